"""Key record generation backed by the ``cryptography`` package.

The did:peer encoders only consume already-formed key records. This module
produces such records from freshly generated Ed25519 and X25519 keys, with
the public key written as a multikey::

    z + base58btc(varint(multicodec) || raw public key)

Optional dependency
-------------------
Key generation requires the ``cryptography`` package (>=41.0)::

    pip install did-peer[crypto]

:func:`encode_multikey` and :func:`decode_multikey` work without it.
"""
from __future__ import annotations

from did_peer.codec import decode_varint, encode_varint, multibase_decode, multibase_encode
from did_peer.constants import ED25519_PUB_MULTICODEC, X25519_PUB_MULTICODEC
from did_peer.document import KeyType, VerificationMethod
from did_peer.errors import InvalidEncodingError

try:
    from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
    from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey
    from cryptography.hazmat.primitives.serialization import (
        Encoding,
        NoEncryption,
        PrivateFormat,
        PublicFormat,
    )

    _CRYPTO_AVAILABLE = True
except ImportError:
    _CRYPTO_AVAILABLE = False

_RAW_KEY_LENGTH = 32


def _require_crypto() -> None:
    if not _CRYPTO_AVAILABLE:
        raise ImportError(
            "The 'cryptography' package is required for key generation. "
            "Install it with: pip install did-peer[crypto]"
        )


def encode_multikey(codec: int, raw_public_key: bytes) -> str:
    """Return the multibase multikey string for *raw_public_key*."""
    return multibase_encode(encode_varint(codec) + raw_public_key)


def decode_multikey(multikey: str) -> tuple[int, bytes]:
    """Split a multikey string into ``(multicodec, raw public key)``.

    Raises
    ------
    InvalidEncodingError
        If *multikey* is not base58btc multibase or has no key bytes.
    """
    codec, raw = decode_varint(multibase_decode(multikey))
    if not raw:
        raise InvalidEncodingError(f"Multikey {multikey!r} carries no key material")
    return codec, raw


def generate_ed25519_key(
    key_type: KeyType = KeyType.ED25519_VERIFICATION_KEY_2020,
) -> tuple[bytes, VerificationMethod]:
    """Generate an Ed25519 key usable for authentication.

    Returns
    -------
    tuple[bytes, VerificationMethod]
        The 32-byte raw private key and the public key record.
    """
    _require_crypto()
    private_key = Ed25519PrivateKey.generate()
    private_bytes = private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
    public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return private_bytes, VerificationMethod(
        type=key_type.value,
        public_key_multibase=encode_multikey(ED25519_PUB_MULTICODEC, public_bytes),
    )


def generate_x25519_key(
    key_type: KeyType = KeyType.X25519_KEY_AGREEMENT_KEY_2020,
) -> tuple[bytes, VerificationMethod]:
    """Generate an X25519 key usable for key agreement.

    Returns
    -------
    tuple[bytes, VerificationMethod]
        The 32-byte raw private key and the public key record.
    """
    _require_crypto()
    private_key = X25519PrivateKey.generate()
    private_bytes = private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
    public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return private_bytes, VerificationMethod(
        type=key_type.value,
        public_key_multibase=encode_multikey(X25519_PUB_MULTICODEC, public_bytes),
    )


def public_key_bytes(method: VerificationMethod) -> bytes:
    """Return the raw 32-byte public key of an Ed25519 or X25519 record.

    Raises
    ------
    InvalidEncodingError
        If the record has no multikey or the key is not Ed25519/X25519.
    """
    if not method.public_key_multibase:
        raise InvalidEncodingError(f"Key {method.id!r} has no publicKeyMultibase")
    codec, raw = decode_multikey(method.public_key_multibase)
    if codec not in (ED25519_PUB_MULTICODEC, X25519_PUB_MULTICODEC) or len(raw) != _RAW_KEY_LENGTH:
        raise InvalidEncodingError(
            f"Unsupported multikey 0x{codec:x} of {len(raw)} bytes in {method.public_key_multibase!r}"
        )
    return raw


__all__ = [
    "decode_multikey",
    "encode_multikey",
    "generate_ed25519_key",
    "generate_x25519_key",
    "public_key_bytes",
]
