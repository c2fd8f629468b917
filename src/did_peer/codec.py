"""Codec primitives used to pack keys and documents into did:peer strings.

Encodings
---------
base58btc
    Bitcoin alphabet, big-endian integer conversion. Leading zero bytes are
    preserved as leading ``1`` characters.
base64url
    RFC 4648 URL-safe alphabet without ``=`` padding.
varint
    Unsigned LEB128 as used by multicodec: seven payload bits per byte, the
    high bit flags a continuation.
multibase
    Only the base58btc form (``z`` prefix) is produced or accepted here.
multihash
    Only SHA2-256 (``0x12 0x20`` followed by the 32-byte digest).
"""
from __future__ import annotations

import base64
import binascii
import hashlib

from did_peer.constants import (
    MULTIBASE_BASE58BTC_PREFIX,
    SHA256_HASH_LENGTH,
    SHA256_MULTIHASH_PREFIX,
)
from did_peer.errors import InvalidEncodingError

# ---------------------------------------------------------------------------
# Base58btc
# ---------------------------------------------------------------------------

_BASE58_ALPHABET: str = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX: dict[str, int] = {char: index for index, char in enumerate(_BASE58_ALPHABET)}


def base58_encode(data: bytes) -> str:
    """Encode *data* to a base58btc string.

    Parameters
    ----------
    data:
        Arbitrary bytes to encode.

    Returns
    -------
    str
        Base58btc-encoded string. Empty input encodes to ``"1"``.
    """
    if not data:
        return _BASE58_ALPHABET[0]
    n = int.from_bytes(data, "big")
    result: list[str] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_BASE58_ALPHABET[remainder])
    # Preserve leading zero bytes as '1' characters
    for byte in data:
        if byte == 0:
            result.append(_BASE58_ALPHABET[0])
        else:
            break
    return "".join(reversed(result))


def base58_decode(encoded: str) -> bytes:
    """Decode a base58btc string back to bytes.

    Raises
    ------
    InvalidEncodingError
        If the string contains a character not in the base58btc alphabet.
    """
    n = 0
    for char in encoded:
        digit = _BASE58_INDEX.get(char)
        if digit is None:
            raise InvalidEncodingError(
                f"Invalid base58btc character {char!r} in encoded string {encoded!r}"
            )
        n = n * 58 + digit
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_size = len(encoded) - len(encoded.lstrip(_BASE58_ALPHABET[0]))
    return b"\x00" * pad_size + result


# ---------------------------------------------------------------------------
# Base64url
# ---------------------------------------------------------------------------


def base64url_encode(data: bytes) -> str:
    """Encode *data* as unpadded base64url."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def base64url_decode(encoded: str) -> bytes:
    """Decode unpadded (or padded) base64url text.

    Raises
    ------
    InvalidEncodingError
        If *encoded* is not valid base64url.
    """
    padded = encoded.rstrip("=")
    padded += "=" * (-len(padded) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise InvalidEncodingError(f"Invalid base64url data {encoded!r}: {exc}") from exc


# ---------------------------------------------------------------------------
# UTF-8
# ---------------------------------------------------------------------------


def utf8_encode(text: str) -> bytes:
    """Encode *text* as UTF-8 bytes.

    Parameters
    ----------
    text:
        The string to encode.

    Returns
    -------
    bytes
        The UTF-8 encoding of *text*.
    """
    return text.encode("utf-8")


def utf8_decode(data: bytes) -> str:
    """Decode UTF-8 *data* back to a string.

    Raises
    ------
    InvalidEncodingError
        If *data* is not valid UTF-8.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError(f"Payload is not valid UTF-8: {exc}") from exc


# ---------------------------------------------------------------------------
# Unsigned varint (LEB128)
# ---------------------------------------------------------------------------


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as an unsigned LEB128 varint.

    Raises
    ------
    InvalidEncodingError
        If *value* is negative.
    """
    if value < 0:
        raise InvalidEncodingError(f"Cannot varint-encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes) -> tuple[int, bytes]:
    """Decode a leading unsigned varint from *data*.

    Returns
    -------
    tuple[int, bytes]
        The decoded value and the bytes that follow it.

    Raises
    ------
    InvalidEncodingError
        If *data* ends before a byte without the continuation bit.
    """
    value = 0
    shift = 0
    for position, byte in enumerate(data):
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, data[position + 1 :]
        shift += 7
    raise InvalidEncodingError(f"Truncated varint in {data.hex()!r}")


# ---------------------------------------------------------------------------
# Multibase / multihash
# ---------------------------------------------------------------------------


def multibase_encode(data: bytes) -> str:
    """Return *data* as a base58btc multibase string (``z`` prefix)."""
    return MULTIBASE_BASE58BTC_PREFIX + base58_encode(data)


def multibase_decode(encoded: str) -> bytes:
    """Decode a base58btc multibase string.

    Raises
    ------
    InvalidEncodingError
        If *encoded* does not carry the ``z`` prefix or is not base58btc.
    """
    if not encoded.startswith(MULTIBASE_BASE58BTC_PREFIX):
        raise InvalidEncodingError(
            f"Unsupported multibase prefix in {encoded!r}; "
            f"only base58btc ({MULTIBASE_BASE58BTC_PREFIX!r}) is supported."
        )
    return base58_decode(encoded[len(MULTIBASE_BASE58BTC_PREFIX):])


def sha256_multihash(data: bytes) -> bytes:
    """Return the SHA2-256 multihash of *data*."""
    return bytes([SHA256_MULTIHASH_PREFIX, SHA256_HASH_LENGTH]) + hashlib.sha256(data).digest()


__all__ = [
    "base58_decode",
    "base58_encode",
    "base64url_decode",
    "base64url_encode",
    "decode_varint",
    "encode_varint",
    "multibase_decode",
    "multibase_encode",
    "sha256_multihash",
    "utf8_decode",
    "utf8_encode",
]
