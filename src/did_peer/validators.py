"""Format checks for did:peer identifiers and the key records used to build them."""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from did_peer.document import KeyType, VerificationMethod
from did_peer.errors import PeerDIDValidationError

_B58 = r"[1-9a-km-zA-HJ-NP-Z]"

# did:peer:<numalgo><payload> for the supported numalgos.
#   0/1: single base58btc multibase value
#   2:   .<purpose>z<key> groups, then optional .S<base64url service> groups
#   4:   z<hash>, optionally :<document>
_PEER_DID_PATTERN = re.compile(
    r"^did:peer:("
    rf"([01]z{_B58}*)"
    rf"|(2(\.[AEVID]z{_B58}*)+(\.S[0-9a-zA-Z_\-=]*)*)"
    rf"|(4z{_B58}+(:[0-9a-zA-Z]+)?)"
    r")$"
)

_AUTHENTICATION_TYPES = frozenset(
    {KeyType.ED25519_VERIFICATION_KEY_2020.value, KeyType.MULTIKEY.value}
)
_ENCRYPTION_TYPES = frozenset(
    {KeyType.X25519_KEY_AGREEMENT_KEY_2020.value, KeyType.MULTIKEY.value}
)


def is_peer_did(did: str) -> bool:
    """Return ``True`` if *did* matches the did:peer grammar."""
    return isinstance(did, str) and _PEER_DID_PATTERN.match(did) is not None


def validate_authentication(key: VerificationMethod | Mapping[str, Any]) -> VerificationMethod:
    """Check that *key* may be used as an authentication key.

    Returns
    -------
    VerificationMethod
        The key, coerced to a model.

    Raises
    ------
    PeerDIDValidationError
        If the type is not Ed25519VerificationKey2020 or Multikey, or the key
        carries no ``publicKeyMultibase``.
    """
    method = VerificationMethod.coerce(key)
    if method.type not in _AUTHENTICATION_TYPES:
        raise PeerDIDValidationError(
            "verificationMethod type must be Ed25519VerificationKey2020 or Multikey"
        )
    require_multibase(method)
    return method


def validate_encryption(key: VerificationMethod | Mapping[str, Any]) -> VerificationMethod:
    """Check that *key* may be used as a key agreement key.

    Raises
    ------
    PeerDIDValidationError
        If the type is not X25519KeyAgreementKey2020 or Multikey, or the key
        carries no ``publicKeyMultibase``.
    """
    method = VerificationMethod.coerce(key)
    if method.type not in _ENCRYPTION_TYPES:
        raise PeerDIDValidationError(
            "verificationMethod type must be X25519KeyAgreementKey2020 or Multikey"
        )
    require_multibase(method)
    return method


def require_multibase(method: VerificationMethod) -> None:
    if not method.public_key_multibase:
        raise PeerDIDValidationError("verificationMethod must have publicKeyMultibase property")


__all__ = [
    "is_peer_did",
    "require_multibase",
    "validate_authentication",
    "validate_encryption",
]
