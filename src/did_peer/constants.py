"""Constants shared by the did:peer encoders and decoders."""
from __future__ import annotations

from enum import Enum

DID_PEER_PREFIX: str = "did:peer:"

# Index of the numalgo character in a did:peer string.
NUMALGO_INDEX: int = len(DID_PEER_PREFIX)


class Numalgo2Prefix(str, Enum):
    """Purpose codes that lead each dot-delimited element of a numalgo 2 DID."""

    AUTHENTICATION = "V"
    KEY_AGREEMENT = "E"
    SERVICE = "S"


# Full name -> abbreviation. Applied to member names, except the
# DIDCommMessaging entry which applies to the value of the type member.
SERVICE_ABBREVIATIONS: dict[str, str] = {
    "type": "t",
    "DIDCommMessaging": "dm",
    "serviceEndpoint": "s",
    "routingKeys": "r",
    "accept": "a",
}

SERVICE_TYPE_DIDCOMM: str = "DIDCommMessaging"

# ---------------------------------------------------------------------------
# JSON-LD contexts
# ---------------------------------------------------------------------------

DID_CORE_CONTEXT: str = "https://www.w3.org/ns/did/v1"
MULTIKEY_CONTEXT: str = "https://w3id.org/security/multikey/v1"
ED25519_2020_CONTEXT: str = "https://w3id.org/security/suites/ed25519-2020/v1"
X25519_2020_CONTEXT: str = "https://w3id.org/security/suites/x25519-2020/v1"

# ---------------------------------------------------------------------------
# Variant 4 encoding
# ---------------------------------------------------------------------------

VARIANT_4_PREFIX: str = "4"
SHA256_MULTIHASH_PREFIX: int = 0x12
SHA256_HASH_LENGTH: int = 0x20
MULTIBASE_BASE58BTC_PREFIX: str = "z"

# Multicodec codes for raw public keys (written as unsigned varints).
ED25519_PUB_MULTICODEC: int = 0xED
X25519_PUB_MULTICODEC: int = 0xEC

__all__ = [
    "DID_CORE_CONTEXT",
    "DID_PEER_PREFIX",
    "ED25519_2020_CONTEXT",
    "ED25519_PUB_MULTICODEC",
    "MULTIBASE_BASE58BTC_PREFIX",
    "MULTIKEY_CONTEXT",
    "NUMALGO_INDEX",
    "Numalgo2Prefix",
    "SERVICE_ABBREVIATIONS",
    "SERVICE_TYPE_DIDCOMM",
    "SHA256_HASH_LENGTH",
    "SHA256_MULTIHASH_PREFIX",
    "VARIANT_4_PREFIX",
    "X25519_2020_CONTEXT",
    "X25519_PUB_MULTICODEC",
]
