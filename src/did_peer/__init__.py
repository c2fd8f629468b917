"""did-peer — the did:peer DID method: deterministic create and resolve.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import did_peer
>>> did_peer.__version__
'0.1.0'

Quick start
-----------
::

    from did_peer import InMemoryDIDRepository, create, resolve, store_long_form_did

    auth_key = {"type": "Multikey", "publicKeyMultibase": "z6Mkh..."}

    did = create(2, [auth_key])
    document = resolve(did)

    repository = InMemoryDIDRepository()
    long_form = create(4, [auth_key])
    short_form = store_long_form_did(long_form, repository)
    document = resolve(short_form, repository)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Model
# ------------------------------------------------------------------
from did_peer.document import (
    DIDDocument,
    KeyType,
    ServiceDescriptor,
    VerificationMethod,
    build_did_document,
)

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from did_peer.errors import (
    DIDNotFoundError,
    HashVerificationError,
    InvalidEncodingError,
    InvalidPeerDIDError,
    PeerDIDError,
    PeerDIDValidationError,
    RepositoryRequiredError,
    UnrecognizedNumalgoError,
    UnsupportedNumalgoError,
)

# ------------------------------------------------------------------
# Create / resolve
# ------------------------------------------------------------------
from did_peer.create import create, create_numalgo0, create_numalgo2, create_numalgo4
from did_peer.resolve import (
    resolve,
    resolve_long_form_numalgo4,
    resolve_numalgo0,
    resolve_numalgo2,
    resolve_numalgo4,
)
from did_peer.service import ServiceIndex, decode_service, encode_service
from did_peer.validators import is_peer_did, validate_authentication, validate_encryption

# ------------------------------------------------------------------
# Repository
# ------------------------------------------------------------------
from did_peer.provider import PeerDIDProvider
from did_peer.repository import (
    DIDRepository,
    InMemoryDIDRepository,
    extract_short_form_did,
    store_long_form_did,
)

__all__ = [
    # version
    "__version__",
    # model
    "DIDDocument",
    "KeyType",
    "ServiceDescriptor",
    "VerificationMethod",
    "build_did_document",
    # errors
    "DIDNotFoundError",
    "HashVerificationError",
    "InvalidEncodingError",
    "InvalidPeerDIDError",
    "PeerDIDError",
    "PeerDIDValidationError",
    "RepositoryRequiredError",
    "UnrecognizedNumalgoError",
    "UnsupportedNumalgoError",
    # create / resolve
    "create",
    "create_numalgo0",
    "create_numalgo2",
    "create_numalgo4",
    "decode_service",
    "encode_service",
    "is_peer_did",
    "resolve",
    "resolve_long_form_numalgo4",
    "resolve_numalgo0",
    "resolve_numalgo2",
    "resolve_numalgo4",
    "ServiceIndex",
    "validate_authentication",
    "validate_encryption",
    # repository
    "DIDRepository",
    "InMemoryDIDRepository",
    "PeerDIDProvider",
    "extract_short_form_did",
    "store_long_form_did",
]
