"""Resolution of did:peer identifiers into DID documents.

Resolution is purely syntactic: every document is rebuilt from the
identifier itself, except short form numalgo 4 DIDs whose long form is
looked up in a :class:`~did_peer.repository.DIDRepository`.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from did_peer.codec import multibase_decode, utf8_decode
from did_peer.constants import (
    DID_PEER_PREFIX,
    MULTIBASE_BASE58BTC_PREFIX,
    NUMALGO_INDEX,
    Numalgo2Prefix,
)
from did_peer.create import hash_encoded_document
from did_peer.document import (
    DIDDocument,
    KeyType,
    ServiceDescriptor,
    VerificationMethod,
    build_did_document,
)
from did_peer.errors import (
    DIDNotFoundError,
    HashVerificationError,
    InvalidEncodingError,
    InvalidPeerDIDError,
    RepositoryRequiredError,
    UnrecognizedNumalgoError,
    UnsupportedNumalgoError,
)
from did_peer.repository import DIDRepository, extract_short_form_did
from did_peer.service import ServiceIndex, decode_service
from did_peer.validators import is_peer_did

logger = logging.getLogger(__name__)

# Relationships whose embedded verification methods receive a controller.
_RELATIONSHIPS = (
    "authentication",
    "keyAgreement",
    "assertionMethod",
    "capabilityInvocation",
    "capabilityDelegation",
)


def resolve(did: str, repository: DIDRepository | None = None) -> DIDDocument:
    """Resolve a did:peer identifier.

    Parameters
    ----------
    did:
        The identifier to resolve.
    repository:
        Lookup table for short form numalgo 4 DIDs. Not used otherwise.

    Returns
    -------
    DIDDocument
        A freshly built document.

    Raises
    ------
    InvalidPeerDIDError
        If *did* is not a well-formed did:peer identifier.
    UnsupportedNumalgoError
        For numalgo 1.
    UnrecognizedNumalgoError
        For an unknown numalgo.
    HashVerificationError
        If a numalgo 4 document does not match its hash.
    RepositoryRequiredError, DIDNotFoundError
        For short form numalgo 4 lookups that cannot be satisfied.
    """
    if not is_peer_did(did):
        raise InvalidPeerDIDError(f"{did!r} is not a valid did:peer identifier")

    numalgo = did[NUMALGO_INDEX]
    if numalgo == "0":
        return resolve_numalgo0(did)
    if numalgo == "1":
        raise UnsupportedNumalgoError(1)
    if numalgo == "2":
        return resolve_numalgo2(did)
    if numalgo == "4":
        return resolve_numalgo4(did, repository)
    raise UnrecognizedNumalgoError(numalgo)


def resolve_numalgo0(did: str) -> DIDDocument:
    """Resolve ``did:peer:0``: a single Ed25519 authentication key."""
    multibase_key = did[NUMALGO_INDEX + 1 :]
    key = VerificationMethod(
        id=f"{did}#{multibase_key[len(MULTIBASE_BASE58BTC_PREFIX):]}",
        type=KeyType.ED25519_VERIFICATION_KEY_2020.value,
        controller=did,
        public_key_multibase=multibase_key,
    )
    logger.debug("Resolved numalgo 0 DID %s", did)
    return build_did_document(did, [key], [], [])


def resolve_numalgo2(did: str) -> DIDDocument:
    """Resolve ``did:peer:2`` element by element.

    Keys are numbered ``#key-1``, ``#key-2``... in the order they appear,
    whichever their purpose.
    """
    auth_keys: list[VerificationMethod] = []
    enc_keys: list[VerificationMethod] = []
    services: list[ServiceDescriptor] = []
    service_index = ServiceIndex()
    key_number = 0

    for element in did.split(".")[1:]:
        purpose, value = element[:1], element[1:]
        if purpose in (Numalgo2Prefix.AUTHENTICATION.value, Numalgo2Prefix.KEY_AGREEMENT.value):
            key_number += 1
            key = VerificationMethod(
                id=f"#key-{key_number}",
                type=KeyType.MULTIKEY.value,
                controller=did,
                public_key_multibase=value,
            )
            if purpose == Numalgo2Prefix.AUTHENTICATION.value:
                auth_keys.append(key)
            else:
                enc_keys.append(key)
        elif purpose == Numalgo2Prefix.SERVICE.value:
            services.append(decode_service(did, value, service_index))
        else:
            logger.debug("Skipping numalgo 2 element with purpose %r in %s", purpose, did)

    logger.debug(
        "Resolved numalgo 2 DID with %d authentication key(s), %d key agreement key(s), "
        "%d service(s)",
        len(auth_keys),
        len(enc_keys),
        len(services),
    )
    return build_did_document(did, auth_keys, enc_keys, services)


# ---------------------------------------------------------------------------
# numalgo 4
# ---------------------------------------------------------------------------


def resolve_numalgo4(did: str, repository: DIDRepository | None = None) -> DIDDocument:
    """Resolve ``did:peer:4`` in long or short form."""
    parts = did.split(":")
    if len(parts) == 4 and parts[3].startswith(MULTIBASE_BASE58BTC_PREFIX):
        return resolve_long_form_numalgo4(did)
    if len(parts) == 3:
        return resolve_short_form_numalgo4(did, repository)
    raise InvalidPeerDIDError(f"{did!r} is not a valid did:peer:4 identifier")


def resolve_long_form_numalgo4(did: str) -> DIDDocument:
    """Verify and decode a long form ``did:peer:4``.

    Raises
    ------
    HashVerificationError
        If the hash segment does not commit to the embedded document.
    InvalidPeerDIDError
        If the identifier is not a long form did:peer:4 or the embedded
        document cannot be decoded.
    """
    parts = did.split(":")
    if len(parts) != 4 or not parts[3].startswith(MULTIBASE_BASE58BTC_PREFIX):
        raise InvalidPeerDIDError(f"{did!r} is not a long form did:peer:4 identifier")
    hash_segment, encoded_document = parts[2], parts[3]

    expected = hash_encoded_document(encoded_document)
    if expected != hash_segment:
        logger.warning("Hash verification failed for %s", did)
        raise HashVerificationError(did, expected, hash_segment)

    try:
        document = json.loads(utf8_decode(multibase_decode(encoded_document)))
    except (InvalidEncodingError, json.JSONDecodeError) as exc:
        raise InvalidPeerDIDError(f"Embedded document of {did!r} cannot be decoded: {exc}") from exc
    if not isinstance(document, dict):
        raise InvalidPeerDIDError(f"Embedded document of {did!r} is not a JSON object")

    short_form = f"{DID_PEER_PREFIX}{hash_segment}"
    _contextualize(document, did, short_form)
    try:
        resolved = DIDDocument.model_validate(document)
    except ValueError as exc:
        raise InvalidPeerDIDError(f"Embedded document of {did!r} is invalid: {exc}") from exc
    logger.debug("Resolved long form numalgo 4 DID %s", short_form)
    return resolved


def resolve_short_form_numalgo4(did: str, repository: DIDRepository | None) -> DIDDocument:
    """Resolve a short form ``did:peer:4`` through *repository*.

    The stored long form must hash to *did*; a mismatch raises
    :class:`HashVerificationError`.
    """
    if repository is None:
        raise RepositoryRequiredError(did)
    long_form = repository.retrieve(did)
    if long_form is None:
        raise DIDNotFoundError(did)

    stored_short_form = extract_short_form_did(long_form)
    if stored_short_form != did:
        logger.warning("Repository entry for %s holds a long form of %s", did, stored_short_form)
        raise HashVerificationError(did, did, stored_short_form)

    resolved = resolve_long_form_numalgo4(long_form)
    return resolved.model_copy(update={"id": did, "also_known_as": [long_form]})


def _members(document: dict[str, Any], name: str, did: str) -> list[Any]:
    value = document.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidPeerDIDError(
            f"Embedded document of {did!r} has a non-list {name!r} member: {value!r}"
        )
    return value


def _contextualize(document: dict[str, Any], did: str, short_form: str) -> None:
    document["id"] = did

    also_known_as = _members(document, "alsoKnownAs", did)
    if short_form not in also_known_as:
        also_known_as.append(short_form)
    document["alsoKnownAs"] = also_known_as

    for name in ("verificationMethod", *_RELATIONSHIPS):
        for entry in _members(document, name, did):
            if isinstance(entry, dict) and not entry.get("controller"):
                entry["controller"] = did


__all__ = [
    "resolve",
    "resolve_long_form_numalgo4",
    "resolve_numalgo0",
    "resolve_numalgo2",
    "resolve_numalgo4",
    "resolve_short_form_numalgo4",
]
