"""Construction of did:peer identifiers from key records and services.

numalgo 0
    ``did:peer:0<multibase key>``: the single authentication key, verbatim.
numalgo 2
    ``did:peer:2.V<key>...E<key>...S<service>...``: authentication keys,
    then key agreement keys, then compressed services.
numalgo 4
    ``did:peer:4<hash>:<document>``: the whole input document is embedded,
    and ``<hash>`` commits to its encoded form.

All constructions are deterministic: the same inputs always produce the same
identifier.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Union

from did_peer.codec import multibase_encode, sha256_multihash, utf8_encode
from did_peer.constants import (
    DID_CORE_CONTEXT,
    DID_PEER_PREFIX,
    MULTIKEY_CONTEXT,
    VARIANT_4_PREFIX,
    Numalgo2Prefix,
)
from did_peer.document import KeyType, ServiceDescriptor, VerificationMethod
from did_peer.errors import (
    PeerDIDValidationError,
    UnrecognizedNumalgoError,
    UnsupportedNumalgoError,
)
from did_peer.service import encode_service, service_to_dict
from did_peer.validators import validate_authentication, validate_encryption

logger = logging.getLogger(__name__)

KeyInput = Union[VerificationMethod, Mapping[str, Any]]
ServiceInput = Union[ServiceDescriptor, Mapping[str, Any]]


def _as_service_list(
    services: ServiceInput | Sequence[ServiceInput] | None,
) -> list[ServiceInput]:
    if services is None:
        return []
    if isinstance(services, (ServiceDescriptor, Mapping)):
        return [services]
    return list(services)


def create(
    numalgo: int,
    authentication_keys: Sequence[KeyInput],
    encryption_keys: Sequence[KeyInput] | None = None,
    services: ServiceInput | Sequence[ServiceInput] | None = None,
) -> str:
    """Create a did:peer identifier with the given numalgo.

    Parameters
    ----------
    numalgo:
        0, 2 or 4. Numalgo 1 is recognised but not supported.
    authentication_keys:
        Authentication key records. Numalgo 0 uses the first one only.
    encryption_keys:
        Key agreement key records (numalgo 2 and 4).
    services:
        A service descriptor or a list of them (numalgo 2 and 4).

    Returns
    -------
    str
        The identifier.

    Raises
    ------
    UnsupportedNumalgoError
        For numalgo 1.
    UnrecognizedNumalgoError
        For any numalgo outside 0, 1, 2 and 4.
    PeerDIDValidationError
        If a key record is not acceptable for its purpose.
    """
    if numalgo == 0:
        if not authentication_keys:
            raise PeerDIDValidationError("numalgo 0 requires exactly one authentication key")
        return create_numalgo0(authentication_keys[0])
    if numalgo == 1:
        return create_numalgo1()
    if numalgo == 2:
        return create_numalgo2(authentication_keys, encryption_keys, services)
    if numalgo == 4:
        return create_numalgo4(authentication_keys, encryption_keys, services)
    raise UnrecognizedNumalgoError(numalgo)


def create_numalgo0(authentication_key: KeyInput) -> str:
    """Create ``did:peer:0`` from a single authentication key."""
    key = validate_authentication(authentication_key)
    did = f"{DID_PEER_PREFIX}0{key.public_key_multibase}"
    logger.debug("Created numalgo 0 DID %s", did)
    return did


def create_numalgo1() -> str:
    raise UnsupportedNumalgoError(1)


def create_numalgo2(
    authentication_keys: Sequence[KeyInput],
    encryption_keys: Sequence[KeyInput] | None = None,
    services: ServiceInput | Sequence[ServiceInput] | None = None,
) -> str:
    """Create ``did:peer:2`` from keys and services.

    Element classes always appear in the order authentication, key
    agreement, service; within a class the input order is kept.
    """
    auth = [validate_authentication(key) for key in authentication_keys]
    enc = [validate_encryption(key) for key in encryption_keys or []]
    service_list = _as_service_list(services)

    elements = [f".{Numalgo2Prefix.AUTHENTICATION.value}{key.public_key_multibase}" for key in auth]
    elements += [f".{Numalgo2Prefix.KEY_AGREEMENT.value}{key.public_key_multibase}" for key in enc]
    elements += [encode_service(service) for service in service_list]

    did = f"{DID_PEER_PREFIX}2{''.join(elements)}"
    logger.debug(
        "Created numalgo 2 DID with %d authentication key(s), %d key agreement key(s), "
        "%d service(s)",
        len(auth),
        len(enc),
        len(service_list),
    )
    return did


# ---------------------------------------------------------------------------
# numalgo 4
# ---------------------------------------------------------------------------


def _input_key(
    key: KeyInput, validate: Callable[[VerificationMethod], VerificationMethod]
) -> VerificationMethod:
    method = VerificationMethod.coerce(key)
    if method.type is None:
        method = method.model_copy(update={"type": KeyType.MULTIKEY.value})
    return validate(method)


def build_input_document(
    authentication_keys: Sequence[KeyInput],
    encryption_keys: Sequence[KeyInput] | None = None,
    services: ServiceInput | Sequence[ServiceInput] | None = None,
) -> dict[str, Any]:
    """Return the input document embedded in a numalgo 4 DID.

    Keys get ids ``#key-0``, ``#key-1``... in append order, authentication
    keys first. Services are embedded verbatim, member order included.
    """
    verification_methods: list[dict[str, Any]] = []
    authentication: list[str] = []
    key_agreement: list[str] = []

    for validate, keys, ids in (
        (validate_authentication, authentication_keys, authentication),
        (validate_encryption, encryption_keys or [], key_agreement),
    ):
        for key in keys:
            method = _input_key(key, validate)
            key_id = f"#key-{len(verification_methods)}"
            verification_methods.append(
                {
                    "id": key_id,
                    "type": method.type,
                    "publicKeyMultibase": method.public_key_multibase,
                }
            )
            ids.append(key_id)

    document: dict[str, Any] = {
        "@context": [DID_CORE_CONTEXT, MULTIKEY_CONTEXT],
        "verificationMethod": verification_methods,
        "authentication": authentication,
    }
    if key_agreement:
        document["keyAgreement"] = key_agreement
    service_list = [service_to_dict(s) for s in _as_service_list(services)]
    if service_list:
        document["service"] = service_list
    return document


def encode_input_document(document: Mapping[str, Any]) -> str:
    """Encode an input document as the ``<document>`` part of a numalgo 4 DID."""
    payload = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    return multibase_encode(utf8_encode(payload))


def hash_encoded_document(encoded_document: str) -> str:
    """Return the ``4<hash>`` segment committing to *encoded_document*.

    The hash covers the encoded text, not the JSON it was built from.
    """
    return VARIANT_4_PREFIX + multibase_encode(sha256_multihash(utf8_encode(encoded_document)))


def create_numalgo4(
    authentication_keys: Sequence[KeyInput],
    encryption_keys: Sequence[KeyInput] | None = None,
    services: ServiceInput | Sequence[ServiceInput] | None = None,
) -> str:
    """Create a long form ``did:peer:4`` identifier."""
    document = build_input_document(authentication_keys, encryption_keys, services)
    encoded_document = encode_input_document(document)
    did = f"{DID_PEER_PREFIX}{hash_encoded_document(encoded_document)}:{encoded_document}"
    logger.debug(
        "Created numalgo 4 DID with %d verification method(s)",
        len(document["verificationMethod"]),
    )
    return did


__all__ = [
    "build_input_document",
    "create",
    "create_numalgo0",
    "create_numalgo1",
    "create_numalgo2",
    "create_numalgo4",
    "encode_input_document",
    "hash_encoded_document",
]
