"""DID document model for resolved did:peer identifiers.

Key records and service descriptors arrive from callers either as the models
below or as plain mappings using the W3C camelCase member names. Resolution
always produces a fresh :class:`DIDDocument`.

Specification reference
-----------------------
https://www.w3.org/TR/did-core/#data-model
https://identity.foundation/peer-did-method-spec/
"""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from did_peer.constants import (
    DID_CORE_CONTEXT,
    DID_PEER_PREFIX,
    ED25519_2020_CONTEXT,
    MULTIKEY_CONTEXT,
    NUMALGO_INDEX,
    X25519_2020_CONTEXT,
)
from did_peer.errors import PeerDIDValidationError

# ------------------------------------------------------------------
# Key types
# ------------------------------------------------------------------


class KeyType(str, Enum):
    """Verification method types understood by the did:peer encoders."""

    ED25519_VERIFICATION_KEY_2020 = "Ed25519VerificationKey2020"
    X25519_KEY_AGREEMENT_KEY_2020 = "X25519KeyAgreementKey2020"
    MULTIKEY = "Multikey"


# ------------------------------------------------------------------
# Verification method
# ------------------------------------------------------------------


class VerificationMethod(BaseModel):
    """A public key entry of a DID document.

    Only ``publicKeyMultibase`` is read by the encoders. Other key
    representations (``publicKeyJwk`` and friends) are carried as extra
    members when present in an embedded numalgo 4 document.

    Parameters
    ----------
    id:
        Key identifier, relative (``#key-1``) or absolute.
    type:
        Key type, normally one of :class:`KeyType`.
    controller:
        DID controlling the key.
    public_key_multibase:
        The public key as a multibase string (alias ``publicKeyMultibase``).
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    id: str | None = None
    type: str | None = None
    controller: str | None = None
    public_key_multibase: str | None = Field(default=None, alias="publicKeyMultibase")

    @field_validator("type", mode="before")
    @classmethod
    def plain_type(cls, value: Any) -> Any:
        """Store KeyType members as their plain string value."""
        return value.value if isinstance(value, KeyType) else value

    @classmethod
    def coerce(cls, key: VerificationMethod | Mapping[str, Any]) -> VerificationMethod:
        """Return *key* as a :class:`VerificationMethod`.

        Raises
        ------
        PeerDIDValidationError
            If a mapping cannot be interpreted as a key record.
        """
        if isinstance(key, VerificationMethod):
            return key
        if not isinstance(key, Mapping):
            raise PeerDIDValidationError(
                f"verificationMethod must be a mapping or VerificationMethod, "
                f"got {type(key).__name__}"
            )
        try:
            return cls.model_validate(dict(key))
        except ValidationError as exc:
            raise PeerDIDValidationError(f"Invalid verificationMethod {dict(key)!r}: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a W3C-compatible plain dictionary."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ------------------------------------------------------------------
# Service descriptor
# ------------------------------------------------------------------


class ServiceDescriptor(BaseModel):
    """A service entry of a DID document.

    Members other than the ones declared here are kept untouched, so a
    descriptor survives compression into a numalgo 2 DID and back.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    type: str | None = None
    service_endpoint: Union[str, dict[str, Any], list[Any], None] = Field(
        default=None, alias="serviceEndpoint"
    )
    routing_keys: list[str] | None = Field(default=None, alias="routingKeys")
    accept: list[str] | None = None

    @classmethod
    def coerce(cls, service: ServiceDescriptor | Mapping[str, Any]) -> ServiceDescriptor:
        if isinstance(service, ServiceDescriptor):
            return service
        try:
            return cls.model_validate(dict(service))
        except (ValidationError, TypeError, ValueError) as exc:
            raise PeerDIDValidationError(f"Invalid service descriptor {service!r}: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ------------------------------------------------------------------
# DID document (Pydantic v2)
# ------------------------------------------------------------------

_Relationship = Union[str, VerificationMethod]


class DIDDocument(BaseModel):
    """A DID document produced by resolving a did:peer identifier.

    Relationship members (``authentication`` and the like) hold either
    verification method ids or embedded :class:`VerificationMethod` entries.
    Members that do not apply to a given DID are ``None`` and are left out
    of :meth:`to_dict`.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    context: Union[str, list[Any]] = Field(alias="@context")
    id: str
    controller: Union[str, list[str], None] = None
    also_known_as: list[str] | None = Field(default=None, alias="alsoKnownAs")
    verification_method: list[VerificationMethod] = Field(
        default_factory=list, alias="verificationMethod"
    )
    authentication: list[_Relationship] | None = None
    assertion_method: list[_Relationship] | None = Field(default=None, alias="assertionMethod")
    key_agreement: list[_Relationship] | None = Field(default=None, alias="keyAgreement")
    capability_invocation: list[_Relationship] | None = Field(
        default=None, alias="capabilityInvocation"
    )
    capability_delegation: list[_Relationship] | None = Field(
        default=None, alias="capabilityDelegation"
    )
    service: list[ServiceDescriptor] | None = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def resolve_verification_method(self, method_id: str) -> VerificationMethod | None:
        """Return the VerificationMethod with the given id, or None.

        Relative ids (``#key-1``) match absolute ones ending in the same
        fragment and the other way round.
        """
        for method in self.verification_method:
            if method.id == method_id:
                return method
        fragment = "#" + method_id.split("#", 1)[-1]
        for method in self.verification_method:
            if method.id is not None and method.id.endswith(fragment):
                return method
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary with W3C member names."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialize this document to an indented JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "DIDDocument":
        """Deserialize a DIDDocument from a JSON string.

        Raises
        ------
        ValueError
            If the JSON is malformed or the document fails validation.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON: {exc}") from exc
        return cls.model_validate(data)


# ------------------------------------------------------------------
# Document assembly
# ------------------------------------------------------------------


def build_did_document(
    did: str,
    auth_keys: Sequence[VerificationMethod],
    enc_keys: Sequence[VerificationMethod],
    services: Sequence[ServiceDescriptor],
) -> DIDDocument:
    """Assemble the DID document for a numalgo 0 or 2 identifier.

    Numalgo 2 and later use the Multikey context with an ``@base`` anchor so
    relative key ids resolve against the DID. Numalgo 0 uses the 2020 suite
    contexts and also lists the authentication keys under the capability
    relationships.
    """
    numalgo = int(did[NUMALGO_INDEX]) if did.startswith(DID_PEER_PREFIX) else 0
    legacy = numalgo < 2

    contexts: list[Any]
    if legacy:
        contexts = [DID_CORE_CONTEXT, ED25519_2020_CONTEXT]
    else:
        contexts = [DID_CORE_CONTEXT, MULTIKEY_CONTEXT, {"@base": did}]

    auth_ids = [key.id for key in auth_keys]
    enc_ids = [key.id for key in enc_keys]
    methods = [
        VerificationMethod(
            id=key.id,
            type=key.type,
            controller=key.controller,
            public_key_multibase=key.public_key_multibase,
        )
        for key in [*auth_keys, *enc_keys]
    ]

    document: dict[str, Any] = {
        "id": did,
        "verificationMethod": methods,
        "authentication": auth_ids,
        "assertionMethod": auth_ids,
    }
    if legacy:
        document["capabilityInvocation"] = auth_ids
        document["capabilityDelegation"] = auth_ids
    if enc_ids:
        document["keyAgreement"] = enc_ids
        if legacy:
            contexts.append(X25519_2020_CONTEXT)
    if services:
        document["service"] = list(services)

    return DIDDocument.model_validate({"@context": contexts, **document})


__all__ = [
    "DIDDocument",
    "KeyType",
    "ServiceDescriptor",
    "VerificationMethod",
    "build_did_document",
]
