"""Service descriptor compression for numalgo 2 identifiers.

A service is embedded as ``.S<base64url(json)>`` where the JSON uses
abbreviated member names::

    type            -> t     (value DIDCommMessaging -> dm)
    serviceEndpoint -> s
    routingKeys     -> r
    accept          -> a

Renaming is structural: it touches member names of the descriptor and of an
object-valued ``serviceEndpoint`` (or each object of a list-valued one),
never the text of values.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from did_peer.codec import base64url_decode, base64url_encode, utf8_decode, utf8_encode
from did_peer.constants import SERVICE_ABBREVIATIONS, SERVICE_TYPE_DIDCOMM, Numalgo2Prefix
from did_peer.document import ServiceDescriptor
from did_peer.errors import InvalidEncodingError, InvalidPeerDIDError, PeerDIDValidationError

# Member name abbreviations; the DIDCommMessaging entry maps a type value.
_ABBREVIATIONS: dict[str, str] = {
    name: short for name, short in SERVICE_ABBREVIATIONS.items() if name != SERVICE_TYPE_DIDCOMM
}


@dataclass
class ServiceIndex:
    """Running service counter for a single resolve call.

    Services without an ``id`` receive ``#service`` for the first one and
    ``#service-<n>`` afterwards.
    """

    index: int = 0

    def next_id(self) -> str:
        service_id = "#service" if self.index == 0 else f"#service-{self.index}"
        self.index += 1
        return service_id


@dataclass(frozen=True)
class _RenameTable:
    names: Mapping[str, str]
    type_key: str
    endpoint_key: str
    type_values: Mapping[str, str]


_ABBREVIATE = _RenameTable(
    names=_ABBREVIATIONS,
    type_key="type",
    endpoint_key="serviceEndpoint",
    type_values={SERVICE_TYPE_DIDCOMM: SERVICE_ABBREVIATIONS[SERVICE_TYPE_DIDCOMM]},
)
_EXPAND = _RenameTable(
    names={short: name for name, short in _ABBREVIATIONS.items()},
    type_key=_ABBREVIATIONS["type"],
    endpoint_key=_ABBREVIATIONS["serviceEndpoint"],
    type_values={SERVICE_ABBREVIATIONS[SERVICE_TYPE_DIDCOMM]: SERVICE_TYPE_DIDCOMM},
)


def _rename(obj: Mapping[str, Any], table: _RenameTable) -> dict[str, Any]:
    renamed: dict[str, Any] = {}
    for key, value in obj.items():
        if key == table.type_key and isinstance(value, str):
            value = table.type_values.get(value, value)
        elif key == table.endpoint_key:
            value = _rename_endpoint(value, table)
        name = table.names.get(key, key)
        if name in renamed:
            raise PeerDIDValidationError(
                f"Service member {key!r} collides with another member renamed to {name!r}"
            )
        renamed[name] = value
    return renamed


def _rename_endpoint(value: Any, table: _RenameTable) -> Any:
    if isinstance(value, Mapping):
        return _rename(value, table)
    if isinstance(value, list):
        return [_rename(item, table) if isinstance(item, Mapping) else item for item in value]
    return value


def abbreviate_service(descriptor: Mapping[str, Any]) -> dict[str, Any]:
    """Return *descriptor* with member names abbreviated.

    Raises
    ------
    PeerDIDValidationError
        If two members end up with the same name, e.g. ``type`` next to an
        extra member literally called ``t``.
    """
    return _rename(descriptor, _ABBREVIATE)


def expand_service(compact: Mapping[str, Any]) -> dict[str, Any]:
    """Inverse of :func:`abbreviate_service`."""
    return _rename(compact, _EXPAND)


def service_to_dict(descriptor: ServiceDescriptor | Mapping[str, Any]) -> dict[str, Any]:
    """Return *descriptor* as a plain dict, keeping a mapping's members as given.

    Mappings are checked against :class:`ServiceDescriptor` but embedded with
    their original member order and ``null`` members intact; only model
    inputs are serialized through :meth:`ServiceDescriptor.to_dict`.

    Raises
    ------
    PeerDIDValidationError
        If *descriptor* cannot be interpreted as a service descriptor.
    """
    service = ServiceDescriptor.coerce(descriptor)
    if isinstance(descriptor, ServiceDescriptor):
        return service.to_dict()
    return dict(descriptor)


def encode_service(descriptor: ServiceDescriptor | Mapping[str, Any]) -> str:
    """Encode a service descriptor as a ``.S`` element of a numalgo 2 DID."""
    compact = abbreviate_service(service_to_dict(descriptor))
    encoded = json.dumps(compact, separators=(",", ":"), ensure_ascii=False)
    return f".{Numalgo2Prefix.SERVICE.value}{base64url_encode(utf8_encode(encoded))}"


def decode_service(did: str, token: str, state: ServiceIndex) -> ServiceDescriptor:
    """Decode the payload of a ``.S`` element (without the ``S``).

    Parameters
    ----------
    did:
        The identifier being resolved, used in error messages.
    token:
        The base64url payload.
    state:
        Counter shared by every service of the identifier. It is advanced
        each time an ``id`` is assigned.

    Raises
    ------
    InvalidPeerDIDError
        If the payload is not base64url-encoded JSON describing an object.
    """
    try:
        raw = json.loads(utf8_decode(base64url_decode(token)))
    except (InvalidEncodingError, json.JSONDecodeError) as exc:
        raise InvalidPeerDIDError(f"Malformed service element {token!r} in {did!r}: {exc}") from exc
    if not isinstance(raw, dict):
        raise InvalidPeerDIDError(
            f"Malformed service element {token!r} in {did!r}: expected a JSON object"
        )

    try:
        expanded = expand_service(raw)
    except PeerDIDValidationError as exc:
        raise InvalidPeerDIDError(f"Malformed service element {token!r} in {did!r}: {exc}") from exc
    if not expanded.get("id"):
        expanded["id"] = state.next_id()
    try:
        return ServiceDescriptor.model_validate(expanded)
    except ValueError as exc:
        raise InvalidPeerDIDError(f"Malformed service element {token!r} in {did!r}: {exc}") from exc


__all__ = [
    "ServiceIndex",
    "abbreviate_service",
    "decode_service",
    "encode_service",
    "expand_service",
    "service_to_dict",
]
