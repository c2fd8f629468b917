"""Short form lookup table for numalgo 4 identifiers.

A short form ``did:peer:4<hash>`` carries no document, so resolving it needs
the long form ``did:peer:4<hash>:<document>`` it was derived from. Any object
implementing :class:`DIDRepository` can supply it;
:class:`InMemoryDIDRepository` is the reference implementation.
"""
from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from did_peer.constants import MULTIBASE_BASE58BTC_PREFIX, VARIANT_4_PREFIX
from did_peer.errors import InvalidPeerDIDError

logger = logging.getLogger(__name__)


@runtime_checkable
class DIDRepository(Protocol):
    """Storage contract for short form -> long form did:peer:4 entries."""

    def store(self, short_form_did: str, long_form_did: str) -> None:
        """Store *long_form_did* under *short_form_did*."""

    def retrieve(self, short_form_did: str) -> str | None:
        """Return the long form stored under *short_form_did*, or ``None``."""

    def exists(self, short_form_did: str) -> bool:
        """Return ``True`` if an entry exists for *short_form_did*."""


class InMemoryDIDRepository:
    """Non-persistent :class:`DIDRepository` backed by a dict.

    All methods are thread-safe via a single :class:`threading.Lock`.
    Contents are lost when the process exits.

    Example
    -------
    ::

        repository = InMemoryDIDRepository()
        short_form = store_long_form_did(long_form, repository)
        document = resolve(short_form, repository)
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def store(self, short_form_did: str, long_form_did: str) -> None:
        with self._lock:
            self._entries[short_form_did] = long_form_did
        logger.info("Stored long form DID for %s", short_form_did)

    def retrieve(self, short_form_did: str) -> str | None:
        with self._lock:
            return self._entries.get(short_form_did)

    def exists(self, short_form_did: str) -> bool:
        with self._lock:
            return short_form_did in self._entries

    def clear(self) -> None:
        """Remove every stored entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Return the number of stored entries."""
        with self._lock:
            return len(self._entries)

    def __contains__(self, short_form_did: object) -> bool:
        with self._lock:
            return short_form_did in self._entries


def extract_short_form_did(long_form_did: str) -> str:
    """Return the short form of a long form ``did:peer:4``.

    Raises
    ------
    InvalidPeerDIDError
        Unless *long_form_did* has exactly four colon-separated parts,
        starts with ``did:peer:`` and its hash segment starts with ``4z``.
    """
    parts = long_form_did.split(":")
    if (
        len(parts) != 4
        or parts[0] != "did"
        or parts[1] != "peer"
        or not parts[2].startswith(VARIANT_4_PREFIX + MULTIBASE_BASE58BTC_PREFIX)
    ):
        raise InvalidPeerDIDError(f"Invalid long form did:peer:4 format: {long_form_did!r}")
    return f"did:peer:{parts[2]}"


def store_long_form_did(long_form_did: str, repository: DIDRepository) -> str:
    """Store *long_form_did* under its short form and return the short form."""
    short_form_did = extract_short_form_did(long_form_did)
    repository.store(short_form_did, long_form_did)
    return short_form_did


__all__ = [
    "DIDRepository",
    "InMemoryDIDRepository",
    "extract_short_form_did",
    "store_long_form_did",
]
