"""PeerDIDProvider: create and resolve did:peer identifiers against one repository."""
from __future__ import annotations

from collections.abc import Sequence

from did_peer.create import KeyInput, ServiceInput, create
from did_peer.document import DIDDocument
from did_peer.errors import RepositoryRequiredError
from did_peer.repository import DIDRepository, extract_short_form_did, store_long_form_did
from did_peer.resolve import resolve


class PeerDIDProvider:
    """Bind did:peer creation and resolution to an optional repository.

    Parameters
    ----------
    repository:
        Lookup table used to resolve short form numalgo 4 DIDs.
    store_long_form:
        When ``True`` (the default) every numalgo 4 DID created through this
        provider is stored in *repository* under its short form.

    Example
    -------
    ::

        provider = PeerDIDProvider(InMemoryDIDRepository())
        long_form = provider.create(4, [auth_key])
        short_form = extract_short_form_did(long_form)
        document = provider.resolve(short_form)
    """

    def __init__(
        self,
        repository: DIDRepository | None = None,
        store_long_form: bool = True,
    ) -> None:
        self._repository = repository
        self._store_long_form = store_long_form

    @property
    def repository(self) -> DIDRepository | None:
        return self._repository

    def create(
        self,
        numalgo: int,
        authentication_keys: Sequence[KeyInput],
        encryption_keys: Sequence[KeyInput] | None = None,
        services: ServiceInput | Sequence[ServiceInput] | None = None,
    ) -> str:
        """Create an identifier, see :func:`did_peer.create.create`."""
        did = create(numalgo, authentication_keys, encryption_keys, services)
        if numalgo == 4 and self._store_long_form and self._repository is not None:
            store_long_form_did(did, self._repository)
        return did

    def resolve(self, did: str) -> DIDDocument:
        """Resolve *did* using this provider's repository."""
        return resolve(did, self._repository)

    def store(self, long_form_did: str) -> str:
        """Store a long form numalgo 4 DID and return its short form.

        Raises
        ------
        RepositoryRequiredError
            If the provider has no repository.
        """
        if self._repository is None:
            raise RepositoryRequiredError(extract_short_form_did(long_form_did))
        return store_long_form_did(long_form_did, self._repository)


__all__ = ["PeerDIDProvider"]
