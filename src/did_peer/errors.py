"""Exception hierarchy for did:peer creation and resolution.

Every failure is terminal for the call that raised it. Nothing in this
package catches one of these to retry or to return a partial document.
"""
from __future__ import annotations


class PeerDIDError(Exception):
    """Base exception for all did:peer errors."""


class PeerDIDValidationError(PeerDIDError, ValueError):
    """Raised when a key record is missing key material or has the wrong type."""


class InvalidEncodingError(PeerDIDError, ValueError):
    """Raised when a base58, base64url, multibase or varint payload cannot be decoded."""


class InvalidPeerDIDError(PeerDIDError, ValueError):
    """Raised when an identifier fails the grammar or a structural check."""


class HashVerificationError(PeerDIDError, ValueError):
    """Raised when a numalgo 4 hash does not match its embedded document."""

    def __init__(self, did: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Hash verification failed for {did!r}: "
            f"expected {expected!r}, got {actual!r}."
        )
        self.did = did
        self.expected = expected
        self.actual = actual


class UnsupportedNumalgoError(PeerDIDError, NotImplementedError):
    """Raised for numalgo 1, which is recognised but not implemented."""

    def __init__(self, numalgo: int | str) -> None:
        super().__init__(f"NumAlgo{numalgo} not supported")
        self.numalgo = numalgo


class UnrecognizedNumalgoError(PeerDIDError, ValueError):
    """Raised when the numalgo is not one of 0, 1, 2 or 4."""

    def __init__(self, numalgo: int | str) -> None:
        super().__init__(f"numalgo {numalgo} not recognized")
        self.numalgo = numalgo


class RepositoryRequiredError(PeerDIDError):
    """Raised when a short form numalgo 4 DID is resolved without a repository."""

    def __init__(self, did: str) -> None:
        super().__init__(
            f"Short form did:peer:4 resolution requires a DID repository: {did!r}"
        )
        self.did = did


class DIDNotFoundError(PeerDIDError, KeyError):
    """Raised when a short form DID has no long form entry in the repository."""

    def __init__(self, did: str) -> None:
        super().__init__(f"{did} not found in repository")
        self.did = did

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0])


__all__ = [
    "DIDNotFoundError",
    "HashVerificationError",
    "InvalidEncodingError",
    "InvalidPeerDIDError",
    "PeerDIDError",
    "PeerDIDValidationError",
    "RepositoryRequiredError",
    "UnrecognizedNumalgoError",
    "UnsupportedNumalgoError",
]
