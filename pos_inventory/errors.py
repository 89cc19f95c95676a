"""
Error types for the collection cache.

Read paths recover from backend failures locally; write paths propagate them.
"""


class PosCacheError(Exception):
    """Base class for all collection cache errors."""


class BackendError(PosCacheError):
    """
    The backing document store could not be reached or refused the request.

    Raised by BackingStore implementations on transport, auth, or server
    failures.
    """

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.collection = collection


class CacheCorruptError(PosCacheError):
    """A cached payload could not be decoded into the expected document type."""


class StorageError(PosCacheError):
    """The persistent key-value store failed to read or write a key."""


class UnknownCollectionError(PosCacheError, KeyError):
    """No collection is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown collection: {self.name}"
