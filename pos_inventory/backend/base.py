"""
Backing store interface.

The remote document store is the source of truth. The cache only needs the
capability set below; documents cross this boundary as JSON-safe dicts.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

DocumentDict = dict[str, Any]


class BackingStore(ABC):
    """
    Async capability set of the remote document store.

    All methods raise BackendError on transport, auth, or server failure.
    """

    @abstractmethod
    async def fetch_all(self, collection: str) -> list[DocumentDict]:
        """Fetch every document in a collection."""
        pass

    @abstractmethod
    async def fetch_by_id(self, collection: str, doc_id: str) -> Optional[DocumentDict]:
        """Fetch one document, None if it does not exist."""
        pass

    @abstractmethod
    async def insert(self, collection: str, document: DocumentDict) -> DocumentDict:
        """
        Store a document.

        Returns:
            The stored document; the server may assign or override fields
            such as id and timestamps
        """
        pass

    async def insert_many(
        self, collection: str, documents: list[DocumentDict]
    ) -> list[DocumentDict]:
        """Store several documents, returning them in input order."""
        return [await self.insert(collection, doc) for doc in documents]

    @abstractmethod
    async def update(
        self, collection: str, doc_id: str, fields: DocumentDict
    ) -> Optional[DocumentDict]:
        """
        Merge fields into an existing document.

        Returns:
            The updated document, None if it does not exist
        """
        pass

    @abstractmethod
    async def remove(self, collection: str, doc_id: str) -> bool:
        """Delete a document; True if it existed."""
        pass

    async def close(self) -> None:
        """Release connections held by the store."""
        return None
