"""
In-process backing store for development and tests.
"""

import asyncio
import copy
import uuid
from collections import Counter
from typing import Callable, Optional

from ..errors import BackendError
from .base import BackingStore, DocumentDict


class InMemoryBackingStore(BackingStore):
    """
    Dict-backed document store with the remote store's semantics.

    Assigns a generated id (uuid4 hex by default) to documents inserted
    without one, returns copies so callers can never alias stored state, and
    counts calls per operation.
    Setting `available = False` makes every call fail with BackendError.
    """

    def __init__(
        self,
        seed: Optional[dict[str, list[DocumentDict]]] = None,
        latency_s: float = 0.0,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        """
        Args:
            seed: Initial documents per collection (each must carry an id)
            latency_s: Simulated round-trip delay per call
            id_factory: Generates ids for documents inserted without one
        """
        self._collections: dict[str, dict[str, DocumentDict]] = {}
        self.latency_s = latency_s
        self.id_factory = id_factory
        self.available = True
        self.calls: Counter = Counter()

        for collection, documents in (seed or {}).items():
            rows = self._collections.setdefault(collection, {})
            for doc in documents:
                rows[doc["id"]] = copy.deepcopy(doc)

    async def _call(self, op: str, collection: str) -> dict[str, DocumentDict]:
        self.calls[op] += 1
        if self.latency_s:
            await asyncio.sleep(self.latency_s)
        if not self.available:
            raise BackendError(f"Backing store unavailable during {op}", collection)
        return self._collections.setdefault(collection, {})

    async def fetch_all(self, collection: str) -> list[DocumentDict]:
        rows = await self._call("fetch_all", collection)
        return [copy.deepcopy(doc) for doc in rows.values()]

    async def fetch_by_id(self, collection: str, doc_id: str) -> Optional[DocumentDict]:
        rows = await self._call("fetch_by_id", collection)
        doc = rows.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert(self, collection: str, document: DocumentDict) -> DocumentDict:
        rows = await self._call("insert", collection)
        stored = copy.deepcopy(document)
        if not stored.get("id"):
            stored["id"] = self.id_factory()
        rows[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update(
        self, collection: str, doc_id: str, fields: DocumentDict
    ) -> Optional[DocumentDict]:
        rows = await self._call("update", collection)
        if doc_id not in rows:
            return None
        rows[doc_id].update(copy.deepcopy(fields))
        rows[doc_id]["id"] = doc_id
        return copy.deepcopy(rows[doc_id])

    async def remove(self, collection: str, doc_id: str) -> bool:
        rows = await self._call("remove", collection)
        return rows.pop(doc_id, None) is not None

    def put(self, collection: str, document: DocumentDict) -> None:
        """Write a document directly, bypassing call accounting (another client's write)."""
        self._collections.setdefault(collection, {})[document["id"]] = copy.deepcopy(document)
