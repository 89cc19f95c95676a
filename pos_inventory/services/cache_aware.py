"""
Cache-aware document service.

Answers list / find / save requests for a collection from the local cache
when the timestamp ledger says the cached snapshot can be trusted, and falls
back to the backing store otherwise. Every write goes to the backing store
first, then advances the collection's update time, then patches the cache.

Read failures degrade to an empty / absent result (or a failed FetchResult);
write failures propagate to the caller and leave cache and ledger untouched.
A stored copy that fails validation after a successful write is reported as
a BackendError; the write is recorded but the cache is not patched.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from pydantic import ValidationError

from ..backend.base import BackingStore
from ..errors import BackendError
from ..models.base import Document
from ..persist.cache_store import CacheStore
from ..persist.ledger import CollectionLedger

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Document)
R = TypeVar("R")


@dataclass(frozen=True)
class CollectionData(Generic[T]):
    """
    Binds a logical collection to its three namespaces.

    collection: name in the backing store
    collection_key: ledger namespace
    cache_key: cache store namespace
    """

    collection: str
    collection_key: str
    cache_key: str
    model: type[T]


@dataclass(frozen=True)
class FetchResult(Generic[R]):
    """
    Outcome of a read.

    Separates "empty because empty" from "empty because the store failed".
    """

    ok: bool
    data: Optional[R] = None
    error: Optional[str] = None
    from_cache: bool = False

    @classmethod
    def success(cls, data: R, from_cache: bool = False) -> "FetchResult[R]":
        return cls(ok=True, data=data, from_cache=from_cache)

    @classmethod
    def failure(cls, reason: str) -> "FetchResult[R]":
        return cls(ok=False, error=reason)


class CacheAwareDBService:
    """
    Orchestrates the cache store, the timestamp ledger and the backing store.

    One instance per process; domain services share it.
    """

    def __init__(
        self,
        backend: BackingStore,
        cache: CacheStore,
        ledger: CollectionLedger,
    ):
        self.backend = backend
        self.cache = cache
        self.ledger = ledger
        # Full-collection fetches in flight, by cache key
        self._inflight: dict[str, asyncio.Task] = {}

    # ----- read paths -----

    async def fetch_documents_result(
        self, cd: CollectionData[T], force_refresh: bool = False
    ) -> FetchResult[list[T]]:
        """
        List a collection, from cache when allowed.

        Args:
            cd: Collection triple
            force_refresh: Skip the cache and refetch

        Returns:
            FetchResult with the documents, or a failure if the store was
            unreachable
        """
        should_refresh = self.ledger.should_fetch_collection(
            cd.collection_key, force=force_refresh
        )
        if not should_refresh and self.cache.is_cache_valid(cd.cache_key):
            cached = self.cache.get_from_cache(cd.cache_key, cd.model)
            if cached:
                logger.info(f"Using cached data for collection: {cd.collection_key}")
                return FetchResult.success(cached, from_cache=True)

        task = self._inflight.get(cd.cache_key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_collection(cd))
            self._inflight[cd.cache_key] = task
            task.add_done_callback(lambda t: self._forget_inflight(cd.cache_key, t))
        else:
            logger.debug(f"Joining in-flight fetch for {cd.collection}")

        return await asyncio.shield(task)

    async def fetch_documents(
        self, cd: CollectionData[T], force_refresh: bool = False
    ) -> list[T]:
        """List a collection; an unreachable store yields an empty list."""
        result = await self.fetch_documents_result(cd, force_refresh=force_refresh)
        return result.data if result.ok else []

    def _forget_inflight(self, cache_key: str, task: asyncio.Task) -> None:
        if self._inflight.get(cache_key) is task:
            del self._inflight[cache_key]

    async def _fetch_collection(self, cd: CollectionData[T]) -> FetchResult[list[T]]:
        before = self.ledger.get_collection_timestamps(cd.collection_key)

        logger.info(f"Fetching collection from backing store: {cd.collection}")
        try:
            raw = await self.backend.fetch_all(cd.collection)
            documents = [cd.model.model_validate(item) for item in raw]
        except BackendError as e:
            logger.error(f"Error fetching documents for collection: {cd.collection}: {e}")
            return FetchResult.failure(str(e))
        except ValidationError as e:
            logger.error(f"Backing store returned invalid {cd.collection} documents: {e}")
            return FetchResult.failure(f"Invalid documents in {cd.collection}")

        after = self.ledger.get_collection_timestamps(cd.collection_key)
        if after.last_update_time != before.last_update_time:
            # The snapshot may predate that write; keep the optimistic cache
            logger.info(
                f"Write to {cd.collection} during fetch, not replacing cached snapshot"
            )
            return FetchResult.success(documents)

        self.cache.save_to_cache(cd.cache_key, documents)
        self.ledger.save_collection_fetch_time(cd.collection_key)
        return FetchResult.success(documents)

    async def find_by_id_result(
        self, cd: CollectionData[T], doc_id: str
    ) -> FetchResult[Optional[T]]:
        """
        Find one document.

        The cached copy is served only if no write to the collection has been
        recorded since the last full fetch; otherwise the document is fetched
        and merged to the front of the cached list.

        Returns:
            FetchResult with the document, None data if it does not exist
        """
        stamps = self.ledger.get_collection_timestamps(cd.collection_key)
        cached = self.cache.get_from_cache(cd.cache_key, cd.model)
        hit = next((doc for doc in cached if doc.id == doc_id), None)

        if hit is not None and stamps.snapshot_is_fresh:
            logger.info(f"Using cached document for {cd.collection} with ID: {doc_id}")
            return FetchResult.success(hit, from_cache=True)

        logger.info(f"Fetching fresh document for {cd.collection} with ID: {doc_id}")
        try:
            raw = await self.backend.fetch_by_id(cd.collection, doc_id)
            document = cd.model.model_validate(raw) if raw is not None else None
        except BackendError as e:
            logger.error(f"Error fetching document by ID from {cd.collection}: {e}")
            return FetchResult.failure(str(e))
        except ValidationError as e:
            logger.error(f"Backing store returned invalid {cd.collection} document {doc_id}: {e}")
            return FetchResult.failure(f"Invalid document {doc_id} in {cd.collection}")

        if document is None:
            return FetchResult.success(None)

        self._prepend_to_cache(cd, [document])
        return FetchResult.success(document)

    async def find_by_id(self, cd: CollectionData[T], doc_id: str) -> Optional[T]:
        """Find one document; unreachable store or no such document yields None."""
        result = await self.find_by_id_result(cd, doc_id)
        return result.data if result.ok else None

    # ----- write paths -----

    async def save_document(self, cd: CollectionData[T], document: T) -> T:
        """
        Insert a document and put the stored copy at the front of the cache.

        Raises:
            BackendError: If the store rejected the write or returned
                an invalid document
        """
        try:
            raw = await self.backend.insert(cd.collection, document.to_store_dict())
        except BackendError as e:
            logger.error(f"Error saving document in {cd.collection_key}: {e}")
            raise

        self.ledger.save_collection_update_time(cd.collection_key)

        stored = self._validate_stored(cd, raw)
        self._prepend_to_cache(cd, [stored])
        return stored

    async def save_documents(
        self, cd: CollectionData[T], documents: Sequence[T]
    ) -> list[T]:
        """
        Insert several documents with one ledger update.

        Raises:
            BackendError: If the store rejected the write or returned
                an invalid document
        """
        if not documents:
            return []

        try:
            raw = await self.backend.insert_many(
                cd.collection, [doc.to_store_dict() for doc in documents]
            )
        except BackendError as e:
            logger.error(f"Error saving documents in {cd.collection_key}: {e}")
            raise

        self.ledger.save_collection_update_time(cd.collection_key)

        stored = [self._validate_stored(cd, item) for item in raw]
        self._prepend_to_cache(cd, stored)
        return stored

    async def update_document(
        self, cd: CollectionData[T], doc_id: str, fields: dict[str, Any]
    ) -> Optional[T]:
        """
        Merge fields into a stored document and patch the cached copy.

        Returns:
            The updated document, None if it does not exist

        Raises:
            BackendError: If the store rejected the write or returned
                an invalid document
        """
        try:
            raw = await self.backend.update(cd.collection, doc_id, fields)
        except BackendError as e:
            logger.error(f"Error updating {doc_id} in {cd.collection_key}: {e}")
            raise

        if raw is None:
            logger.info(f"No {cd.collection} document with ID {doc_id} to update")
            return None

        self.ledger.save_collection_update_time(cd.collection_key)

        updated = self._validate_stored(cd, raw)
        cached = self.cache.get_from_cache(cd.cache_key, cd.model)
        if any(doc.id == doc_id for doc in cached):
            patched = [updated if doc.id == doc_id else doc for doc in cached]
            self.cache.save_to_cache(cd.cache_key, patched)
        else:
            self.cache.save_to_cache(cd.cache_key, [updated, *cached])
        return updated

    async def delete_document(self, cd: CollectionData[T], doc_id: str) -> bool:
        """
        Delete a document and drop it from the cache.

        Returns:
            True if the store held the document

        Raises:
            BackendError: If the store rejected the delete
        """
        try:
            removed = await self.backend.remove(cd.collection, doc_id)
        except BackendError as e:
            logger.error(f"Error deleting document from {cd.collection}: {e}")
            raise

        self.ledger.save_collection_update_time(cd.collection_key)

        cached = self.cache.get_from_cache(cd.cache_key, cd.model)
        self.cache.save_to_cache(cd.cache_key, [doc for doc in cached if doc.id != doc_id])
        return removed

    def invalidate(self, cd: CollectionData[T]) -> None:
        """Drop the cached list and ledger entries; the next read refetches."""
        self.cache.clear_cache(cd.cache_key)
        self.ledger.clear(cd.collection_key)
        logger.info(f"Invalidated cache for collection: {cd.collection}")

    def _validate_stored(self, cd: CollectionData[T], raw: Any) -> T:
        # The write already happened and is recorded; only the cache update is skipped
        try:
            return cd.model.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Invalid stored copy in {cd.collection_key}: {e}")
            raise BackendError(
                f"Invalid {cd.collection} document returned by the store", cd.collection
            ) from e

    def _prepend_to_cache(self, cd: CollectionData[T], documents: Sequence[T]) -> None:
        # Re-read: the cache may have changed while the backend call was pending
        cached = self.cache.get_from_cache(cd.cache_key, cd.model)
        ids = {doc.id for doc in documents}
        self.cache.save_to_cache(
            cd.cache_key, [*documents, *(doc for doc in cached if doc.id not in ids)]
        )
