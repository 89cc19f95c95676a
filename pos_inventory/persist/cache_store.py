"""
Cache store - serialized document lists per cache key.

Each cache key holds one envelope in the KV "collections" table:

    {"data": [...documents...], "stored_at": <epoch s>, "last_modified": <epoch s>}

Reads never raise: a missing or undecodable envelope is a cache miss.
"""

import json
import logging
import time
from typing import Any, Callable, Optional, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import CacheCorruptError, StorageError
from .sqlite_store import KVStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

TABLE = "collections"


class CacheStore:
    """
    Typed document-list cache on top of KVStore.

    Validity (is the envelope present and within TTL) is reported separately
    from content, so callers can decide freshness without decoding documents.
    """

    def __init__(
        self,
        kv: KVStore,
        ttl_s: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            kv: Persistent key-value store
            ttl_s: Max envelope age in seconds (None disables TTL)
            clock: Source of "now" in epoch seconds
        """
        self.kv = kv
        self.ttl_s = ttl_s
        self.clock = clock

    def _read_envelope(self, cache_key: str) -> Optional[dict[str, Any]]:
        """
        Load and shape-check the envelope for a key.

        Returns:
            Envelope dict, or None if the key is absent

        Raises:
            CacheCorruptError: If the payload is not a valid envelope
        """
        raw = self.kv.get(TABLE, cache_key)
        if raw is None:
            return None

        try:
            envelope = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheCorruptError(f"Undecodable cache entry {cache_key}: {e}") from e

        if not isinstance(envelope, dict) or not isinstance(envelope.get("data"), list):
            raise CacheCorruptError(f"Malformed cache entry {cache_key}")

        return envelope

    def get_from_cache(self, cache_key: str, model: type[T]) -> list[T]:
        """
        Get the cached document list for a key.

        Args:
            cache_key: Cache namespace of the collection
            model: Document model to validate entries into

        Returns:
            Cached documents in stored order; empty if absent or corrupt
        """
        try:
            envelope = self._read_envelope(cache_key)
            if envelope is None:
                return []
            return [model.model_validate(item) for item in envelope["data"]]
        except (CacheCorruptError, ValidationError) as e:
            logger.warning(f"Discarding corrupt cache entry {cache_key}: {e}")
            return []
        except StorageError as e:
            logger.error(f"Cache read failed for {cache_key}: {e}")
            return []

    def save_to_cache(
        self,
        cache_key: str,
        documents: Sequence[BaseModel],
        last_modified: Optional[float] = None,
    ) -> None:
        """
        Overwrite the cached list for a key.

        Args:
            cache_key: Cache namespace of the collection
            documents: Documents in the order they should be served
            last_modified: Server modification instant (defaults to now)

        Raises:
            StorageError: If the envelope could not be persisted
        """
        now = self.clock()
        envelope = {
            "data": [doc.model_dump(mode="json") for doc in documents],
            "stored_at": now,
            "last_modified": now if last_modified is None else last_modified,
        }
        self.kv.set(TABLE, cache_key, json.dumps(envelope).encode("utf-8"))

    def is_cache_valid(self, cache_key: str, ttl_s: Optional[float] = None) -> bool:
        """
        Check whether a key holds a usable envelope.

        Args:
            cache_key: Cache namespace of the collection
            ttl_s: Override of the configured TTL for this check

        Returns:
            True if an envelope exists, decodes, and is within TTL
        """
        ttl = self.ttl_s if ttl_s is None else ttl_s
        try:
            envelope = self._read_envelope(cache_key)
        except (CacheCorruptError, StorageError) as e:
            logger.warning(f"Cache entry {cache_key} unusable: {e}")
            return False

        if envelope is None:
            return False
        if ttl is None:
            return True

        stored_at = envelope.get("stored_at")
        if not isinstance(stored_at, (int, float)):
            return False
        return (self.clock() - stored_at) <= ttl

    def get_last_modified_time(self, cache_key: str) -> float:
        """Server modification instant recorded with the entry, 0.0 if unknown."""
        try:
            envelope = self._read_envelope(cache_key)
        except (CacheCorruptError, StorageError):
            return 0.0
        if envelope is None:
            return 0.0
        last_modified = envelope.get("last_modified", 0.0)
        return float(last_modified) if isinstance(last_modified, (int, float)) else 0.0

    def clear_cache(self, cache_key: str) -> bool:
        """
        Remove the entry for a key.

        Returns:
            True if an entry was removed
        """
        return self.kv.delete(TABLE, cache_key)
