"""
Collection timestamp ledger.

Tracks, per collection key, when the whole collection was last fetched from
the backing store and when it was last written. A cached snapshot is only
trustworthy while last_fetch_time > last_update_time.
"""

import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .sqlite_store import KVStore

logger = logging.getLogger(__name__)

TABLE = "timestamps"
FETCH_SUFFIX = "lastFetchTime"
UPDATE_SUFFIX = "lastUpdateTime"


@dataclass(frozen=True)
class CollectionTimestamps:
    """Fetch/update instants for one collection, epoch seconds."""

    last_fetch_time: float = 0.0
    last_update_time: float = 0.0

    @property
    def never_fetched(self) -> bool:
        return self.last_fetch_time <= 0.0

    @property
    def snapshot_is_fresh(self) -> bool:
        """No write has been recorded since the last full fetch."""
        return self.last_fetch_time > self.last_update_time


def _after(value: float) -> float:
    """Smallest float strictly greater than value."""
    return math.nextafter(value, math.inf)


class CollectionLedger:
    """
    Persistent fetch/update ledger for logical collections.

    Both instants only move forward. An update is always recorded strictly
    after the last recorded fetch, and a fetch strictly after the last
    recorded update, so a coarse or skewed clock cannot make a write look
    older than the snapshot it invalidates.

    Writes go straight to the KV store; failures raise StorageError.
    """

    def __init__(
        self,
        kv: KVStore,
        max_age_s: float = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            kv: Persistent key-value store
            max_age_s: Default age after which a collection is refetched
            clock: Source of "now" in epoch seconds
        """
        self.kv = kv
        self.max_age_s = max_age_s
        self.clock = clock

    @staticmethod
    def _key(collection_key: str, suffix: str) -> str:
        return f"{collection_key}.{suffix}"

    def _read(self, collection_key: str, suffix: str) -> float:
        raw = self.kv.get(TABLE, self._key(collection_key, suffix))
        if raw is None:
            return 0.0
        try:
            value = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning(f"Unreadable {suffix} for {collection_key}, treating as epoch")
            return 0.0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        return float(value)

    def _write(self, collection_key: str, suffix: str, value: float) -> None:
        self.kv.set(
            TABLE,
            self._key(collection_key, suffix),
            json.dumps(value).encode("utf-8"),
        )

    def get_collection_timestamps(self, collection_key: str) -> CollectionTimestamps:
        """
        Read both instants for a collection.

        Args:
            collection_key: Ledger namespace of the collection

        Returns:
            CollectionTimestamps, epoch (0.0) for anything never recorded
        """
        return CollectionTimestamps(
            last_fetch_time=self._read(collection_key, FETCH_SUFFIX),
            last_update_time=self._read(collection_key, UPDATE_SUFFIX),
        )

    def should_fetch_collection(
        self,
        collection_key: str,
        max_age_s: Optional[float] = None,
        force: bool = False,
    ) -> bool:
        """
        Decide whether the whole collection must be pulled from the store.

        Writes do not factor in here; they are judged per document.

        Args:
            collection_key: Ledger namespace of the collection
            max_age_s: Override of the default max age
            force: Explicit refresh request

        Returns:
            True if never fetched, forced, or the last fetch is too old
        """
        if force:
            return True

        stamps = self.get_collection_timestamps(collection_key)
        if stamps.never_fetched:
            return True

        max_age = self.max_age_s if max_age_s is None else max_age_s
        return (self.clock() - stamps.last_fetch_time) > max_age

    def save_collection_fetch_time(
        self, collection_key: str, timestamp: Optional[float] = None
    ) -> float:
        """
        Record a completed full-collection fetch.

        Returns:
            The instant actually recorded
        """
        stamps = self.get_collection_timestamps(collection_key)
        now = self.clock() if timestamp is None else timestamp
        recorded = max(now, _after(stamps.last_fetch_time), _after(stamps.last_update_time))
        self._write(collection_key, FETCH_SUFFIX, recorded)
        return recorded

    def save_collection_update_time(
        self, collection_key: str, timestamp: Optional[float] = None
    ) -> float:
        """
        Record a completed create/update/delete against the collection.

        Returns:
            The instant actually recorded
        """
        stamps = self.get_collection_timestamps(collection_key)
        now = self.clock() if timestamp is None else timestamp
        recorded = max(now, _after(stamps.last_update_time), _after(stamps.last_fetch_time))
        self._write(collection_key, UPDATE_SUFFIX, recorded)
        return recorded

    def clear(self, collection_key: str) -> None:
        """Forget both instants for a collection."""
        self.kv.delete(TABLE, self._key(collection_key, FETCH_SUFFIX))
        self.kv.delete(TABLE, self._key(collection_key, UPDATE_SUFFIX))
