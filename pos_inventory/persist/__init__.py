"""
Persistence layer for the collection cache.

Provides:
- SQLite-backed KV store (the durable local medium)
- Cache store for serialized document lists
- Collection timestamp ledger driving staleness decisions
"""

from .sqlite_store import KVStore
from .cache_store import CacheStore
from .ledger import CollectionLedger, CollectionTimestamps

__all__ = [
    "KVStore",
    "CacheStore",
    "CollectionLedger",
    "CollectionTimestamps",
]
