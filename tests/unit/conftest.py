"""
Shared fixtures for collection cache unit tests.
"""
import pytest

from pos_inventory.backend import InMemoryBackingStore
from pos_inventory.persist import CacheStore, CollectionLedger, KVStore
from pos_inventory.services import CacheAwareDBService


class FakeClock:
    """Manually advanced clock in epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def kv(tmp_path):
    """Create a temporary KVStore instance."""
    db_path = tmp_path / "cache.db"
    store = KVStore(db_path)
    yield store
    store.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(kv, clock):
    return CacheStore(kv, clock=clock)


@pytest.fixture
def ledger(kv, clock):
    return CollectionLedger(kv, max_age_s=300.0, clock=clock)


@pytest.fixture
def backend(product_docs):
    """In-memory backing store seeded with the product catalogue."""
    return InMemoryBackingStore(seed={"products": product_docs})


@pytest.fixture
def service(backend, cache, ledger):
    """Cache-aware service wired to the in-memory backend."""
    return CacheAwareDBService(backend, cache, ledger)
