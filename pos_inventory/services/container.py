"""
Wiring: one KV store, cache store, ledger and orchestrator per process,
passed by reference to every domain service.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..backend import BackingStore, HttpBackingStore, InMemoryBackingStore
from ..config import Settings
from ..persist import CacheStore, CollectionLedger, KVStore
from .cache_aware import CacheAwareDBService
from .customers import CustomerService
from .invoices import InvoiceService
from .products import ProductService
from .stores import StoreService
from .users import UserService
from .warehouses import WarehouseService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Constructed service graph."""

    kv: KVStore
    backend: BackingStore
    db: CacheAwareDBService
    products: ProductService
    customers: CustomerService
    invoices: InvoiceService
    stores: StoreService
    warehouses: WarehouseService
    users: UserService

    async def close(self) -> None:
        await self.backend.close()
        self.kv.close()


def build_services(
    settings: Settings,
    backend: Optional[BackingStore] = None,
    kv: Optional[KVStore] = None,
    clock: Callable[[], float] = time.time,
) -> Services:
    """
    Build the service graph from settings.

    Args:
        settings: Application settings
        backend: Backing store override (default: HTTP if a base URL is
            configured, otherwise an in-memory store)
        kv: KV store override (default: SQLite at settings.paths.cache_db)
        clock: Source of "now" shared by cache store and ledger
    """
    if kv is None:
        kv = KVStore(Path(settings.paths.cache_db))

    if backend is None:
        if settings.backend.base_url:
            backend = HttpBackingStore(
                settings.backend.base_url, timeout=settings.backend.timeout_s
            )
        else:
            logger.warning("No backend URL configured, using in-memory document store")
            backend = InMemoryBackingStore()

    cache = CacheStore(kv, ttl_s=settings.cache.ttl_s, clock=clock)
    ledger = CollectionLedger(kv, max_age_s=settings.cache.max_age_s, clock=clock)
    db = CacheAwareDBService(backend, cache, ledger)

    stores = StoreService(db)
    return Services(
        kv=kv,
        backend=backend,
        db=db,
        products=ProductService(db),
        customers=CustomerService(db),
        invoices=InvoiceService(db, stores),
        stores=stores,
        warehouses=WarehouseService(db),
        users=UserService(db),
    )
