"""
Cache-aware document service and the collection-specific services on top.
"""

from .cache_aware import CacheAwareDBService, CollectionData, FetchResult
from .collections import (
    CUSTOMERS,
    INVOICES,
    PRODUCTS,
    REGISTRY,
    STORES,
    USERS,
    WAREHOUSES,
    get_collection,
)
from .customers import CustomerService
from .invoices import InvoiceService
from .products import ProductService
from .stores import StoreService
from .users import UserService
from .warehouses import WarehouseService
from .container import Services, build_services

__all__ = [
    "CacheAwareDBService",
    "CollectionData",
    "FetchResult",
    "CUSTOMERS",
    "INVOICES",
    "PRODUCTS",
    "REGISTRY",
    "STORES",
    "USERS",
    "WAREHOUSES",
    "get_collection",
    "CustomerService",
    "InvoiceService",
    "ProductService",
    "StoreService",
    "UserService",
    "WarehouseService",
    "Services",
    "build_services",
]
