"""
Static collection triples.

Each logical collection has one backing-store name, one ledger key and one
cache key, fixed for the process lifetime.
"""

from ..errors import UnknownCollectionError
from ..models import Customer, Invoice, Product, StoreItem, User, Warehouse
from .cache_aware import CollectionData

PRODUCTS = CollectionData(
    collection="products",
    collection_key="products_collection",
    cache_key="products_cache",
    model=Product,
)

CUSTOMERS = CollectionData(
    collection="customers",
    collection_key="customers_collection",
    cache_key="customers_cache",
    model=Customer,
)

INVOICES = CollectionData(
    collection="invoices",
    collection_key="invoices_collection",
    cache_key="invoice_cache",
    model=Invoice,
)

WAREHOUSES = CollectionData(
    collection="warehouses",
    collection_key="warehouse_collection",
    cache_key="warehouse_cache",
    model=Warehouse,
)

STORES = CollectionData(
    collection="stores",
    collection_key="store_collection",
    cache_key="store_cache",
    model=StoreItem,
)

USERS = CollectionData(
    collection="users",
    collection_key="users_collection",
    cache_key="users_cache",
    model=User,
)

REGISTRY: dict[str, CollectionData] = {
    cd.collection: cd
    for cd in (PRODUCTS, CUSTOMERS, INVOICES, WAREHOUSES, STORES, USERS)
}


def get_collection(name: str) -> CollectionData:
    """
    Look up a collection triple by backing-store name.

    Raises:
        UnknownCollectionError: If no collection is registered under name
    """
    try:
        return REGISTRY[name]
    except KeyError:
        raise UnknownCollectionError(name) from None
