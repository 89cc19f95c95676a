"""
Unit tests for the domain services in pos_inventory/services/.

Products, customers, store stock, invoices, warehouses and users all go
through one shared cache-aware service backed by an in-memory store.
"""
import re
from datetime import datetime, timezone

import pytest

from pos_inventory.backend import InMemoryBackingStore
from pos_inventory.config import Settings
from pos_inventory.errors import BackendError, UnknownCollectionError
from pos_inventory.models import Invoice, Product, StoreItem
from pos_inventory.services import (
    INVOICES,
    PRODUCTS,
    REGISTRY,
    STORES,
    build_services,
    get_collection,
)
from pos_inventory.services.invoices import make_invoice_number

pytestmark = pytest.mark.asyncio


def _stock_row(row_id, available, product_name="Widget"):
    return {
        "id": row_id,
        "cost_price": 2.5,
        "selling_price": 4.0,
        "location": {"id": "w1", "name": "Main Store", "code": "MS"},
        "product": {"id": "p1", "name": product_name, "barcode": "4006381333931"},
        "qty": {"total_qty": 20, "available_qty": available},
        "grn_number": "GRN-0042",
    }


@pytest.fixture
def backend(product_docs):
    return InMemoryBackingStore(
        seed={
            "products": product_docs,
            "customers": [
                {"id": "c1", "name": "Alice Perera", "phone": "0771234567", "email": "alice@example.com"},
                {"id": "c2", "name": "Bob Silva", "phone": "0719876543", "email": "al.bob@example.com"},
                {"id": "c3", "name": "Carol", "phone": "0112223334", "email": None},
            ],
            "stores": [_stock_row("s1", 10), _stock_row("s2", 5, "Gadget")],
            "users": [{"id": "u1", "name": "Admin", "email": "admin@example.com", "role": "admin"}],
        }
    )


@pytest.fixture
def services(kv, backend, clock):
    return build_services(Settings(), backend=backend, kv=kv, clock=clock)


# ----- registry -----


async def test_registry_triples_are_distinct():
    cache_keys = {cd.cache_key for cd in REGISTRY.values()}
    collection_keys = {cd.collection_key for cd in REGISTRY.values()}

    assert len(cache_keys) == len(REGISTRY)
    assert len(collection_keys) == len(REGISTRY)
    assert get_collection("invoices") is INVOICES
    assert INVOICES.cache_key == "invoice_cache"


async def test_unknown_collection():
    with pytest.raises(UnknownCollectionError) as exc_info:
        get_collection("suppliers")

    assert str(exc_info.value) == "Unknown collection: suppliers"
    assert isinstance(exc_info.value, KeyError)


# ----- products -----


async def test_search_products_matches_fields(services):
    by_keyword = await services.products.search_products("STEEL")
    by_code = await services.products.search_products("gd-1")
    by_description = await services.products.search_products("wall charger")

    assert [p.id for p in by_keyword] == ["p1"]
    assert [p.id for p in by_code] == ["p2"]
    assert [p.id for p in by_description] == ["p2"]


async def test_search_products_blank_returns_all(services):
    assert [p.id for p in await services.products.search_products("  ")] == ["p1", "p2"]


async def test_search_uses_cached_catalogue(services, backend):
    await services.products.search_products("widget")
    await services.products.search_products("gadget")

    assert backend.calls["fetch_all"] == 1


async def test_create_product_is_visible_first(services, backend):
    await services.products.get_all_products()

    created = await services.products.create_product({"name": "Sprocket", "stock": 4})

    assert created.id
    assert created.created_at is not None
    products = await services.products.get_all_products()
    assert products[0].id == created.id
    assert backend.calls["fetch_all"] == 1


async def test_update_product_refetch_by_id(services, backend):
    product = await services.products.get_product_by_id("p1")

    updated = await services.products.update_product(product.model_copy(update={"stock": 7}))

    assert updated.stock == 7
    assert updated.modified_date is not None
    fetched = await services.products.get_product_by_id("p1")
    assert fetched.stock == 7


async def test_delete_product(services):
    await services.products.get_all_products()

    assert await services.products.delete_product("p2") is True
    assert [p.id for p in await services.products.get_all_products()] == ["p1"]


async def test_categories_sorted_and_distinct(kv, clock):
    backend = InMemoryBackingStore(seed={"products": [
        {"id": "a", "name": "A", "category": "Hardware", "subcategory": "Fasteners"},
        {"id": "b", "name": "B", "category": "Electronics", "subcategory": "Chargers"},
        {"id": "c", "name": "C", "category": "Hardware", "subcategory": ""},
        {"id": "d", "name": "D"},
    ]})
    services = build_services(Settings(), backend=backend, kv=kv, clock=clock)

    assert await services.products.get_categories() == ["Electronics", "Hardware"]
    assert await services.products.get_subcategories() == ["Chargers", "Fasteners"]
    assert backend.calls["fetch_all"] == 1


async def test_categories_follow_cached_writes(services, backend):
    await services.products.get_categories()
    await services.products.create_product({"name": "Lamp", "category": "Lighting"})

    assert await services.products.get_categories() == ["Electronics", "Hardware", "Lighting"]
    assert backend.calls["fetch_all"] == 1


async def test_categories_force_refresh(services, backend):
    await services.products.get_subcategories()
    backend.put("products", {"id": "p3", "name": "Cable", "subcategory": "Cables"})

    assert "Cables" not in await services.products.get_subcategories()
    assert "Cables" in await services.products.get_subcategories(force_refresh=True)
    assert backend.calls["fetch_all"] == 2


# ----- customers -----


async def test_search_customers_field_order_and_dedup(services):
    results = await services.customers.search_customers("al")

    # Name match first, then the email-only match; Alice appears once
    assert [c.id for c in results] == ["c1", "c2"]


async def test_search_customers_by_phone(services):
    results = await services.customers.search_customers("071")

    assert [c.id for c in results] == ["c2"]


async def test_search_customers_blank(services, backend):
    assert await services.customers.search_customers("   ") == []
    assert backend.calls["fetch_all"] == 0


async def test_search_customers_limit(kv, clock):
    backend = InMemoryBackingStore(
        seed={"customers": [{"id": f"c{i}", "name": f"Sam {i}"} for i in range(15)]}
    )
    services = build_services(Settings(), backend=backend, kv=kv, clock=clock)

    assert len(await services.customers.search_customers("sam")) == 10


async def test_create_customer(services):
    created = await services.customers.create_customer("Dan", "0779990000", type="wholesale")

    assert created.type == "wholesale"
    assert created.registration_date is not None
    assert (await services.customers.get_customer_by_id(created.id)).name == "Dan"


# ----- store stock and invoices -----


async def test_search_store_items(services):
    items = await services.stores.get_store_items()

    assert [i.id for i in services.stores.search_store_items("gadget", items)] == ["s2"]
    assert len(services.stores.search_store_items("grn-0042", items)) == 2
    assert len(services.stores.search_store_items("ms", items)) == 2
    assert services.stores.search_store_items(" ", items) == items


async def test_save_store_items(services, backend):
    row = StoreItem.model_validate(_stock_row("s3", 8))

    saved = await services.stores.save_store_items([row])

    assert [i.id for i in saved] == ["s3"]
    assert backend.calls["insert"] == 1


async def test_invoice_decrements_stock(services, backend):
    invoice = await services.invoices.create_invoice({
        "customer_name": "Alice Perera",
        "products": [
            {"product": {"id": "p1", "name": "Widget"}, "quantity": 2, "store_id": "s1"},
            {"product": {"id": "p1", "name": "Widget"}, "quantity": 1, "store_id": "s1"},
            {"product": {"id": "p2", "name": "Gadget"}, "quantity": 5, "store_id": "s2"},
        ],
        "total": 32.0,
    })

    assert re.fullmatch(r"INV-\d{8}-\d{4}", invoice.invoice_number)
    assert invoice.status == "Pending"

    s1 = await backend.fetch_by_id("stores", "s1")
    s2 = await backend.fetch_by_id("stores", "s2")
    assert s1["qty"]["available_qty"] == 7
    assert s2["qty"]["available_qty"] == 0


async def test_invoice_stock_read_reflects_sale(services):
    await services.stores.get_store_items()
    await services.invoices.create_invoice({
        "products": [{"product": {"id": "p1", "name": "Widget"}, "quantity": 4, "store_id": "s1"}],
    })

    items = await services.stores.get_store_items()

    assert items[0].id == "s1"
    assert items[0].qty.available_qty == 6


async def test_invoice_skips_unknown_stock_row(services, backend):
    await services.invoices.create_invoice({
        "products": [{"product": {"id": "p9", "name": "Ghost"}, "quantity": 1, "store_id": "missing"}],
    })

    assert backend.calls["insert"] == 1


class StockLookupDownStore(InMemoryBackingStore):
    """Backend that cannot serve single stock rows."""

    async def fetch_by_id(self, collection, doc_id):
        if collection == "stores":
            self.calls["fetch_by_id"] += 1
            raise BackendError("transport down", collection)
        return await super().fetch_by_id(collection, doc_id)


async def test_invoice_stock_lookup_failure_propagates(kv, clock):
    backend = StockLookupDownStore(seed={"stores": [_stock_row("s1", 10)]})
    services = build_services(Settings(), backend=backend, kv=kv, clock=clock)

    with pytest.raises(BackendError):
        await services.invoices.create_invoice({
            "products": [{"product": {"id": "p1", "name": "Widget"}, "quantity": 4, "store_id": "s1"}],
        })

    row = await InMemoryBackingStore.fetch_by_id(backend, "stores", "s1")
    assert row["qty"]["available_qty"] == 10
    assert services.db.ledger.get_collection_timestamps(STORES.collection_key).last_update_time == 0.0


async def test_invoice_write_failure_propagates(services, backend, ledger):
    backend.available = False

    with pytest.raises(BackendError):
        await services.invoices.create_invoice({"products": []})

    assert ledger.get_collection_timestamps(INVOICES.collection_key).last_update_time == 0.0


async def test_update_invoice_status(services):
    invoice = await services.invoices.create_invoice({"products": []})

    assert await services.invoices.update_invoice_status(invoice.id, "Paid") is True

    fetched = await services.invoices.get_invoice_by_id(invoice.id)
    assert fetched.status == "Paid"
    assert fetched.modified_date is not None
    listed = await services.invoices.get_invoices()
    assert listed[0].status == "Paid"


async def test_update_invoice_status_rejects_unknown(services, backend):
    with pytest.raises(ValueError):
        await services.invoices.update_invoice_status("any", "Refunded")

    assert backend.calls["update"] == 0


async def test_update_invoice_status_missing_invoice(services):
    assert await services.invoices.update_invoice_status("nope", "Paid") is False


async def test_make_invoice_number():
    number = make_invoice_number(datetime(2024, 3, 9, tzinfo=timezone.utc))

    assert number.startswith("INV-20240309-")
    assert 1000 <= int(number.rsplit("-", 1)[1]) <= 9999


# ----- warehouses and users -----


async def test_create_warehouse(services, backend):
    await services.warehouses.fetch_warehouses()

    created = await services.warehouses.create_warehouse("North", "NW")

    assert [w.code for w in await services.warehouses.fetch_warehouses()] == ["NW"]
    assert created.id
    assert backend.calls["fetch_all"] == 1


async def test_user_role_and_activation(services):
    assert (await services.users.set_user_role("u1", "cashier")).role == "cashier"
    assert (await services.users.set_user_active("u1", False)).active is False

    user = await services.users.get_user_by_id("u1")
    assert user.role == "cashier"
    assert user.active is False


async def test_user_role_rejects_unknown(services):
    with pytest.raises(ValueError):
        await services.users.set_user_role("u1", "root")


async def test_create_user(services):
    await services.users.get_users()
    created = await services.users.create_user("Eve", "eve@example.com")

    assert created.role == "user"
    assert [u.id for u in await services.users.get_users()][0] == created.id


async def test_services_share_one_orchestrator(services):
    assert services.products.db is services.invoices.db is services.stores.db
    assert services.invoices.store_service is services.stores


async def test_close_releases_store(services, kv):
    from pos_inventory.errors import StorageError

    await services.close()

    with pytest.raises(StorageError):
        kv.get("collections", PRODUCTS.cache_key)


async def test_store_rows_cached_per_collection(services, backend):
    await services.stores.get_store_items()
    await services.products.get_all_products()
    await services.stores.get_store_items()

    assert backend.calls["fetch_all"] == 2
    assert services.db.ledger.get_collection_timestamps(STORES.collection_key).snapshot_is_fresh


async def test_models_parse_store_timestamps():
    invoice = Invoice.model_validate({"invoice_date": {"seconds": 1700000000, "nanoseconds": 0}})
    product = Product.model_validate({"name": "x", "created_at": 1700000000000})

    assert invoice.invoice_date == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert product.created_at == invoice.invoice_date
