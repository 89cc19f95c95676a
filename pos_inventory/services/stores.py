"""
Store stock service: batches of products held at locations.
"""

import logging

from ..errors import BackendError
from ..models import Invoice, StoreItem
from .cache_aware import CacheAwareDBService
from .collections import STORES

logger = logging.getLogger(__name__)


class StoreService:
    collection_data = STORES

    def __init__(self, db: CacheAwareDBService):
        self.db = db

    async def get_store_items(self, force_refresh: bool = False) -> list[StoreItem]:
        return await self.db.fetch_documents(self.collection_data, force_refresh=force_refresh)

    def search_store_items(self, term: str, items: list[StoreItem]) -> list[StoreItem]:
        """
        Filter already-loaded stock rows.

        Matches product fields, location name/code, GRN number, and prices
        as text.
        """
        if not term.strip():
            return items

        needle = term.strip().lower()
        return [item for item in items if needle in _search_text(item)]

    async def save_store_items(self, items: list[StoreItem]) -> list[StoreItem]:
        """
        Persist a batch of stock rows (e.g. from a goods received note).

        Raises:
            BackendError: If the store rejected the write
        """
        return await self.db.save_documents(self.collection_data, items)

    async def update_product_quantity_after_invoice(self, invoice: Invoice) -> list[StoreItem]:
        """
        Decrement available quantity of each stock row sold on an invoice.

        Returns:
            The updated stock rows

        Raises:
            BackendError: If a stock row could not be loaded or the store rejected
                the write
        """
        sold: dict[str, int] = {}
        for line in invoice.products:
            sold[line.store_id] = sold.get(line.store_id, 0) + line.quantity

        updated: list[StoreItem] = []
        for store_id, quantity in sold.items():
            result = await self.db.find_by_id_result(self.collection_data, store_id)
            if not result.ok:
                raise BackendError(
                    f"Could not load stock row {store_id} for invoice "
                    f"{invoice.invoice_number}: {result.error}",
                    self.collection_data.collection,
                )
            item = result.data
            if item is None:
                logger.warning(
                    f"Invoice {invoice.invoice_number} references unknown stock row {store_id}"
                )
                continue
            item.qty.available_qty -= quantity
            updated.append(item)

        return await self.db.save_documents(self.collection_data, updated)


def _search_text(item: StoreItem) -> str:
    parts = [
        item.product.name,
        item.product.product_code,
        item.product.barcode,
        item.product.category,
        item.product.subcategory,
        item.location.name,
        item.location.code,
        item.grn_number,
        str(item.cost_price),
        str(item.selling_price),
        str(item.discount) if item.discount else None,
    ]
    return " ".join(p.lower() for p in parts if p)
