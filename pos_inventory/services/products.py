"""
Product catalogue service.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from ..models import Product
from .cache_aware import CacheAwareDBService
from .collections import PRODUCTS

logger = logging.getLogger(__name__)


class ProductService:
    """Product reads and writes through the shared cache-aware service."""

    collection_data = PRODUCTS

    def __init__(self, db: CacheAwareDBService):
        self.db = db

    async def get_all_products(self, force_refresh: bool = False) -> list[Product]:
        return await self.db.fetch_documents(self.collection_data, force_refresh=force_refresh)

    async def search_products(self, search_term: str) -> list[Product]:
        """
        Case-insensitive search over the cached catalogue.

        Matches name, product code, category, subcategory, barcode,
        description and keywords. A blank term returns every product.
        """
        products = await self.get_all_products()
        if not search_term or not search_term.strip():
            return products

        term = search_term.strip().lower()
        return [p for p in products if _matches(p, term)]

    async def get_categories(self, force_refresh: bool = False) -> list[str]:
        """Sorted distinct non-empty categories of the catalogue."""
        products = await self.get_all_products(force_refresh=force_refresh)
        return sorted({p.category for p in products if p.category})

    async def get_subcategories(self, force_refresh: bool = False) -> list[str]:
        """Sorted distinct non-empty subcategories of the catalogue."""
        products = await self.get_all_products(force_refresh=force_refresh)
        return sorted({p.subcategory for p in products if p.subcategory})

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        return await self.db.find_by_id(self.collection_data, product_id)

    async def create_product(self, product_data: dict[str, Any]) -> Product:
        """
        Create a product with a fresh id and audit timestamps.

        Raises:
            BackendError: If the store rejected the write
        """
        now = datetime.now(timezone.utc)
        product = Product(
            **{
                **product_data,
                "id": str(uuid.uuid4()),
                "created_at": now,
                "modified_date": now,
            }
        )
        return await self.db.save_document(self.collection_data, product)

    async def update_product(self, product: Product) -> Product:
        """
        Overwrite a product and stamp its modification time.

        Raises:
            BackendError: If the store rejected the write
        """
        product = product.model_copy(update={"modified_date": datetime.now(timezone.utc)})
        return await self.db.save_document(self.collection_data, product)

    async def delete_product(self, product_id: str) -> bool:
        """
        Delete a product from the store and the cache.

        Raises:
            BackendError: If the store rejected the delete
        """
        removed = await self.db.delete_document(self.collection_data, product_id)
        logger.info(f"Deleted product {product_id} (existed: {removed})")
        return removed


def _matches(product: Product, term: str) -> bool:
    fields = [
        product.name,
        product.product_code,
        product.category,
        product.subcategory,
        product.barcode,
        product.description,
    ]
    if any(value and term in value.lower() for value in fields):
        return True
    return any(term in keyword.lower() for keyword in product.keywords)
