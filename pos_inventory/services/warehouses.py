"""
Warehouse service.
"""

import logging
import uuid
from typing import Optional

from ..models import Warehouse
from .cache_aware import CacheAwareDBService
from .collections import WAREHOUSES

logger = logging.getLogger(__name__)


class WarehouseService:
    collection_data = WAREHOUSES

    def __init__(self, db: CacheAwareDBService):
        self.db = db

    async def fetch_warehouses(self, force_refresh: bool = False) -> list[Warehouse]:
        return await self.db.fetch_documents(self.collection_data, force_refresh=force_refresh)

    async def create_warehouse(
        self, name: str, code: str, description: Optional[str] = None
    ) -> Warehouse:
        """
        Raises:
            BackendError: If the store rejected the write
        """
        warehouse = Warehouse(id=str(uuid.uuid4()), name=name, code=code, description=description)
        saved = await self.db.save_document(self.collection_data, warehouse)
        logger.info(f"Warehouse {saved.code} added")
        return saved
