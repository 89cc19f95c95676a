"""
Invoice service.
"""

import random
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, get_args

from ..models import Invoice, InvoiceStatus
from .cache_aware import CacheAwareDBService
from .collections import INVOICES
from .stores import StoreService


def make_invoice_number(now: datetime) -> str:
    """INV-YYYYMMDD-NNNN with a random four-digit suffix."""
    return f"INV-{now:%Y%m%d}-{random.randint(1000, 9999)}"


class InvoiceService:
    collection_data = INVOICES

    def __init__(self, db: CacheAwareDBService, store_service: StoreService):
        self.db = db
        self.store_service = store_service

    async def create_invoice(self, invoice_data: dict[str, Any]) -> Invoice:
        """
        Create an invoice, then take the sold quantities out of store stock.

        Raises:
            BackendError: If the store rejected either write
        """
        now = datetime.now(timezone.utc)
        invoice = Invoice(
            **{
                **invoice_data,
                "id": uuid.uuid4().hex,
                "invoice_number": make_invoice_number(now),
                "invoice_date": now,
                "created_at": now,
            }
        )
        saved = await self.db.save_document(self.collection_data, invoice)
        await self.store_service.update_product_quantity_after_invoice(saved)
        return saved

    async def get_invoice_by_id(self, invoice_id: str) -> Optional[Invoice]:
        return await self.db.find_by_id(self.collection_data, invoice_id)

    async def get_invoices(self, force_refresh: bool = False) -> list[Invoice]:
        return await self.db.fetch_documents(self.collection_data, force_refresh=force_refresh)

    async def update_invoice_status(self, invoice_id: str, status: str) -> bool:
        """
        Set an invoice's status.

        Returns:
            False if the invoice does not exist

        Raises:
            ValueError: If status is not a known invoice status
            BackendError: If the store rejected the write
        """
        if status not in get_args(InvoiceStatus):
            raise ValueError(f"Unknown invoice status: {status}")

        updated = await self.db.update_document(
            self.collection_data,
            invoice_id,
            {"status": status, "modified_date": datetime.now(timezone.utc).isoformat()},
        )
        return updated is not None
