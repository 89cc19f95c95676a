"""
Customer service.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from ..models import Customer
from .cache_aware import CacheAwareDBService
from .collections import CUSTOMERS

SEARCH_LIMIT = 10
SEARCH_FIELDS = ("name", "phone", "email")


class CustomerService:
    collection_data = CUSTOMERS

    def __init__(self, db: CacheAwareDBService):
        self.db = db

    async def get_customers(self, force_refresh: bool = False) -> list[Customer]:
        return await self.db.fetch_documents(self.collection_data, force_refresh=force_refresh)

    async def search_customers(self, search_term: str) -> list[Customer]:
        """
        Prefix search on name, then phone, then email.

        Results keep that field order, drop duplicates, and are capped at
        SEARCH_LIMIT.
        """
        term = search_term.strip().lower()
        if not term:
            return []

        customers = await self.get_customers()
        results: dict[str, Customer] = {}
        for field in SEARCH_FIELDS:
            for customer in customers:
                value = getattr(customer, field) or ""
                if value.lower().startswith(term):
                    results.setdefault(customer.id, customer)

        return list(results.values())[:SEARCH_LIMIT]

    async def create_customer(
        self,
        name: str,
        phone: str,
        email: Optional[str] = None,
        type: Literal["retail", "wholesale"] = "retail",
    ) -> Customer:
        """
        Raises:
            BackendError: If the store rejected the write
        """
        customer = Customer(
            id=str(uuid.uuid4()),
            name=name,
            phone=phone,
            email=email,
            type=type,
            registration_date=datetime.now(timezone.utc),
        )
        return await self.db.save_document(self.collection_data, customer)

    async def get_customer_by_id(self, customer_id: str) -> Optional[Customer]:
        return await self.db.find_by_id(self.collection_data, customer_id)
