"""
Pydantic models for the documents held in each collection.
"""

from .base import AuditedDocument, Document, Timestamp
from .inventory import (
    Product,
    StockLocation,
    StockProduct,
    StockQuantity,
    StoreItem,
    Warehouse,
)
from .sales import (
    Customer,
    Invoice,
    InvoiceItem,
    InvoiceProduct,
    InvoiceStatus,
    User,
    UserRole,
)

__all__ = [
    "AuditedDocument",
    "Document",
    "Timestamp",
    "Product",
    "StockLocation",
    "StockProduct",
    "StockQuantity",
    "StoreItem",
    "Warehouse",
    "Customer",
    "Invoice",
    "InvoiceItem",
    "InvoiceProduct",
    "InvoiceStatus",
    "User",
    "UserRole",
]
