"""
Inventory document models: products, warehouses, store stock.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .base import AuditedDocument, Timestamp


class Product(AuditedDocument):
    """Catalogue product."""

    name: str
    cost_price: float = 0.0
    selling_price: float = 0.0
    stock: int = 0
    category: str = ""
    subcategory: str = ""
    location: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    discount: Optional[float] = None
    grn_number: Optional[str] = None
    product_code: Optional[str] = None
    barcode: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    specifications: Dict[str, str] = Field(default_factory=dict)


class Warehouse(AuditedDocument):
    """Physical stock location."""

    name: str
    code: str
    description: Optional[str] = None


class StockLocation(BaseModel):
    """Location reference embedded in a store stock row."""

    id: str
    name: str
    code: str


class StockProduct(BaseModel):
    """Product snapshot embedded in a store stock row."""

    id: str
    name: str
    product_code: Optional[str] = None
    image_url: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None


class StockQuantity(BaseModel):
    """Received and remaining quantity of a stock row."""

    total_qty: int = 0          # Received from the supplier
    available_qty: int = 0      # Remaining after sales


class StoreItem(AuditedDocument):
    """
    A batch of a product held at a location.

    Invoices reference store items by id and decrement available_qty.
    """

    cost_price: float
    selling_price: float
    location: StockLocation
    product: StockProduct
    qty: StockQuantity = Field(default_factory=StockQuantity)
    discount: Optional[float] = None
    grn_number: Optional[str] = None
    created_date: Timestamp = None
