"""
Sales document models: customers, invoices, users.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .base import AuditedDocument, Document, Timestamp

UserRole = Literal["admin", "cashier", "helper", "user"]
InvoiceStatus = Literal["Pending", "Paid", "Overdue", "Canceled"]


class Customer(AuditedDocument):
    """Retail or wholesale customer."""

    name: str
    phone: str = ""
    type: str = "retail"
    address: Optional[str] = None
    email: Optional[str] = None
    registration_date: Timestamp = None


class InvoiceProduct(BaseModel):
    """Product reference on an invoice line."""

    id: str
    name: str


class InvoiceItem(BaseModel):
    """One line of an invoice, drawn from a store stock row."""

    id: Optional[str] = None
    product: InvoiceProduct
    quantity: int
    cost_price: float = 0.0
    selling_price: float = 0.0
    discount: float = 0.0
    sub_total: float = 0.0      # Before tax
    store_id: str


class Invoice(AuditedDocument):
    """Sales invoice."""

    invoice_number: Optional[str] = None
    invoice_date: Timestamp = None
    customer_name: str = ""
    products: List[InvoiceItem] = Field(default_factory=list)
    sub_total: float = 0.0
    tax: float = 0.0
    shipping_fees: float = 0.0
    total: float = 0.0
    payment_type: str = "cash"
    amount_paid: float = 0.0
    balance: float = 0.0
    status: InvoiceStatus = "Pending"


class User(Document):
    """Admin application user."""

    name: str
    email: str
    role: UserRole = "user"
    active: bool = True
    created_date: Timestamp = None
    photo_url: Optional[str] = None
    last_login: Timestamp = None
