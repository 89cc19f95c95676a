"""
Client-side collection cache for the POS inventory admin.

Serves collections (products, customers, invoices, ...) from a local SQLite
cache while a remote document store remains the source of truth.
"""

__version__ = "0.3.0"
