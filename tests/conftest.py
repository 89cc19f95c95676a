"""Test configuration and fixtures."""

import pytest


@pytest.fixture
def product_docs() -> list[dict]:
    """Small product catalogue as stored in the backing store."""
    return [
        {
            "id": "p1",
            "name": "Widget",
            "cost_price": 2.5,
            "selling_price": 4.0,
            "stock": 10,
            "category": "Hardware",
            "subcategory": "Fasteners",
            "keywords": ["bolt", "steel"],
            "barcode": "4006381333931",
        },
        {
            "id": "p2",
            "name": "Gadget",
            "cost_price": 10.0,
            "selling_price": 15.0,
            "stock": 3,
            "category": "Electronics",
            "subcategory": "Chargers",
            "keywords": ["usb"],
            "product_code": "GD-100",
            "description": "Fast USB-C wall charger",
        },
    ]
