"""Editable static catalog, variant and payment configuration."""

from __future__ import annotations

DEFAULT_PRODUCTS: list[dict[str, str | int | bool]] = [
    {"id": 1, "name": "Matcha OG", "unit_price": 15000, "category": "Signature", "active": True},
    {"id": 2, "name": "Matcha Cloud", "unit_price": 18000, "category": "Signature", "active": True},
    {"id": 3, "name": "Strawberry Cream Matcha", "unit_price": 17000, "category": "Signature", "active": True},
    {"id": 4, "name": "Choco Matcha", "unit_price": 17000, "category": "Signature", "active": True},
    {"id": 5, "name": "Matcha Cookies", "unit_price": 17000, "category": "Signature", "active": True},
    {"id": 6, "name": "Honey Matcha", "unit_price": 18000, "category": "Signature", "active": True},
    {"id": 7, "name": "Coconut Matcha", "unit_price": 18000, "category": "Signature", "active": True},
    {"id": 8, "name": "Orange Matcha", "unit_price": 17000, "category": "Signature", "active": True},
]

# First entry is the default size for a fresh customization.
SIZE_OPTIONS: dict[str, dict[str, str | int]] = {
    "R": {"name": "Regular", "price_delta": 0},
    "L": {"name": "Large", "price_delta": 3000},
}

TOPPINGS: dict[str, dict[str, str | int]] = {
    "boba": {"name": "Boba", "price": 3000},
    "cream": {"name": "Cream", "price": 3000},
    "coco": {"name": "Coco Jelly", "price": 3000},
}

PAY_METHODS: list[str] = ["Cash", "QRIS", "GoPay", "OVO", "DANA", "Transfer"]
CASH = "Cash"

DEFAULT_SETTINGS: dict[str, str | float] = {
    "shop_name": "CHAFU MATCHA",
    "tax_rate_percent": 0,
    "service_rate_percent": 0,
}

RECEIPT_FOOTER = "Terima kasih! Follow @chafumatcha"

CATEGORY_BADGE_STYLES: dict[str, str] = {
    "Signature": "bold #0b1f0f on #5fbf72",
}
DEFAULT_BADGE_STYLE = "bold #ffffff on #2f6db5"
