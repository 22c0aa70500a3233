"""Static catalog, size and topping reference data."""

from __future__ import annotations

from kasir.constant import (
    DEFAULT_PRODUCTS as _DEFAULT_PRODUCTS_RAW,
    DEFAULT_SETTINGS as _DEFAULT_SETTINGS_RAW,
    SIZE_OPTIONS as _SIZE_OPTIONS_RAW,
    TOPPINGS as _TOPPINGS_RAW,
)
from kasir.models import Product, ShopSettings, SizeOption, Topping

SIZE_BY_ID: dict[str, SizeOption] = {
    size_id: SizeOption(id=size_id, name=str(raw["name"]), price_delta=int(raw["price_delta"]))
    for size_id, raw in _SIZE_OPTIONS_RAW.items()
}

TOPPING_BY_ID: dict[str, Topping] = {
    topping_id: Topping(id=topping_id, name=str(raw["name"]), price=int(raw["price"]))
    for topping_id, raw in _TOPPINGS_RAW.items()
}

SIZE_OPTIONS: list[SizeOption] = list(SIZE_BY_ID.values())
TOPPINGS: list[Topping] = list(TOPPING_BY_ID.values())
DEFAULT_SIZE_ID = SIZE_OPTIONS[0].id


def default_products() -> list[Product]:
    """Fresh copy of the seed catalog."""
    return [Product.from_dict(raw) for raw in _DEFAULT_PRODUCTS_RAW]


def default_settings() -> ShopSettings:
    return ShopSettings.from_dict(_DEFAULT_SETTINGS_RAW)


def known_toppings(topping_ids: set[str] | frozenset[str]) -> list[Topping]:
    """Known toppings among ``topping_ids`` in catalog order; unknown ids are dropped."""
    return [topping for topping in TOPPINGS if topping.id in topping_ids]
