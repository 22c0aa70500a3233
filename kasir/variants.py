"""Variant resolution: base product + size + toppings -> priced identity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from kasir.data import SIZE_BY_ID, known_toppings
from kasir.errors import InvalidVariant
from kasir.models import Product


@dataclass(frozen=True)
class ResolvedVariant:
    unit_price: int
    display_name: str
    identity_key: tuple[int, str, str, tuple[str, ...]]
    size_id: str
    topping_ids: frozenset[str]
    note: str


def normalize_note(note: str | None) -> str:
    return (note or "").strip()


def resolve(product: Product, size_id: str, topping_ids: Iterable[str], note: str | None = "") -> ResolvedVariant:
    """Price a variant and build the key used to merge equal cart lines.

    Unknown topping ids are filtered out of both price and identity. An
    unknown size is an invariant violation and raises ``InvalidVariant``.
    """
    size = SIZE_BY_ID.get(size_id)
    if size is None:
        raise InvalidVariant(f"Unknown size {size_id!r} for product {product.id}")

    toppings = known_toppings(frozenset(topping_ids))
    kept_ids = frozenset(topping.id for topping in toppings)
    unit_price = product.unit_price + size.price_delta + sum(topping.price for topping in toppings)

    display_name = f"{product.name} ({size.name}"
    if toppings:
        display_name += ", +" + "/".join(topping.name for topping in toppings)
    display_name += ")"

    clean_note = normalize_note(note)
    return ResolvedVariant(
        unit_price=unit_price,
        display_name=display_name,
        identity_key=(product.id, clean_note, size.id, tuple(sorted(kept_ids))),
        size_id=size.id,
        topping_ids=kept_ids,
        note=clean_note,
    )
