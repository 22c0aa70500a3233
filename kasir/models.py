"""Domain models for the cashier core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kasir.constant import CASH
from kasir.errors import ValidationError


@dataclass(frozen=True)
class Product:
    """A sellable catalog entry."""

    id: int
    name: str
    unit_price: int
    category: str = "Signature"
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit_price": self.unit_price,
            "category": self.category,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Product:
        return cls(
            id=int(raw["id"]),
            name=str(raw["name"]),
            unit_price=int(raw["unit_price"]),
            category=str(raw.get("category") or "Signature"),
            active=raw.get("active") is not False,
        )


@dataclass(frozen=True)
class SizeOption:
    id: str
    name: str
    price_delta: int


@dataclass(frozen=True)
class Topping:
    id: str
    name: str
    price: int


@dataclass(frozen=True)
class CartLine:
    """One priced, quantity-bearing row of the cart.

    ``unit_price`` is fixed when the line is created; quantity changes replace
    the line with a copy so snapshots taken at commit never move.
    """

    line_id: str
    product_id: int
    display_name: str
    unit_price: int
    quantity: int
    size_id: str
    topping_ids: frozenset[str] = frozenset()
    note: str = ""

    @property
    def identity_key(self) -> tuple[int, str, str, tuple[str, ...]]:
        return (self.product_id, self.note, self.size_id, tuple(sorted(self.topping_ids)))

    @property
    def amount(self) -> int:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_id": self.line_id,
            "product_id": self.product_id,
            "display_name": self.display_name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "size_id": self.size_id,
            "topping_ids": sorted(self.topping_ids),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CartLine:
        _require(raw, ("line_id", "product_id", "display_name", "unit_price", "quantity", "size_id"), "cart line")
        quantity = int(raw["quantity"])
        if quantity < 1:
            raise ValidationError(f"cart line {raw['line_id']!r} has quantity {quantity}")
        return cls(
            line_id=str(raw["line_id"]),
            product_id=int(raw["product_id"]),
            display_name=str(raw["display_name"]),
            unit_price=int(raw["unit_price"]),
            quantity=quantity,
            size_id=str(raw["size_id"]),
            topping_ids=frozenset(str(t) for t in raw.get("topping_ids") or ()),
            note=str(raw.get("note") or ""),
        )


@dataclass
class Cart:
    """The single active cart of the running checkout session."""

    lines: list[CartLine] = field(default_factory=list)
    discount_amount: int = 0
    include_tax: bool = False
    include_service: bool = False
    note: str = ""
    cash_tendered: int = 0
    pay_method: str = CASH

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class PricedTotals:
    subtotal: int
    tax: int
    service: int
    discount: int
    total: int


@dataclass(frozen=True)
class Settlement:
    """Cash actually counted against the total and the change owed."""

    effective_cash: int
    change: int


@dataclass(frozen=True)
class ShopSettings:
    shop_name: str
    tax_rate_percent: float = 0
    service_rate_percent: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "shop_name": self.shop_name,
            "tax_rate_percent": self.tax_rate_percent,
            "service_rate_percent": self.service_rate_percent,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ShopSettings:
        return cls(
            shop_name=str(raw["shop_name"]),
            tax_rate_percent=float(raw.get("tax_rate_percent") or 0),
            service_rate_percent=float(raw.get("service_rate_percent") or 0),
        )


@dataclass(frozen=True)
class SaleRecord:
    """An immutable, committed sale.

    ``tax`` and ``service`` hold the amounts computed at commit time so a
    receipt printed later never recomputes them from current settings.
    """

    id: str
    created_at: str
    timestamp_ms: int
    lines: tuple[CartLine, ...]
    subtotal: int
    discount_amount: int
    tax_rate_applied: float
    service_rate_applied: float
    tax: int
    service: int
    total: int
    pay_method: str
    cash_tendered: int
    change: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "timestamp_ms": self.timestamp_ms,
            "lines": [line.to_dict() for line in self.lines],
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "tax_rate_applied": self.tax_rate_applied,
            "service_rate_applied": self.service_rate_applied,
            "tax": self.tax,
            "service": self.service,
            "total": self.total,
            "pay_method": self.pay_method,
            "cash_tendered": self.cash_tendered,
            "change": self.change,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SaleRecord:
        _require(raw, ("id", "created_at", "timestamp_ms", "lines", "total", "pay_method"), "sale record")
        total = int(raw["total"])
        cash_tendered = int(raw.get("cash_tendered", total))
        return cls(
            id=str(raw["id"]),
            created_at=str(raw["created_at"]),
            timestamp_ms=int(raw["timestamp_ms"]),
            lines=tuple(CartLine.from_dict(line) for line in raw["lines"]),
            subtotal=int(raw.get("subtotal", 0)),
            discount_amount=int(raw.get("discount_amount", 0)),
            tax_rate_applied=float(raw.get("tax_rate_applied", 0)),
            service_rate_applied=float(raw.get("service_rate_applied", 0)),
            tax=int(raw.get("tax", 0)),
            service=int(raw.get("service", 0)),
            total=total,
            pay_method=str(raw["pay_method"]),
            cash_tendered=cash_tendered,
            change=int(raw.get("change", max(0, cash_tendered - total))),
        )


def _require(raw: dict[str, Any], keys: tuple[str, ...], what: str) -> None:
    missing = [key for key in keys if key not in raw or raw[key] is None]
    if missing:
        raise ValidationError(f"{what} is missing required fields: {', '.join(missing)}")
