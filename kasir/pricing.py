"""Pure pricing functions: cart totals and cash settlement."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from kasir.constant import CASH
from kasir.models import Cart, PricedTotals, Settlement, ShopSettings


def round_currency(value: Decimal) -> int:
    """Round to a whole currency unit, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_of(amount: int, rate_percent: float) -> int:
    return round_currency(Decimal(amount) * Decimal(str(rate_percent)) / Decimal(100))


def compute_totals(cart: Cart, settings: ShopSettings) -> PricedTotals:
    subtotal = sum(line.unit_price * line.quantity for line in cart.lines)
    tax = percent_of(subtotal, settings.tax_rate_percent) if cart.include_tax else 0
    service = percent_of(subtotal, settings.service_rate_percent) if cart.include_service else 0
    # Discount only clamps the final total; it is never spread over the lines.
    total = max(0, subtotal + tax + service - cart.discount_amount)
    return PricedTotals(
        subtotal=subtotal,
        tax=tax,
        service=service,
        discount=cart.discount_amount,
        total=total,
    )


def compute_change(pay_method: str, cash_tendered: int, total: int) -> Settlement:
    effective_cash = cash_tendered if pay_method == CASH else total
    return Settlement(effective_cash=effective_cash, change=max(0, effective_cash - total))
