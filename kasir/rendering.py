"""Currency formatting and rich text helpers for the cashier screens."""

from __future__ import annotations

from rich.text import Text

from kasir.constant import CATEGORY_BADGE_STYLES, DEFAULT_BADGE_STYLE
from kasir.data import TOPPING_BY_ID
from kasir.models import CartLine, PricedTotals, Product


def format_idr(amount: int) -> str:
    """Rupiah without subunits, dot as thousands separator: 46200 -> Rp46.200."""
    sign = "-" if amount < 0 else ""
    return f"{sign}Rp{abs(int(amount)):,}".replace(",", ".")


def badge_style(category: str) -> str:
    """Return a consistent badge style for category tags."""
    return CATEGORY_BADGE_STYLES.get(category, DEFAULT_BADGE_STYLE)


def format_product_label(product: Product) -> Text:
    text = Text()
    text.append(product.category[:3].upper(), style=badge_style(product.category))
    text.append(f" {product.name} ")
    text.append(format_idr(product.unit_price), style="dim")
    return text


def format_cart_line(line: CartLine) -> Text:
    text = Text()
    text.append(f"{line.quantity}x ", style="bold")
    text.append(line.display_name)
    text.append(f"  {format_idr(line.amount)}", style="bold")
    if line.note:
        text.append(f"\n      [{line.note}]", style="white")
    return text


def format_topping_tags(topping_ids: set[str] | frozenset[str]) -> Text:
    """Render selected toppings as compact tags."""
    text = Text()
    for idx, topping_id in enumerate(sorted(topping_ids)):
        if idx > 0:
            text.append(" ")
        topping = TOPPING_BY_ID.get(topping_id)
        text.append(f"[{topping.name if topping else topping_id}]", style="white")
    return text


def format_totals(totals: PricedTotals, include_tax: bool, include_service: bool) -> Text:
    text = Text()
    text.append(f"Subtotal  {format_idr(totals.subtotal)}")
    if include_tax:
        text.append(f"\nTax       {format_idr(totals.tax)}")
    if include_service:
        text.append(f"\nService   {format_idr(totals.service)}")
    if totals.discount:
        text.append(f"\nDiscount  -{format_idr(totals.discount)}")
    text.append(f"\nTOTAL     {format_idr(totals.total)}", style="bold")
    return text
