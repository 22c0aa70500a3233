"""Plain-text receipt layout built only from a frozen SaleRecord."""

from __future__ import annotations

from kasir.config import RECEIPT_WIDTH_CHARS
from kasir.constant import RECEIPT_FOOTER
from kasir.models import SaleRecord, ShopSettings
from kasir.rendering import format_idr


def _rate(value: float) -> str:
    return f"{value:g}"


def _row(label: str, amount: str, width: int) -> str:
    gap = max(1, width - len(label) - len(amount))
    return f"{label}{' ' * gap}{amount}"


def _wrap(text: str, width: int) -> list[str]:
    words = text.split()
    lines: list[str] = []
    current = ""
    for word in words:
        while len(word) > width:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:width])
            word = word[width:]
        candidate = f"{current} {word}" if current else word
        if len(candidate) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines or [""]


def render_receipt(record: SaleRecord, settings: ShopSettings, width: int = RECEIPT_WIDTH_CHARS) -> list[str]:
    """Receipt lines for ``record``. Nothing here is recomputed from current settings."""
    rule = "-" * width
    lines = [settings.shop_name.center(width).rstrip(), record.id.center(width).rstrip(), record.created_at.center(width).rstrip()]
    lines.append(f"Metode: {record.pay_method}".center(width).rstrip())
    lines.append(rule)

    for line in record.lines:
        lines.extend(_wrap(line.display_name, width))
        if line.note:
            lines.extend(f"  {chunk}" for chunk in _wrap(line.note, width - 2))
        lines.append(_row(f"  {line.quantity}x {format_idr(line.unit_price)}", format_idr(line.amount), width))

    lines.append(rule)
    lines.append(_row("Subtotal", format_idr(record.subtotal), width))
    if record.tax:
        lines.append(_row(f"Pajak ({_rate(record.tax_rate_applied)}%)", format_idr(record.tax), width))
    if record.service:
        lines.append(_row(f"Service ({_rate(record.service_rate_applied)}%)", format_idr(record.service), width))
    if record.discount_amount:
        lines.append(_row("Diskon", f"-{format_idr(record.discount_amount)}", width))
    lines.append(_row("Total", format_idr(record.total), width))
    lines.append(_row("Dibayar", format_idr(record.cash_tendered), width))
    lines.append(_row("Kembali", format_idr(record.change), width))
    lines.append(rule)
    lines.extend(chunk.center(width).rstrip() for chunk in _wrap(RECEIPT_FOOTER, width))
    return lines
