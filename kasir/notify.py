"""Best-effort order notification webhook."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from kasir.config import NOTIFY_TIMEOUT_SECONDS, NOTIFY_WEBHOOK_URL
from kasir.errors import NotificationFailed
from kasir.log import get_logger
from kasir.models import SaleRecord
from kasir.rendering import format_idr

logger = get_logger(__name__)


@dataclass(frozen=True)
class Customer:
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    distance_km: float | None = None


def build_order_summary(
    record: SaleRecord,
    outlet: str,
    customer: Customer | None = None,
    shipping: int = 0,
) -> dict[str, Any]:
    customer = customer or Customer()
    summary: dict[str, Any] = {
        "orderId": record.id,
        "outlet": outlet,
        "payMethod": record.pay_method,
        "items": [{"name": line.display_name, "qty": line.quantity, "price": line.unit_price} for line in record.lines],
        "subtotal": record.subtotal,
        "shipping": shipping,
        "total": record.total + shipping,
        "timeISO": datetime.fromtimestamp(record.timestamp_ms / 1000, tz=timezone.utc).isoformat(),
    }
    optional = {
        "customerName": customer.name,
        "customerPhone": customer.phone,
        "address": customer.address,
        "distanceKm": customer.distance_km,
    }
    summary.update({key: value for key, value in optional.items() if value is not None})
    return summary


def format_order_text(summary: dict[str, Any]) -> str:
    """Chat message body for a summary."""
    lines = [f"New order {summary.get('orderId', '-')} @ {summary.get('outlet', '-')}"]
    if summary.get("customerName") or summary.get("customerPhone"):
        lines.append(f"Customer: {summary.get('customerName') or '-'} ({summary.get('customerPhone') or '-'})")
    if summary.get("address"):
        distance = summary.get("distanceKm")
        suffix = f" ({distance} km)" if distance is not None else ""
        lines.append(f"Address: {summary['address']}{suffix}")
    for item in summary["items"]:
        lines.append(f"- {item['name']} x{item['qty']} {format_idr(item['price'] * item['qty'])}")
    if summary.get("shipping"):
        lines.append(f"Shipping: {format_idr(summary['shipping'])}")
    lines.append(f"Total: {format_idr(summary['total'])} ({summary['payMethod']})")
    return "\n".join(lines)


class Notifier:
    """POSTs order summaries to a chat webhook. Failures never reach the checkout."""

    def __init__(
        self,
        url: str = NOTIFY_WEBHOOK_URL,
        timeout_seconds: float = NOTIFY_TIMEOUT_SECONDS,
        transport: Callable[..., httpx.Response] | None = None,
    ) -> None:
        self.url = url.strip()
        self.timeout_seconds = timeout_seconds
        self.transport = transport or httpx.request

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def send(self, summary: dict[str, Any]) -> None:
        for key in ("payMethod", "items", "total"):
            if key not in summary:
                raise NotificationFailed(f"summary is missing {key!r}")
        body = {**summary, "text": format_order_text(summary)}
        try:
            response = self.transport("POST", self.url, json=body, timeout=self.timeout_seconds)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NotificationFailed(f"webhook unreachable: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise NotificationFailed(f"webhook returned {response.status_code}", status_code=response.status_code)

    def notify_sale(
        self,
        record: SaleRecord,
        outlet: str,
        customer: Customer | None = None,
        shipping: int = 0,
    ) -> bool:
        if not self.enabled:
            return False
        try:
            self.send(build_order_summary(record, outlet, customer=customer, shipping=shipping))
        except NotificationFailed as exc:
            logger.warning(f"notify_failed sale_id={record.id} status={exc.status_code} error={exc}")
            return False
        logger.info(f"notify_ok sale_id={record.id}")
        return True
