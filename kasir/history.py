"""Remote sales-history query client and its strict row schema."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from kasir.config import HISTORY_BASE_URL, HISTORY_PAGE_SIZE, HISTORY_TIMEOUT_SECONDS
from kasir.constant import CASH
from kasir.data import DEFAULT_SIZE_ID
from kasir.errors import RemoteQueryFailed, RemoteQueryIndexRequired, ValidationError
from kasir.log import get_logger
from kasir.models import CartLine, SaleRecord
from kasir.sales_log import outlet_zone

logger = get_logger(__name__)

INDEX_HINT = (
    "The history query needs an index in the remote store. Open the link in the "
    "message below to create it, wait until it is active (about 2 minutes), then retry."
)


@dataclass(frozen=True)
class HistoryQuery:
    outlet: str
    start: datetime | None = None
    end: datetime | None = None
    shift_id: str | None = None
    cashier_id: str | None = None
    customer_phone: str | None = None
    page_size: int = HISTORY_PAGE_SIZE
    cursor: str | None = None

    def to_params(self) -> dict[str, str | int]:
        if not self.outlet.strip():
            raise ValidationError("outlet is required for history queries")
        if self.page_size < 1:
            raise ValidationError("page_size must be at least 1")
        params: dict[str, str | int] = {"outlet": self.outlet, "pageSize": self.page_size}
        optional = {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "shiftId": self.shift_id,
            "cashierId": self.cashier_id,
            "customerPhone": self.customer_phone,
            "cursor": self.cursor,
        }
        params.update({key: value for key, value in optional.items() if value})
        return params


@dataclass(frozen=True)
class HistoryPage:
    rows: list[SaleRecord]
    next_cursor: str | None


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(round(float(value)))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"expected a number, got {value!r}") from exc


def _timestamp_ms(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"unsupported time value {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if seconds is not None:
            return int(seconds) * 1000 + int(nanos) // 1_000_000
    if isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValidationError(f"unparseable time {value!r}") from exc
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp() * 1000)
    raise ValidationError(f"unsupported time value {value!r}")


def sale_record_from_remote(doc: dict[str, Any]) -> SaleRecord:
    """Validate a loosely-typed remote sale document into a SaleRecord.

    Required: ``id``, ``time``, ``items``. Amounts default to 0, ``payMethod``
    to Cash, ``cash`` to the total and ``change`` to ``max(0, cash - total)``.
    """
    missing = [key for key in ("id", "time", "items") if doc.get(key) is None]
    if missing:
        raise ValidationError(f"remote sale is missing required fields: {', '.join(missing)}")
    if not isinstance(doc["items"], list):
        raise ValidationError("remote sale items must be a list")

    sale_id = str(doc["id"])
    timestamp_ms = _timestamp_ms(doc["time"])
    lines = []
    for idx, item in enumerate(doc["items"]):
        if not isinstance(item, dict) or not item.get("name"):
            raise ValidationError(f"remote sale {sale_id} item {idx} has no name")
        quantity = _as_int(item.get("qty"), 1)
        if quantity < 1:
            raise ValidationError(f"remote sale {sale_id} item {idx} has quantity {quantity}")
        lines.append(
            CartLine(
                line_id=f"{sale_id}-{idx}",
                product_id=int(item["productId"]) if str(item.get("productId", "")).isdigit() else 0,
                display_name=str(item["name"]),
                unit_price=_as_int(item.get("price")),
                quantity=quantity,
                size_id=str(item.get("sizeId") or DEFAULT_SIZE_ID),
                topping_ids=frozenset(str(t) for t in item.get("toppingIds") or ()),
                note=str(item.get("note") or ""),
            )
        )

    total = _as_int(doc.get("total"))
    cash = _as_int(doc.get("cash"), total)
    created_at = datetime.fromtimestamp(timestamp_ms / 1000, tz=outlet_zone())
    return SaleRecord(
        id=sale_id,
        created_at=created_at.strftime("%d/%m/%Y %H:%M:%S"),
        timestamp_ms=timestamp_ms,
        lines=tuple(lines),
        subtotal=_as_int(doc.get("subtotal")),
        discount_amount=_as_int(doc.get("discount")),
        tax_rate_applied=float(doc.get("taxRate") or 0),
        service_rate_applied=float(doc.get("serviceRate") or 0),
        tax=_as_int(doc.get("tax")),
        service=_as_int(doc.get("service")),
        total=total,
        pay_method=str(doc.get("payMethod") or CASH),
        cash_tendered=cash,
        change=_as_int(doc.get("change"), max(0, cash - total)),
    )


class HistoryClient:
    """Reads sales history pages from a remote store. No automatic retries."""

    def __init__(
        self,
        base_url: str = HISTORY_BASE_URL,
        timeout_seconds: float = HISTORY_TIMEOUT_SECONDS,
        transport: Callable[..., httpx.Response] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport or httpx.request

    def fetch(self, query: HistoryQuery) -> HistoryPage:
        if not self.base_url:
            raise RemoteQueryFailed("Remote history is not configured (KASIR_HISTORY_URL)")
        try:
            response = self.transport(
                "GET",
                f"{self.base_url}/sales",
                params=query.to_params(),
                timeout=self.timeout_seconds,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RemoteQueryFailed(f"History query failed: {exc}") from exc

        payload = self._safe_json(response)
        if response.status_code >= 400:
            self._raise_for_error(response.status_code, payload)

        raw_rows = payload.get("rows")
        if not isinstance(raw_rows, list):
            raise RemoteQueryFailed("History response has no rows list")
        rows = [sale_record_from_remote(doc) for doc in raw_rows]
        logger.info(f"history_page outlet={query.outlet} rows={len(rows)}")
        return HistoryPage(rows=rows, next_cursor=payload.get("nextCursor") or None)

    @staticmethod
    def _raise_for_error(status_code: int, payload: dict[str, Any]) -> None:
        code = str(payload.get("code", ""))
        message = str(payload.get("message", ""))
        if (status_code == 412 or code == "failed-precondition") and "index" in message.lower():
            logger.warning(f"history_index_required status={status_code}")
            raise RemoteQueryIndexRequired(f"{INDEX_HINT}\n\n{message}")
        raise RemoteQueryFailed(f"History query returned {status_code}: {message or code or 'no details'}")

    @staticmethod
    def _safe_json(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {"message": response.text}
        return payload if isinstance(payload, dict) else {"rows": payload}
