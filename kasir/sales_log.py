"""Append-only sales log and day-bucketed reporting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from kasir.config import OUTLET_TIMEZONE
from kasir.errors import ValidationError
from kasir.models import SaleRecord
from kasir.pricing import round_currency


class SalesLog:
    """Committed sales, iterated newest first. Records are never edited or removed."""

    def __init__(self, records: list[SaleRecord] | None = None) -> None:
        # Stored oldest first so append stays O(1).
        self._records: list[SaleRecord] = []
        self._ids: set[str] = set()
        for record in sorted(records or [], key=lambda r: r.timestamp_ms):
            self.append(record)

    def append(self, record: SaleRecord) -> None:
        if record.id in self._ids:
            raise ValidationError(f"Sale {record.id} is already recorded")
        self._records.append(record)
        self._ids.add(record.id)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SaleRecord]:
        return reversed(self._records)

    def __contains__(self, sale_id: object) -> bool:
        return sale_id in self._ids

    def records(self) -> list[SaleRecord]:
        """Newest first."""
        return list(reversed(self._records))

    def get(self, sale_id: str) -> SaleRecord:
        for record in self._records:
            if record.id == sale_id:
                return record
        raise ValidationError(f"No sale {sale_id!r}")


@dataclass(frozen=True)
class TopItem:
    name: str
    quantity: int


@dataclass(frozen=True)
class DaySummary:
    day_key: str
    revenue: int
    transaction_count: int
    average_order_value: int
    top_items: tuple[TopItem, ...]


@dataclass(frozen=True)
class DayTotals:
    day_key: str
    revenue: int
    transaction_count: int


def outlet_zone(name: str | None = None) -> ZoneInfo:
    zone_name = name or OUTLET_TIMEZONE
    try:
        return ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"KASIR_TIMEZONE {zone_name!r} is not a known timezone") from exc


def day_key(timestamp_ms: int, zone: ZoneInfo | None = None) -> str:
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=zone or outlet_zone())
    return moment.date().isoformat()


def _now_ms() -> int:
    return int(datetime.now().timestamp() * 1000)


def today_summary(
    records: SalesLog | list[SaleRecord],
    now_ms: int | None = None,
    zone: ZoneInfo | None = None,
    top_n: int = 3,
) -> DaySummary:
    zone = zone or outlet_zone()
    today = day_key(_now_ms() if now_ms is None else now_ms, zone)
    todays = [record for record in records if day_key(record.timestamp_ms, zone) == today]

    revenue = sum(record.total for record in todays)
    count = len(todays)
    average = round_currency(Decimal(revenue) / count) if count else 0

    # dict keeps first-seen order, and sorted() is stable, so ties stay in encounter order.
    quantities: dict[str, int] = {}
    for record in todays:
        for line in record.lines:
            quantities[line.display_name] = quantities.get(line.display_name, 0) + line.quantity
    ranked = sorted(quantities.items(), key=lambda item: item[1], reverse=True)[:top_n]

    return DaySummary(
        day_key=today,
        revenue=revenue,
        transaction_count=count,
        average_order_value=average,
        top_items=tuple(TopItem(name=name, quantity=qty) for name, qty in ranked),
    )


def trailing_series(
    records: SalesLog | list[SaleRecord],
    days: int = 14,
    now_ms: int | None = None,
    zone: ZoneInfo | None = None,
) -> list[DayTotals]:
    """Revenue and transaction count for the last ``days`` calendar days, oldest first."""
    if days < 1:
        raise ValidationError("days must be at least 1")
    zone = zone or outlet_zone()
    now = datetime.fromtimestamp((_now_ms() if now_ms is None else now_ms) / 1000, tz=zone)
    keys = [(now.date() - timedelta(days=offset)).isoformat() for offset in range(days - 1, -1, -1)]

    revenue = dict.fromkeys(keys, 0)
    counts = dict.fromkeys(keys, 0)
    for record in records:
        key = day_key(record.timestamp_ms, zone)
        if key in revenue:
            revenue[key] += record.total
            counts[key] += 1
    return [DayTotals(day_key=key, revenue=revenue[key], transaction_count=counts[key]) for key in keys]
