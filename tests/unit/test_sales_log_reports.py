from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from kasir.errors import ValidationError
from kasir.models import CartLine
from kasir.sales_log import SalesLog, day_key, today_summary, trailing_series

JAKARTA = ZoneInfo("Asia/Jakarta")
NOW_MS = int(datetime(2026, 3, 14, 20, 0, tzinfo=JAKARTA).timestamp() * 1000)


def _line(name: str, qty: int, price: int) -> CartLine:
    return CartLine(line_id=name[:3], product_id=1, display_name=name, unit_price=price, quantity=qty, size_id="R")


@pytest.fixture
def sales(make_record):
    return SalesLog(
        [
            make_record("CM-A", datetime(2026, 3, 14, 8, 0, tzinfo=JAKARTA), total=30000, lines=[_line("Matcha OG (Regular)", 2, 15000)]),
            make_record("CM-B", datetime(2026, 3, 14, 23, 30, tzinfo=JAKARTA), total=18000, lines=[_line("Matcha Cloud (Regular)", 1, 18000)]),
            make_record("CM-C", datetime(2026, 3, 13, 23, 59, tzinfo=JAKARTA), total=10000),
            make_record("CM-D", datetime(2026, 3, 15, 0, 10, tzinfo=JAKARTA), total=99000),
        ]
    )


def test_log_iterates_newest_first_and_rejects_duplicate_ids(sales, make_record) -> None:
    assert [record.id for record in sales] == ["CM-D", "CM-B", "CM-A", "CM-C"]
    assert "CM-A" in sales
    with pytest.raises(ValidationError):
        sales.append(make_record("CM-A", datetime(2026, 3, 16, tzinfo=JAKARTA)))
    assert len(sales) == 4


def test_day_key_uses_outlet_zone_not_utc() -> None:
    # 17:10 UTC on the 14th is already the 15th in Jakarta.
    ts = int(datetime(2026, 3, 15, 0, 10, tzinfo=JAKARTA).timestamp() * 1000)

    assert day_key(ts, JAKARTA) == "2026-03-15"
    assert day_key(ts, ZoneInfo("UTC")) == "2026-03-14"


def test_today_summary(sales) -> None:
    summary = today_summary(sales, now_ms=NOW_MS, zone=JAKARTA)

    assert summary.day_key == "2026-03-14"
    assert summary.revenue == 48000
    assert summary.transaction_count == 2
    assert summary.average_order_value == 24000
    assert [(item.name, item.quantity) for item in summary.top_items] == [
        ("Matcha OG (Regular)", 2),
        ("Matcha Cloud (Regular)", 1),
    ]


def test_today_summary_rounds_average_half_up(make_record) -> None:
    records = [
        make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA), total=10000),
        make_record("CM-2", datetime(2026, 3, 14, 10, tzinfo=JAKARTA), total=1),
    ]

    assert today_summary(records, now_ms=NOW_MS, zone=JAKARTA).average_order_value == 5001


def test_today_summary_ties_keep_encounter_order(make_record) -> None:
    records = [
        make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA), lines=[_line("Honey Matcha (Regular)", 1, 18000)]),
        make_record("CM-2", datetime(2026, 3, 14, 10, tzinfo=JAKARTA), lines=[_line("Choco Matcha (Regular)", 1, 17000)]),
        make_record("CM-3", datetime(2026, 3, 14, 11, tzinfo=JAKARTA), lines=[_line("Orange Matcha (Regular)", 1, 17000)]),
        make_record("CM-4", datetime(2026, 3, 14, 12, tzinfo=JAKARTA), lines=[_line("Matcha OG (Regular)", 1, 15000)]),
    ]

    top = today_summary(records, now_ms=NOW_MS, zone=JAKARTA).top_items

    assert [item.name for item in top] == ["Honey Matcha (Regular)", "Choco Matcha (Regular)", "Orange Matcha (Regular)"]


def test_today_summary_without_sales_is_zero() -> None:
    summary = today_summary(SalesLog(), now_ms=NOW_MS, zone=JAKARTA)

    assert summary.revenue == 0
    assert summary.transaction_count == 0
    assert summary.average_order_value == 0
    assert summary.top_items == ()


def test_trailing_series_is_oldest_first_and_zero_filled(sales) -> None:
    series = trailing_series(sales, days=3, now_ms=NOW_MS, zone=JAKARTA)

    assert [(day.day_key, day.revenue, day.transaction_count) for day in series] == [
        ("2026-03-12", 0, 0),
        ("2026-03-13", 10000, 1),
        ("2026-03-14", 48000, 2),
    ]


def test_trailing_series_defaults_to_fourteen_days(sales) -> None:
    series = trailing_series(sales, now_ms=NOW_MS, zone=JAKARTA)

    assert len(series) == 14
    assert series[0].day_key == "2026-03-01"
    assert series[-1].day_key == "2026-03-14"


def test_trailing_series_rejects_non_positive_days(sales) -> None:
    with pytest.raises(ValidationError):
        trailing_series(sales, days=0, now_ms=NOW_MS, zone=JAKARTA)
