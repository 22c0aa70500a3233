import sqlite3
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from kasir.errors import PersistenceUnavailable, ValidationError
from kasir.persistence import SqliteStore

JAKARTA = ZoneInfo("Asia/Jakarta")


@pytest.fixture
def sqlite_store(tmp_path) -> SqliteStore:
    store = SqliteStore(tmp_path / "data" / "kasir.db")
    store.bootstrap_schema()
    return store


def test_key_value_round_trip_and_overwrite(sqlite_store) -> None:
    assert sqlite_store.load("settings") is None

    sqlite_store.save("settings", {"shop_name": "CHAFU MATCHA", "tax_rate_percent": 10})
    sqlite_store.save("settings", {"shop_name": "Kedai Teh", "tax_rate_percent": 11})

    assert sqlite_store.load("settings") == {"shop_name": "Kedai Teh", "tax_rate_percent": 11}


def test_sales_are_appended_and_loaded_in_order(sqlite_store, make_record) -> None:
    first = make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA), total=15000)
    second = make_record("CM-2", datetime(2026, 3, 14, 10, tzinfo=JAKARTA), total=21000)

    sqlite_store.append_sale(first)
    sqlite_store.append_sale(second)

    assert sqlite_store.load_sales() == [first, second]


def test_duplicate_sale_id_is_rejected(sqlite_store, make_record) -> None:
    record = make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA))
    sqlite_store.append_sale(record)

    with pytest.raises(ValidationError):
        sqlite_store.append_sale(record)
    assert len(sqlite_store.load_sales()) == 1


def test_invalid_rows_are_skipped(sqlite_store, make_record) -> None:
    sqlite_store.append_sale(make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA)))
    with sqlite3.connect(sqlite_store.db_path) as conn:
        conn.execute(
            "INSERT INTO sales (id, timestamp_ms, pay_method, total, payload, stored_at) VALUES (?, ?, ?, ?, ?, ?)",
            ("CM-BAD", 0, "Cash", 0, '{"id": "CM-BAD"}', "now"),
        )

    assert [record.id for record in sqlite_store.load_sales()] == ["CM-1"]


def test_unusable_path_raises_persistence_unavailable(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = SqliteStore(blocker / "kasir.db")

    with pytest.raises(PersistenceUnavailable):
        store.bootstrap_schema()
