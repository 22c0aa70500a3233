from datetime import datetime, timezone

import httpx
import pytest

from kasir.errors import RemoteQueryFailed, RemoteQueryIndexRequired, ValidationError
from kasir.history import INDEX_HINT, HistoryClient, HistoryQuery, sale_record_from_remote

BASE = "https://history.example.test/api"


def _transport(status_code: int, payload, calls: list | None = None):
    def send(method, url, **kwargs):
        if calls is not None:
            calls.append({"method": method, "url": url, **kwargs})
        return httpx.Response(status_code, json=payload, request=httpx.Request(method, url))

    return send


def test_remote_doc_defaults_are_filled() -> None:
    record = sale_record_from_remote(
        {
            "id": "CM-202603-0000001",
            "time": 1773459000000,
            "items": [{"name": "Matcha OG (Regular)", "qty": 2, "price": 15000, "productId": "1"}],
            "total": 30000,
        }
    )

    assert record.pay_method == "Cash"
    assert record.cash_tendered == 30000
    assert record.change == 0
    assert record.subtotal == 0
    assert record.timestamp_ms == 1773459000000
    assert record.lines[0].line_id == "CM-202603-0000001-0"
    assert record.lines[0].product_id == 1
    assert record.lines[0].amount == 30000


def test_remote_change_defaults_from_cash() -> None:
    record = sale_record_from_remote(
        {"id": "CM-1", "time": {"seconds": 1773459000, "nanoseconds": 500000000}, "items": [], "total": 46200, "cash": 50000}
    )

    assert record.change == 3800
    assert record.timestamp_ms == 1773459000500


def test_remote_time_accepts_iso_strings() -> None:
    record = sale_record_from_remote({"id": "CM-1", "time": "2026-03-14T03:30:00Z", "items": []})

    assert record.timestamp_ms == int(datetime(2026, 3, 14, 3, 30, tzinfo=timezone.utc).timestamp() * 1000)
    assert record.created_at == "14/03/2026 10:30:00"


@pytest.mark.parametrize(
    "doc",
    [
        {"time": 0, "items": []},
        {"id": "CM-1", "items": []},
        {"id": "CM-1", "time": 0},
        {"id": "CM-1", "time": "yesterday", "items": []},
        {"id": "CM-1", "time": 0, "items": [{"qty": 1}]},
        {"id": "CM-1", "time": 0, "items": [{"name": "X", "qty": 0}]},
    ],
)
def test_remote_doc_violations_are_rejected(doc) -> None:
    with pytest.raises(ValidationError):
        sale_record_from_remote(doc)


def test_query_params_include_only_given_filters() -> None:
    query = HistoryQuery(outlet="CHAFU MATCHA", shift_id="s-1", page_size=20, cursor="abc")

    assert query.to_params() == {"outlet": "CHAFU MATCHA", "pageSize": 20, "shiftId": "s-1", "cursor": "abc"}
    with pytest.raises(ValidationError):
        HistoryQuery(outlet=" ").to_params()


def test_fetch_returns_parsed_page() -> None:
    calls: list = []
    payload = {"rows": [{"id": "CM-1", "time": 1773459000000, "items": [], "total": 15000}], "nextCursor": "n2"}
    client = HistoryClient(base_url=BASE + "/", transport=_transport(200, payload, calls))

    page = client.fetch(HistoryQuery(outlet="CHAFU MATCHA", page_size=10))

    assert [row.id for row in page.rows] == ["CM-1"]
    assert page.next_cursor == "n2"
    assert calls[0]["method"] == "GET"
    assert calls[0]["url"] == f"{BASE}/sales"
    assert calls[0]["params"] == {"outlet": "CHAFU MATCHA", "pageSize": 10}


def test_missing_index_is_reported_with_hint() -> None:
    payload = {"code": "failed-precondition", "message": "The query requires an index. Create it here: https://console.example.test/idx"}
    client = HistoryClient(base_url=BASE, transport=_transport(400, payload))

    with pytest.raises(RemoteQueryIndexRequired) as excinfo:
        client.fetch(HistoryQuery(outlet="CHAFU MATCHA"))

    assert str(excinfo.value).startswith(INDEX_HINT)
    assert "https://console.example.test/idx" in str(excinfo.value)


def test_other_failures_raise_remote_query_failed() -> None:
    def unreachable(method, url, **kwargs):
        raise httpx.ConnectTimeout("timed out")

    with pytest.raises(RemoteQueryFailed):
        HistoryClient(base_url=BASE, transport=_transport(500, {"message": "boom"})).fetch(HistoryQuery(outlet="X"))
    with pytest.raises(RemoteQueryFailed):
        HistoryClient(base_url=BASE, transport=unreachable).fetch(HistoryQuery(outlet="X"))
    with pytest.raises(RemoteQueryFailed):
        HistoryClient(base_url="", transport=_transport(200, {"rows": []})).fetch(HistoryQuery(outlet="X"))
