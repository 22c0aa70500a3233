from datetime import datetime
from zoneinfo import ZoneInfo

from kasir.export import CSV_HEADERS, export_sales_csv, parse_sales_csv, sales_to_csv
from kasir.models import CartLine

JAKARTA = ZoneInfo("Asia/Jakarta")


def _quoted_line() -> CartLine:
    return CartLine(
        line_id="q1",
        product_id=1,
        display_name='Matcha "OG", Large',
        unit_price=18000,
        quantity=2,
        size_id="L",
    )


def test_csv_round_trips_ids_totals_and_quoted_names(make_record) -> None:
    records = [
        make_record("CM-202603-AAAAAAA", datetime(2026, 3, 14, 9, tzinfo=JAKARTA), total=36000, lines=[_quoted_line()]),
        make_record(
            "CM-202603-BBBBBBB",
            datetime(2026, 3, 14, 10, tzinfo=JAKARTA),
            total=46200,
            tax_rate_applied=10,
            pay_method="QRIS",
            cash_tendered=46200,
        ),
    ]

    rows = parse_sales_csv(sales_to_csv(records))

    assert [row["ID"] for row in rows] == ["CM-202603-AAAAAAA", "CM-202603-BBBBBBB"]
    assert [row["Total"] for row in rows] == ["36000", "46200"]
    assert rows[0]["Item (qty)"] == 'Matcha "OG", Large(2)'
    assert rows[0]["Waktu"] == "14/03/2026 09:00:00"
    assert rows[1]["Metode"] == "QRIS"
    assert rows[1]["Pajak%"] == "10"


def test_every_field_is_quoted_and_rows_are_newline_joined(make_record) -> None:
    text = sales_to_csv([make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA))])

    header, row = text.split("\n")
    assert header == ",".join(f'"{name}"' for name in CSV_HEADERS)
    assert row.startswith('"CM-1","14/03/2026 09:00:00","Cash"')


def test_empty_log_exports_only_the_header() -> None:
    assert parse_sales_csv(sales_to_csv([])) == []


def test_export_writes_dated_file(tmp_path, make_record) -> None:
    out_dir = tmp_path / "exports"

    path = export_sales_csv([make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA))], out_dir)

    assert path.exists()
    assert path.parent == out_dir
    assert path.name.startswith("kasir_sales_") and path.suffix == ".csv"
    assert parse_sales_csv(path.read_text(encoding="utf-8"))[0]["ID"] == "CM-1"


def test_embedded_quotes_are_doubled(make_record) -> None:
    text = sales_to_csv([make_record("CM-1", datetime(2026, 3, 14, 9, tzinfo=JAKARTA), lines=[_quoted_line()])])

    assert '"Matcha ""OG"", Large(2)"' in text
    assert not text.endswith("\n")


def test_export_file_is_dated_in_outlet_zone(tmp_path, monkeypatch) -> None:
    far_east = ZoneInfo("Pacific/Kiritimati")
    monkeypatch.setattr("kasir.export.outlet_zone", lambda: far_east)

    path = export_sales_csv([], tmp_path)

    assert path.name == f"kasir_sales_{datetime.now(far_east):%Y-%m-%d}.csv"
