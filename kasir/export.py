"""CSV export of the sales log."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Iterable

from kasir.config import EXPORT_DIR
from kasir.models import SaleRecord
from kasir.sales_log import outlet_zone

CSV_HEADERS = [
    "ID",
    "Waktu",
    "Metode",
    "Item (qty)",
    "Subtotal",
    "Diskon",
    "Pajak%",
    "Service%",
    "Total",
    "Dibayar",
    "Kembali",
]


def _rate(value: float) -> str:
    return f"{value:g}"


def sale_row(record: SaleRecord) -> list[str]:
    return [
        record.id,
        record.created_at,
        record.pay_method,
        "; ".join(f"{line.display_name}({line.quantity})" for line in record.lines),
        str(record.subtotal),
        str(record.discount_amount),
        _rate(record.tax_rate_applied),
        _rate(record.service_rate_applied),
        str(record.total),
        str(record.cash_tendered),
        str(record.change),
    ]


def sales_to_csv(records: Iterable[SaleRecord]) -> str:
    """Header plus one fully quoted row per record, newline-joined."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(sale_row(record) for record in records)
    return buffer.getvalue().rstrip("\n")


def parse_sales_csv(text: str) -> list[dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text))
    return [dict(row) for row in reader]


def export_sales_csv(records: Iterable[SaleRecord], output_dir: str | Path = EXPORT_DIR) -> Path:
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)
    path = destination / f"kasir_sales_{datetime.now(outlet_zone()):%Y-%m-%d}.csv"
    path.write_text(sales_to_csv(records), encoding="utf-8")
    return path
