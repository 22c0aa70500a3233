from datetime import datetime
from zoneinfo import ZoneInfo

from kasir.constant import RECEIPT_FOOTER
from kasir.models import CartLine, ShopSettings
from kasir.receipt import render_receipt
from kasir.rendering import format_idr

JAKARTA = ZoneInfo("Asia/Jakarta")
SETTINGS = ShopSettings(shop_name="CHAFU MATCHA", tax_rate_percent=11)


def _record(make_record, **overrides):
    line = CartLine(
        line_id="a",
        product_id=1,
        display_name="Matcha OG (Large, +Boba)",
        unit_price=21000,
        quantity=2,
        size_id="L",
        note="less ice",
    )
    fields = dict(total=46200, lines=[line], subtotal=42000, tax=4200, tax_rate_applied=10, cash_tendered=50000, change=3800)
    fields.update(overrides)
    return make_record("CM-202603-ABCDEF1", datetime(2026, 3, 14, 10, 30, tzinfo=JAKARTA), **fields)


def test_format_idr_uses_dot_thousands() -> None:
    assert format_idr(46200) == "Rp46.200"
    assert format_idr(0) == "Rp0"
    assert format_idr(1250000) == "Rp1.250.000"
    assert format_idr(-5000) == "-Rp5.000"


def test_receipt_uses_recorded_amounts_only(make_record) -> None:
    lines = render_receipt(_record(make_record), SETTINGS, width=32)

    assert lines[0] == "CHAFU MATCHA".center(32).rstrip()
    assert "CM-202603-ABCDEF1" in lines[1]
    assert "14/03/2026 10:30:00" in lines[2]
    assert "  less ice" in lines
    assert any(line.startswith("Pajak (10%)") and line.endswith("Rp4.200") for line in lines)
    assert any(line.startswith("Total") and line.endswith("Rp46.200") for line in lines)
    assert any(line.startswith("Kembali") and line.endswith("Rp3.800") for line in lines)
    last_rule = max(idx for idx, line in enumerate(lines) if line == "-" * 32)
    assert " ".join(line.strip() for line in lines[last_rule + 1 :]) == RECEIPT_FOOTER
    assert all(len(line) <= 32 for line in lines)


def test_zero_charges_are_omitted(make_record) -> None:
    lines = render_receipt(_record(make_record, tax=0, tax_rate_applied=0, total=42000), SETTINGS)

    assert not any(line.startswith(("Pajak", "Service", "Diskon")) for line in lines)


def test_discount_line_is_negative(make_record) -> None:
    lines = render_receipt(_record(make_record, discount_amount=5000), SETTINGS)

    assert any(line.startswith("Diskon") and line.endswith("-Rp5.000") for line in lines)
