"""Runtime configuration defaults for persistence, printing and collaborators."""

from __future__ import annotations

import os


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw, 0)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


DB_PATH = _env_str("KASIR_DB_PATH", "data/kasir.db")
LOG_PATH = _env_str("KASIR_LOG_PATH", "/tmp/kasir-debug.log")
EXPORT_DIR = _env_str("KASIR_EXPORT_DIR", "data/exports")

# Day buckets for reporting are computed in this zone, not the device clock.
OUTLET_TIMEZONE = _env_str("KASIR_TIMEZONE", "Asia/Jakarta")

NOTIFY_WEBHOOK_URL = _env_str("KASIR_NOTIFY_URL", "")
NOTIFY_TIMEOUT_SECONDS = _env_float("KASIR_NOTIFY_TIMEOUT", 5.0)

HISTORY_BASE_URL = _env_str("KASIR_HISTORY_URL", "")
HISTORY_TIMEOUT_SECONDS = _env_float("KASIR_HISTORY_TIMEOUT", 20.0)
HISTORY_PAGE_SIZE = _env_int("KASIR_HISTORY_PAGE_SIZE", 50)

PRINTER_USB_VENDOR_ID = _env_int("KASIR_PRINTER_VENDOR_ID", 0x28E9)
PRINTER_USB_PRODUCT_ID = _env_int("KASIR_PRINTER_PRODUCT_ID", 0x0289)
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 22
PRINTER_FONT_PATH = "/System/Library/Fonts/Menlo.ttc"
PRINTER_LEFT_INDENT_PX = 8
RECEIPT_WIDTH_CHARS = 32
