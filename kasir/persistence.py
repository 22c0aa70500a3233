"""SQLite persistence: a JSON key-value store plus an append-only sales table."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from kasir.config import DB_PATH
from kasir.errors import PersistenceUnavailable, ValidationError
from kasir.log import get_logger
from kasir.models import SaleRecord

logger = get_logger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteStore:
    """Durable store for catalog, settings and committed sales.

    Every sqlite failure is re-raised as ``PersistenceUnavailable`` so callers
    can degrade to in-memory operation.
    """

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            return sqlite3.connect(self.db_path)
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceUnavailable(f"Cannot open {self.db_path}: {exc}") from exc

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        try:
            with self._connect() as conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );

                    CREATE TABLE IF NOT EXISTS sales (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        id TEXT NOT NULL UNIQUE,
                        timestamp_ms INTEGER NOT NULL,
                        pay_method TEXT NOT NULL,
                        total INTEGER NOT NULL,
                        payload TEXT NOT NULL,
                        stored_at TEXT NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_sales_timestamp
                        ON sales(timestamp_ms);
                    """
                )
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Cannot bootstrap schema: {exc}") from exc

    def load(self, key: str) -> Any | None:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Cannot load {key!r}: {exc}") from exc
        if row is None:
            return None
        return json.loads(row[0])

    def save(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        try:
            with self._connect() as conn:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                        """,
                        (key, payload, _utc_now_iso()),
                    )
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Cannot save {key!r}: {exc}") from exc

    def append_sale(self, record: SaleRecord) -> None:
        """Insert a committed sale. Existing rows are never updated."""
        try:
            with self._connect() as conn:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO sales (id, timestamp_ms, pay_method, total, payload, stored_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            record.id,
                            record.timestamp_ms,
                            record.pay_method,
                            record.total,
                            json.dumps(record.to_dict(), ensure_ascii=False),
                            _utc_now_iso(),
                        ),
                    )
        except sqlite3.IntegrityError as exc:
            raise ValidationError(f"Sale {record.id} is already stored") from exc
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Cannot append sale {record.id}: {exc}") from exc

    def load_sales(self) -> list[SaleRecord]:
        """All stored sales, oldest first. Rows failing validation are skipped and logged."""
        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT id, payload FROM sales ORDER BY seq").fetchall()
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Cannot load sales: {exc}") from exc

        records: list[SaleRecord] = []
        for sale_id, payload in rows:
            try:
                records.append(SaleRecord.from_dict(json.loads(payload)))
            except (ValidationError, ValueError, KeyError, TypeError) as exc:
                logger.warning(f"sale_row_skipped id={sale_id} error={exc!r}")
        return records
