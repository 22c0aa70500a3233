"""Entry point for the Kasir cashier app."""

from __future__ import annotations

from kasir.config import DB_PATH, HISTORY_BASE_URL
from kasir.errors import PersistenceUnavailable
from kasir.history import HistoryClient
from kasir.log import get_logger
from kasir.notify import Notifier
from kasir.persistence import SqliteStore
from kasir.pos_app import KasirApp
from kasir.state import AppState, load_state

logger = get_logger(__name__)


def build_state(db_path: str = DB_PATH) -> AppState:
    """Open the local store and load saved state, or start fresh when storage is down."""
    store = SqliteStore(db_path)
    try:
        store.bootstrap_schema()
    except PersistenceUnavailable as exc:
        logger.warning(f"bootstrap_failed db={db_path} error={exc!r}")
        return AppState.fresh()
    return load_state(store)


def main() -> None:
    """Run the Textual application."""
    history = HistoryClient() if HISTORY_BASE_URL else None
    KasirApp(build_state(), notifier=Notifier(), history=history).run()


if __name__ == "__main__":
    main()
