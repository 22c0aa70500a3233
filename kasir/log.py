"""File-backed logging; the terminal belongs to the UI."""

from __future__ import annotations

import logging
from pathlib import Path

from kasir.config import LOG_PATH

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    root = logging.getLogger("kasir")
    if root.handlers:
        return logger
    root.setLevel(logging.INFO)
    try:
        log_file = Path(LOG_PATH)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        # Logging must never interfere with app flow.
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    return logger
