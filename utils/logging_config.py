"""Logging setup for the Inventory Ledger API.

Installs a console handler on the root logger and, when a log directory is
configured, size-rotated ``combined.log`` and ``error.log`` files.

Copyright (c) Bryn Gwalad 2025
"""

import logging
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5

_lock = threading.Lock()
_configured = False


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Configure the root logger (idempotent).

    Does not override a configuration the hosting process already installed.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)

        combined = RotatingFileHandler(path / "combined.log", maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
        combined.setFormatter(formatter)
        root.addHandler(combined)

        errors = RotatingFileHandler(path / "error.log", maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)
        root.addHandler(errors)


def reset_logging() -> None:
    """Forget a previous configure_logging() call. Used by tests."""
    global _configured
    with _lock:
        _configured = False
