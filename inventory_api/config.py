"""Runtime configuration for the Inventory Ledger API.

Values are read from the environment once at import time. A ``.env`` file at
the project root is honored when present.

Copyright (c) Bryn Gwalad 2025
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _split(value: str) -> list:
    return [v.strip() for v in value.split(",") if v.strip()]


# Default SQLite file location. DATABASE_URL wins when both are set.
SQLITE_FILE = os.getenv("SQLITE_FILE", "database/database.db")
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{SQLITE_FILE}"

API_PREFIX = os.getenv("API_PREFIX", "/api/v1")

# Items at or below this quantity (and above zero) are reported as low stock.
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "5"))

# Admin users configuration: comma-separated list in env ADMIN_USERS, fallback to ['admin']
ADMIN_USERS = _split(os.getenv("ADMIN_USERS", "admin"))

CORS_ORIGINS = _split(os.getenv("CORS_ORIGINS", "*"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# When unset only the console handler is installed.
LOG_DIR = os.getenv("LOG_DIR") or None
