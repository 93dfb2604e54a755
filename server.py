"""Server launcher for the Inventory Ledger API.

This module provides a small entrypoint to set up logging, initialize the
database and run the FastAPI app via uvicorn.

Copyright (c) Bryn Gwalad 2025
"""

import os

from dotenv import load_dotenv

# Load .env from repo root so init_db picks up config
load_dotenv()

from inventory_api import config
from utils.database import init_db
from utils.logging_config import configure_logging

try:
    from inventory_api.main import app
except Exception as exc:
    raise RuntimeError(
        "Failed to import the FastAPI app. Ensure project root is on PYTHONPATH"
    ) from exc


def main() -> None:
    """Initialize DB and run uvicorn.

    Environment variables:
    - HOST: listen address (default 127.0.0.1)
    - PORT: listen port (default 5000)
    - RELOAD: set to '1' to enable uvicorn reload
    """

    configure_logging(config.LOG_LEVEL, config.LOG_DIR)

    # Initialize DB (creates tables if needed)
    init_db()

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "5000"))
    reload = os.getenv("RELOAD", "0") in ("1", "true", "True")

    # Start uvicorn programmatically
    import uvicorn

    if reload:
        # reload needs an import string rather than an app object
        uvicorn.run("inventory_api.main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
