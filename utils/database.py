"""Database helpers for the Inventory Ledger API.

Utilities provided:
- build SQLAlchemy engines (file-backed or in-memory SQLite, or any DATABASE_URL)
- create tables and sessions
- log history entries

The default local SQLite file is `database/database.db` (configurable via
the `SQLITE_FILE` environment variable, or replaced entirely by
`DATABASE_URL`). The module ensures the parent directory exists before
creating the engine so the database can be created on first use.

Copyright (c) Bryn Gwalad 2025
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import models (absolute import so this works when scripts run from
# different CWDs). Importing registers every table on SQLModel.metadata.
from inventory_api import config
from inventory_api.models import History, utcnow


def make_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for ``url``.

    SQLite connections are shared with FastAPI's worker threads, so the
    same-thread check is disabled. An in-memory URL (``sqlite://``) gets a
    single static connection, otherwise every session would see an empty
    database.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    else:
        # Ensure parent directory exists before creating the engine
        db_file = url.split("sqlite:///", 1)[-1]
        Path(db_file).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, **kwargs)


# Default engine used by the API and the scripts (no echo by default)
engine = make_engine(config.DATABASE_URL)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create database tables from SQLModel metadata."""
    SQLModel.metadata.create_all(bind or engine)


def get_session(bind: Optional[Engine] = None) -> Session:
    # Records stay readable after commit and after the session is closed.
    return Session(bind or engine, expire_on_commit=False)


def ping(bind: Optional[Engine] = None) -> None:
    """Run ``SELECT 1``; raises when the database is unreachable."""
    with (bind or engine).connect() as conn:
        conn.execute(text("SELECT 1"))


def log_history(table_operation: str, table_modified: str, user_id: str, modified_id: Optional[int] = None, session: Optional[Session] = None, commit: bool = True) -> History:
    """Create a History entry. If a Session is provided it will be used,
    otherwise a short-lived one will be created.

    Pass ``commit=False`` to leave the entry pending in the caller's session
    so it is committed together with the change it describes.

    The `id` is composed as: <table_modified>:<table_operation>:<user_id>:<modified_id>:<YYYYmmddTHHMMSSffffff>
    """
    ts = utcnow()
    key = f"{table_modified}:{table_operation}:{user_id}:{modified_id}:{ts.strftime('%Y%m%dT%H%M%S%f')}"
    entry = History(id=key, table_operation=table_operation, table_modified=table_modified, timestamp=ts, user_id=user_id, modified_id=modified_id)
    own_session = False
    if session is None:
        session = get_session()
        own_session = True
    try:
        session.add(entry)
        if commit or own_session:
            session.commit()
    finally:
        if own_session:
            session.close()
    return entry
