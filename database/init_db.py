"""Database initialization helper.

Creates the configured database (``DATABASE_URL`` or the ``SQLITE_FILE``
SQLite file), emits SQL DDL into ``database/schema.sql`` and, with
``--seed``, loads a set of sample inventory items into an empty store.

Copyright (c) Bryn Gwalad 2025
"""

from __future__ import annotations
import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path so `from inventory_api import models`
# works when running this script directly (python database/init_db.py).
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sqlmodel import SQLModel
from sqlalchemy.schema import CreateTable
from dotenv import load_dotenv

# Load environment variables from .env (so this script honors .env settings)
load_dotenv()

# Import application models after adjusting sys.path and loading env
from inventory_api import config, models  # noqa: F401 - models are registered via SQLModel metadata
from inventory_api.store import ItemStore
from utils.database import make_engine

SAMPLE_ITEMS = [
    ("SKU001", "Laptop", "Electronics", 25, "Warehouse A"),
    ("SKU002", "Office Chair", "Furniture", 15, "Warehouse B"),
    ("SKU003", "Printer Ink", "Office Supplies", 5, "Warehouse A"),
    ("SKU004", "Smartphone", "Electronics", 30, "Warehouse C"),
    ("SKU005", "Desk", "Furniture", 0, "Warehouse B"),
    ("SKU006", "Wireless Mouse", "Electronics", 45, "Warehouse A"),
    ("SKU007", "Headphones", "Electronics", 7, "Warehouse C"),
    ("SKU008", "File Cabinet", "Furniture", 12, "Warehouse B"),
    ("SKU009", "Notebook", "Office Supplies", 0, "Warehouse A"),
    ("SKU010", "Monitor", "Electronics", 18, "Warehouse C"),
]


def seed(store: ItemStore) -> int:
    """Add the sample items when the store is empty. Returns how many were added."""
    if store.list():
        return 0
    for sku, name, category, quantity, location in SAMPLE_ITEMS:
        store.create(sku, name, category, quantity=quantity, location=location, user_id="seed")
    return len(SAMPLE_ITEMS)


def main(argv=None) -> None:
    """Create the database and emit SQL DDL."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", action="store_true", help="load sample items into an empty database")
    args = parser.parse_args(argv)

    print(f"Using database URL: {config.DATABASE_URL}")

    engine = make_engine(config.DATABASE_URL, echo=True)

    # create all tables
    print("Creating tables...")
    SQLModel.metadata.create_all(engine)
    print("Tables created.")

    # emit SQL DDL to file
    schema_path = Path("database") / "schema.sql"
    schema_path.parent.mkdir(parents=True, exist_ok=True)
    print(f"Writing SQL DDL to {schema_path}")
    with open(schema_path, "w", encoding="utf-8") as f:
        for table in SQLModel.metadata.sorted_tables:
            ddl = str(CreateTable(table).compile(engine))
            f.write(ddl)
            f.write(";\n\n")

    if args.seed:
        added = seed(ItemStore(engine))
        print(f"Seeded {added} sample items.")

    print("Done.\n")


if __name__ == "__main__":
    main()
