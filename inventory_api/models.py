"""Data models for the Inventory Ledger API.

This module defines the SQLModel tables used by the API: InventoryItem,
Transaction (the stock ledger), History (audit trail) and Order.

Ledger rows are append-only: ORM listeners at the bottom of the module refuse
any UPDATE or DELETE of a Transaction.

Copyright (c) Bryn Gwalad 2025
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import event
from sqlmodel import Field, SQLModel

from .errors import LedgerImmutableError


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class StockStatus(str, Enum):
    OUT_OF_STOCK = "Out of Stock"
    LOW_STOCK = "Low Stock"
    IN_STOCK = "In Stock"


class TransactionType(str, Enum):
    LEND = "lend"
    GIVE = "give"
    RECEIVE = "receive"
    ADD = "add"


# Transaction types that take stock out of the store.
OUTGOING_TYPES = (TransactionType.LEND, TransactionType.GIVE)


class OrderStatus(str, Enum):
    PENDING = "pending"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class InventoryItem(SQLModel, table=True):
    """A stocked item.

    Attributes:
        id: primary key, never reused after a delete
        sku: unique stock-keeping code
        name: display name
        category: free-text category used for filtering
        quantity: units on hand, never negative
        location: where the stock is kept
        status: derived from quantity, see ``inventory_api.status.classify``
    """

    __tablename__ = "inventory_item"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    sku: str = Field(index=True, unique=True)
    name: str
    category: str = Field(index=True)
    quantity: int = 0
    location: str = ""
    status: StockStatus = StockStatus.OUT_OF_STOCK


class Transaction(SQLModel, table=True):
    """A single stock movement recorded in the ledger.

    ``item_id`` is a plain reference: deleting the item leaves the entry in
    place. ``return_date`` is only set for lend transactions.
    """

    __tablename__ = "stock_transaction"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    item_id: int = Field(index=True)
    type: TransactionType
    quantity: int
    recipient: str
    purpose: str = ""
    return_date: Optional[date] = None
    returned: bool = False
    user_id: str = "system"
    timestamp: datetime = Field(default_factory=utcnow)


class History(SQLModel, table=True):
    """Audit/history table to log modifications to items and the ledger.

    The ``id`` field is a composed string used to make simple text searches
    convenient while the record keeps structured fields for queries.
    """

    id: str = Field(primary_key=True)
    table_operation: str
    table_modified: str = Field(index=True)
    user_id: str = Field(default="system", index=True)
    modified_id: Optional[int] = None
    timestamp: datetime = Field(default_factory=utcnow)


class Order(SQLModel, table=True):
    """A purchase order placed with a supplier."""

    __tablename__ = "purchase_order"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)
    supplier_id: Optional[int] = None
    status: OrderStatus = OrderStatus.PENDING
    order_date: datetime = Field(default_factory=utcnow)
    expected_date: Optional[date] = None
    received_date: Optional[date] = None
    notes: Optional[str] = None
    total_amount: float = 0.0


@event.listens_for(Transaction, "before_update")
def _block_transaction_update(mapper, connection, target):
    raise LedgerImmutableError(f"Transaction {target.id} cannot be modified")


@event.listens_for(Transaction, "before_delete")
def _block_transaction_delete(mapper, connection, target):
    raise LedgerImmutableError(f"Transaction {target.id} cannot be deleted")
