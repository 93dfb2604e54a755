"""The stock transaction ledger.

``TransactionLedger.apply`` validates a stock movement against the current
item, updates the item through its ItemStore and appends an immutable
Transaction, all in one database transaction and under the store's lock.
A rejected request leaves both the item and the ledger untouched.

Copyright (c) Bryn Gwalad 2025
"""

import logging
from datetime import date, datetime
from typing import List, NamedTuple, Optional

from sqlmodel import select

from utils.database import log_history
from .errors import (
    InsufficientQuantityError,
    InvalidQuantityError,
    InvalidReturnDateError,
    InvalidTransactionTypeError,
    MissingRecipientError,
    NotFoundError,
)
from .models import OUTGOING_TYPES, InventoryItem, Transaction, TransactionType
from .store import MAX_QUANTITY, ItemStore

logger = logging.getLogger("inventory_api.ledger")


class AppliedTransaction(NamedTuple):
    item: InventoryItem
    transaction: Transaction


def _parse_type(value) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise InvalidTransactionTypeError() from None


def _parse_return_date(value) -> Optional[date]:
    """Accept a date, an ISO ``YYYY-MM-DD`` string or an ISO datetime string."""
    if isinstance(value, datetime):
        return value.date()
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        # browsers send Date.toISOString(), e.g. 2026-11-02T00:00:00.000Z
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise InvalidReturnDateError()


class TransactionLedger:
    """Append-only log of stock movements for the items of one ItemStore."""

    def __init__(self, store: ItemStore):
        self.store = store

    def apply(
        self,
        item_id: int,
        type,
        quantity,
        recipient,
        purpose=None,
        return_date=None,
        user_id: str = "system",
    ) -> AppliedTransaction:
        """Apply one transaction and return the updated item with its ledger entry.

        Checks run in this order and the first failure is raised:
        unknown item (NotFoundError), unknown type
        (InvalidTransactionTypeError), quantity not a positive integer
        (InvalidQuantityError), empty recipient (MissingRecipientError), a
        lend return date that is not a date (InvalidReturnDateError), and
        for lend/give a quantity above what is on hand
        (InsufficientQuantityError).

        A lend without ``return_date`` is accepted; ``return_date`` is dropped
        for every other type.
        """
        with self.store.lock, self.store.session() as session:
            item = session.get(InventoryItem, item_id)
            if item is None:
                raise NotFoundError()
            kind = _parse_type(type)
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise InvalidQuantityError()
            if quantity > MAX_QUANTITY:
                raise InvalidQuantityError(f"Quantity cannot exceed {MAX_QUANTITY}")
            if recipient is None or not str(recipient).strip():
                raise MissingRecipientError()
            recipient = str(recipient).strip()
            return_date = _parse_return_date(return_date) if kind == TransactionType.LEND else None

            if kind in OUTGOING_TYPES:
                if item.quantity < quantity:
                    logger.warning(
                        "Rejected %s of %s from item id=%s: only %s on hand",
                        kind.value, quantity, item_id, item.quantity,
                    )
                    raise InsufficientQuantityError()
                new_quantity = item.quantity - quantity
            else:
                new_quantity = item.quantity + quantity
                if new_quantity > MAX_QUANTITY:
                    raise InvalidQuantityError(f"Quantity on hand cannot exceed {MAX_QUANTITY}")

            item = self.store.update(item_id, {"quantity": new_quantity}, session=session, user_id=user_id)
            entry = Transaction(
                item_id=item_id,
                type=kind,
                quantity=quantity,
                recipient=recipient,
                purpose="" if purpose is None else str(purpose),
                return_date=return_date,
                returned=False,
                user_id=user_id,
            )
            session.add(entry)
            session.flush()
            log_history("add", "Transaction", user_id, modified_id=entry.id, session=session, commit=False)
            session.commit()

        logger.info(
            "Applied %s of %s to item id=%s for %s; quantity now %s",
            kind.value, quantity, item_id, recipient, item.quantity,
        )
        return AppliedTransaction(item=item, transaction=entry)

    def get(self, transaction_id: int) -> Transaction:
        with self.store.lock, self.store.session() as session:
            entry = session.get(Transaction, transaction_id)
            if entry is None:
                raise NotFoundError("Transaction not found")
            return entry

    def list(self, item_id: Optional[int] = None, type=None) -> List[Transaction]:
        """Ledger entries in the order they were recorded, optionally filtered."""
        q = select(Transaction)
        if item_id is not None:
            q = q.where(Transaction.item_id == item_id)
        if type is not None:
            q = q.where(Transaction.type == _parse_type(type))
        q = q.order_by(Transaction.id)
        with self.store.lock, self.store.session() as session:
            return list(session.exec(q).all())
