"""Item storage for the Inventory Ledger API.

``ItemStore`` owns every InventoryItem record. It keeps the derived ``status``
in step with ``quantity`` on every write and records each change in the
history table.

All writes run under ``ItemStore.lock``. The lock is re-entrant and is shared
with the TransactionLedger so a ledger transaction can read, check and update
an item without another writer slipping in between.

Copyright (c) Bryn Gwalad 2025
"""

import logging
import threading
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from utils.database import get_session, log_history
from .errors import DuplicateSkuError, InvalidQuantityError, NotFoundError
from .models import InventoryItem
from .status import classify

logger = logging.getLogger("inventory_api.store")

EDITABLE_FIELDS = ("sku", "name", "category", "quantity", "location")

# Largest quantity the INTEGER column can hold.
MAX_QUANTITY = 2 ** 63 - 1


def _check_stock_quantity(quantity) -> None:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise InvalidQuantityError("Quantity must be a non-negative integer")
    if quantity > MAX_QUANTITY:
        raise InvalidQuantityError(f"Quantity cannot exceed {MAX_QUANTITY}")


class ItemStore:
    """CRUD over InventoryItem records bound to one database engine."""

    def __init__(self, bind: Optional[Engine] = None):
        self.bind = bind
        self.lock = threading.RLock()

    def session(self) -> Session:
        return get_session(self.bind)

    def _load(self, session: Session, item_id: int) -> InventoryItem:
        item = session.get(InventoryItem, item_id)
        if item is None:
            raise NotFoundError()
        return item

    def _sku_owner(self, session: Session, sku: str) -> Optional[InventoryItem]:
        return session.exec(select(InventoryItem).where(InventoryItem.sku == sku)).first()

    def create(self, sku: str, name: str, category: str, quantity: int = 0, location: str = "", user_id: str = "system") -> InventoryItem:
        """Add a new item. Fails with DuplicateSkuError if the sku is in use."""
        _check_stock_quantity(quantity)
        with self.lock, self.session() as session:
            if self._sku_owner(session, sku) is not None:
                raise DuplicateSkuError()
            item = InventoryItem(
                sku=sku,
                name=name,
                category=category,
                quantity=quantity,
                location=location or "",
                status=classify(quantity),
            )
            session.add(item)
            session.flush()
            log_history("add", "InventoryItem", user_id, modified_id=item.id, session=session, commit=False)
            session.commit()
        logger.info("Created item id=%s sku=%s quantity=%s", item.id, item.sku, item.quantity)
        return item

    def get(self, item_id: int) -> InventoryItem:
        # Reads hold the lock too: on a single shared connection a reader's
        # rollback would otherwise discard a writer's open transaction.
        with self.lock, self.session() as session:
            return self._load(session, item_id)

    def update(self, item_id: int, changes: dict, session: Optional[Session] = None, user_id: str = "system") -> InventoryItem:
        """Apply ``changes`` (any subset of the editable fields) to an item.

        Fields that are omitted or ``None`` keep their current value. The
        status is recomputed from the resulting quantity. Changing the sku to
        one held by another item raises DuplicateSkuError.

        When ``session`` is given the update is left uncommitted in it so the
        caller can commit it together with its own writes.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown item fields: {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in changes.items() if v is not None}
        if "quantity" in changes:
            _check_stock_quantity(changes["quantity"])

        own_session = session is None
        with self.lock:
            if own_session:
                session = self.session()
            try:
                item = self._load(session, item_id)
                new_sku = changes.get("sku")
                if new_sku is not None and new_sku != item.sku:
                    owner = self._sku_owner(session, new_sku)
                    if owner is not None and owner.id != item.id:
                        raise DuplicateSkuError()
                for key, value in changes.items():
                    setattr(item, key, value)
                item.status = classify(item.quantity)
                session.add(item)
                log_history("update", "InventoryItem", user_id, modified_id=item.id, session=session, commit=False)
                if own_session:
                    session.commit()
            finally:
                if own_session:
                    session.close()
        logger.info("Updated item id=%s fields=%s status=%s", item.id, sorted(changes), item.status.value)
        return item

    def delete(self, item_id: int, user_id: str = "system") -> InventoryItem:
        """Remove an item and return the deleted record.

        Ledger entries that reference the item are left untouched.
        """
        with self.lock, self.session() as session:
            item = self._load(session, item_id)
            session.delete(item)
            log_history("delete", "InventoryItem", user_id, modified_id=item_id, session=session, commit=False)
            session.commit()
        logger.info("Deleted item id=%s sku=%s", item_id, item.sku)
        return item

    def list(self) -> List[InventoryItem]:
        """Return every item in insertion order."""
        with self.lock, self.session() as session:
            return list(session.exec(select(InventoryItem).order_by(InventoryItem.id)).all())

    def categories(self) -> List[str]:
        """Distinct item categories in the order they first appear."""
        seen = []
        for item in self.list():
            if item.category not in seen:
                seen.append(item.category)
        return seen
