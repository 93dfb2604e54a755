"""Tests for the transaction ledger.

Each test runs against its own in-memory SQLite database.

Copyright (c) Bryn Gwalad 2025
"""

import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import threading
import unittest
from datetime import date

from inventory_api.errors import (
    InsufficientQuantityError,
    InvalidQuantityError,
    InvalidReturnDateError,
    InvalidTransactionTypeError,
    LedgerImmutableError,
    MissingRecipientError,
    NotFoundError,
)
from inventory_api.ledger import TransactionLedger
from inventory_api.models import StockStatus, Transaction, TransactionType
from inventory_api.store import MAX_QUANTITY, ItemStore
from utils.database import init_db, make_engine


class TransactionLedgerTest(unittest.TestCase):

    def setUp(self):
        engine = make_engine("sqlite://")
        init_db(engine)
        self.store = ItemStore(engine)
        self.ledger = TransactionLedger(self.store)
        self.item = self.store.create("SKU001", "Laptop", "Electronics", quantity=10)

    def test_give_reduces_quantity(self):
        result = self.ledger.apply(self.item.id, "give", 5, "Bob")
        self.assertEqual(result.item.quantity, 5)
        self.assertEqual(result.item.status, StockStatus.LOW_STOCK)
        entry = result.transaction
        self.assertEqual(entry.id, 1)
        self.assertEqual(entry.item_id, self.item.id)
        self.assertEqual(entry.type, TransactionType.GIVE)
        self.assertEqual(entry.quantity, 5)
        self.assertEqual(entry.recipient, "Bob")
        self.assertEqual(entry.purpose, "")
        self.assertFalse(entry.returned)
        self.assertIsNone(entry.return_date)
        self.assertIsNotNone(entry.timestamp)
        self.assertEqual(self.store.get(self.item.id).quantity, 5)

    def test_give_more_than_on_hand_changes_nothing(self):
        with self.assertRaises(InsufficientQuantityError):
            self.ledger.apply(self.item.id, "give", 999, "Bob")
        self.assertEqual(self.store.get(self.item.id).quantity, 10)
        self.assertEqual(self.ledger.list(), [])

    def test_lend_everything_is_out_of_stock(self):
        result = self.ledger.apply(self.item.id, "lend", 10, "Carol", return_date=date(2026, 10, 24))
        self.assertEqual(result.item.quantity, 0)
        self.assertEqual(result.item.status, StockStatus.OUT_OF_STOCK)
        self.assertEqual(result.transaction.return_date, date(2026, 10, 24))

    def test_receive_on_empty_item(self):
        desk = self.store.create("SKU005", "Desk", "Furniture")
        result = self.ledger.apply(desk.id, "receive", 3, "Supplier")
        self.assertEqual(result.item.quantity, 3)
        self.assertEqual(result.item.status, StockStatus.LOW_STOCK)

    def test_add_increases_quantity(self):
        result = self.ledger.apply(self.item.id, TransactionType.ADD, 7, "Restock", purpose="quarterly order")
        self.assertEqual(result.item.quantity, 17)
        self.assertEqual(result.transaction.purpose, "quarterly order")

    def test_return_date_only_kept_for_lend(self):
        given = self.ledger.apply(self.item.id, "give", 1, "Dan", return_date=date(2026, 1, 1))
        self.assertIsNone(given.transaction.return_date)
        lent = self.ledger.apply(self.item.id, "lend", 1, "Dan")
        self.assertIsNone(lent.transaction.return_date)
        self.assertEqual(lent.transaction.type, TransactionType.LEND)

    def test_unknown_item(self):
        with self.assertRaises(NotFoundError):
            self.ledger.apply(99, "give", 1, "Bob")

    def test_checks_run_in_order(self):
        with self.assertRaises(NotFoundError):
            self.ledger.apply(99, "steal", 0, "")
        with self.assertRaises(InvalidTransactionTypeError):
            self.ledger.apply(self.item.id, "steal", 0, "")
        with self.assertRaises(InvalidQuantityError):
            self.ledger.apply(self.item.id, "give", 0, "")
        with self.assertRaises(MissingRecipientError):
            self.ledger.apply(self.item.id, "give", 999, "")
        self.assertEqual(self.ledger.list(), [])

    def test_invalid_types(self):
        for kind in (None, "", "GIVE", "borrow", 3):
            with self.assertRaises(InvalidTransactionTypeError):
                self.ledger.apply(self.item.id, kind, 1, "Bob")

    def test_invalid_quantities(self):
        for quantity in (0, -2, 1.5, "3", None, True):
            with self.assertRaises(InvalidQuantityError):
                self.ledger.apply(self.item.id, "receive", quantity, "Bob")
        self.assertEqual(self.store.get(self.item.id).quantity, 10)

    def test_quantities_past_the_storable_maximum(self):
        with self.assertRaises(InvalidQuantityError):
            self.ledger.apply(self.item.id, "receive", 10 ** 20, "Supplier")
        big = self.store.create("SKU009", "Bolt", "Parts", quantity=MAX_QUANTITY - 1)
        with self.assertRaises(InvalidQuantityError):
            self.ledger.apply(big.id, "add", 2, "Supplier")
        self.assertEqual(self.ledger.apply(big.id, "add", 1, "Supplier").item.quantity, MAX_QUANTITY)
        self.assertEqual(self.store.get(self.item.id).quantity, 10)

    def test_lend_return_date_parsing(self):
        lent = self.ledger.apply(self.item.id, "lend", 1, "Dan", return_date="2026-11-02")
        self.assertEqual(lent.transaction.return_date, date(2026, 11, 2))
        lent = self.ledger.apply(self.item.id, "lend", 1, "Dan", return_date="")
        self.assertIsNone(lent.transaction.return_date)
        with self.assertRaises(InvalidReturnDateError):
            self.ledger.apply(self.item.id, "lend", 1, "Dan", return_date="tomorrow")
        with self.assertRaises(InvalidReturnDateError):
            self.ledger.apply(self.item.id, "lend", 1, "Dan", return_date="2026-11-02 lol")
        lent = self.ledger.apply(self.item.id, "lend", 1, "Dan", return_date="2026-11-02T09:30:00.000Z")
        self.assertEqual(lent.transaction.return_date, date(2026, 11, 2))
        # ignored for types other than lend
        given = self.ledger.apply(self.item.id, "give", 1, "Dan", return_date="tomorrow")
        self.assertIsNone(given.transaction.return_date)
        self.assertEqual(self.store.get(self.item.id).quantity, 6)

    def test_recipient_and_purpose_are_stored_as_text(self):
        entry = self.ledger.apply(self.item.id, "give", 1, "  Bob  ", purpose=42).transaction
        self.assertEqual(entry.recipient, "Bob")
        self.assertEqual(entry.purpose, "42")
        entry = self.ledger.apply(self.item.id, "give", 1, 7).transaction
        self.assertEqual(entry.recipient, "7")
        self.assertEqual(self.ledger.get(entry.id).recipient, "7")

    def test_missing_recipient(self):
        for recipient in (None, "", "   "):
            with self.assertRaises(MissingRecipientError):
                self.ledger.apply(self.item.id, "receive", 1, recipient)

    def test_transaction_ids_increase(self):
        first = self.ledger.apply(self.item.id, "give", 1, "A").transaction
        second = self.ledger.apply(self.item.id, "receive", 1, "B").transaction
        self.assertEqual((first.id, second.id), (1, 2))

    def test_get_and_list(self):
        other = self.store.create("SKU002", "Chair", "Furniture", quantity=4)
        self.ledger.apply(self.item.id, "give", 1, "A")
        self.ledger.apply(other.id, "lend", 2, "B")
        self.ledger.apply(self.item.id, "add", 3, "C")

        self.assertEqual([e.id for e in self.ledger.list()], [1, 2, 3])
        self.assertEqual([e.id for e in self.ledger.list(item_id=self.item.id)], [1, 3])
        self.assertEqual([e.id for e in self.ledger.list(type="lend")], [2])
        self.assertEqual(self.ledger.get(2).recipient, "B")
        with self.assertRaises(NotFoundError) as ctx:
            self.ledger.get(40)
        self.assertEqual(ctx.exception.message, "Transaction not found")
        with self.assertRaises(InvalidTransactionTypeError):
            self.ledger.list(type="bogus")

    def test_entries_survive_item_deletion(self):
        self.ledger.apply(self.item.id, "give", 2, "A")
        self.store.delete(self.item.id)
        entries = self.ledger.list(item_id=self.item.id)
        self.assertEqual(len(entries), 1)
        with self.assertRaises(NotFoundError):
            self.ledger.apply(self.item.id, "receive", 1, "A")

    def test_entries_cannot_be_modified_or_deleted(self):
        entry_id = self.ledger.apply(self.item.id, "give", 1, "A").transaction.id
        with self.store.session() as session:
            entry = session.get(Transaction, entry_id)
            entry.recipient = "Mallory"
            session.add(entry)
            with self.assertRaises(LedgerImmutableError):
                session.commit()
        with self.store.session() as session:
            entry = session.get(Transaction, entry_id)
            session.delete(entry)
            with self.assertRaises(LedgerImmutableError):
                session.commit()
        self.assertEqual(self.ledger.get(entry_id).recipient, "A")


class ConcurrentApplyTest(unittest.TestCase):

    def setUp(self):
        engine = make_engine("sqlite://")
        init_db(engine)
        self.store = ItemStore(engine)
        self.ledger = TransactionLedger(self.store)

    def _run(self, item_id, workers, quantity):
        barrier = threading.Barrier(workers)
        outcomes = []
        outcomes_lock = threading.Lock()

        def worker():
            barrier.wait()
            try:
                self.ledger.apply(item_id, "give", quantity, "worker")
                ok = True
            except InsufficientQuantityError:
                ok = False
            with outcomes_lock:
                outcomes.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        return outcomes

    def test_two_overdrawing_gives_cannot_both_succeed(self):
        item = self.store.create("SKU001", "Laptop", "Electronics", quantity=10)
        outcomes = self._run(item.id, 2, 6)
        self.assertEqual(sorted(outcomes), [False, True])
        self.assertEqual(self.store.get(item.id).quantity, 4)

    def test_many_workers_never_overdraw(self):
        item = self.store.create("SKU002", "Chair", "Furniture", quantity=10)
        outcomes = self._run(item.id, 8, 3)
        self.assertEqual(len(outcomes), 8)
        self.assertEqual(outcomes.count(True), 3)
        self.assertEqual(self.store.get(item.id).quantity, 1)
        self.assertEqual(len(self.ledger.list(item_id=item.id)), 3)


if __name__ == "__main__":
    unittest.main()
