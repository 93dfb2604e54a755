"""Exceptions raised by the inventory store and the transaction ledger.

Every error is a caller-input error: it carries the HTTP status code and the
message the API reports back, and it is raised before anything is written.

Copyright (c) Bryn Gwalad 2025
"""

from typing import Optional


class InventoryError(Exception):
    """Base class for inventory errors."""

    status_code = 400
    message = "Invalid request"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFoundError(InventoryError):
    status_code = 404
    message = "Item not found"


class DuplicateSkuError(InventoryError):
    message = "SKU already exists"


class InvalidTransactionTypeError(InventoryError):
    message = "Invalid transaction type"


class InvalidQuantityError(InventoryError):
    message = "Quantity must be at least 1"


class MissingRecipientError(InventoryError):
    message = "Recipient is required"


class InvalidReturnDateError(InventoryError):
    message = "Return date must be an ISO date (YYYY-MM-DD)"


class InsufficientQuantityError(InventoryError):
    message = "Not enough quantity available"


class LedgerImmutableError(InventoryError):
    """Raised when code tries to modify or delete a ledger entry."""

    status_code = 500
    message = "Ledger entries cannot be modified or deleted"
