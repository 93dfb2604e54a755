"""
Pydantic schemas for request validation.

Request bodies use the field names of the public API (camelCase where the
wire format has it). Item and transaction bodies only check shape here; the
store and the ledger re-validate values before anything is written.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemCreate(BaseModel):
    """Body of ``POST /inventory``."""
    sku: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    quantity: int = Field(default=0, ge=0)
    location: str = ""


class ItemUpdate(BaseModel):
    """Body of ``PUT /inventory/{id}``. All fields are optional."""
    sku: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None


class TransactionRequest(BaseModel):
    """Body of ``POST /inventory/{id}/transaction``.

    Every field is taken as sent. The ledger looks the item up before it
    checks any of them, so a bad value on an unknown item is still a 404.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: Any = None
    quantity: Any = None
    recipient: Any = None
    purpose: Any = None
    return_date: Any = Field(default=None, alias="returnDate")


class Credentials(BaseModel):
    email: str = ""
    password: str = ""


class Registration(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
