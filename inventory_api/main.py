"""HTTP API for the Inventory Ledger service.

Provides endpoints for inventory item CRUD, stock transactions (lend, give,
receive, add) and the transaction ledger, plus the audit history, purchase
order listing, mocked authentication and a health probe.

Every response is a JSON envelope ``{success, data?, message?, errors?}``;
list responses also carry ``count``. The ``X-User-Id`` header identifies the
caller for transaction attribution and audit logging.

Copyright (c) Bryn Gwalad 2025
"""

from typing import Optional
import logging
import time
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlmodel import select
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.database import init_db, ping
from utils.logging_config import configure_logging
from . import auth, config
from .errors import InventoryError
from .ledger import TransactionLedger
from .models import History, InventoryItem, Order, Transaction, utcnow
from .query import filter_items, paginate
from .schemas import ItemCreate, ItemUpdate, TransactionRequest
from .status import classify
from .store import ItemStore

# Module logger
logger = logging.getLogger("inventory_api")


class Inventory:
    """An item store and its ledger, bound to one database engine."""

    def __init__(self, bind: Optional[Engine] = None):
        self.store = ItemStore(bind)
        self.ledger = TransactionLedger(self.store)


app = FastAPI(title="Inventory Ledger API")
app.state.inventory = Inventory()

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

api = APIRouter(prefix=config.API_PREFIX)


def get_inventory(request: Request) -> Inventory:
    return request.app.state.inventory


def _serialize_item(item: InventoryItem) -> dict:
    return {
        "id": item.id,
        "sku": item.sku,
        "name": item.name,
        "category": item.category,
        "quantity": item.quantity,
        "location": item.location,
        # stored status can predate a LOW_STOCK_THRESHOLD change
        "status": classify(item.quantity).value,
    }


def _serialize_transaction(entry: Transaction) -> dict:
    return {
        "id": entry.id,
        "itemId": entry.item_id,
        "type": entry.type.value,
        "quantity": entry.quantity,
        "recipient": entry.recipient,
        "purpose": entry.purpose,
        "returnDate": entry.return_date.isoformat() if entry.return_date else None,
        "returned": entry.returned,
        "userId": entry.user_id,
        "timestamp": entry.timestamp.isoformat(),
    }


def _ok(data=None, status_code: int = status.HTTP_200_OK, **extra) -> JSONResponse:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.on_event("startup")
async def on_startup():
    """Application startup handler.

    Configures logging and creates the database tables.
    """
    configure_logging(config.LOG_LEVEL, config.LOG_DIR)
    init_db(app.state.inventory.store.bind)
    logger.info("Inventory Ledger API started; api prefix=%s", config.API_PREFIX)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed)
    return response


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.detail})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"success": False, "message": "Server error"})


@app.get("/health")
def health(inventory: Inventory = Depends(get_inventory)):
    """Liveness probe that also checks the database answers ``SELECT 1``."""
    try:
        ping(inventory.store.bind)
    except Exception as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "message": "Database connection failed", "error": str(exc)},
        )
    return {"status": "success", "message": "Server is healthy", "database": "Connected successfully", "timestamp": utcnow().isoformat()}


@api.get("/inventory")
def list_items(
    search: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(0, ge=0),
    page_size: Optional[int] = Query(None, ge=1, alias="pageSize"),
    inventory: Inventory = Depends(get_inventory),
):
    """List items, optionally filtered by search term and category.

    Without ``pageSize`` every match is returned. ``count`` is the number of
    matches before pagination.
    """
    items = filter_items(inventory.store.list(), search, category)
    count = len(items)
    if page_size is not None:
        items = paginate(items, page, page_size)
    return _ok([_serialize_item(i) for i in items], count=count)


@api.get("/inventory/categories")
def list_categories(inventory: Inventory = Depends(get_inventory)):
    """Distinct categories, for building category filters."""
    categories = inventory.store.categories()
    return _ok(categories, count=len(categories))


@api.get("/inventory/{item_id}")
def get_item(item_id: int, inventory: Inventory = Depends(get_inventory)):
    """Return an item by id or 404 if not found."""
    return _ok(_serialize_item(inventory.store.get(item_id)))


@api.post("/inventory")
def create_item(item: ItemCreate, user_id: str = Header("system", alias="X-User-Id"), inventory: Inventory = Depends(get_inventory)):
    """Create a new item. Rejects a sku that is already in use.

    Uses `X-User-Id` for audit logging.
    """
    created = inventory.store.create(**item.model_dump(), user_id=user_id)
    return _ok(_serialize_item(created), status_code=status.HTTP_201_CREATED)


@api.put("/inventory/{item_id}")
def update_item(item_id: int, item: ItemUpdate, user_id: str = Header("system", alias="X-User-Id"), inventory: Inventory = Depends(get_inventory)):
    """Update the supplied fields of an item; the status follows the quantity."""
    updated = inventory.store.update(item_id, item.model_dump(exclude_unset=True), user_id=user_id)
    return _ok(_serialize_item(updated))


@api.delete("/inventory/{item_id}")
def delete_item(item_id: int, user_id: str = Header("system", alias="X-User-Id"), inventory: Inventory = Depends(get_inventory)):
    """Delete an item by id. Records an audit entry using X-User-Id."""
    removed = inventory.store.delete(item_id, user_id=user_id)
    return _ok(_serialize_item(removed), message="Deleted successfully")


@api.post("/inventory/{item_id}/transaction")
def apply_transaction(item_id: int, body: TransactionRequest, user_id: str = Header("system", alias="X-User-Id"), inventory: Inventory = Depends(get_inventory)):
    """Lend, give, receive or add stock for an item.

    Returns the updated item together with the new ledger entry.
    """
    result = inventory.ledger.apply(
        item_id,
        body.type,
        body.quantity,
        body.recipient,
        purpose=body.purpose,
        return_date=body.return_date,
        user_id=user_id,
    )
    return _ok({"item": _serialize_item(result.item), "transaction": _serialize_transaction(result.transaction)})


@api.get("/inventory/{item_id}/transactions")
def list_item_transactions(item_id: int, inventory: Inventory = Depends(get_inventory)):
    """Ledger entries recorded against an item, including deleted items."""
    entries = inventory.ledger.list(item_id=item_id)
    return _ok([_serialize_transaction(e) for e in entries], count=len(entries))


@api.get("/transactions")
def list_transactions(
    item_id: Optional[int] = Query(None, alias="itemId"),
    type: Optional[str] = None,
    inventory: Inventory = Depends(get_inventory),
):
    """The whole ledger in recording order, optionally filtered by item and type."""
    entries = inventory.ledger.list(item_id=item_id, type=type)
    return _ok([_serialize_transaction(e) for e in entries], count=len(entries))


@api.get("/transactions/{transaction_id}")
def get_transaction(transaction_id: int, inventory: Inventory = Depends(get_inventory)):
    return _ok(_serialize_transaction(inventory.ledger.get(transaction_id)))


@api.get("/history")
def get_history(
    user_id: Optional[str] = None,
    table_modified: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    x_user_id: str = Header("system", alias="X-User-Id"),
    inventory: Inventory = Depends(get_inventory),
):
    """Return history entries.

    Access control: only callers with X-User-Id present in ADMIN_USERS may read history.

    Filtering:
    - `user_id` exact match
    - `table_modified` exact match ("InventoryItem" or "Transaction")
    - `date_from` and `date_to` are ISO dates (YYYY-MM-DD) or datetimes and filter on the `timestamp` field inclusive.
    - `limit` and `offset` provide pagination.
    """
    # enforce admin-only access via configured ADMIN_USERS
    if x_user_id not in config.ADMIN_USERS:
        raise HTTPException(status_code=403, detail="admin user required to access history")

    # parse optional date filters
    dt_from = None
    dt_to = None
    try:
        if date_from:
            dt_from = datetime.fromisoformat(date_from)
        if date_to:
            dt_to = datetime.fromisoformat(date_to)
            # if date only (YYYY-MM-DD) was provided, include entire day
            if len(date_to) == 10:
                dt_to = dt_to + timedelta(days=1) - timedelta(microseconds=1)
    except ValueError:
        raise HTTPException(status_code=400, detail="date_from/date_to must be ISO format (YYYY-MM-DD or full ISO datetime)")
    # timestamps are stored in UTC; filters without an offset are read as UTC
    if dt_from is not None and dt_from.tzinfo is None:
        dt_from = dt_from.replace(tzinfo=timezone.utc)
    if dt_to is not None and dt_to.tzinfo is None:
        dt_to = dt_to.replace(tzinfo=timezone.utc)

    q = select(History)
    if user_id is not None:
        q = q.where(History.user_id == user_id)
    if table_modified is not None:
        q = q.where(History.table_modified == table_modified)
    if dt_from is not None:
        q = q.where(History.timestamp >= dt_from)
    if dt_to is not None:
        q = q.where(History.timestamp <= dt_to)

    # order by timestamp desc (most recent first)
    q = q.order_by(History.timestamp.desc()).offset(offset).limit(limit)

    with inventory.store.lock, inventory.store.session() as session:
        results = session.exec(q).all()
        return _ok([r.model_dump() for r in results], count=len(results))


@api.get("/orders")
def list_orders(inventory: Inventory = Depends(get_inventory)):
    """Return all purchase orders."""
    with inventory.store.lock, inventory.store.session() as session:
        orders = session.exec(select(Order).order_by(Order.id)).all()
        return _ok([o.model_dump() for o in orders], count=len(orders))


api.include_router(auth.router)
app.include_router(api)
