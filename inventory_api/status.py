"""Stock status derived from an item's quantity."""

from typing import Optional

from . import config
from .models import StockStatus


def classify(quantity: int, threshold: Optional[int] = None) -> StockStatus:
    """Return the stock status for ``quantity``.

    Zero or less is out of stock, anything up to ``threshold`` (the configured
    ``LOW_STOCK_THRESHOLD`` by default) is low stock, the rest is in stock.
    """
    if threshold is None:
        threshold = config.LOW_STOCK_THRESHOLD
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK
