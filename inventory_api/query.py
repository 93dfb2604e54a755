"""Filtering and pagination of item listings."""

from typing import Iterable, List, Optional, Sequence

from .models import InventoryItem


def filter_items(items: Iterable[InventoryItem], search_term: Optional[str] = None, category: Optional[str] = None) -> List[InventoryItem]:
    """Keep items whose name or sku contains ``search_term`` (ignoring case)
    and whose category equals ``category``. Empty filters match everything.
    """
    needle = (search_term or "").lower()
    result = []
    for item in items:
        if needle and needle not in item.name.lower() and needle not in item.sku.lower():
            continue
        if category and item.category != category:
            continue
        result.append(item)
    return result


def paginate(sequence: Sequence, page: int, page_size: int) -> list:
    """Return page ``page`` (zero-based) of ``page_size`` entries.

    Pages past the end, negative pages and non-positive sizes are empty.
    """
    if page < 0 or page_size <= 0:
        return []
    start = page * page_size
    return list(sequence[start:start + page_size])
