"""Cursor-based pagination over a single ordered timestamp column.

A cursor is ``base64("<iso timestamp>@<epoch millis>")``. Only the part before
``@`` is meaningful; the suffix makes two encodings of the same value differ
and is never checked for expiry.
"""

import base64
import binascii
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, List, Optional, TypeVar

from sqlalchemy.orm import Query

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LIMIT = 20
# Listings scoped to one student or faculty
SCOPED_MAX_LIMIT = 20
# Unscoped "list all" listings
MAX_LIMIT = 100


@dataclass
class PaginationParams:
    cursor: Optional[str] = None
    limit: Optional[int] = None
    order: str = "desc"


@dataclass
class Page(Generic[T]):
    items: List[T]
    next_cursor: Optional[str]

    def to_dict(self, serialize: Callable[[T], Any] = lambda item: item) -> dict:
        return {
            "items": [serialize(item) for item in self.items],
            "nextCursor": self.next_cursor,
        }


def encode_token(value: str) -> str:
    """Encode a cursor value into an opaque token."""
    raw = f"{value}@{int(time.time() * 1000)}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_token(token: Optional[str]) -> Optional[str]:
    """Extract the cursor value from a token, or None if it cannot be decoded."""
    if not token:
        return None
    try:
        decoded = base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as e:
        logger.error("Error decoding pagination token: %s", e)
        return None
    return decoded.split("@", 1)[0]


def resolve_limit(limit: Optional[int], max_limit: int) -> int:
    """Apply the default page size and reject sizes outside ``1..max_limit``."""
    if limit is None:
        return min(DEFAULT_LIMIT, max_limit)
    if limit < 1:
        raise ValidationError("Limit must be greater than or equal to 1")
    if limit > max_limit:
        raise ValidationError(f"Limit must be less than or equal to {max_limit}")
    return limit


def paginate(
    query: Query,
    column: Any,
    params: PaginationParams,
    max_limit: int = SCOPED_MAX_LIMIT,
    key: Callable[[Any], datetime] = lambda row: row.created_at,
) -> Page:
    """Fetch one page of ``query`` ordered by ``column``.

    Args:
        query: Base query with all filters except the cursor condition.
        column: Timestamp column used for ordering and the cursor comparison.
        params: Cursor, page size and direction.
        max_limit: Largest page size accepted for this listing.
        key: Extracts the ordering value from a result row.

    Returns:
        Page holding at most ``limit`` rows and the cursor of the next page,
        or ``None`` when this is the last page.

    Raises:
        ValidationError: If the limit or the order is invalid.
    """
    order = (params.order or "desc").lower()
    if order not in ("asc", "desc"):
        raise ValidationError("Order must be 'asc' or 'desc'")
    limit = resolve_limit(params.limit, max_limit)

    cursor_value = decode_token(params.cursor)
    if cursor_value is not None:
        try:
            cursor = datetime.fromisoformat(cursor_value)
        except ValueError:
            logger.warning("Ignoring malformed pagination cursor value: %s", cursor_value)
            cursor = None
        if cursor is not None:
            query = query.filter(column < cursor if order == "desc" else column > cursor)

    ordering = column.desc() if order == "desc" else column.asc()
    rows = query.order_by(ordering).limit(limit + 1).all()

    if not rows:
        return Page(items=[], next_cursor=None)

    has_more = len(rows) > limit
    if has_more:
        rows = rows[:limit]
        next_cursor = encode_token(key(rows[-1]).isoformat())
    else:
        next_cursor = None
    return Page(items=rows, next_cursor=next_cursor)
