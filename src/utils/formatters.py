"""Formatting and time helpers shared by managers and models."""

from datetime import date, datetime
from typing import Optional, Union

import pytz


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the storage convention of this app."""
    return datetime.now(pytz.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(pytz.utc).replace(tzinfo=None)


def format_academic_year(
    start_date: Union[date, datetime], end_date: Union[date, datetime]
) -> str:
    """Format an academic year label such as ``"2025-2026"``.

    When the start and end dates fall in the same calendar year the end year is
    shown as the following year, so ``2025-01-01 .. 2025-12-31`` becomes
    ``"2025-2026"`` while ``2025-09-01 .. 2026-08-31`` stays ``"2025-2026"``.
    """
    start_year = start_date.year
    end_year = end_date.year
    if start_year == end_year:
        end_year = start_year + 1
    return f"{start_year}-{end_year}"


def format_timestamp(value: Optional[datetime], default: str = "N/A") -> str:
    if value is None:
        return default
    return value.strftime("%Y-%m-%d %H:%M:%S")
