# Rev 0.1.0
"""Date helpers shared by every timeline computation.

All date differences go through `days_between(earlier, later)` so there is
exactly one operand order in the engine: later minus earlier.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..models.types import DateLike


def parse_date(value: DateLike) -> Optional[date]:
    """Return a calendar date for `value`, or None when empty/unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    try:
        if len(s) == 10:
            return date.fromisoformat(s)
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def days_between(earlier: date, later: date) -> int:
    """Whole days from `earlier` to `later`; positive when later is after earlier."""
    return (later - earlier).days


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def today() -> date:
    return date.today()
