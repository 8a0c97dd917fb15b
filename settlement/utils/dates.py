"""
Calendar helpers shared by the grouping and matching stages.
"""

from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, str, None]


def coerce_date(value: DateLike) -> Optional[date]:
    """
    Convert parser output into a date.

    Accepts date objects, datetimes and ISO strings (only the leading
    YYYY-MM-DD part is read). Blank values become None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    return date.fromisoformat(text[:10])


def days_between(first: date, second: date) -> int:
    """Absolute calendar-day distance."""
    return abs((first - second).days)


def format_short(value: Optional[date]) -> str:
    """Render a date as M/D for diagnostic notes."""
    if value is None:
        return ""
    return f"{value.month}/{value.day}"
