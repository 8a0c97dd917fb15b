"""Utility modules."""

from .text import normalize_pickup, normalize_name, parse_pax, extract_child_count
from .dates import coerce_date, days_between, format_short

__all__ = [
    "normalize_pickup",
    "normalize_name",
    "parse_pax",
    "extract_child_count",
    "coerce_date",
    "days_between",
    "format_short",
]
