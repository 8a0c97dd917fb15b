"""
String normalization helpers for names, pickups and headcounts.
"""

import re
from typing import Optional

_TRAILING_PARENS = re.compile(r"(?:\s*\([^()]*\))+\s*$")
_WHITESPACE = re.compile(r"\s+")
_DIGITS = re.compile(r"[^0-9]")
# (아1), 아동 2, 소아1, 유아1, child 2, baby1, (c1); not inside words, not clock times
_CHILD_MARKER = re.compile(
    r"(?<![0-9A-Za-z가-힣])(?:소아|유아|아동|아|유|소|child|baby)\s*(\d+)(?![\d:시분])"
    r"|\(\s*c\s*(\d+)\s*\)",
    re.IGNORECASE,
)


def normalize_pickup(text: Optional[str]) -> str:
    """
    Strip trailing parenthetical qualifiers from a pickup location.

    "Hotel (Lobby)" -> "Hotel". Idempotent; None or empty input yields "".
    """
    if not text:
        return ""
    return _TRAILING_PARENS.sub("", text).strip()


def normalize_name(text: Optional[str]) -> str:
    """Trim, collapse internal whitespace and case-fold a customer name."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.strip()).casefold()


def parse_pax(value) -> int:
    """Read a headcount from an int or free text such as '3명'."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    digits = _DIGITS.sub("", str(value or ""))
    return int(digits) if digits else 0


def extract_child_count(text: Optional[str]) -> int:
    """Find a child headcount marker in a note, 0 when there is none."""
    if not text:
        return 0
    match = _CHILD_MARKER.search(text)
    if not match:
        return 0
    return int(match.group(1) or match.group(2))
