"""Shared helpers for coercing raw CSV strings into typed values."""
from __future__ import annotations

import re
from typing import List, Optional

_LEADING_INT = re.compile(r"[+-]?\d+")
_NOT_DIGIT_OR_COMMA = re.compile(r"[^0-9,]")


def clean_text(raw: Optional[str]) -> str:
    """Return a trimmed string, or an empty string when the value is absent."""

    if raw is None:
        return ""
    return raw.strip()


def parse_amount(raw: Optional[str]) -> int:
    """Parse the leading base-10 integer of a quantity cell.

    Absent, non-numeric and negative values all yield ``0``.
    """

    if raw is None:
        return 0
    match = _LEADING_INT.match(raw.strip())
    if not match:
        return 0
    return max(int(match.group(0)), 0)


def parse_decimal(raw: Optional[str]) -> float:
    """Convert a Danish-formatted price (comma decimals) into a float.

    Everything except digits and commas is dropped first, so thousands dots
    and currency labels disappear: ``"1.234,56 kr"`` becomes ``1234.56``.
    """

    if raw is None:
        return 0.0
    cleaned = _NOT_DIGIT_OR_COMMA.sub("", raw).replace(",", ".", 1)
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def split_locations(raw: Optional[str]) -> List[str]:
    """Split a ``-`` separated location list, trimming each segment."""

    if raw is None or not raw.strip():
        return []
    return [segment.strip() for segment in raw.split("-")]
