from __future__ import annotations

import math
from typing import Any

from .results import Rejected, ResultCode

# Ids are signed 64-bit keys
MAX_ID = 2**63 - 1


def to_int(value: Any) -> int | None:
    """Normalise loosely-typed input to an int, or ``None`` when unusable.

    Ints pass through untouched and integer strings are parsed exactly.
    Other numeric strings and finite floats are truncated toward zero.
    Booleans, blanks, non-numeric text and out-of-range numbers are treated
    as missing.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            pass
        try:
            value = float(value)
        except (ValueError, OverflowError):
            return None
    if not isinstance(value, float) or not math.isfinite(value):
        return None
    return int(value)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def require_positive_id(value: Any, field: str) -> int:
    number = to_int(value)
    if number is None or not 0 < number <= MAX_ID:
        raise Rejected(ResultCode.invalid_parameter, f"{field} must be a positive integer")
    return number
