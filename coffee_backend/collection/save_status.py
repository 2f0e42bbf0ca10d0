from __future__ import annotations

import math
from typing import Any, Mapping

from ..common.results import OperationResult, operation
from ..common.validation import require_positive_id
from ..storage.base import DataStore
from .models import SaveStatus

# Field names the data source has used for the flag, in lookup order
SAVE_FLAG_ALIASES: tuple[str, ...] = ("is_saved", "isSaved", "saved")

_TRUTHY = frozenset({"1", "y", "yes", "true", "t"})
_FALSY = frozenset({"0", "n", "no", "false", "f"})


def normalize_saved_flag(value: Any) -> int | None:
    """Map any encoding of a save flag to 1, 0 or ``None``.

    Numbers and booleans use their truthiness. Strings are trimmed and
    lower-cased, matched against the yes/no spellings, then parsed as a
    number. Anything else is ``None``; this never raises.
    """
    if value is None:
        return None
    if isinstance(value, (bool, int)):
        return 1 if value else 0
    if isinstance(value, float):
        return None if math.isnan(value) else (1 if value else 0)

    text = str(value).strip().lower()
    if text in _TRUTHY:
        return 1
    if text in _FALSY:
        return 0
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return 1 if number else 0


def pick_saved_flag(row: Any) -> int | None:
    if not isinstance(row, Mapping):
        return None
    for alias in SAVE_FLAG_ALIASES:
        if row.get(alias) is not None:
            return normalize_saved_flag(row[alias])
    return None


class SaveStatusResolver:

    def __init__(self, store: DataStore):
        self.store = store

    @operation("get save status")
    def resolve(self, user_id: Any, analysis_id: Any) -> OperationResult:
        owner = require_positive_id(user_id, "user_id")
        aid = require_positive_id(analysis_id, "analysis_id")

        rows = self.store.find_save_status(owner, aid) or []
        status = SaveStatus(
            is_saved=pick_saved_flag(rows[0]) if rows else None,
            row_count=len(rows),
        )
        return OperationResult.success(
            {"status": status, "rows": rows},
            f"OK ({len(rows)} rows)",
        )
