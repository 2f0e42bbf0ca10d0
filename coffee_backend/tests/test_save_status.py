from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from coffee_backend.analyses.models import Analysis
from coffee_backend.collection.models import Collection
from coffee_backend.collection.save_status import (
    SaveStatusResolver,
    normalize_saved_flag,
    pick_saved_flag,
)
from coffee_backend.common.results import ResultCode
from coffee_backend.recommendations.models import PreferenceVector
from coffee_backend.storage.memory import MemoryDataStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [1, True, "Y", "yes", "1", " TRUE ", "t", 2, "3.5"])
def test_truthy_encodings(value):
    assert normalize_saved_flag(value) == 1


@pytest.mark.parametrize("value", [0, False, "N", "no", "0", "false", "F", 0.0, "0.0"])
def test_falsy_encodings(value):
    assert normalize_saved_flag(value) == 0


@pytest.mark.parametrize("value", ["maybe", "", "  ", None, "nan", "inf", object(), float("nan")])
def test_unrecognised_encodings_are_none(value):
    assert normalize_saved_flag(value) is None


def test_alias_lookup_order():
    assert pick_saved_flag({"is_saved": "Y", "saved": 0}) == 1
    assert pick_saved_flag({"is_saved": None, "isSaved": "no"}) == 0
    assert pick_saved_flag({"saved": True}) == 1
    assert pick_saved_flag({"other": 1}) is None
    assert pick_saved_flag(["not", "a", "row"]) is None


def test_resolve_zero_rows_is_null():
    store = MagicMock()
    store.find_save_status.return_value = []
    result = SaveStatusResolver(store).resolve(1, 5)
    assert result.code is ResultCode.success
    assert result.data["status"].is_saved is None
    assert result.data["status"].row_count == 0


def test_resolve_uses_first_row_only():
    store = MagicMock()
    store.find_save_status.return_value = [{"isSaved": "yes"}, {"isSaved": "no"}]
    status = SaveStatusResolver(store).resolve(1, 5).data["status"]
    assert status.is_saved == 1
    assert status.row_count == 2


def test_resolve_against_memory_store():
    store = MemoryDataStore()
    prefs = PreferenceVector(aroma=3, acidity=3, nutty=3, body=3, sweetness=3)
    aid = store.insert_analysis(Analysis(user_id=1, preferences=prefs, created_at=NOW))
    resolver = SaveStatusResolver(store)

    assert resolver.resolve(1, aid).data["status"].is_saved == 0
    assert resolver.resolve(2, aid).data["status"].is_saved is None

    store.insert_collection(Collection(
        user_id=1, analysis_id=aid, name="Kept", personal_comment="yes",
        created_at=NOW, updated_at=NOW,
    ))
    assert resolver.resolve(1, aid).data["status"].is_saved == 1


def test_resolve_validates_ids():
    resolver = SaveStatusResolver(MagicMock())
    assert resolver.resolve(0, 1).code is ResultCode.invalid_parameter
    assert resolver.resolve(1, None).code is ResultCode.invalid_parameter


def test_resolve_store_failure_maps_to_error():
    store = MagicMock()
    store.find_save_status.side_effect = TimeoutError("procedure timed out")
    result = SaveStatusResolver(store).resolve(1, 1)
    assert result.code is ResultCode.error
