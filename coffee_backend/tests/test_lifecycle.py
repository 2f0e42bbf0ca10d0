from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from coffee_backend.analyses.lifecycle import AnalysisLifecycle, ExpiryPolicy
from coffee_backend.analyses.models import Analysis, AnalysisState
from coffee_backend.common.results import ResultCode
from coffee_backend.recommendations.models import CoffeeProfile, PreferenceVector
from coffee_backend.storage.catalog import FrameCatalog
from coffee_backend.storage.memory import MemoryDataStore

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

_CATALOG = FrameCatalog.from_profiles([
    CoffeeProfile(coffee_id=1, name="Morning Bloom", aroma=5, acidity=4, nutty=2, body=2, sweetness=3,
                  category="Single Origin", origin="Ethiopia"),
    CoffeeProfile(coffee_id=2, name="Velvet Hazel", aroma=3, acidity=2, nutty=5, body=4, sweetness=4),
])

_SCORES = {"aroma": 5, "acidity": 4, "nutty": 2, "body": 2, "sweetness": 3}


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _lifecycle(store=None, clock=None):
    clock = clock or FakeClock(START)
    return AnalysisLifecycle(_CATALOG, store or MemoryDataStore(), policy=ExpiryPolicy(clock=clock)), clock


def _seed(store, user_id, created_at, saved=False):
    prefs = PreferenceVector(**_SCORES)
    return store.insert_analysis(Analysis(user_id=user_id, preferences=prefs, created_at=created_at, saved=saved))


# ── create ───────────────────────────────────────────────────────────────


def test_create_ephemeral_analysis_returns_matches():
    lifecycle, _ = _lifecycle()
    result = lifecycle.create(_SCORES, user_id=1)
    assert result.code is ResultCode.success
    outcome = result.data
    assert outcome.analysis.analysis_id == 1
    assert outcome.analysis.saved is False
    assert outcome.analysis.created_at == START
    assert outcome.recommendations[0].coffee_id == 1
    assert outcome.recommendations[0].similarity_score == 100


def test_create_anonymous_analysis():
    lifecycle, _ = _lifecycle()
    result = lifecycle.create(_SCORES)
    assert result.code is ResultCode.success
    assert result.data.analysis.user_id is None


def test_create_save_requires_user():
    store = MemoryDataStore()
    lifecycle, _ = _lifecycle(store)
    result = lifecycle.create(_SCORES, user_id=None, save_requested=1)
    assert result.code is ResultCode.invalid_parameter
    assert "User ID is required" in result.message
    assert store.get_analysis(1) is None


def test_create_rejects_non_positive_user():
    lifecycle, _ = _lifecycle()
    result = lifecycle.create(_SCORES, user_id=0, save_requested=True)
    assert result.code is ResultCode.invalid_parameter


def test_create_with_save_flag_marks_saved():
    lifecycle, _ = _lifecycle()
    result = lifecycle.create(_SCORES, user_id=7, save_requested="1")
    assert result.data.analysis.saved is True


def test_create_rejects_bad_save_flag():
    lifecycle, _ = _lifecycle()
    result = lifecycle.create(_SCORES, user_id=7, save_requested=2)
    assert result.code is ResultCode.invalid_parameter


def test_create_rejects_top_range_zero():
    lifecycle, _ = _lifecycle()
    result = lifecycle.create({**_SCORES, "aroma": 0}, user_id=1)
    assert result.code is ResultCode.invalid_parameter


def test_create_store_failure_maps_to_error():
    store = MagicMock()
    store.insert_analysis.side_effect = ConnectionError("db down")
    lifecycle, _ = _lifecycle(store)
    result = lifecycle.create(_SCORES, user_id=1)
    assert result.code is ResultCode.error
    assert "db down" in result.message


# ── list_past ────────────────────────────────────────────────────────────


def test_list_past_window_boundaries():
    store = MemoryDataStore()
    lifecycle, clock = _lifecycle(store)
    clock.now = START + timedelta(days=2)

    stale = _seed(store, 1, clock.now - timedelta(hours=24, seconds=1))
    fresh = _seed(store, 1, clock.now - timedelta(hours=23, minutes=59))
    exact = _seed(store, 1, clock.now - timedelta(hours=24))

    ids = [a.analysis_id for a in lifecycle.list_past(1).data]
    assert stale not in ids
    assert fresh in ids
    assert exact in ids


def test_list_past_newest_first_and_scoped_to_user():
    store = MemoryDataStore()
    lifecycle, clock = _lifecycle(store)
    older = _seed(store, 1, START - timedelta(hours=3))
    newer = _seed(store, 1, START - timedelta(hours=1))
    _seed(store, 2, START - timedelta(hours=2))

    result = lifecycle.list_past(1)
    assert result.code is ResultCode.success
    assert [a.analysis_id for a in result.data] == [newer, older]
    assert result.message == "OK (2)"


def test_list_past_excludes_saved_analyses():
    store = MemoryDataStore()
    lifecycle, _ = _lifecycle(store)
    _seed(store, 1, START - timedelta(hours=1), saved=True)
    assert lifecycle.list_past(1).data == []


def test_list_past_ignores_rows_the_store_failed_to_filter():
    store = MagicMock()
    prefs = PreferenceVector(**_SCORES)
    store.query_analyses.return_value = [
        Analysis(analysis_id=1, user_id=1, preferences=prefs, created_at=START - timedelta(days=3)),
        Analysis(analysis_id=2, user_id=1, preferences=prefs, created_at=START - timedelta(hours=2)),
    ]
    lifecycle, _ = _lifecycle(store)
    assert [a.analysis_id for a in lifecycle.list_past(1).data] == [2]


def test_list_past_rejects_bad_user():
    lifecycle, _ = _lifecycle()
    assert lifecycle.list_past(-4).code is ResultCode.invalid_parameter


# ── sweep / state ────────────────────────────────────────────────────────


def test_sweep_deletes_only_expired_unsaved_and_is_idempotent():
    store = MemoryDataStore()
    lifecycle, _ = _lifecycle(store)
    expired = _seed(store, 1, START - timedelta(hours=25))
    kept_saved = _seed(store, 1, START - timedelta(hours=30), saved=True)
    kept_fresh = _seed(store, 2, START - timedelta(hours=5))

    first = lifecycle.sweep_expired()
    assert first.code is ResultCode.success
    assert first.data == {"deleted": 1}
    assert store.get_analysis(expired) is None
    assert store.get_analysis(kept_saved) is not None
    assert store.get_analysis(kept_fresh) is not None

    second = lifecycle.sweep_expired()
    assert second.code is ResultCode.success
    assert second.data == {"deleted": 0}


def test_sweep_on_empty_store():
    lifecycle, _ = _lifecycle()
    assert lifecycle.sweep_expired().data == {"deleted": 0}


def test_state_transitions_over_time():
    store = MemoryDataStore()
    lifecycle, clock = _lifecycle(store)
    analysis = lifecycle.create(_SCORES, user_id=1).data.analysis

    assert lifecycle.state_of(analysis) is AnalysisState.ephemeral
    clock.advance(hours=24)
    assert lifecycle.state_of(analysis) is AnalysisState.ephemeral
    clock.advance(seconds=1)
    assert lifecycle.state_of(analysis) is AnalysisState.expired

    lifecycle.sweep_expired()
    assert lifecycle.state_of(store.get_analysis(analysis.analysis_id)) is AnalysisState.deleted


def test_saved_analysis_never_expires():
    lifecycle, clock = _lifecycle()
    analysis = lifecycle.create(_SCORES, user_id=1, save_requested=True).data.analysis
    clock.advance(days=30)
    assert lifecycle.state_of(analysis) is AnalysisState.saved
