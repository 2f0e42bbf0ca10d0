"""
Analysis lifecycle.

An analysis starts EPHEMERAL and is valid for the configured window
(24 hours by default). Once ``now - created_at`` exceeds the window an
unsaved analysis is EXPIRED: ``list_past`` stops returning it straight away
and the next ``sweep_expired`` deletes it. Saved analyses never expire;
they live and die with the collection entry that wraps them.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from ..analytics.store import record_event
from ..common.results import OperationResult, Rejected, ResultCode, operation
from ..common.validation import require_positive_id, to_int
from ..recommendations.config import DEFAULT_RANKING_CONFIG, RankingConfig
from ..recommendations.ranking import SimilarityRanker, parse_preferences
from ..storage.base import CatalogGateway, DataStore
from .config import DEFAULT_LIFECYCLE_CONFIG, LifecycleConfig
from .models import Analysis, AnalysisOutcome, AnalysisState

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExpiryPolicy:
    """The validity window, shared by queries, the sweep and collection saves."""

    def __init__(self, config: LifecycleConfig = DEFAULT_LIFECYCLE_CONFIG, clock: Clock = utc_now):
        self.config = config
        self.clock = clock

    def now(self) -> datetime:
        return self.clock()

    def cutoff(self, now: datetime | None = None) -> datetime:
        """Oldest ``created_at`` that is still valid."""
        return (now or self.clock()) - self.config.ttl

    def is_expired(self, analysis: Analysis, now: datetime | None = None) -> bool:
        if analysis.saved:
            return False
        return (now or self.clock()) - analysis.created_at > self.config.ttl


def _parse_save_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    flag = to_int(value)
    if flag not in (0, 1):
        raise Rejected(ResultCode.invalid_parameter, "saveAnalysis must be 0 or 1")
    return flag == 1


class AnalysisLifecycle:

    def __init__(
        self,
        catalog: CatalogGateway,
        store: DataStore,
        ranker: SimilarityRanker | None = None,
        policy: ExpiryPolicy | None = None,
        ranking_config: RankingConfig = DEFAULT_RANKING_CONFIG,
    ):
        self.catalog = catalog
        self.store = store
        self.ranking_config = ranking_config
        self.ranker = ranker or SimilarityRanker(ranking_config)
        self.policy = policy or ExpiryPolicy()

    def state_of(self, analysis: Analysis | None) -> AnalysisState:
        if analysis is None:
            return AnalysisState.deleted
        if analysis.saved:
            return AnalysisState.saved
        if self.policy.is_expired(analysis):
            return AnalysisState.expired
        return AnalysisState.ephemeral

    @operation("create analysis")
    def create(
        self,
        scores: Mapping[str, Any],
        user_id: Any = None,
        save_requested: Any = False,
    ) -> OperationResult:
        start_time = time.time()
        preferences = parse_preferences(scores, self.ranking_config.standard_range)
        save = _parse_save_flag(save_requested)

        owner: int | None = None
        if user_id is not None:
            owner = require_positive_id(user_id, "user_id")
        if save and owner is None:
            # An explicit save request is never downgraded to an ephemeral analysis
            raise Rejected(
                ResultCode.invalid_parameter,
                "User ID is required when saveAnalysis is enabled",
            )

        ranked = self.ranker.rank(preferences, self.catalog.fetch_profiles())
        analysis = Analysis(
            user_id=owner,
            preferences=preferences,
            created_at=self.policy.now(),
            saved=save,
            matches=ranked,
        )
        analysis_id = self.store.insert_analysis(analysis)
        analysis = analysis.model_copy(update={"analysis_id": analysis_id})
        logger.info(
            "Created analysis %s for user %s (saved=%s, %d matches)",
            analysis_id, owner, save, len(ranked),
        )

        record_event("recommendation", {
            "variant": "standard",
            "preferences": preferences.model_dump(),
            "results_returned": len(ranked),
            "top_score": ranked[0].similarity_score if ranked else None,
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
            "saved": save,
        })

        return OperationResult.success(
            AnalysisOutcome(analysis=analysis, recommendations=ranked),
            "Coffee recommendations generated successfully",
        )

    @operation("list past analyses")
    def list_past(self, user_id: Any) -> OperationResult:
        owner = require_positive_id(user_id, "user_id")
        now = self.policy.now()
        rows = self.store.query_analyses(owner, self.policy.cutoff(now))
        # The window is re-checked here so correctness never depends on sweep cadence
        valid = [a for a in rows if not a.saved and not self.policy.is_expired(a, now)]
        valid.sort(key=lambda a: (a.created_at, a.analysis_id or 0), reverse=True)
        return OperationResult.success(valid, f"OK ({len(valid)})")

    @operation("sweep expired analyses")
    def sweep_expired(self) -> OperationResult:
        deleted = self.store.delete_expired(self.policy.cutoff())
        logger.info("Expired analysis sweep removed %d rows", deleted)
        record_event("sweep", {"deleted": deleted})
        return OperationResult.success({"deleted": deleted}, f"Removed {deleted} expired analyses")
