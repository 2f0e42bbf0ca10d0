from __future__ import annotations

import time
from typing import Any, Mapping

from ..analytics.store import record_event
from ..common.results import OperationResult, Rejected, ResultCode, operation
from ..common.validation import require_positive_id
from ..storage.base import CatalogGateway
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import ATTRIBUTES, PreferenceVector
from .ranking import SimilarityRanker, TopSelector, parse_preferences, parse_similar_limit


class RecommendationService:
    """Catalog-facing ranking operations that do not create an analysis."""

    def __init__(
        self,
        catalog: CatalogGateway,
        ranker: SimilarityRanker | None = None,
        config: RankingConfig = DEFAULT_RANKING_CONFIG,
    ):
        self.catalog = catalog
        self.config = config
        self.ranker = ranker or SimilarityRanker(config)
        self.selector = TopSelector(self.ranker)

    @operation("top matches")
    def top_matches(self, scores: Mapping[str, Any], limit_similar: Any = None) -> OperationResult:
        start_time = time.time()
        preferences = parse_preferences(scores, self.config.top_range)
        k = parse_similar_limit(limit_similar, self.config)

        top = self.selector.select(preferences, self.catalog.fetch_profiles(), k)

        record_event("recommendation", {
            "variant": "top5",
            "preferences": preferences.model_dump(),
            "results_returned": top.total,
            "top_score": top.primary.similarity_score if top.primary else None,
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
            "saved": False,
        })

        message = "OK" if top.primary else "No matching coffee found"
        return OperationResult.success({
            "primary": top.primary,
            "similar": top.similar,
            "total": top.total,
            "preferences": preferences,
            "limit_similar": k,
        }, message)

    @operation("similar blends")
    def similar_to(self, coffee_id: Any, limit_similar: Any = None) -> OperationResult:
        reference_id = require_positive_id(coffee_id, "coffee_id")
        k = parse_similar_limit(limit_similar, self.config)

        found = self.catalog.fetch_profiles([reference_id])
        if not found:
            raise Rejected(ResultCode.not_found, f"Coffee {reference_id} not found")
        reference = found[0]

        as_preferences = PreferenceVector(**{name: getattr(reference, name) for name in ATTRIBUTES})
        others = [p for p in self.catalog.fetch_profiles() if p.coffee_id != reference_id]
        ranked = self.ranker.rank(as_preferences, others, self.config.standard_range)

        return OperationResult.success({
            "reference": reference,
            "similar": ranked[:k],
        })
