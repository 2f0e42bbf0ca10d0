from __future__ import annotations

import math
from typing import Any, Mapping, Sequence

import numpy as np
from sklearn.metrics.pairwise import euclidean_distances

from ..common.results import Rejected, ResultCode
from ..common.validation import to_int
from .config import DEFAULT_RANKING_CONFIG, RankingConfig, ScoreRange
from .models import ATTRIBUTES, CoffeeProfile, PreferenceVector, RankedMatch, TopMatches

_LABELS = {
    "aroma": "aroma",
    "acidity": "acidity",
    "nutty": "nutty notes",
    "body": "body",
    "sweetness": "sweetness",
}


def parse_preferences(raw: Mapping[str, Any], score_range: ScoreRange) -> PreferenceVector:
    """Normalise raw scores and check them against ``score_range``."""
    values: dict[str, int] = {}
    for name in ATTRIBUTES:
        value = to_int(raw.get(name))
        if value is None or not score_range.contains(value):
            raise Rejected(
                ResultCode.invalid_parameter,
                f"All preference scores must be integers between "
                f"{score_range.low} and {score_range.high}",
            )
        values[name] = value
    return PreferenceVector(**values)


def parse_similar_limit(raw: Any, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> int:
    if raw is None:
        return config.default_similar
    value = to_int(raw)
    if value is None or not 0 <= value <= config.max_similar:
        raise Rejected(
            ResultCode.invalid_parameter,
            f"limitSimilar must be between 0 and {config.max_similar}",
        )
    return value


def max_distance(score_range: ScoreRange) -> float:
    spread = score_range.high - score_range.low
    return math.sqrt(len(ATTRIBUTES) * spread ** 2)


def _intensity(value: int) -> str:
    if value >= 4:
        return "strong"
    if value <= 2:
        return "mild"
    return "moderate"


def explain(
    preferences: PreferenceVector,
    profile: CoffeeProfile,
    limit: int = DEFAULT_RANKING_CONFIG.max_reasons,
) -> list[str]:
    """Short human-readable reasons, attribute matches first, metadata last."""
    reasons: list[str] = []
    for name in ATTRIBUTES:
        wanted = getattr(preferences, name)
        gap = abs(wanted - getattr(profile, name))
        label = _LABELS[name]
        if gap <= 1:
            reasons.append(f"{_intensity(wanted).capitalize()} {label} matches your taste")
        elif gap == 2:
            reasons.append(f"Good balance of {label} for your preference")

    if profile.category:
        reasons.append(f"{profile.category} style suits your profile")
    if profile.origin:
        reasons.append(f"Sourced from {profile.origin}")
    return reasons[:limit]


class SimilarityRanker:
    """Ranks catalog profiles by Euclidean closeness to a preference vector."""

    def __init__(self, config: RankingConfig = DEFAULT_RANKING_CONFIG):
        self.config = config

    def scores(
        self, preferences: PreferenceVector, catalog: Sequence[CoffeeProfile], score_range: ScoreRange,
    ) -> np.ndarray:
        user_vec = np.array([preferences.as_list()], dtype=float)
        profile_vecs = np.array([p.as_list() for p in catalog], dtype=float)
        distances = euclidean_distances(user_vec, profile_vecs).flatten()
        raw = (1.0 - distances / max_distance(score_range)) * 100.0
        # Half-up rounding; np.round would round halves to even
        return np.clip(np.floor(raw + 0.5), 0, 100).astype(int)

    def rank(
        self,
        preferences: PreferenceVector,
        catalog: Sequence[CoffeeProfile],
        score_range: ScoreRange | None = None,
    ) -> list[RankedMatch]:
        if not catalog:
            return []
        score_range = score_range or self.config.standard_range
        scores = self.scores(preferences, catalog, score_range)
        # Stable sort keeps catalog order among equal scores
        order = np.argsort(-scores, kind="stable")

        matches: list[RankedMatch] = []
        for idx in order:
            profile = catalog[int(idx)]
            matches.append(RankedMatch(
                coffee_id=profile.coffee_id,
                name=profile.name,
                similarity_score=int(scores[idx]),
                reasons=explain(preferences, profile, self.config.max_reasons),
                category=profile.category,
                origin=profile.origin,
            ))
        return matches


class TopSelector:
    """Best match plus up to ``k`` distinct runners-up."""

    def __init__(self, ranker: SimilarityRanker | None = None):
        self.ranker = ranker or SimilarityRanker()

    def select(
        self,
        preferences: PreferenceVector,
        catalog: Sequence[CoffeeProfile],
        k: int,
        score_range: ScoreRange | None = None,
    ) -> TopMatches:
        score_range = score_range or self.ranker.config.top_range
        ranked = self.ranker.rank(preferences, catalog, score_range)
        if not ranked:
            return TopMatches()

        primary = ranked[0]
        seen = {primary.coffee_id}
        similar: list[RankedMatch] = []
        for match in ranked[1:]:
            if len(similar) >= k:
                break
            if match.coffee_id in seen:
                continue
            seen.add(match.coffee_id)
            similar.append(match)
        return TopMatches(primary=primary, similar=similar)
