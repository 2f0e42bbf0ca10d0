from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ATTRIBUTES: tuple[str, ...] = ("aroma", "acidity", "nutty", "body", "sweetness")


class PreferenceVector(BaseModel):
    model_config = ConfigDict(frozen=True)

    aroma: int
    acidity: int
    nutty: int
    body: int
    sweetness: int

    def as_list(self) -> list[int]:
        return [getattr(self, name) for name in ATTRIBUTES]


class CoffeeProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    coffee_id: int
    name: str
    aroma: int = Field(..., ge=1, le=5)
    acidity: int = Field(..., ge=1, le=5)
    nutty: int = Field(..., ge=1, le=5)
    body: int = Field(..., ge=1, le=5)
    sweetness: int = Field(..., ge=1, le=5)
    category: str | None = None
    origin: str | None = None
    description: str | None = None
    roast_level: str | None = None
    price: float | None = None

    def as_list(self) -> list[int]:
        return [getattr(self, name) for name in ATTRIBUTES]


class RankedMatch(BaseModel):
    coffee_id: int
    name: str
    similarity_score: int = Field(..., ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    category: str | None = None
    origin: str | None = None


class TopMatches(BaseModel):
    primary: RankedMatch | None = None
    similar: list[RankedMatch] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.similar) + (1 if self.primary else 0)


# ── Request bodies ───────────────────────────────────────────────────────
# Scores are typed loosely on purpose: the engine normalises them and
# reports bad values as INVALID_PARAMETER instead of a transport 422.


class RecommendationRequest(BaseModel):
    aroma: Any = None
    acidity: Any = None
    nutty: Any = None
    body: Any = None
    sweetness: Any = None
    save_analysis: Any = Field(default=0, alias="saveAnalysis")

    model_config = ConfigDict(populate_by_name=True)

    def scores(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in ATTRIBUTES}


class Top5Request(BaseModel):
    aroma: Any = None
    acidity: Any = None
    nutty: Any = None
    body: Any = None
    sweetness: Any = None
    limit_similar: Any = Field(default=None, alias="limitSimilar")

    model_config = ConfigDict(populate_by_name=True)

    def scores(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in ATTRIBUTES}


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
