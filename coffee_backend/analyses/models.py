from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..recommendations.models import PreferenceVector, RankedMatch


class AnalysisState(str, Enum):
    ephemeral = "EPHEMERAL"
    saved = "SAVED"
    expired = "EXPIRED"
    deleted = "DELETED"


class Analysis(BaseModel):
    analysis_id: int | None = None
    user_id: int | None = None
    preferences: PreferenceVector
    created_at: datetime
    saved: bool = False
    matches: list[RankedMatch] = Field(default_factory=list)


class AnalysisOutcome(BaseModel):
    analysis: Analysis
    recommendations: list[RankedMatch]
