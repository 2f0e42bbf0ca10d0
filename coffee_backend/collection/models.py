from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NAME_MAX_LENGTH = 100
COMMENT_MAX_LENGTH = 255


class Collection(BaseModel):
    collection_id: int | None = None
    user_id: int
    analysis_id: int
    name: str
    personal_comment: str
    created_at: datetime
    updated_at: datetime


class SaveStatus(BaseModel):
    is_saved: int | None = None
    row_count: int = 0


# ── Request bodies ───────────────────────────────────────────────────────


class SaveCollectionRequest(BaseModel):
    analysis_id: Any = Field(default=None, alias="analysisId")
    name: Any = Field(default=None, alias="collectionName")
    comment: Any = Field(default=None, alias="personalComment")

    model_config = ConfigDict(populate_by_name=True)


class UpdateCollectionRequest(BaseModel):
    name: Any = Field(default=None, alias="collectionName")
    comment: Any = Field(default=None, alias="personalComment")

    model_config = ConfigDict(populate_by_name=True)
