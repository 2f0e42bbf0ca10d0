from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from ..recommendations.config import DEFAULT_RANKING_CONFIG
from ..recommendations.models import ATTRIBUTES, CoffeeProfile
from .base import CatalogGateway

_OPTIONAL_COLUMNS = ("category", "origin", "description", "roast_level", "price")


def _load(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path)
    df["coffee_id"] = df["coffee_id"].astype(int)
    for name in ATTRIBUTES:
        df[name] = df[name].astype(int)
    for column in _OPTIONAL_COLUMNS:
        if column not in df.columns:
            df[column] = None
    return df


class FrameCatalog(CatalogGateway):
    """Catalog backed by an in-memory DataFrame, in catalog (row) order."""

    def __init__(self, frame: pd.DataFrame):
        self._df = frame.reset_index(drop=True)

    @classmethod
    def from_csv(cls, path: Path) -> FrameCatalog:
        return cls(_load(path))

    @classmethod
    def from_profiles(cls, profiles: Iterable[CoffeeProfile]) -> FrameCatalog:
        rows = [p.model_dump() for p in profiles]
        columns = ["coffee_id", "name", *ATTRIBUTES, *_OPTIONAL_COLUMNS]
        return cls(pd.DataFrame(rows, columns=columns))

    @property
    def frame(self) -> pd.DataFrame:
        return self._df

    def fetch_profiles(self, coffee_ids: Iterable[int] | None = None) -> list[CoffeeProfile]:
        df = self._df
        if coffee_ids is not None:
            df = df[df["coffee_id"].isin(list(coffee_ids))]
        return [CoffeeProfile(**self._clean(row)) for row in df.to_dict(orient="records")]

    @staticmethod
    def _clean(row: dict) -> dict:
        # Blank metadata cells come back as NaN; numpy scalars need unboxing
        cleaned = {}
        for key, value in row.items():
            if value is not None and pd.isna(value):
                value = None
            elif hasattr(value, "item"):
                value = value.item()
            cleaned[key] = value
        return cleaned


_catalog: FrameCatalog | None = None


def get_catalog() -> FrameCatalog:
    """Return the process-wide catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = FrameCatalog.from_csv(DEFAULT_RANKING_CONFIG.catalog_path)
    return _catalog
