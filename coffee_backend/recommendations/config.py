from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_CATALOG_CSV = Path(__file__).resolve().parent.parent / "data" / "catalog.csv"


@dataclass(frozen=True)
class ScoreRange:
    low: int
    high: int

    def contains(self, value: int) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class RankingConfig:
    standard_range: ScoreRange = ScoreRange(1, 5)
    top_range: ScoreRange = ScoreRange(0, 5)
    default_similar: int = 4
    max_similar: int = 10
    max_reasons: int = 3
    catalog_path: Path = Path(os.getenv("COFFEE_CATALOG_CSV", str(_DEFAULT_CATALOG_CSV)))


DEFAULT_RANKING_CONFIG = RankingConfig()
