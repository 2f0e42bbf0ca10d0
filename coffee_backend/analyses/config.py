from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LifecycleConfig:
    ttl_hours: float = float(os.getenv("ANALYSIS_TTL_HOURS", "24"))

    @property
    def ttl(self) -> timedelta:
        return timedelta(hours=self.ttl_hours)


DEFAULT_LIFECYCLE_CONFIG = LifecycleConfig()
