from __future__ import annotations

from collections import Counter
from typing import Any

from ..recommendations.models import ATTRIBUTES


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    recos = [e for e in events if e["type"] == "recommendation"]
    total = len(recos)

    # Average response time
    times = [r["response_time_ms"] for r in recos if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Average best score
    top_scores = [r["top_score"] for r in recos if r.get("top_score") is not None]
    avg_top_score = round(sum(top_scores) / len(top_scores), 1) if top_scores else 0.0

    # Requests per variant (standard / top5)
    variant_usage = dict(Counter(r.get("variant", "standard") for r in recos))

    # Mean preference per attribute
    preference_means: dict[str, float] = {}
    for name in ATTRIBUTES:
        values = [r["preferences"][name] for r in recos if r.get("preferences")]
        preference_means[name] = round(sum(values) / len(values), 2) if values else 0.0

    # Empty result rate
    empty = sum(1 for r in recos if not r.get("results_returned"))

    saved = sum(1 for r in recos if r.get("saved"))

    # Lifecycle events
    sweeps = [e for e in events if e["type"] == "sweep"]
    collections_saved = sum(1 for e in events if e["type"] == "collection_saved")

    return {
        "total_recommendations": total,
        "avg_response_time_ms": avg_time,
        "avg_top_score": avg_top_score,
        "variant_usage": variant_usage,
        "preference_means": preference_means,
        "empty_result_rate": round(empty / total * 100, 1) if total else 0.0,
        "save_requested_rate": round(saved / total * 100, 1) if total else 0.0,
        "sweeps": {
            "runs": len(sweeps),
            "deleted": sum(s.get("deleted", 0) for s in sweeps),
        },
        "collections_saved": collections_saved,
    }
