"""Engine wiring for the HTTP layer.

Each provider builds a service over the process-wide catalog and store.
Tests swap them out through ``app.dependency_overrides``.
"""
from __future__ import annotations

from .analyses.lifecycle import AnalysisLifecycle
from .collection.save_status import SaveStatusResolver
from .collection.store import CollectionStore
from .recommendations.retrieval import RecommendationService
from .storage.catalog import get_catalog
from .storage.memory import get_store


def get_recommendation_service() -> RecommendationService:
    return RecommendationService(get_catalog())


def get_lifecycle() -> AnalysisLifecycle:
    return AnalysisLifecycle(get_catalog(), get_store())


def get_collection_store() -> CollectionStore:
    return CollectionStore(get_store())


def get_save_status_resolver() -> SaveStatusResolver:
    return SaveStatusResolver(get_store())
