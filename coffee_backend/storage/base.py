"""Collaborator interfaces the engine calls into.

Implementations return plain data only. Any of these calls may raise; the
engine turns such failures into ``ERROR`` results.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Iterable

from ..analyses.models import Analysis
from ..collection.models import Collection
from ..recommendations.models import CoffeeProfile


class UniqueConstraintViolation(Exception):
    """Raised when a write would break the per-user collection name constraint."""


class AnalysisAlreadyLinked(Exception):
    """Raised when an analysis is already wrapped by a collection."""


class AnalysisUnavailable(Exception):
    """Raised when the analysis a write refers to no longer exists."""


class CatalogGateway(ABC):

    @abstractmethod
    def fetch_profiles(self, coffee_ids: Iterable[int] | None = None) -> list[CoffeeProfile]:
        """Return catalog profiles in catalog order, optionally scoped to ``coffee_ids``."""


class DataStore(ABC):

    # -- analyses -----------------------------------------------------------

    @abstractmethod
    def insert_analysis(self, analysis: Analysis) -> int:
        pass

    @abstractmethod
    def get_analysis(self, analysis_id: int) -> Analysis | None:
        pass

    @abstractmethod
    def query_analyses(self, user_id: int, since: datetime) -> list[Analysis]:
        """Unsaved analyses of ``user_id`` created at or after ``since``."""

    @abstractmethod
    def delete_expired(self, before: datetime) -> int:
        """Delete unsaved analyses created strictly before ``before``; return the count."""

    # -- collections --------------------------------------------------------

    @abstractmethod
    def insert_collection(self, collection: Collection) -> int:
        """Insert, mark the linked analysis saved and return the new id.

        Checked and applied as one step. Raises ``AnalysisUnavailable`` when the
        analysis is gone, ``AnalysisAlreadyLinked`` when another collection
        wraps it and ``UniqueConstraintViolation`` on a name clash.
        """

    @abstractmethod
    def update_collection(
        self, collection_id: int, name: str, personal_comment: str, updated_at: datetime,
    ) -> None:
        """Rename / re-comment; raise ``UniqueConstraintViolation`` on a name clash."""

    @abstractmethod
    def delete_collection(self, collection_id: int) -> None:
        """Remove the entry together with its linked analysis."""

    @abstractmethod
    def get_collection(self, collection_id: int) -> Collection | None:
        """Look up by id regardless of owner."""

    @abstractmethod
    def find_collection(
        self, user_id: int, collection_id: int | None = None,
    ) -> list[Collection]:
        """The user's collections newest first, or the single owned entry."""

    @abstractmethod
    def collection_name_exists(
        self, user_id: int, name: str, exclude_id: int | None = None,
    ) -> bool:
        pass

    @abstractmethod
    def find_save_status(self, user_id: int, analysis_id: int) -> list[dict[str, Any]]:
        pass
