from __future__ import annotations

import itertools
import threading
from datetime import datetime
from typing import Any

from ..analyses.models import Analysis
from ..collection.models import Collection
from .base import AnalysisAlreadyLinked, AnalysisUnavailable, DataStore, UniqueConstraintViolation


def name_key(name: str) -> str:
    """Collection names are unique per user, compared case-insensitively."""
    return name.strip().casefold()


class MemoryDataStore(DataStore):
    """Process-local store.

    The lock stands in for the database's transactional guarantees: the
    ``(user_id, name)`` constraint and the one-collection-per-analysis link
    are checked and applied in one step at write time, so concurrent writers
    cannot both claim a name or an analysis.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._analyses: dict[int, Analysis] = {}
        self._collections: dict[int, Collection] = {}
        self._names: dict[tuple[int, str], int] = {}
        self._linked: dict[int, int] = {}
        self._analysis_ids = itertools.count(1)
        self._collection_ids = itertools.count(1)

    # -- analyses -----------------------------------------------------------

    def insert_analysis(self, analysis: Analysis) -> int:
        with self._lock:
            analysis_id = next(self._analysis_ids)
            self._analyses[analysis_id] = analysis.model_copy(update={"analysis_id": analysis_id})
            return analysis_id

    def get_analysis(self, analysis_id: int) -> Analysis | None:
        with self._lock:
            found = self._analyses.get(analysis_id)
            return found.model_copy() if found else None

    def query_analyses(self, user_id: int, since: datetime) -> list[Analysis]:
        with self._lock:
            return [
                a.model_copy()
                for a in self._analyses.values()
                if a.user_id == user_id and not a.saved and a.created_at >= since
            ]

    def delete_expired(self, before: datetime) -> int:
        with self._lock:
            doomed = [
                aid for aid, a in self._analyses.items()
                if not a.saved and a.created_at < before
            ]
            for aid in doomed:
                del self._analyses[aid]
            return len(doomed)

    # -- collections --------------------------------------------------------

    def insert_collection(self, collection: Collection) -> int:
        key = (collection.user_id, name_key(collection.name))
        with self._lock:
            analysis = self._analyses.get(collection.analysis_id)
            if analysis is None:
                raise AnalysisUnavailable(collection.analysis_id)
            if collection.analysis_id in self._linked:
                raise AnalysisAlreadyLinked(
                    f"analysis {collection.analysis_id} already saved as collection "
                    f"{self._linked[collection.analysis_id]}"
                )
            if key in self._names:
                raise UniqueConstraintViolation(
                    f"collection name {collection.name!r} already used by user {collection.user_id}"
                )
            collection_id = next(self._collection_ids)
            self._collections[collection_id] = collection.model_copy(
                update={"collection_id": collection_id}
            )
            self._names[key] = collection_id
            self._linked[collection.analysis_id] = collection_id
            self._analyses[collection.analysis_id] = analysis.model_copy(update={"saved": True})
            return collection_id

    def update_collection(
        self, collection_id: int, name: str, personal_comment: str, updated_at: datetime,
    ) -> None:
        with self._lock:
            current = self._collections.get(collection_id)
            if current is None:
                raise KeyError(collection_id)
            new_key = (current.user_id, name_key(name))
            holder = self._names.get(new_key)
            if holder is not None and holder != collection_id:
                raise UniqueConstraintViolation(
                    f"collection name {name!r} already used by user {current.user_id}"
                )
            del self._names[(current.user_id, name_key(current.name))]
            self._names[new_key] = collection_id
            self._collections[collection_id] = current.model_copy(update={
                "name": name,
                "personal_comment": personal_comment,
                "updated_at": updated_at,
            })

    def delete_collection(self, collection_id: int) -> None:
        with self._lock:
            current = self._collections.pop(collection_id, None)
            if current is None:
                return
            self._names.pop((current.user_id, name_key(current.name)), None)
            self._linked.pop(current.analysis_id, None)
            self._analyses.pop(current.analysis_id, None)

    def get_collection(self, collection_id: int) -> Collection | None:
        with self._lock:
            found = self._collections.get(collection_id)
            return found.model_copy() if found else None

    def find_collection(
        self, user_id: int, collection_id: int | None = None,
    ) -> list[Collection]:
        with self._lock:
            owned = [c for c in self._collections.values() if c.user_id == user_id]
        if collection_id is not None:
            return [c.model_copy() for c in owned if c.collection_id == collection_id]
        owned.sort(key=lambda c: (c.created_at, c.collection_id), reverse=True)
        return [c.model_copy() for c in owned]

    def collection_name_exists(
        self, user_id: int, name: str, exclude_id: int | None = None,
    ) -> bool:
        with self._lock:
            holder = self._names.get((user_id, name_key(name)))
        return holder is not None and holder != exclude_id

    def find_save_status(self, user_id: int, analysis_id: int) -> list[dict[str, Any]]:
        with self._lock:
            analysis = self._analyses.get(analysis_id)
            if analysis is None or analysis.user_id != user_id:
                return []
            linked = self._linked.get(analysis_id)
        return [{
            "analysis_id": analysis_id,
            "collection_id": linked,
            "is_saved": "Y" if linked is not None else "N",
        }]


_store: MemoryDataStore | None = None


def get_store() -> MemoryDataStore:
    """Return the process-wide store, creating it on first call."""
    global _store
    if _store is None:
        _store = MemoryDataStore()
    return _store


def reset_store() -> None:
    global _store
    _store = None
