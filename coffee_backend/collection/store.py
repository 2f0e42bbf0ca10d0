from __future__ import annotations

import logging
from typing import Any

from ..analyses.lifecycle import ExpiryPolicy
from ..analytics.store import record_event
from ..common.results import OperationResult, Rejected, ResultCode, operation
from ..common.validation import require_positive_id, to_text
from ..storage.base import (
    AnalysisAlreadyLinked,
    AnalysisUnavailable,
    DataStore,
    UniqueConstraintViolation,
)
from .models import COMMENT_MAX_LENGTH, NAME_MAX_LENGTH, Collection

logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGE = "Duplicate collection name for this user"
_MISSING_ANALYSIS_MESSAGE = "Analysis not found or expired"


def _validate_fields(name: Any, comment: Any) -> tuple[str, str]:
    """Trimmed name and comment; each missing field has its own code."""
    name = to_text(name)
    comment = to_text(comment)
    if not name:
        raise Rejected(ResultCode.missing_name, "collection_name is required")
    if not comment:
        raise Rejected(ResultCode.missing_comment, "personal_comment is required")
    if len(name) > NAME_MAX_LENGTH:
        raise Rejected(
            ResultCode.invalid_parameter,
            f"collection_name must be at most {NAME_MAX_LENGTH} characters",
        )
    if len(comment) > COMMENT_MAX_LENGTH:
        raise Rejected(
            ResultCode.invalid_parameter,
            f"personal_comment must be at most {COMMENT_MAX_LENGTH} characters",
        )
    return name, comment


class CollectionStore:
    """Named, user-owned wrappers around saved analyses.

    Name uniqueness is ultimately enforced by the data store at write time;
    the pre-checks here only avoid a pointless write. A constraint violation
    raised by the store is reported as ``DUPLICATE_NAME`` like any other clash.
    """

    def __init__(self, store: DataStore, policy: ExpiryPolicy | None = None):
        self.store = store
        self.policy = policy or ExpiryPolicy()

    def _owned(self, user_id: int, collection_id: int) -> Collection:
        existing = self.store.get_collection(collection_id)
        if existing is None:
            raise Rejected(ResultCode.not_found, "Collection not found")
        if existing.user_id != user_id:
            raise Rejected(ResultCode.no_permission, "No permission to modify this collection")
        return existing

    @operation("save collection")
    def save(self, user_id: Any, analysis_id: Any, name: Any, comment: Any) -> OperationResult:
        name, comment = _validate_fields(name, comment)
        owner = require_positive_id(user_id, "user_id")
        aid = require_positive_id(analysis_id, "analysis_id")

        analysis = self.store.get_analysis(aid)
        if analysis is None or self.policy.is_expired(analysis):
            raise Rejected(ResultCode.not_found, _MISSING_ANALYSIS_MESSAGE)
        if analysis.user_id != owner:
            raise Rejected(ResultCode.no_permission, "No permission to access this analysis")

        if self.store.collection_name_exists(owner, name):
            raise Rejected(ResultCode.duplicate_name, _DUPLICATE_MESSAGE)

        now = self.policy.now()
        try:
            collection_id = self.store.insert_collection(Collection(
                user_id=owner,
                analysis_id=aid,
                name=name,
                personal_comment=comment,
                created_at=now,
                updated_at=now,
            ))
        except UniqueConstraintViolation:
            logger.info("Name clash for user %s detected at insert", owner)
            raise Rejected(ResultCode.duplicate_name, _DUPLICATE_MESSAGE)
        except AnalysisAlreadyLinked:
            raise Rejected(ResultCode.invalid_parameter, "Analysis is already saved in a collection")
        except AnalysisUnavailable:
            # swept between the validity check and the write
            raise Rejected(ResultCode.not_found, _MISSING_ANALYSIS_MESSAGE)

        logger.info("Saved analysis %s as collection %s for user %s", aid, collection_id, owner)
        record_event("collection_saved", {"user_id": owner, "collection_id": collection_id})
        return OperationResult.success({"collection_id": collection_id}, "Collection saved successfully")

    @operation("get collection")
    def get(self, user_id: Any, collection_id: Any = None) -> OperationResult:
        owner = require_positive_id(user_id, "user_id")
        if collection_id is None or collection_id == "":
            return OperationResult.success(self.store.find_collection(owner))

        cid = require_positive_id(collection_id, "collection_id")
        rows = self.store.find_collection(owner, cid)
        if not rows:
            # Someone else's collection reads exactly like a missing one
            raise Rejected(ResultCode.not_found, "Collection not found")
        return OperationResult.success(rows[0])

    @operation("update collection")
    def update(self, user_id: Any, collection_id: Any, name: Any, comment: Any) -> OperationResult:
        owner = require_positive_id(user_id, "user_id")
        cid = require_positive_id(collection_id, "collection_id")
        name, comment = _validate_fields(name, comment)

        self._owned(owner, cid)
        if self.store.collection_name_exists(owner, name, exclude_id=cid):
            raise Rejected(ResultCode.duplicate_name, _DUPLICATE_MESSAGE)

        try:
            self.store.update_collection(cid, name, comment, self.policy.now())
        except UniqueConstraintViolation:
            raise Rejected(ResultCode.duplicate_name, _DUPLICATE_MESSAGE)
        return OperationResult.success({"collection_id": cid}, "Collection updated successfully")

    @operation("delete collection")
    def delete(self, user_id: Any, collection_id: Any) -> OperationResult:
        owner = require_positive_id(user_id, "user_id")
        cid = require_positive_id(collection_id, "collection_id")

        self._owned(owner, cid)
        self.store.delete_collection(cid)
        logger.info("Deleted collection %s of user %s", cid, owner)
        return OperationResult.success({"collection_id": cid}, "Collection deleted successfully")

    @operation("check collection name")
    def exists(self, user_id: Any, name: Any) -> OperationResult:
        owner = require_positive_id(user_id, "user_id")
        name = to_text(name)
        if not name:
            raise Rejected(ResultCode.missing_name, "collection_name is required")
        return OperationResult.success({"exists": self.store.collection_name_exists(owner, name)})
