from __future__ import annotations

import functools
import logging
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ResultCode(str, Enum):
    success = "SUCCESS"
    invalid_parameter = "INVALID_PARAMETER"
    missing_name = "MISSING_NAME"
    missing_comment = "MISSING_COMMENT"
    duplicate_name = "DUPLICATE_NAME"
    not_found = "NOT_FOUND"
    no_permission = "NO_PERMISSION"
    error = "ERROR"


class OperationResult(BaseModel):
    code: ResultCode
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.code is ResultCode.success

    @classmethod
    def success(cls, data: Any = None, message: str = "OK") -> OperationResult:
        return cls(code=ResultCode.success, message=message, data=data)

    @classmethod
    def failure(cls, code: ResultCode, message: str) -> OperationResult:
        return cls(code=code, message=message)


class Rejected(Exception):
    """Raised by validators; converted to a result before leaving an operation."""

    def __init__(self, code: ResultCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def operation(name: str) -> Callable:
    """Wrap an engine operation so every outcome comes back as an ``OperationResult``.

    ``Rejected`` becomes its own code. Anything else raised underneath
    (collaborator failures included) becomes ``ERROR`` with the exception
    message kept for diagnostics.
    """

    def decorator(fn: Callable[..., OperationResult]) -> Callable[..., OperationResult]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> OperationResult:
            try:
                return fn(*args, **kwargs)
            except Rejected as exc:
                return OperationResult.failure(exc.code, exc.message)
            except Exception as exc:
                logger.warning("%s failed", name, exc_info=True)
                return OperationResult.failure(ResultCode.error, f"{name} failed: {exc}")

        return wrapper

    return decorator
