"""
Result type returned by the ArborCore entry points.

Managers raise ArborError subclasses; the facade converts them into an
OperationResult so callers never see exceptions for expected conditions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type

from arbor.exceptions import (
    ArborError,
    InvalidOperationError,
    NotFoundError,
    PersistenceConflictError,
    ValidationError,
)


class ErrorKind(str, Enum):
    """Tagged error kinds surfaced to callers."""

    NOT_FOUND = "not_found"
    INVALID_OPERATION = "invalid_operation"
    VALIDATION_ERROR = "validation_error"
    PERSISTENCE_CONFLICT = "persistence_conflict"


# Stable external status per kind, for the HTTP/CLI layer.
ERROR_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_OPERATION: 400,
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.PERSISTENCE_CONFLICT: 409,
}

_EXCEPTION_FOR_KIND: Dict[ErrorKind, Type[ArborError]] = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.INVALID_OPERATION: InvalidOperationError,
    ErrorKind.VALIDATION_ERROR: ValidationError,
    ErrorKind.PERSISTENCE_CONFLICT: PersistenceConflictError,
}


@dataclass
class OperationResult:
    """Outcome of one engine operation.

    Attributes:
        ok: True when the operation applied.
        value: Operation payload (node, tree, rendered text...) on success.
        error: Error kind on failure.
        detail: Human-readable failure detail.
    """

    ok: bool
    value: Any = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str) -> "OperationResult":
        return cls(ok=False, error=error, detail=detail)

    @classmethod
    def from_exception(cls, exc: ArborError) -> "OperationResult":
        """Build a failed result from a tagged exception.

        Raises:
            ArborError: If the exception kind has no external mapping
                (e.g. StorageError), since that is not an expected condition.
        """
        try:
            kind = ErrorKind(exc.kind)
        except ValueError:
            raise exc from None
        return cls.failure(kind, str(exc))

    @property
    def status(self) -> int:
        """External status code: 200 on success, mapped code otherwise."""
        if self.ok:
            return 200
        return ERROR_STATUS[self.error]

    @property
    def retryable(self) -> bool:
        """Only persistence conflicts may be retried (after reloading)."""
        return self.error is ErrorKind.PERSISTENCE_CONFLICT

    def unwrap(self) -> Any:
        """Return the value or raise the exception matching the error kind."""
        if self.ok:
            return self.value
        raise _EXCEPTION_FOR_KIND[self.error](self.detail)
