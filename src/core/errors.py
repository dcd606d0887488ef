"""Domain error taxonomy and the explicit result type returned by task operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel

from src.core.config import constants


T = TypeVar("T")


class ErrorCategory(Enum):
    """Categories of failures a task operation can report."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Input errors
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_INVALID_QUERY = "ERR_INVALID_QUERY"

    # Task errors
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_VERSION_CONFLICT = "ERR_VERSION_CONFLICT"

    # Storage errors
    ERR_PERSISTENCE = "ERR_PERSISTENCE"


class TaskError(Exception):
    """Base class for every domain failure kind."""

    category: ErrorCategory
    code: str
    http_status: int
    severity: ErrorSeverity = ErrorSeverity.LOW


class ValidationError(TaskError):
    """Input or business-rule violation (bad field, bad transition, bad query parameter)."""

    category = ErrorCategory.VALIDATION
    code = ErrorCode.ERR_VALIDATION
    http_status = constants.HTTP_BAD_REQUEST

    def __init__(self, reason: str, *, field: str | None = None, code: str | None = None) -> None:
        self.reason = reason
        self.field = field
        if code:
            self.code = code
        super().__init__(reason)


class NotFoundError(TaskError):
    """Referenced task does not exist."""

    category = ErrorCategory.NOT_FOUND
    code = ErrorCode.ERR_TASK_NOT_FOUND
    http_status = constants.HTTP_NOT_FOUND

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class ConflictError(TaskError):
    """Task was modified by someone else between read and write."""

    category = ErrorCategory.CONFLICT
    code = ErrorCode.ERR_VERSION_CONFLICT
    http_status = constants.HTTP_CONFLICT
    severity = ErrorSeverity.MEDIUM

    def __init__(self, task_id: str, expected_version: int) -> None:
        self.task_id = task_id
        self.expected_version = expected_version
        super().__init__(f"Task {task_id} was modified concurrently (expected version {expected_version})")


class PersistenceError(TaskError):
    """Storage collaborator failed. The original exception is kept as __cause__."""

    category = ErrorCategory.PERSISTENCE
    code = ErrorCode.ERR_PERSISTENCE
    http_status = constants.HTTP_SERVER_ERROR
    severity = ErrorSeverity.HIGH

    def __init__(self, cause: BaseException, *, operation: str, task_id: str | None = None) -> None:
        self.cause = cause
        self.operation = operation
        self.task_id = task_id
        target = f" for task {task_id}" if task_id else ""
        super().__init__(f"Storage failure during {operation}{target}: {cause}")
        self.__cause__ = cause


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a task operation: exactly one of value or error is meaningful."""

    value: T | None = None
    error: TaskError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: TaskError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried error if the operation failed."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class ErrorResponse(BaseModel):
    """Structured error payload for the request-handling layer."""

    code: str
    message: str
    category: str
    severity: ErrorSeverity


def to_error_response(error: TaskError) -> ErrorResponse:
    """Build the client-facing description of a domain failure.

    Persistence failures hide the underlying cause; it is logged, not returned.
    """
    message = str(error)
    if isinstance(error, PersistenceError):
        message = f"Storage failure during {error.operation}. Please try again later."

    return ErrorResponse(
        code=error.code,
        message=message,
        category=error.category.value,
        severity=error.severity,
    )
