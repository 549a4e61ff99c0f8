"""Error Hierarchy - typed, categorized exceptions for every review failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Codes are stable: the presentation layer switches on them, never on messages
    - Domain errors (400-level) are recoverable; storage errors (500-level) are critical
    - to_response() produces the REST envelope; to_reason() the short reason code

Design Decisions:
    - Single hierarchy with ReviewError base: coordinator and FastAPI handler catch one type
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories (NotFound / Unauthorized / InvalidInput / StorageFailure)."""
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    INVALID_INPUT = "invalid_input"
    STORAGE_FAILURE = "storage_failure"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None
    applicant_id: str | None = None
    reviewer_id: str | None = None
    debug_info: dict[str, Any] | None = None


class ReviewError(Exception):
    """Base exception for all applicant review errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_reason(self) -> str:
        """Short, stable reason code for the presentation layer."""
        return self.code

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "session_id": self.context.session_id,
                    "applicant_id": self.context.applicant_id,
                    "reviewer_id": self.context.reviewer_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidInputError(ReviewError):
    """Malformed key, out-of-range index, unknown decision value."""
    def __init__(
        self, message: str, code: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.INVALID_INPUT,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class UnauthorizedReviewerError(ReviewError):
    """A principal other than the session's reviewer tried to drive it."""
    def __init__(
        self, session_id: str, reviewer_id: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.session_id = session_id
        ctx.reviewer_id = reviewer_id
        super().__init__(
            "Only the reviewer who started this interview can act on it.",
            "UNAUTHORIZED_REVIEWER", ErrorCategory.UNAUTHORIZED,
            ErrorSeverity.WARNING, ctx, 403,
        )


class SessionNotFoundError(ReviewError):
    """Interview session absent: never created, finalized, or evicted."""
    def __init__(self, session_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.session_id = session_id
        super().__init__(
            f"Interview session '{session_id}' is no longer active",
            "SESSION_NOT_FOUND", ErrorCategory.NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


class ResourceNotFoundError(ReviewError):
    """Requested ledger record does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageFailureError(ReviewError):
    """Durable read or write did not complete."""
    def __init__(
        self, message: str, operation: str, code: str = "STORAGE_FAILURE",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Ledger {operation} failed: {message}",
            code, ErrorCategory.STORAGE_FAILURE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class StorageTimeoutError(StorageFailureError):
    """Durable write exhausted its retries without completing."""
    def __init__(self, operation: str, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"no acknowledgement after {attempts} attempt(s)",
            operation, "STORAGE_TIMEOUT", context,
        )
        self.attempts = attempts
