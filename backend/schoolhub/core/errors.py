"""Error Hierarchy: typed, categorized exceptions for every request failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - to_response() produces the REST envelope {"error": str, "details"?: list}
    - Absent and foreign-tenant entities raise the same ResourceNotFoundError
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with SchoolHubError base: one global handler catches all
    - ErrorContext as dataclass: log enrichment without coupling to the logging setup
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for log records only."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    school_id: str | None = None
    user_id: str | None = None
    resource: str | None = None
    debug_info: dict[str, Any] | None = None


class SchoolHubError(Exception):
    """Base exception for all SchoolHub errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        details: list[dict] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.details = details

    def to_response(self) -> dict:
        """Convert to the REST error envelope."""
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body

    def log_extra(self) -> dict:
        """Fields surfaced by the JSON log formatter."""
        return {
            "error_code": self.code,
            "school_id": self.context.school_id,
            "user_id": self.context.user_id,
            "resource": self.context.resource,
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class UnauthorizedError(SchoolHubError):
    """No valid session accompanies the request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Unauthorized", "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(SchoolHubError):
    """Caller's role is not in the operation's allow-list."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Forbidden", "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class RequestValidationFailed(SchoolHubError):
    """Request body or parameters failed schema validation."""
    def __init__(self, details: list[dict], context: ErrorContext | None = None):
        super().__init__(
            "Validation error", "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400, details,
        )


class ResourceNotFoundError(SchoolHubError):
    """Entity is absent or belongs to another school."""
    def __init__(
        self,
        resource_type: str,
        resource_id: str | None = None,
        context: ErrorContext | None = None,
        message: str | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource = resource_type
        if resource_id is not None:
            ctx.debug_info = {"resource_id": resource_id}
        super().__init__(
            message or f"{resource_type} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.resource_type = resource_type


class ConflictError(SchoolHubError):
    """Uniqueness rule violated (duplicate name, duplicate link)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 400,
        )


class InvalidOperationError(SchoolHubError):
    """Business rule forbids the operation (e.g. entity still has dependents)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_OPERATION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SchoolHubError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
