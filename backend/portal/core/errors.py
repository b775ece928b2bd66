"""Error Hierarchy — typed, categorized exceptions for every portal failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are 400-level; infrastructure errors are 500-level
    - to_response() produces the standard envelope with an `error` block
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PortalError base: one global handler catches all
    - ErrorContext as dataclass: request-scoped detail for logs, not for clients
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Extra context for error observability."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


class PortalError(Exception):
    """Base exception for all portal errors."""

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

    def details(self) -> list[dict] | None:
        """Structured details for the client. Subclasses override."""
        return None

    def log_context(self) -> dict[str, Any]:
        """Context fields for the log record; never sent to the client."""
        ctx = self.context
        fields = {
            "user_id": ctx.user_id,
            "resource_type": ctx.resource_type,
            "resource_id": ctx.resource_id,
            "debug_info": ctx.debug_info,
        }
        return {k: v for k, v in fields.items() if v is not None}

    def to_response(self) -> dict:
        """Convert to the standard envelope with an error block."""
        error: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
        }
        details = self.details()
        if details:
            error["details"] = details
        return {
            "success": False,
            "message": self.message,
            "data": None,
            "timestamp": self.context.timestamp.isoformat(),
            "error": error,
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class BusinessRuleError(PortalError):
    """A request is well-formed but violates a domain rule."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "BUSINESS_RULE_VIOLATION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class AuthenticationError(PortalError):
    """Missing, invalid or expired credentials."""
    def __init__(self, message: str = "Invalid or expired token", context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(PortalError):
    """Authenticated user lacks the role for an action."""
    def __init__(
        self,
        message: str = "Access denied - insufficient permissions",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(PortalError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: object = None, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_type = resource_type
        ctx.resource_id = None if resource_id is None else str(resource_id)
        super().__init__(
            f"{resource_type} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateResourceError(PortalError):
    """A unique field value is already taken."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "DUPLICATE_RESOURCE", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.field = field

    def details(self) -> list[dict] | None:
        if not self.field:
            return None
        return [{"field": self.field, "message": self.message}]


class ScheduleConflictError(PortalError):
    """Candidate schedule overlaps an existing one for a teacher, class or room."""
    def __init__(
        self,
        message: str,
        kind: str,
        conflicting_schedule_id: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "SCHEDULE_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.kind = kind
        self.conflicting_schedule_id = conflicting_schedule_id

    def details(self) -> list[dict] | None:
        return [{
            "conflict": self.kind,
            "schedule_id": str(self.conflicting_schedule_id),
        }]


class DuplicateAttendanceError(PortalError):
    """Person already has an attendance record with this status today."""
    def __init__(self, person: str, status: str, context: ErrorContext | None = None):
        super().__init__(
            f"{person} already recorded {status.lower()} attendance today",
            "DUPLICATE_ATTENDANCE", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.status = status


class DataIntegrityError(PortalError):
    """A database constraint rejected the write."""
    def __init__(self, message: str = "Duplicate field value entered", context: ErrorContext | None = None):
        super().__init__(
            message, "DATA_INTEGRITY_VIOLATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PortalError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
