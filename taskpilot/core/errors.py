"""Error Hierarchy — typed, categorized exceptions for every TaskPilot failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error carries a localized user_message safe to show in chat
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TaskPilotError base: dispatcher, interpreter and the
      FastAPI global handler all catch one type (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from taskpilot.core import language_strings as strings


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    UNKNOWN_OPERATION = "unknown_operation"
    STORE = "store"
    EXTERNAL_API = "external_api"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    conversation_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class TaskPilotError(Exception):
    """Base exception for all TaskPilot errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.user_message = user_message or strings.GENERIC_FAILURE

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "conversation_id": self.context.conversation_id,
                    "operation": self.context.operation,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class OperationValidationError(TaskPilotError):
    """Function call arguments are malformed or insufficient."""
    def __init__(
        self, message: str, field: str, user_message: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400, user_message or message,
        )
        self.field = field


class OperationNotPermittedError(TaskPilotError):
    """Caller lacks admin rights or the apartment assignment the operation needs."""
    def __init__(
        self, operation: str, user_message: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Caller may not run '{operation}'",
            "AUTHORIZATION_ERROR", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403, user_message,
        )
        self.operation = operation


class ResourceNotFoundError(TaskPilotError):
    """Requested user, task or assignment does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, user_message: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404, user_message,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class UnknownOperationError(TaskPilotError):
    """Function name is not part of the function catalog."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Operation '{name}' does not exist",
            "UNKNOWN_OPERATION", ErrorCategory.UNKNOWN_OPERATION,
            ErrorSeverity.WARNING, context, 400, strings.UNKNOWN_OPERATION,
        )
        self.name = name


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreError(TaskPilotError):
    """Entity store operation failed or timed out."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.STORE,
            ErrorSeverity.CRITICAL, context, 503, strings.GENERIC_FAILURE,
        )
        self.operation = operation


class ProviderError(TaskPilotError):
    """NLP provider call failed or timed out."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        category = (
            ErrorCategory.TIMEOUT if api_error_type == "timeout"
            else ErrorCategory.EXTERNAL_API
        )
        super().__init__(
            f"Provider error ({api_error_type}): {message}",
            "PROVIDER_ERROR", category,
            ErrorSeverity.CRITICAL, ctx, 503, strings.INTERPRET_FALLBACK,
        )
        self.api_error_type = api_error_type
