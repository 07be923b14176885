"""Error Hierarchy — typed, categorized exceptions for all HarMind failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope; to_tool_result() the shape the model sees
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with HarMindError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    SANDBOX = "sandbox"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    project_id: str | None = None
    tool_name: str | None = None
    turn: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class HarMindError(Exception):
    """Base exception for all HarMind errors."""

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
                    "project_id": self.context.project_id,
                    "tool_name": self.context.tool_name,
                    "turn": self.context.turn,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }

    def to_tool_result(self) -> dict:
        """Convert to the error-shaped result handed back to the model."""
        return {
            "status": "error",
            "error_code": self.code,
            "error": self.message,
        }

    def to_event(self) -> dict:
        """Convert to a stream error event."""
        return {
            "type": "error",
            "data": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "severity": self.severity.value,
                "recoverable": self.severity in (
                    ErrorSeverity.INFO, ErrorSeverity.WARNING,
                ),
                "tool_name": self.context.tool_name,
            },
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ToolNotFoundError(HarMindError):
    """Requested tool name has no implementation."""
    def __init__(self, tool_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Tool '{tool_name}' not implemented.",
            "UNKNOWN_TOOL", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 404,
        )
        self.tool_name = tool_name


class ToolValidationError(HarMindError):
    """Tool input validation failed."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ToolExecutionError(HarMindError):
    """Tool implementation raised while running."""
    def __init__(self, tool_name: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "TOOL_EXECUTION_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, context, 500,
        )
        self.tool_name = tool_name


class SandboxScriptError(HarMindError):
    """Model-authored script raised, timed out, or returned a bad value."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SANDBOX_SCRIPT_ERROR", ErrorCategory.SANDBOX,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidTransitionError(HarMindError):
    """Scraping entry status write would move the pipeline backwards."""
    def __init__(
        self, current: str, requested: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot move entry from '{current}' back to '{requested}'. "
            "Pass allow_regression=true to force it.",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current = current
        self.requested = requested


class BackupValidationError(HarMindError):
    """Project backup document is malformed."""
    def __init__(self, problems: list[str], context: ErrorContext | None = None):
        super().__init__(
            "Invalid backup format: " + "; ".join(problems),
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.problems = problems


class ResourceNotFoundError(HarMindError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(HarMindError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ExternalServiceError(HarMindError):
    """A collaborator outside the process (model, proxy, graph DB) failed."""
    def __init__(
        self,
        message: str,
        service: str,
        code: str = "EXTERNAL_SERVICE_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.service = service


class AnthropicAPIError(ExternalServiceError):
    """Anthropic API call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Anthropic API error ({api_error_type}): {message}",
            "anthropic", "ANTHROPIC_API_ERROR", ctx,
        )
        self.api_error_type = api_error_type


class ProxyRequestError(ExternalServiceError):
    """Proxy backend unreachable or returned an unusable response."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Proxy Request Failed: {message}", "proxy",
            "PROXY_REQUEST_ERROR", context,
        )


class GraphDatabaseError(ExternalServiceError):
    """Neo4j connection or query failed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cypher execution failed: {message}", "neo4j",
            "GRAPH_DATABASE_ERROR", context,
        )
