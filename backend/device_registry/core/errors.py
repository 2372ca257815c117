"""Error Taxonomy — classified failures carrying a wire-visible status code.

Invariants:
    - Every ServiceInvocationError carries a status code in [400, 600)
    - ClientError codes are in [400, 500), ServerError codes in [500, 600)
    - An out-of-range code raises ValueError at construction (programmer error)
    - to_response() produces the REST error envelope, never internal details

Design Decisions:
    - Range check lives in validate_status_code(), a pure function returning an
      error message or None; constructors only raise what it reports
    - StatusClass enum is the variant tag: isinstance checks are not needed
      to tell client failures from server failures
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from http import HTTPStatus
from typing import Any


class StatusClass(str, Enum):
    """Status class of a classified failure."""
    CLIENT = "client"
    SERVER = "server"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    PRECONDITION_FAILED = "precondition_failed"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    EXTERNAL_SERVICE = "external_service"
    INTERNAL = "internal"


# Half-open ranges [low, high)
STATUS_CLASS_RANGES: dict[StatusClass, tuple[int, int]] = {
    StatusClass.CLIENT: (400, 500),
    StatusClass.SERVER: (500, 600),
}


def status_class_of(status_code: int) -> StatusClass | None:
    """Return the class a status code belongs to, None for non-error codes."""
    for status_class, (low, high) in STATUS_CLASS_RANGES.items():
        if low <= status_code < high:
            return status_class
    return None


def validate_status_code(
    status_code: int, expected: StatusClass | None = None,
) -> str | None:
    """Check a status code against a class. Returns error message or None.

    With expected=None any error code in [400, 600) is accepted.
    """
    if isinstance(status_code, bool) or not isinstance(status_code, int):
        return f"status code must be an integer, got {status_code!r}"
    if expected is None:
        if status_class_of(status_code) is None:
            return "error code must be >= 400 and < 600"
        return None
    low, high = STATUS_CLASS_RANGES[expected]
    if not low <= status_code < high:
        return f"{expected.value} error code must be >= {low} and < {high}"
    return None


def _default_message(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"Error {status_code}"


@dataclass
class ErrorContext:
    """Request context attached to an error for observability."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tenant_id: str | None = None
    device_id: str | None = None
    debug_info: dict[str, Any] | None = None


class ServiceInvocationError(Exception):
    """Base exception for all classified registry failures."""

    status_class: StatusClass | None = None

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        cause: BaseException | None = None,
        code: str = "SERVICE_INVOCATION_ERROR",
        category: ErrorCategory = ErrorCategory.EXTERNAL_SERVICE,
        context: ErrorContext | None = None,
    ):
        problem = validate_status_code(status_code, self.status_class)
        if problem:
            raise ValueError(problem)
        message = message or _default_message(status_code)
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code
        self.category = category
        self.context = context or ErrorContext()
        self.__cause__ = cause

    @property
    def classification(self) -> StatusClass:
        """Status class derived from the code (always set for valid codes)."""
        return status_class_of(self.status_code)

    @property
    def severity(self) -> ErrorSeverity:
        if self.classification is StatusClass.CLIENT:
            return ErrorSeverity.ERROR
        return ErrorSeverity.CRITICAL

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "status_class": self.classification.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "tenant_id": self.context.tenant_id,
                    "device_id": self.context.device_id,
                },
            }
        }


class ClientError(ServiceInvocationError):
    """Failure caused by the client's request (status 4xx)."""

    status_class = StatusClass.CLIENT

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        cause: BaseException | None = None,
        code: str = "CLIENT_ERROR",
        category: ErrorCategory = ErrorCategory.VALIDATION,
        context: ErrorContext | None = None,
    ):
        super().__init__(status_code, message, cause, code, category, context)


class ServerError(ServiceInvocationError):
    """Failure on the service side (status 5xx)."""

    status_class = StatusClass.SERVER

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        cause: BaseException | None = None,
        code: str = "SERVER_ERROR",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        context: ErrorContext | None = None,
    ):
        super().__init__(status_code, message, cause, code, category, context)


def error_from_status(
    status_code: int, message: str | None = None, cause: BaseException | None = None,
) -> ServiceInvocationError:
    """Map a status code to the matching classified exception."""
    if status_class_of(status_code) is StatusClass.CLIENT:
        return ClientError(status_code, message, cause)
    return ServerError(status_code, message, cause)


# ─── Payload Validation Errors (400) ────────────────────────────

class PayloadValidationError(ClientError):
    """Request payload could not be decoded or violates an invariant."""
    def __init__(
        self,
        message: str,
        field: str | None = None,
        cause: BaseException | None = None,
        code: str = "VALIDATION_ERROR",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            400, message, cause, code, ErrorCategory.VALIDATION, context,
        )
        self.field = field


class CredentialsValidationError(PayloadValidationError):
    """A credential object is malformed or fails its type-specific checks."""
    def __init__(
        self, message: str, field: str | None = None,
        cause: BaseException | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(message, field, cause, "INVALID_CREDENTIALS", context)


class DeviceValidationError(PayloadValidationError):
    """A device object is malformed."""
    def __init__(
        self, message: str, field: str | None = None,
        cause: BaseException | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(message, field, cause, "INVALID_DEVICE", context)


class DeviceInvariantError(DeviceValidationError):
    """A device relationship mutation would violate mutual exclusion."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(message, field, None, context)
        self.code = "DEVICE_INVARIANT_VIOLATION"


# ─── Request Errors ─────────────────────────────────────────────

class ResourceNotFoundError(ClientError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            404, f"{resource_type} '{resource_id}' not found", None,
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND, context,
        )


class PreconditionFailedError(ClientError):
    """Asserted resource version does not match the stored one."""
    def __init__(self, resource_version: str, context: ErrorContext | None = None):
        super().__init__(
            412, f"Resource version '{resource_version}' does not match", None,
            "RESOURCE_VERSION_MISMATCH", ErrorCategory.PRECONDITION_FAILED, context,
        )
        self.resource_version = resource_version


class PayloadTooLargeError(ClientError):
    """Request body exceeds the configured limit."""
    def __init__(self, limit: int, context: ErrorContext | None = None):
        super().__init__(
            413, f"Request body exceeds {limit} bytes", None,
            "PAYLOAD_TOO_LARGE", ErrorCategory.PAYLOAD_TOO_LARGE, context,
        )
        self.limit = limit


# ─── Service Errors (500-level) ─────────────────────────────────

class ServiceUnavailableError(ServerError):
    """Management service cannot handle the request right now."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            503, message, None, "SERVICE_UNAVAILABLE",
            ErrorCategory.EXTERNAL_SERVICE, context,
        )
