"""
Typed errors of the catalog engine.

Every error carries an ``ErrorCode`` and the HTTP status the JSON handlers
answer with. ``BaseError.to_dict()`` is the wire body of an error response;
``error_from_response()`` turns that body back into the same error class on
the resolver side, so callers catch ``ForbiddenError`` whether the store is
in-process or behind the catalog API.
"""

import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Error codes of the catalog JSON contract."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONNECTION_ERROR = "1002"
    CONFIGURATION_ERROR = "1003"
    TIMEOUT_ERROR = "1004"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    CONSTRAINT_VIOLATION = "2004"

    # Catalog item errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"

    # Tenant rules (4xxx)
    INVALID_STATE_TRANSITION = "4001"
    PERMISSION_DENIED = "4003"

    # Catalog API errors (5xxx)
    EXTERNAL_API_ERROR = "5002"


class BaseError(Exception):
    """
    Root of the catalog error hierarchy.

    Subclasses set ``status_code`` and ``default_code``; ``context`` holds the
    identifiers (tenant, kind, code, item id) that go out with the error body.
    The error is logged once, when it is built.
    """

    status_code = 500
    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context
        self.context["error_id"] = self.error_id

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id
        if cause is not None:
            self.context["cause"] = {"type": type(cause).__name__, "message": str(cause)}

        self._log_error()
        super().__init__(message)

    def _log_error(self) -> None:
        # Imported here: the logger reads config, which is loaded after this module
        from .utils.logger import get_logger

        extra = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "context": {k: v for k, v in self.context.items() if k != "cause"},
        }
        if self.status_code >= 500:
            get_logger().error(
                f"Error {self.error_code.value}: {self.message}", extra=extra, exc_info=self.cause
            )
        else:
            get_logger().warning(f"Client error {self.error_code.value}: {self.message}", extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        """Error body of the JSON contract; the cause stays server-side."""
        body: Dict[str, Any] = {
            "id": self.error_id,
            "code": self.error_code.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "context": {
                k: v
                for k, v in self.context.items()
                if k not in ("cause", "error_id", "correlation_id")
            },
        }
        if "correlation_id" in self.context:
            body["correlation_id"] = self.context["correlation_id"]
        return {"error": body}

    def add_context(self, **kwargs: Any) -> "BaseError":
        self.context.update(kwargs)
        return self


class RepositoryError(BaseError):
    """A store could not read or write catalog rows."""

    default_code = ErrorCode.DATABASE_ERROR


class ServiceError(BaseError):
    """Service or editor failure that is not the caller's fault."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, cause=cause, **context)


class ValidationError(BaseError):
    """Blank names, code collisions, unknown kinds and malformed bodies."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: Optional[ErrorCode] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, cause=cause, **context)


class ForbiddenError(BaseError):
    """Content edits or deletion attempted on an item the tenant does not own."""

    status_code = 403
    default_code = ErrorCode.PERMISSION_DENIED


class NotFoundError(BaseError):
    """Item, code or tenant is not part of the tenant's visible set."""

    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class TransportError(BaseError):
    """Network or server failure between the resolver and the catalog store."""

    status_code = 502
    default_code = ErrorCode.CONNECTION_ERROR


def _describe(resource_type: str, identifiers: Dict[str, Any]) -> str:
    if not identifiers:
        return resource_type
    return f"{resource_type}: {', '.join(f'{k}={v}' for k, v in identifiers.items())}"


def not_found(resource_type: str, cause: Optional[Exception] = None, **identifiers) -> NotFoundError:
    """``CatalogItem not found: item_id=..., kind=...``"""
    return NotFoundError(
        _describe(f"{resource_type} not found", identifiers),
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def duplicate(resource_type: str, cause: Optional[Exception] = None, **identifiers) -> ValidationError:
    """Code already taken within the tenant's visible set of a kind."""
    return ValidationError(
        _describe(f"Duplicate {resource_type}", identifiers),
        field="code",
        error_code=ErrorCode.DUPLICATE,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def validation_failed(
    field: str, value: Any, reason: str, cause: Optional[Exception] = None
) -> ValidationError:
    return ValidationError(
        f"Validation failed for {field}: {reason}",
        field=field,
        cause=cause,
        value=str(value),
        reason=reason,
    )


def permission_denied(
    action: str, resource: str, cause: Optional[Exception] = None, **context
) -> ForbiddenError:
    """Raised for ``update`` and ``delete`` of global items."""
    return ForbiddenError(
        f"Permission denied: {action} on {resource}",
        cause=cause,
        action=action,
        resource=resource,
        **context,
    )


_RESERVED_CONTEXT_KEYS = {"field", "cause", "message", "error_code", "status_code"}

_STATUS_ERRORS = {400: ValidationError, 403: ForbiddenError, 404: NotFoundError}

_CODE_ERRORS = {
    ErrorCode.VALIDATION_FAILED: ValidationError,
    ErrorCode.INVALID_FORMAT: ValidationError,
    ErrorCode.MISSING_REQUIRED: ValidationError,
    ErrorCode.CONSTRAINT_VIOLATION: ValidationError,
    ErrorCode.DUPLICATE: ValidationError,
    ErrorCode.PERMISSION_DENIED: ForbiddenError,
    ErrorCode.NOT_FOUND: NotFoundError,
}


def error_from_response(status_code: int, body: Any) -> BaseError:
    """
    Rebuild a typed error from an error response of the catalog JSON contract.

    Args:
        status_code: HTTP status of the response
        body: Decoded JSON body (may be None or non-dict for non-JSON responses)

    Returns:
        ValidationError, ForbiddenError, NotFoundError or TransportError
    """
    payload = body.get("error") if isinstance(body, dict) else None
    if isinstance(payload, str):
        payload = {"message": payload}
    payload = payload or {}

    message = payload.get("message") or f"Catalog request failed with status {status_code}"
    raw_context = payload.get("context") or {}
    field = raw_context.get("field")
    context = {k: v for k, v in raw_context.items() if k not in _RESERVED_CONTEXT_KEYS}

    try:
        error_code = ErrorCode(payload.get("code"))
    except ValueError:
        error_code = None

    error_class = _CODE_ERRORS.get(error_code) if error_code else None
    if error_class is None:
        error_class = _STATUS_ERRORS.get(status_code)

    remote = {"remote_status": status_code, "remote_error_id": payload.get("id"), **context}

    if error_class is ValidationError:
        return ValidationError(
            message,
            field=field,
            error_code=error_code or ErrorCode.VALIDATION_FAILED,
            **remote,
        )
    if error_class is ForbiddenError:
        return ForbiddenError(message, **remote)
    if error_class is NotFoundError:
        return NotFoundError(message, **remote)
    return TransportError(
        message,
        error_code=ErrorCode.EXTERNAL_API_ERROR,
        status_code=502,
        **remote,
    )


# Correlation id of the catalog request being served on this thread
def set_correlation_id(correlation_id: str) -> None:
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
