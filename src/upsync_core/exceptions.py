"""
Exception hierarchy for Upsync.

Defines all exception types with error codes, transient flags, and correlation IDs.
Validation errors map onto 4xx proxy responses, backend errors carry the
remote store's status line and body for diagnostics.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

import uuid
from typing import Any, Dict, Optional


class UpsyncError(Exception):
    """
    Base exception for all Upsync errors.

    All Upsync exceptions inherit from this class. Provides standard
    error attributes: message, error_code, details, correlation_id.

    Attributes:
        message: Human-readable error message
        error_code: Programmatic error code (e.g., "ERR_001")
        details: Additional context (dict)
        correlation_id: UUID for tracing across layers
        original_exception: Wrapped exception (if any)
        is_transient: Whether error is transient (retryable)

    Example:
        raise UpsyncError(
            message="Operation failed",
            error_code="ERR_UNKNOWN",
            details={"key": "chat-chunk-0"},
        )
    """

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_UNKNOWN",
        details: Optional[Dict[str, Any]] = None,
        correlation_id: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        """
        Initialize UpsyncError.

        Args:
            message: Error message
            error_code: Error code for programmatic handling
            details: Additional context dict
            correlation_id: UUID for request tracing
            original_exception: Original wrapped exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.original_exception = original_exception
        self.is_transient = False  # Default: not retryable

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with all error information
        """
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "correlation_id": self.correlation_id,
            "original_error": str(self.original_exception) if self.original_exception else None,
        }


# === Validation Exceptions ===


class ValidationError(UpsyncError):
    """
    Raised when input validation fails.

    Error Codes:
        VAL_001: Missing required field
        VAL_002: Invalid field type
        VAL_003: Field value out of range
        VAL_004: Invalid field format

    Not transient (user input errors should not be retried).
    """

    status_code = 400

    def __init__(self, message: str, error_code: str = "VAL_001", **kwargs):
        super().__init__(message=message, error_code=error_code, **kwargs)
        self.is_transient = False


class EndpointNotAllowedError(ValidationError):
    """
    Raised when a proxy destination is outside the trusted provider domain.

    Error Codes:
        VAL_005: Endpoint host not in allow-list
    """

    status_code = 403

    def __init__(self, message: str, error_code: str = "VAL_005", **kwargs):
        super().__init__(message=message, error_code=error_code, **kwargs)


class ActionNotAllowedError(ValidationError):
    """
    Raised when the proxy is asked for an action it does not relay.

    Error Codes:
        VAL_006: Action not supported for this HTTP method

    The HTTP status differs by method (405 for GET, 403 for POST), so it is
    carried per instance.
    """

    def __init__(
        self, message: str, status_code: int = 403, error_code: str = "VAL_006", **kwargs
    ):
        super().__init__(message=message, error_code=error_code, **kwargs)
        self.status_code = status_code


# === Backend Exceptions ===


class BackendError(UpsyncError):
    """
    Raised when the remote key-value store answers with a non-success status.

    Error Codes:
        BACKEND_001: Non-2xx response from the store

    Transient only for 429 and 5xx responses.

    Attributes:
        status_code: HTTP status returned by the store
        status_text: HTTP reason phrase
        body: Response body text (diagnostics)
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        status_text: str = "",
        body: str = "",
        error_code: str = "BACKEND_001",
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        details.update({"status_code": status_code, "status_text": status_text, "body": body})
        super().__init__(message=message, error_code=error_code, details=details, **kwargs)
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        self.is_transient = status_code == 429 or status_code >= 500


class ConnectionError(UpsyncError):
    """
    Raised when the store (or proxy) cannot be reached.

    Error Codes:
        CONN_001: Connection refused / network failure

    Transient (network issues are retryable).
    """

    def __init__(self, message: str, error_code: str = "CONN_001", **kwargs):
        super().__init__(message=message, error_code=error_code, **kwargs)
        self.is_transient = True  # Retryable


class TimeoutError(UpsyncError):
    """
    Raised when operation times out.

    Error Codes:
        TIMEOUT_001: Operation timeout
        TIMEOUT_002: Network timeout

    Transient (timeouts are retryable).
    """

    def __init__(self, message: str, error_code: str = "TIMEOUT_002", **kwargs):
        super().__init__(message=message, error_code=error_code, **kwargs)
        self.is_transient = True  # Retryable
