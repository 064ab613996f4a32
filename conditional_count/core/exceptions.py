"""
Structured Error Handling for Alert Condition Evaluation
Provides error hierarchy with categorization, error codes, and structured context.
"""

from typing import Dict, Any, Optional
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    """Error categories for classification and handling."""
    TRANSIENT = "TRANSIENT"  # Backend temporarily unreachable
    PERMANENT = "PERMANENT"  # Won't succeed without a change of input
    VALIDATION = "VALIDATION"  # Condition configuration errors
    EXTERNAL = "EXTERNAL"  # Search backend errors


class ErrorCode(str, Enum):
    """Standardized error codes for monitoring and debugging."""
    # Configuration errors
    MISSING_PARAMETER = "MISSING_PARAMETER"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    INVALID_THRESHOLD_TYPE = "INVALID_THRESHOLD_TYPE"
    INVALID_CONFIG_FILE = "INVALID_CONFIG_FILE"

    # Search backend errors
    INVALID_TIME_RANGE = "INVALID_TIME_RANGE"
    SEARCH_UNAVAILABLE = "SEARCH_UNAVAILABLE"
    SEARCH_TIMEOUT = "SEARCH_TIMEOUT"
    SEARCH_QUERY_REJECTED = "SEARCH_QUERY_REJECTED"
    SEARCH_BAD_RESPONSE = "SEARCH_BAD_RESPONSE"


class AlertConditionException(Exception):
    """
    Base exception for all alert condition errors.

    Provides structured error information for monitoring, debugging, and error recovery.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        error_code: ErrorCode,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize structured exception.

        Args:
            message: Human-readable error message
            category: Error category for classification
            error_code: Standardized error code
            context: Additional context (parameter name, stream id, etc.)
            original_error: Original exception if wrapped
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.error_code = error_code
        self.context = context or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logs and evaluation summaries."""
        result = {
            "error": self.error_code.value,
            "message": self.message,
            "category": self.category.value,
        }

        if self.context:
            result["context"] = self.context

        if self.original_error:
            result["original_error"] = str(self.original_error)

        return result

    def is_retryable(self) -> bool:
        """Check if the host may reasonably try again on its next run."""
        return self.category == ErrorCategory.TRANSIENT


# ============================================
# Configuration Errors (abort construction)
# ============================================

class ConfigurationError(AlertConditionException):
    """
    Invalid or missing condition parameter.
    Fatal to condition construction, never silently defaulted.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_PARAMETER,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            error_code=error_code,
            context=context,
            original_error=original_error
        )


class MissingParameterError(ConfigurationError):
    """A required condition parameter is absent."""

    def __init__(self, field: str, context: Optional[Dict[str, Any]] = None):
        context = context or {}
        context["field"] = field
        super().__init__(
            message=f"Missing required parameter: {field}",
            error_code=ErrorCode.MISSING_PARAMETER,
            context=context
        )


class InvalidThresholdTypeError(ConfigurationError):
    """Threshold type does not canonicalize to a known constant."""

    def __init__(self, value: Any, context: Optional[Dict[str, Any]] = None):
        context = context or {}
        context["threshold_type"] = value
        super().__init__(
            message=f"Unknown threshold type: {value!r}",
            error_code=ErrorCode.INVALID_THRESHOLD_TYPE,
            context=context
        )


# ============================================
# Backend Query Errors (reported as failed evaluations)
# ============================================

class BackendQueryError(AlertConditionException):
    """
    The search backend could not answer a count or search call.
    Must be reported distinctly from "threshold not met".
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.SEARCH_BAD_RESPONSE,
        category: ErrorCategory = ErrorCategory.EXTERNAL,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            category=category,
            error_code=error_code,
            context=context,
            original_error=original_error
        )


class InvalidRangeParametersError(BackendQueryError):
    """Time range is empty, inverted or otherwise unsupported."""

    def __init__(
        self,
        message: str = "Invalid time range",
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_TIME_RANGE,
            category=ErrorCategory.PERMANENT,
            context=context,
            original_error=original_error
        )


class SearchBackendUnavailableError(BackendQueryError):
    """Connection failure, timeout or 5xx from the search backend."""

    def __init__(
        self,
        message: str = "Search backend temporarily unavailable",
        error_code: ErrorCode = ErrorCode.SEARCH_UNAVAILABLE,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.TRANSIENT,
            context=context,
            original_error=original_error
        )


class SearchQueryRejectedError(BackendQueryError):
    """The backend refused the request (4xx): bad query syntax, missing index."""

    def __init__(
        self,
        message: str = "Search backend rejected the query",
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.SEARCH_QUERY_REJECTED,
            category=ErrorCategory.PERMANENT,
            context=context,
            original_error=original_error
        )


# ============================================
# Error Classification Helper
# ============================================

def classify_search_exception(exc: Exception) -> AlertConditionException:
    """
    Classify an exception raised while talking to the search backend.

    Used for wrapping httpx exceptions into our structured error hierarchy.

    Args:
        exc: Original exception

    Returns:
        Appropriate BackendQueryError subclass
    """
    # Already structured
    if isinstance(exc, AlertConditionException):
        return exc

    if isinstance(exc, httpx.TimeoutException):
        return SearchBackendUnavailableError(
            message=f"Search backend timed out: {exc}",
            error_code=ErrorCode.SEARCH_TIMEOUT,
            original_error=exc
        )

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        context = {"status_code": status, "url": str(exc.request.url)}
        body = exc.response.text
        if status >= 500:
            return SearchBackendUnavailableError(
                message=f"Search backend error {status}",
                context=context,
                original_error=exc
            )
        # Elasticsearch reports unparseable range bounds as a 400 parse error
        if "range" in body and ("parse_exception" in body or "failed to parse date" in body):
            return InvalidRangeParametersError(
                message="Search backend rejected the time range",
                context=context,
                original_error=exc
            )
        return SearchQueryRejectedError(
            message=f"Search backend rejected the query ({status})",
            context=context,
            original_error=exc
        )

    if isinstance(exc, httpx.TransportError):
        return SearchBackendUnavailableError(
            message=f"Search backend unreachable: {exc}",
            original_error=exc
        )

    # Malformed JSON or unexpected response shape
    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return BackendQueryError(
            message=f"Unexpected search backend response: {type(exc).__name__}: {exc}",
            original_error=exc
        )

    return BackendQueryError(
        message=f"Unexpected error: {type(exc).__name__}: {exc}",
        original_error=exc
    )
