"""
Structured Logging
JSON-formatted logs with trace correlation.
"""

import logging
import re
import sys
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger
from opentelemetry import trace

from conditional_count.app.config import get_settings


class CloudLoggingFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that adds timestamp, severity, trace_id/span_id
    and service metadata to every record.
    """

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ):
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["severity"] = record.levelname

        # Trace context from OpenTelemetry, when the host runs us inside a span
        span = trace.get_current_span()
        if span and span.get_span_context().is_valid:
            span_context = span.get_span_context()
            log_record["trace_id"] = f"{span_context.trace_id:032x}"
            log_record["span_id"] = f"{span_context.span_id:016x}"
            log_record["trace_sampled"] = span_context.trace_flags.sampled

        settings = get_settings()
        log_record["service"] = settings.app_name
        log_record["version"] = settings.app_version
        log_record["environment"] = settings.environment

        if "message" in log_record:
            log_record["msg"] = log_record.pop("message")


def setup_logging(log_level: Optional[str] = None):
    """
    Configure application-wide structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
                  Defaults to settings.log_level
    """
    settings = get_settings()
    level = log_level or settings.log_level

    handler = logging.StreamHandler(sys.stdout)
    formatter = CloudLoggingFormatter(
        fmt="%(timestamp)s %(severity)s %(name)s %(msg)s",
        json_ensure_ascii=False
    )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.info(
        "Logging initialized",
        extra={
            "log_level": level,
            "environment": settings.environment
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def should_include_stacktrace() -> bool:
    """
    Stack traces can leak backend credentials embedded in URLs,
    so they are only attached outside production.
    """
    return not get_settings().is_production()


_SENSITIVE_PATTERNS = [
    (r'(https?://)[^:/@\s]+:[^@\s]+@', r'\1[REDACTED]@'),
    (r'Basic\s+[a-zA-Z0-9+/=]+', 'Basic [REDACTED]'),
    (r'Bearer\s+[a-zA-Z0-9\-_.]+', 'Bearer [REDACTED]'),
    (r'password["\']?\s*[:=]\s*["\']?[^\s"\']+', 'password: [REDACTED]'),
]

_MAX_ERROR_LENGTH = 500


def sanitize_error_message(error_msg: str) -> str:
    """
    Remove credentials from an error message and truncate it.

    Args:
        error_msg: The original error message

    Returns:
        Sanitized error message
    """
    sanitized = error_msg
    for pattern, replacement in _SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

    if len(sanitized) > _MAX_ERROR_LENGTH:
        sanitized = sanitized[:_MAX_ERROR_LENGTH] + "... [TRUNCATED]"

    return sanitized


class StructuredLogger:
    """
    Structured logger wrapper for adding consistent contextual information.
    """

    def __init__(
        self,
        logger: logging.Logger,
        condition_id: Optional[str] = None,
        stream_id: Optional[str] = None
    ):
        """
        Initialize structured logger.

        Args:
            logger: Base logger instance
            condition_id: Alert condition identifier
            stream_id: Stream the condition is attached to
        """
        self.logger = logger
        self.context = {}

        if condition_id:
            self.context["condition_id"] = condition_id
        if stream_id:
            self.context["stream_id"] = stream_id

    def _log(self, level: int, msg: str, **kwargs):
        """Internal logging method with context injection."""
        exc_info = kwargs.pop('exc_info', False)
        stacklevel = kwargs.pop('stacklevel', 3)

        if exc_info and not should_include_stacktrace():
            exc_info = False
            kwargs['_stacktrace_omitted'] = True

        extra = {**self.context, **kwargs}

        self.logger.log(
            level, msg,
            exc_info=exc_info,
            stacklevel=stacklevel,
            extra=extra
        )

    def debug(self, msg: str, **kwargs):
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs):
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs):
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs):
        self._log(logging.ERROR, msg, **kwargs)

    def error_from(self, msg: str, error: Exception, **kwargs):
        """Log an error with type info, sanitizing the message in production."""
        kwargs["error_type"] = type(error).__name__
        if should_include_stacktrace():
            self._log(logging.ERROR, msg, exc_info=error, **kwargs)
        else:
            self._log(
                logging.ERROR,
                f"{msg}: {sanitize_error_message(str(error))}",
                sanitized=True,
                **kwargs
            )


def create_structured_logger(
    name: str,
    condition_id: Optional[str] = None,
    stream_id: Optional[str] = None
) -> StructuredLogger:
    """
    Create a structured logger with context.

    Args:
        name: Logger name
        condition_id: Alert condition identifier
        stream_id: Stream identifier

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(
        logger=get_logger(name),
        condition_id=condition_id,
        stream_id=stream_id
    )
