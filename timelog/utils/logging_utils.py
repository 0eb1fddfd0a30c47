"""Structured logging utilities with context support."""

import logging
import threading
import uuid
from typing import Any, Dict, Optional, cast

# Thread-local storage for log context
_thread_local = threading.local()

# Header and field names whose values never reach the logs
SENSITIVE_FIELDS = {
    "password",
    "token",
    "api_key",
    "apikey",
    "secret",
    "authorization",
    "credentials",
}


def generate_correlation_id() -> str:
    """
    Generate a unique correlation ID (used to tag delivery attempts).

    Returns:
        UUID string
    """
    return str(uuid.uuid4())


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current thread."""
    return dict(getattr(_thread_local, "context", {}))


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Fields live in thread-local storage, so a delivery running on a worker
    thread carries its own ``delivery_id`` without affecting the
    conversation thread.

    Example:
        with LogContext(session_id="abc", delivery_id="123"):
            logger.info("Delivering entry")
    """

    def __init__(self, **kwargs):
        self.fields = kwargs
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        if not hasattr(_thread_local, "context"):
            _thread_local.context = {}

        self.previous_context = _thread_local.context.copy()
        _thread_local.context.update(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _thread_local.context = self.previous_context or {}


class _ContextFilter(logging.Filter):
    """Logging filter that copies LogContext fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in getattr(_thread_local, "context", {}).items():
            setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact sensitive values in a (possibly nested) dictionary.

    Args:
        data: Dictionary to sanitize, e.g. request headers

    Returns:
        Copy with sensitive values replaced by ``***REDACTED***``

    Example:
        >>> sanitize_sensitive_data({"Authorization": "Bearer abc"})
        {'Authorization': '***REDACTED***'}
    """
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(sensitive in key.lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = "***REDACTED***" if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_sensitive_data(cast(Dict[str, Any], value))
        else:
            sanitized[key] = value
    return sanitized
