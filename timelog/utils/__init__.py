"""Shared utilities."""

from timelog.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    sanitize_sensitive_data,
)

__all__ = ["LogContext", "generate_correlation_id", "sanitize_sensitive_data"]
