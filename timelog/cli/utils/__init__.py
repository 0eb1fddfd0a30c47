"""CLI utility functions."""

from timelog.cli.utils.formatters import (
    format_entry_summary,
    format_error,
    format_info,
    format_options,
    format_success,
    format_warning,
)

__all__ = [
    "format_entry_summary",
    "format_error",
    "format_info",
    "format_options",
    "format_success",
    "format_warning",
]
