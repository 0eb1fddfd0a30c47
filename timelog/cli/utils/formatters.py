"""Output formatting utilities for CLI."""

from typing import List

import click

from timelog.dialogue.prompts import generate_summary
from timelog.models.time_entry import TimeEntry


def format_success(message: str) -> str:
    """Format a success message with green color.

    Args:
        message: The success message to format

    Returns:
        Formatted success message with color
    """
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message with red color."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message with yellow color."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message with blue color."""
    return click.style(f"ℹ {message}", fg="blue")


def format_options(options: List[str]) -> str:
    """Number the options of a select prompt, starting at 1.

    Args:
        options: Option labels in display order

    Returns:
        One "  <n>. <label>" line per option
    """
    return "\n".join(f"  {i}. {option}" for i, option in enumerate(options, start=1))


def format_entry_summary(entry: TimeEntry) -> str:
    """Format a complete entry with its start time as a bullet list."""
    summary = generate_summary(entry.to_partial())
    return f"{summary}\n• Start Time: {entry.start_time.isoformat()}"
