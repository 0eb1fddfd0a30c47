"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click

from timelog.cli.utils.formatters import format_error, format_warning

EXIT_CONFIGURATION = 1
EXIT_DELIVERY = 2
EXIT_TRANSCRIPT = 3
EXIT_CANCELLED = 130
EXIT_UNEXPECTED = 255


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""

    pass


class DeliveryFailedError(CLIError):
    """A time entry or test payload could not be delivered."""

    pass


class TranscriptError(CLIError):
    """A transcript file could not be read or is malformed."""

    pass


_LABELS = [
    (ConfigurationError, "Configuration Error", EXIT_CONFIGURATION),
    (DeliveryFailedError, "Delivery Error", EXIT_DELIVERY),
    (TranscriptError, "Transcript Error", EXIT_TRANSCRIPT),
]


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Handle CLI errors with user-friendly messages.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code for the error type
    """
    for error_type, label, exit_code in _LABELS:
        if isinstance(error, error_type):
            click.echo(format_error(f"{label}: {error.message}"))
            if error.recovery_hint:
                click.echo(format_warning(f"Hint: {error.recovery_hint}"))
            return exit_code

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return EXIT_CANCELLED  # Standard exit code for SIGINT

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))

    if debug:
        click.echo("\nFull stack trace:")
        click.echo(
            "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))

    return EXIT_UNEXPECTED


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Example:
        @click.command()
        @click.option('--debug', is_flag=True)
        def my_command(debug):
            with with_error_handling(debug):
                # Command implementation
                pass
    """

    class ErrorHandler:
        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None and not isinstance(exc_val, SystemExit):
                sys.exit(handle_cli_error(exc_val, self.show_debug))
            return False

    return ErrorHandler(debug)
