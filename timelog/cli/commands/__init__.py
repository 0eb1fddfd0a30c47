"""CLI commands."""

from timelog.cli.commands.chat import chat
from timelog.cli.commands.extract import extract_entry
from timelog.cli.commands.options import list_options
from timelog.cli.commands.test_webhook import test_webhook

__all__ = ["chat", "extract_entry", "list_options", "test_webhook"]
