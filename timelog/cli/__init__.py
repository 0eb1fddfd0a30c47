"""Time Logging Assistant CLI.

This module provides a command-line interface for the time logging
assistant. It includes commands for chatting, extracting entries from
transcripts, checking the webhook and listing the configured options.
"""

import click

from timelog.cli.commands.chat import chat
from timelog.cli.commands.extract import extract_entry
from timelog.cli.commands.options import list_options
from timelog.cli.commands.test_webhook import test_webhook

__version__ = "1.0.0"


@click.group(help="Time Logging Assistant CLI - Log your time through a conversation")
@click.version_option(version=__version__)
def cli():
    """Time Logging Assistant CLI main entry point."""
    pass


# Register commands
cli.add_command(chat)
cli.add_command(extract_entry)
cli.add_command(test_webhook)
cli.add_command(list_options)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
