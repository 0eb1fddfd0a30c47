"""Composition helpers shared by the CLI commands."""

from typing import Optional

import click
from pydantic import ValidationError

from timelog.cli.error_handlers import ConfigurationError
from timelog.config.logging_config import LoggingConfig, configure_logging
from timelog.config.settings import TimeLogConfig, get_config
from timelog.models.conversation import Actor


def load_settings() -> TimeLogConfig:
    """Load settings and configure logging for a command run.

    Raises:
        ConfigurationError: If the environment holds invalid settings
    """
    try:
        config = get_config()
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid settings: {e.error_count()} problem(s)\n{e}",
            recovery_hint="Check the values in your .env file or environment",
        ) from e

    configure_logging(LoggingConfig.from_env(log_level=config.log_level))
    return config


def actor_options(func):
    """Add the --user-id, --user-name and --user-email options to a command."""
    func = click.option("--user-email", default=None, help="Email reported with entries")(func)
    func = click.option("--user-name", default=None, help="Name reported with entries")(func)
    func = click.option("--user-id", default=None, help="User ID reported with entries")(func)
    return func


def build_actor(
    user_id: Optional[str], user_name: Optional[str], user_email: Optional[str]
) -> Actor:
    return Actor(id=user_id, name=user_name, email=user_email)
