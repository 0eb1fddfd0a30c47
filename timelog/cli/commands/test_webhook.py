"""Webhook connectivity check."""

import click

from timelog.cli.error_handlers import (
    ConfigurationError,
    DeliveryFailedError,
    with_error_handling,
)
from timelog.cli.utils.formatters import format_info, format_success
from timelog.cli.utils.runtime import load_settings
from timelog.services import DeliveryService, DeliveryStatus


@click.command(name="test-webhook")
@click.option("--debug", is_flag=True, help="Show full stack traces on errors")
def test_webhook(debug: bool):
    """Send a test payload to the configured webhook.

    Example:
        timelog test-webhook
    """
    with with_error_handling(debug):
        config = load_settings()
        if not config.delivery_configured:
            raise ConfigurationError(
                "No webhook endpoint is configured",
                recovery_hint="Set WEBHOOK_URL (and WEBHOOK_ENABLED=true) in your .env file",
            )

        click.echo(format_info(f"Sending test payload to {config.webhook_url}..."))
        with DeliveryService.from_config(config) as service:
            outcome = service.send_test()

        if outcome.status != DeliveryStatus.DELIVERED:
            raise DeliveryFailedError(
                f"{outcome.error} after {outcome.attempts} attempt(s)",
                recovery_hint="Check the webhook URL and API key",
            )

        click.echo(
            format_success(
                f"Webhook answered with HTTP {outcome.status_code} "
                f"after {outcome.attempts} attempt(s)"
            )
        )
