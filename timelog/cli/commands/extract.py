"""Extract a time entry from a saved transcript."""

import json
from typing import List, Optional

import click
from pydantic import ValidationError

from timelog.cli.error_handlers import (
    DeliveryFailedError,
    TranscriptError,
    with_error_handling,
)
from timelog.cli.utils.formatters import (
    format_entry_summary,
    format_info,
    format_success,
    format_warning,
)
from timelog.cli.utils.runtime import actor_options, build_actor, load_settings
from timelog.dialogue import ConfigOptionSource
from timelog.extractors import FreeTextExtractor
from timelog.models.conversation import Turn
from timelog.services import DeliveryService, DeliveryStatus
from timelog.validators import EntryValidator, ValidationSeverity


def read_transcript(path: str) -> List[Turn]:
    """
    Read a JSON transcript file.

    Args:
        path: File holding a list of {"role", "content"} objects

    Returns:
        Transcript turns in file order

    Raises:
        TranscriptError: If the file is not valid JSON or not a list of turns
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise TranscriptError(
            f"Cannot read transcript {path}: {e}",
            recovery_hint="The transcript must be a JSON file",
        ) from e

    if not isinstance(data, list):
        raise TranscriptError(
            "Transcript must be a JSON list of messages",
            recovery_hint='Use [{"role": "user", "content": "..."}, ...]',
        )

    try:
        return [Turn.model_validate(item) for item in data]
    except ValidationError as e:
        raise TranscriptError(
            f"Transcript contains an invalid message: {e.errors()[0]['msg']}",
            recovery_hint="Each message needs a role (system, user or assistant) and content",
        ) from e


@click.command(name="extract")
@click.argument("transcript", type=click.Path(exists=True, dir_okay=False))
@click.option("--send", is_flag=True, help="Deliver the entry when it is complete")
@actor_options
@click.option("--debug", is_flag=True, help="Show full stack traces on errors")
def extract_entry(
    transcript: str,
    send: bool,
    user_id: Optional[str],
    user_name: Optional[str],
    user_email: Optional[str],
    debug: bool,
):
    """Extract a time entry from a conversation transcript.

    Exits with a non-zero code if required fields cannot be found or,
    with --send, if delivery fails.

    Example:
        timelog extract conversation.json
        timelog extract conversation.json --send --user-name "Jane Doe"
    """
    with with_error_handling(debug):
        config = load_settings()
        turns = read_transcript(transcript)

        extractor = FreeTextExtractor(options=ConfigOptionSource(config))
        result = EntryValidator().validate(extractor.extract(turns))

        for issue in result.report.issues:
            if issue.severity == ValidationSeverity.INFO:
                click.echo(format_info(str(issue)))
            elif issue.severity == ValidationSeverity.WARNING:
                click.echo(format_warning(str(issue)))

        if not result.ok:
            raise TranscriptError(
                "Entry is incomplete, missing: " + ", ".join(result.missing_fields),
                recovery_hint="Mention the task, how long it took and the kind of work",
            )

        click.echo(format_success("Extracted time entry:"))
        click.echo(format_entry_summary(result.entry))

        if not send:
            return

        with DeliveryService.from_config(config) as service:
            outcome = service.deliver(
                result.entry, build_actor(user_id, user_name, user_email)
            )

        if outcome.status == DeliveryStatus.FAILED:
            raise DeliveryFailedError(
                f"{outcome.error} after {outcome.attempts} attempt(s)",
                recovery_hint="Check WEBHOOK_URL and WEBHOOK_API_KEY, then try again",
            )
        if outcome.status == DeliveryStatus.SKIPPED:
            click.echo(format_warning("No webhook configured, entry was not sent"))
        else:
            click.echo(format_success(f"Entry delivered (id {outcome.delivery_id})"))
