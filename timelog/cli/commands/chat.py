"""Interactive chat command."""

from typing import List, Optional

import click

from timelog.cli.error_handlers import ConfigurationError, with_error_handling
from timelog.cli.utils.formatters import (
    format_error,
    format_info,
    format_options,
    format_success,
    format_warning,
)
from timelog.cli.utils.runtime import actor_options, build_actor, load_settings
from timelog.conversation import ConversationSession, OpenConversation, describe_outcome
from timelog.dialogue import ConfigOptionSource, DialogueEngine
from timelog.models.conversation import Prompt
from timelog.services import (
    DeliveryOutcome,
    DeliveryService,
    DeliveryStatus,
    JsonFileSessionRepository,
    OpenAIChatClient,
)

RESTART_COMMAND = "/restart"
RETRY_COMMAND = "/retry"
QUIT_COMMAND = "/quit"

# Seconds to wait for in-flight deliveries when the chat ends
SHUTDOWN_TIMEOUT = 30.0


def resolve_answer(answer: str, options: List[str]) -> str:
    """Map a numeric answer to the option it selects.

    Args:
        answer: Raw answer typed by the user
        options: Options offered with the current prompt

    Returns:
        The selected option, or the answer unchanged
    """
    stripped = answer.strip()
    if options and stripped.isdigit():
        index = int(stripped)
        if 1 <= index <= len(options):
            return options[index - 1]
    return answer


def show_prompt(prompt: Prompt) -> None:
    click.echo()
    click.echo(prompt.text)
    if prompt.options:
        click.echo(format_options(prompt.options))


def show_outcomes(outcomes: List[DeliveryOutcome]) -> None:
    for outcome in outcomes:
        message = describe_outcome(outcome)
        if outcome.status == DeliveryStatus.DELIVERED:
            click.echo(format_success(message))
        elif outcome.status == DeliveryStatus.SKIPPED:
            click.echo(format_info(message))
        else:
            click.echo(format_error(message))
            click.echo(format_warning(f"Type {RETRY_COMMAND} to send it again."))


def read_answer() -> Optional[str]:
    """Read one line; None when input ends."""
    try:
        return click.prompt("You", default="", show_default=False, prompt_suffix="> ")
    except click.Abort:
        return None


@click.command(name="chat")
@click.option(
    "--mode",
    type=click.Choice(["fixed", "open"], case_sensitive=False),
    default="fixed",
    help="Fixed question sequence or open-ended assistant (default: fixed)",
)
@actor_options
@click.option(
    "--resume", is_flag=True, help="Continue the conversation stored in the session file"
)
@click.option("--debug", is_flag=True, help="Show full stack traces on errors")
def chat(
    mode: str,
    user_id: Optional[str],
    user_name: Optional[str],
    user_email: Optional[str],
    resume: bool,
    debug: bool,
):
    """Log time entries through an interactive conversation.

    Numbered options can be selected by typing their number.
    Type /restart to start over, /retry to re-send the last failed
    entry and /quit to leave.

    Example:
        timelog chat
        timelog chat --mode open --user-name "Jane Doe"
        timelog chat --resume
    """
    with with_error_handling(debug):
        config = load_settings()
        actor = build_actor(user_id, user_name, user_email)

        if not config.delivery_configured:
            click.echo(
                format_warning(
                    "No webhook configured: entries will be confirmed but not sent."
                )
            )

        with DeliveryService.from_config(config) as delivery_service:
            if mode.lower() == "open":
                _run_open(config, delivery_service, actor)
            else:
                _run_fixed(config, delivery_service, actor, resume)


def _run_fixed(config, delivery_service, actor, resume: bool) -> None:
    repository = JsonFileSessionRepository(config.session_file)
    if not resume:
        repository.clear()

    session = ConversationSession(
        DialogueEngine(options=ConfigOptionSource(config)),
        delivery_service,
        actor,
        repository=repository,
    )
    prompt = session.start()
    show_prompt(prompt)

    while True:
        answer = read_answer()
        if answer is None or answer.strip() == QUIT_COMMAND:
            break
        if answer.strip() == RESTART_COMMAND:
            prompt = session.restart()
        elif answer.strip() == RETRY_COMMAND:
            if session.retry_delivery() is None:
                click.echo(format_info("There is no failed entry to re-send."))
            show_outcomes(session.drain_notifications())
            show_prompt(prompt)
            continue
        else:
            prompt = session.handle(resolve_answer(answer, prompt.options))

        show_outcomes(session.drain_notifications())
        show_prompt(prompt)

    session.deliveries.wait(timeout=SHUTDOWN_TIMEOUT)
    show_outcomes(session.drain_notifications())
    click.echo(format_info("Goodbye!"))


def _run_open(config, delivery_service, actor) -> None:
    if not config.llm_api_key:
        raise ConfigurationError(
            "Open-ended mode needs a text generation API key",
            recovery_hint="Set OPENAI_API_KEY in your .env file or use --mode fixed",
        )

    conversation = OpenConversation(
        OpenAIChatClient.from_config(config),
        delivery_service,
        actor,
        options=ConfigOptionSource(config),
    )
    click.echo()
    click.echo(conversation.start())

    while True:
        answer = read_answer()
        if answer is None or answer.strip() == QUIT_COMMAND:
            break
        if answer.strip() == RESTART_COMMAND:
            text = conversation.restart()
        elif answer.strip() == RETRY_COMMAND:
            if conversation.retry_delivery() is None:
                click.echo(format_info("There is no failed entry to re-send."))
            show_outcomes(conversation.drain_notifications())
            continue
        else:
            reply = conversation.send(answer)
            text = reply.text
            if reply.completed:
                click.echo(format_info("Time entry captured, sending it for processing."))

        show_outcomes(conversation.drain_notifications())
        click.echo()
        click.echo(text)

    conversation.deliveries.wait(timeout=SHUTDOWN_TIMEOUT)
    show_outcomes(conversation.drain_notifications())
    click.echo(format_info("Goodbye!"))
