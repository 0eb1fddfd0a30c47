"""
Text-generation collaborator for the open-ended conversation mode.

The assistant's replies are opaque text: callers may show them and scan
them for completion phrases, but never parse them as structured data.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

import requests

from timelog.dialogue.options import OptionSource
from timelog.exceptions import TextGenerationError
from timelog.models.conversation import Turn

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Produces the next assistant utterance from a message history."""

    def generate(self, messages: Sequence[Turn]) -> str: ...


def build_system_prompt(options: Optional[OptionSource] = None) -> str:
    """
    Build the instructions given to the model at the start of a conversation.

    Args:
        options: Option lists to mention (omitted when None)

    Returns:
        System prompt text
    """
    prompt = (
        "You are a helpful AI assistant for a time tracking application. Your role "
        "is to guide users through logging their time entries by asking structured "
        "questions in a conversational manner.\n\n"
        "Follow this conversation flow:\n"
        "1. Start by asking what task they worked on\n"
        "2. Ask how long they spent on it (for example 1h30m or 45 minutes)\n"
        "3. Ask if it was billable, non-billable, or personal work\n"
        "4. For billable work ask for the matter/client and cost centre; for "
        "non-billable work ask for the business area and subcategory\n"
        "5. Ask about task enjoyment and energy impact\n"
        "6. Ask about future goals for similar tasks\n"
        "7. Ask the user to say 'log the time' when everything is correct\n\n"
        "Be conversational, friendly, and help users complete their time entries "
        "efficiently. If users provide unclear information, ask clarifying questions."
    )
    if options is not None:
        lists = [
            ("Matters/Clients", options.matters()),
            ("Cost Centres", options.cost_centres()),
            ("Business Areas", options.business_areas()),
            ("Subcategories", options.subcategories()),
        ]
        lines = [
            f"- {label}: {', '.join(values) if values else 'None configured'}"
            for label, values in lists
        ]
        prompt += "\n\nAvailable categorization options:\n" + "\n".join(lines)
    return prompt


class OpenAIChatClient:
    """
    Minimal client for an OpenAI-compatible chat completions endpoint.

    Example:
        >>> client = OpenAIChatClient(api_key="sk-...")
        >>> client.generate([Turn(role="user", content="Hi")])  # doctest: +SKIP
        'Hi! What task did you work on?'
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("An API key is required for text generation")

        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "OpenAIChatClient":
        """Create a client from TimeLogConfig settings."""
        return cls(
            api_key=config.llm_api_key,
            model=config.llm_model,
            base_url=config.llm_base_url,
            temperature=config.llm_temperature,
            max_tokens=config.llm_max_tokens,
        )

    def generate(self, messages: Sequence[Turn]) -> str:
        """
        Request the next assistant message.

        Args:
            messages: Role-tagged history, system prompt first

        Returns:
            The assistant's reply text

        Raises:
            TextGenerationError: On transport errors, non-2xx responses or
                malformed response bodies
        """
        body: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                json=body,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TextGenerationError(f"Text generation request failed: {e}") from e

        if response.status_code != 200:
            raise TextGenerationError(f"Text generation API error: {response.status_code}")

        try:
            choices: List[Dict[str, Any]] = response.json()["choices"]
            content = choices[0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TextGenerationError(f"Malformed text generation response: {e}") from e

        if not content:
            raise TextGenerationError("Text generation returned an empty message")

        logger.debug(f"Generated {len(content)} characters with {self.model}")
        return content
