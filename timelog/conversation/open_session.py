"""
Open-ended (LLM-driven) conversation sessions.

Questions are produced by a text-generation collaborator. The session
keeps the transcript, watches the trailing turns for completion phrases
and, once completion fires, extracts the entry from the user's turns,
validates it and submits it for delivery.
"""

import logging
from dataclasses import dataclass
from concurrent.futures import Future
from typing import Callable, List, Optional

from timelog.conversation.session import DeliveryTracker
from timelog.dialogue.options import OptionSource
from timelog.dialogue.prompts import GREETING_TEXT
from timelog.exceptions import TextGenerationError
from timelog.extractors.free_text_extractor import CompletionDetector, FreeTextExtractor
from timelog.models.conversation import Actor, Turn
from timelog.models.time_entry import TimeEntry
from timelog.services.delivery_service import DeliveryOutcome, DeliveryService
from timelog.services.llm_client import TextGenerator, build_system_prompt
from timelog.utils.logging_utils import LogContext, generate_correlation_id
from timelog.validators.entry_validator import EntryValidator

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "Sorry, I could not process your request right now. "
    "Could you tell me that again?"
)

INCOMPLETE_NOTICE = (
    "I couldn't save this entry yet, I still need: {missing}. "
    "Tell me and then ask me to log the time again."
)


@dataclass
class OpenReply:
    """Assistant reply plus the entry submitted on this turn, if any."""

    text: str
    entry: Optional[TimeEntry] = None
    delivery: Optional["Future[DeliveryOutcome]"] = None

    @property
    def completed(self) -> bool:
        return self.entry is not None


class OpenConversation:
    """
    One user's open-ended conversation.

    Completion fires at most once per submitted entry by default (see
    CompletionDetector). A completion that yields no complete entry re-arms
    the detector; restart() clears the transcript and re-arms it as well.
    """

    def __init__(
        self,
        generator: TextGenerator,
        delivery_service: DeliveryService,
        actor: Actor,
        options: Optional[OptionSource] = None,
        extractor: Optional[FreeTextExtractor] = None,
        validator: Optional[EntryValidator] = None,
        detector: Optional[CompletionDetector] = None,
        on_delivery: Optional[Callable[[DeliveryOutcome], None]] = None,
        session_id: Optional[str] = None,
    ):
        self.generator = generator
        self.options = options
        self.extractor = extractor or FreeTextExtractor(options=options)
        self.validator = validator or EntryValidator()
        self.detector = detector or CompletionDetector()
        self.session_id = session_id or generate_correlation_id()
        self.deliveries = DeliveryTracker(delivery_service, actor, on_delivery)
        self.transcript: List[Turn] = self._initial_transcript()

    def _initial_transcript(self) -> List[Turn]:
        return [
            Turn(role="system", content=build_system_prompt(self.options)),
            Turn(role="assistant", content=GREETING_TEXT),
        ]

    def start(self) -> str:
        """The assistant's opening message."""
        return self.transcript[-1].content

    def send(self, user_input: str) -> OpenReply:
        """
        Process one user message.

        Args:
            user_input: Typed or transcribed message

        Returns:
            OpenReply with the assistant's text and, when the conversation
            completed on this turn, the submitted entry
        """
        text = (user_input or "").strip()
        if not text:
            return OpenReply(text=self.transcript[-1].content)

        with LogContext(session_id=self.session_id):
            self.transcript.append(Turn(role="user", content=text))
            try:
                reply = self.generator.generate(list(self.transcript))
            except TextGenerationError as e:
                logger.error(f"Text generation failed: {e}")
                reply = FALLBACK_REPLY
            self.transcript.append(Turn(role="assistant", content=reply))

            if not self.detector.check(self.transcript):
                return OpenReply(text=reply)

            logger.info("Completion detected, extracting time entry from transcript")
            result = self.validator.validate(self.extractor.extract(self.transcript))
            if not result.ok:
                missing = ", ".join(name.replace("_", " ") for name in result.missing_fields)
                logger.warning(f"Extracted entry incomplete: {missing}")
                # Nothing was submitted, so the next completion phrase may try again
                self.detector.reset()
                notice = INCOMPLETE_NOTICE.format(missing=missing)
                self.transcript[-1] = Turn(role="assistant", content=f"{reply}\n\n{notice}")
                return OpenReply(text=self.transcript[-1].content)

            future = self.deliveries.submit(result.entry)
            return OpenReply(text=reply, entry=result.entry, delivery=future)

    def restart(self) -> str:
        """Clear the transcript and allow completion to fire again."""
        with LogContext(session_id=self.session_id):
            logger.info("Open conversation restarted")
        self.transcript = self._initial_transcript()
        self.detector.reset()
        return self.start()

    def retry_delivery(self) -> Optional["Future[DeliveryOutcome]"]:
        """Re-send the last entry whose delivery failed."""
        return self.deliveries.retry_failed()

    def drain_notifications(self) -> List[DeliveryOutcome]:
        """Delivery outcomes received since the last call."""
        return self.deliveries.drain()
