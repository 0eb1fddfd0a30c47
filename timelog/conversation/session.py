"""
Fixed-flow conversation sessions.

A ConversationSession owns one ConversationState, feeds user answers to
the DialogueEngine one at a time, persists every new state as a whole
snapshot and hands confirmed entries to the DeliveryService as a detached
task. Delivery outcomes are surfaced as notifications instead of blocking
the next answer.
"""

import logging
import queue
import threading
from concurrent.futures import Future, wait
from typing import Callable, List, Optional

from timelog.dialogue.engine import DialogueEngine
from timelog.exceptions import SessionStoreError
from timelog.models.conversation import Actor, ConversationState, Prompt
from timelog.models.time_entry import TimeEntry
from timelog.services.delivery_service import DeliveryOutcome, DeliveryService, DeliveryStatus
from timelog.services.session_repository import InMemorySessionRepository, SessionRepository
from timelog.utils.logging_utils import LogContext, generate_correlation_id

logger = logging.getLogger(__name__)


def describe_outcome(outcome: DeliveryOutcome) -> str:
    """Notification text for a delivery outcome."""
    if outcome.status == DeliveryStatus.DELIVERED:
        return (
            "Perfect! I've successfully sent your time entry for processing. "
            "Your timesheet will be updated shortly."
        )
    if outcome.status == DeliveryStatus.SKIPPED:
        return "Great! I've saved your time entry. Your timesheet will be updated shortly."
    return (
        "I'm sorry, there was an issue saving your time entry "
        f"({outcome.error or 'unknown error'}). Please try again or contact "
        "your administrator."
    )


class DeliveryTracker:
    """
    Submits entries for delivery and collects their outcomes.

    Shared by both conversation modes. Outcomes arrive on worker threads
    and are queued until the front end drains them.
    """

    def __init__(
        self,
        delivery_service: DeliveryService,
        actor: Actor,
        on_delivery: Optional[Callable[[DeliveryOutcome], None]] = None,
    ):
        self.delivery_service = delivery_service
        self.actor = actor
        self.on_delivery = on_delivery
        self._notifications: "queue.Queue[DeliveryOutcome]" = queue.Queue()
        self._pending: List[Future] = []
        self._lock = threading.Lock()
        self._last_failed: Optional[TimeEntry] = None

    def submit(self, entry: TimeEntry) -> "Future[DeliveryOutcome]":
        """Hand an entry to the delivery service without waiting."""
        future = self.delivery_service.deliver_async(
            entry, self.actor, on_complete=self._record
        )
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def _record(self, outcome: DeliveryOutcome) -> None:
        with self._lock:
            if outcome.status == DeliveryStatus.FAILED:
                self._last_failed = outcome.entry
            elif outcome.entry is not None and outcome.entry == self._last_failed:
                self._last_failed = None
        self._notifications.put(outcome)
        if self.on_delivery is not None:
            self.on_delivery(outcome)

    @property
    def last_failed_entry(self) -> Optional[TimeEntry]:
        with self._lock:
            return self._last_failed

    def retry_failed(self) -> Optional["Future[DeliveryOutcome]"]:
        """Re-submit the most recent failed entry, if any."""
        entry = self.last_failed_entry
        if entry is None:
            return None
        logger.info("Re-submitting last failed time entry")
        return self.submit(entry)

    def drain(self) -> List[DeliveryOutcome]:
        """Return and clear every outcome received so far."""
        outcomes = []
        while True:
            try:
                outcomes.append(self._notifications.get_nowait())
            except queue.Empty:
                return outcomes

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until pending deliveries finish (used on shutdown and in tests)."""
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)


class ConversationSession:
    """
    One user's fixed-flow conversation.

    Only one caller may drive a session; answers are processed strictly in
    order.

    Example:
        >>> session = ConversationSession(DialogueEngine(), DeliveryService(), Actor())
        >>> session.start().text.startswith("Hi!")
        True
        >>> session.handle("Code review").text.startswith("Great!")
        True
    """

    def __init__(
        self,
        engine: DialogueEngine,
        delivery_service: DeliveryService,
        actor: Actor,
        repository: Optional[SessionRepository] = None,
        on_delivery: Optional[Callable[[DeliveryOutcome], None]] = None,
        session_id: Optional[str] = None,
    ):
        """
        Initialize the session, resuming a stored state when available.

        Args:
            engine: Dialogue engine driving the questions
            delivery_service: Where confirmed entries are sent
            actor: User the entries are reported for
            repository: Snapshot store (in-memory by default)
            on_delivery: Called (on a worker thread) with each outcome
            session_id: Identifier added to log records
        """
        self.engine = engine
        self.repository = repository or InMemorySessionRepository()
        self.session_id = session_id or generate_correlation_id()
        self.deliveries = DeliveryTracker(delivery_service, actor, on_delivery)
        stored = self.repository.load()
        if stored is not None and not stored.partial_entry.is_empty():
            with LogContext(session_id=self.session_id):
                logger.info(f"Resuming saved draft at step '{stored.step.value}'")
        self.state = stored or ConversationState.initial()

    def start(self) -> Prompt:
        """Prompt for the current step (greeting, or where a resumed session stopped)."""
        return self.engine.prompt_for(self.state.step, self.state.partial_entry)

    def handle(self, user_input: str) -> Prompt:
        """
        Process one answer and return the next prompt.

        Args:
            user_input: Typed or transcribed answer

        Returns:
            Prompt to show next
        """
        with LogContext(session_id=self.session_id):
            result = self.engine.transition(self.state, user_input)

            if result.completed:
                logger.info("Time entry confirmed, submitting for delivery")
                self.deliveries.submit(result.entry)
                self.state = ConversationState.initial()
            else:
                self.state = result.state

            self._persist()
            return result.prompt

    def restart(self) -> Prompt:
        """Discard the draft and start again from the greeting."""
        with LogContext(session_id=self.session_id):
            logger.info("Conversation restarted")
            self.state = ConversationState.initial()
            self._persist()
            return self.engine.start()

    def retry_delivery(self) -> Optional["Future[DeliveryOutcome]"]:
        """Re-send the last entry whose delivery failed."""
        with LogContext(session_id=self.session_id):
            return self.deliveries.retry_failed()

    def drain_notifications(self) -> List[DeliveryOutcome]:
        """Delivery outcomes received since the last call."""
        return self.deliveries.drain()

    def _persist(self) -> None:
        try:
            self.repository.save(self.state)
        except SessionStoreError as e:
            logger.error(f"Session snapshot not saved: {e}")
