"""
Webhook delivery of completed time entries.

The service serializes a TimeEntry into the wire payload, attaches a
bearer token when an API key is configured and POSTs it to the webhook,
retrying transport failures and non-2xx responses with capped exponential
backoff. Delivery never raises to the caller: every call ends in a single
DeliveryOutcome.
"""

import datetime as dt
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import requests

from timelog.exceptions import ConfigMissing, DeliveryRejected, DeliveryTransportError
from timelog.models.base import BaseDataModel
from timelog.models.conversation import Actor
from timelog.models.time_entry import TimeEntry
from timelog.services.error_classifier import DeliveryErrorClassifier, DeliveryErrorKind
from timelog.services.retry_handler import RetryHandler
from timelog.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    sanitize_sensitive_data,
)

logger = logging.getLogger(__name__)

TEST_MESSAGE = "This is a test webhook from the time logging assistant"


class DeliveryPayload(BaseDataModel):
    """Wire format submitted to the webhook."""

    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    timestamp: dt.datetime
    time_entry: TimeEntry


def build_payload(
    entry: TimeEntry, actor: Actor, sent_at: Optional[dt.datetime] = None
) -> Dict[str, Any]:
    """
    Build the JSON-compatible webhook payload.

    Args:
        entry: Validated time entry
        actor: User the entry is reported for
        sent_at: Send time (defaults to now, UTC)

    Returns:
        Dictionary ready to be sent as a JSON body
    """
    payload = DeliveryPayload(
        user_id=actor.id,
        user_name=actor.name,
        user_email=actor.email,
        timestamp=sent_at or dt.datetime.now(dt.timezone.utc),
        time_entry=entry,
    )
    return payload.model_dump(mode="json")


def parse_payload(data: Dict[str, Any]) -> DeliveryPayload:
    """Parse a webhook payload back into models (inverse of build_payload)."""
    return DeliveryPayload.model_validate(data)


class DeliveryStatus(str, Enum):
    """Final status of a delivery."""

    DELIVERED = "delivered"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DeliveryOutcome:
    """Result reported for one delivery request.

    Attributes:
        status: Delivered, skipped (no endpoint) or failed
        delivery_id: Correlation ID used in the logs
        attempts: Number of HTTP attempts made
        error_kind: Error classification when not delivered
        error: Human-readable failure description
        status_code: Last HTTP status received, if any
        entry: The entry that was (or was not) delivered
    """

    status: DeliveryStatus
    delivery_id: str
    attempts: int = 0
    error_kind: Optional[DeliveryErrorKind] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    entry: Optional[TimeEntry] = None

    @property
    def ok(self) -> bool:
        return self.status != DeliveryStatus.FAILED


class DeliveryService:
    """
    Delivers time entries to the configured webhook.

    Features:
    - Documented no-op when no endpoint is configured
    - Bearer authentication when an API key is set
    - Per-attempt timeout and bounded retries with backoff
    - Detached delivery on a worker thread (deliver_async)
    """

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        api_key: Optional[str] = None,
        enabled: bool = True,
        retry_handler: Optional[RetryHandler] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        classifier: Optional[DeliveryErrorClassifier] = None,
        max_workers: int = 2,
    ):
        """
        Initialize the delivery service.

        Args:
            webhook_url: Destination endpoint (None disables delivery)
            api_key: Optional bearer token
            enabled: Master switch for delivery
            retry_handler: Retry policy (defaults to 3 attempts)
            timeout: Per-attempt request timeout in seconds
            session: requests session (injected in tests)
            classifier: Error classifier for failure reporting
            max_workers: Worker threads for deliver_async
        """
        self.webhook_url = webhook_url
        self.api_key = api_key
        self.enabled = enabled
        self.classifier = classifier or DeliveryErrorClassifier()
        self.retry_handler = retry_handler or RetryHandler(
            retry_condition=self.classifier.is_retryable
        )
        self.timeout = timeout
        self.session = session or requests.Session()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="timelog-delivery"
        )

    @classmethod
    def from_config(cls, config, **kwargs) -> "DeliveryService":
        """
        Create a service from TimeLogConfig settings.

        Args:
            config: TimeLogConfig instance
            **kwargs: Overrides passed to the constructor
        """
        classifier = kwargs.pop("classifier", None) or DeliveryErrorClassifier()
        retry_handler = RetryHandler(
            max_attempts=config.delivery_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            retry_condition=classifier.is_retryable,
        )
        options = {
            "webhook_url": config.webhook_url,
            "api_key": config.webhook_api_key,
            "enabled": config.webhook_enabled,
            "retry_handler": retry_handler,
            "timeout": config.request_timeout,
            "classifier": classifier,
        }
        options.update(kwargs)
        return cls(**options)

    @property
    def configured(self) -> bool:
        """Whether a destination endpoint is configured and enabled."""
        return self.enabled and bool(self.webhook_url)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, body: Dict[str, Any]) -> requests.Response:
        headers = self._headers()
        logger.debug(
            f"POST {self.webhook_url} headers={sanitize_sensitive_data(headers)}"
        )
        try:
            response = self.session.post(
                self.webhook_url, json=body, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise DeliveryTransportError(f"{type(e).__name__}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise DeliveryRejected(response.status_code, (response.text or "")[:200])
        return response

    def _send(self, body: Dict[str, Any], entry: Optional[TimeEntry]) -> DeliveryOutcome:
        delivery_id = generate_correlation_id()

        with LogContext(delivery_id=delivery_id):
            if not self.configured:
                missing = ConfigMissing("No webhook endpoint configured")
                logger.info(f"{missing}, delivery skipped")
                return DeliveryOutcome(
                    status=DeliveryStatus.SKIPPED,
                    delivery_id=delivery_id,
                    error_kind=self.classifier.classify(missing),
                    error=self.classifier.get_error_description(missing),
                    entry=entry,
                )

            run = self.retry_handler.execute_with_retry(self._post, body)

            if run.succeeded:
                logger.info(f"Delivered to webhook in {run.attempts} attempt(s)")
                return DeliveryOutcome(
                    status=DeliveryStatus.DELIVERED,
                    delivery_id=delivery_id,
                    attempts=run.attempts,
                    status_code=run.value.status_code,
                    entry=entry,
                )

            error = run.last_error
            status_code = error.status_code if isinstance(error, DeliveryRejected) else None
            error_kind = self.classifier.classify(error)
            description = self.classifier.get_error_description(error)
            logger.error(f"Delivery failed after {run.attempts} attempt(s): {description}")
            return DeliveryOutcome(
                status=DeliveryStatus.FAILED,
                delivery_id=delivery_id,
                attempts=run.attempts,
                error_kind=error_kind,
                error=description,
                status_code=status_code,
                entry=entry,
            )

    def deliver(self, entry: TimeEntry, actor: Actor) -> DeliveryOutcome:
        """
        Deliver an entry, blocking until the outcome is known.

        Args:
            entry: Validated time entry
            actor: User the entry is reported for

        Returns:
            DeliveryOutcome (never raises for delivery failures)
        """
        return self._send(build_payload(entry, actor), entry)

    def deliver_async(
        self,
        entry: TimeEntry,
        actor: Actor,
        on_complete: Optional[Callable[[DeliveryOutcome], None]] = None,
    ) -> "Future[DeliveryOutcome]":
        """
        Deliver an entry on a worker thread.

        Args:
            entry: Validated time entry
            actor: User the entry is reported for
            on_complete: Called with the outcome once delivery finished

        Returns:
            Future resolving to the DeliveryOutcome
        """

        def task() -> DeliveryOutcome:
            outcome = self.deliver(entry, actor)
            if on_complete is not None:
                try:
                    on_complete(outcome)
                except Exception as e:
                    logger.error(f"Delivery callback failed: {e}", exc_info=True)
            return outcome

        return self._executor.submit(task)

    def send_test(self) -> DeliveryOutcome:
        """Send a small test payload to check the webhook settings."""
        body = {
            "test": True,
            "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
            "message": TEST_MESSAGE,
        }
        return self._send(body, None)

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool and HTTP session."""
        self._executor.shutdown(wait=wait)
        self.session.close()
        logger.debug(f"Delivery service closed, retry stats: {self.retry_handler.get_retry_statistics()}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
