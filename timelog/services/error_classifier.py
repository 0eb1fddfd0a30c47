"""
Error classification for webhook delivery failures.
"""

import logging
import socket
from enum import Enum
from typing import Any, Dict

import requests.exceptions

from timelog.exceptions import ConfigMissing, DeliveryRejected, DeliveryTransportError

logger = logging.getLogger(__name__)


class DeliveryErrorKind(Enum):
    """Classification of delivery errors."""

    TRANSPORT = "DeliveryTransportError"  # Network failure, retried
    REJECTED = "DeliveryRejected"  # Non-2xx response, retried
    CONFIG_MISSING = "ConfigMissing"  # No endpoint, skipped silently
    UNKNOWN = "unknown"  # Anything else, not retried


class DeliveryErrorClassifier:
    """
    Maps exceptions raised while delivering to the delivery error taxonomy.

    Features:
    - requests/socket exceptions count as transport errors
    - HTTP status classification for rejected deliveries
    - Human-readable descriptions for failure notices
    - Statistics tracking
    """

    def __init__(self):
        """Initialize classifier with statistics tracking."""
        self._stats: Dict[str, int] = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        stats = {kind.value: 0 for kind in DeliveryErrorKind}
        stats["total"] = 0
        return stats

    @staticmethod
    def _kind(exception: BaseException) -> DeliveryErrorKind:
        if isinstance(exception, DeliveryRejected):
            return DeliveryErrorKind.REJECTED
        if isinstance(
            exception,
            (DeliveryTransportError, socket.timeout, requests.exceptions.RequestException),
        ):
            return DeliveryErrorKind.TRANSPORT
        if isinstance(exception, ConfigMissing):
            return DeliveryErrorKind.CONFIG_MISSING
        return DeliveryErrorKind.UNKNOWN

    def classify(self, exception: BaseException) -> DeliveryErrorKind:
        """
        Classify an exception and count it in the statistics.

        Args:
            exception: The exception to classify

        Returns:
            DeliveryErrorKind classification
        """
        kind = self._kind(exception)
        self._stats["total"] += 1
        self._stats[kind.value] += 1
        return kind

    def is_retryable(self, exception: BaseException) -> bool:
        """
        Check if an exception should be retried (used as the retry condition).

        Both transport failures and rejected responses are retried; a
        missing configuration or an unexpected error is not. Not counted in
        the statistics, which only record final failures.
        """
        return self._kind(exception) in (
            DeliveryErrorKind.TRANSPORT,
            DeliveryErrorKind.REJECTED,
        )

    def get_error_description(self, exception: BaseException) -> str:
        """
        Get a human-readable error description.

        Args:
            exception: The exception to describe

        Returns:
            Error description string
        """
        if isinstance(exception, DeliveryRejected):
            status = exception.status_code
            if status == 401 or status == 403:
                return f"Webhook refused credentials (HTTP {status})"
            if status == 429:
                return "Webhook rate limit reached (HTTP 429)"
            if 500 <= status < 600:
                return f"Webhook server error (HTTP {status})"
            return f"Webhook rejected the entry (HTTP {status})"

        cause = exception.__cause__ or exception
        if isinstance(cause, (socket.timeout, requests.exceptions.Timeout)):
            return "Webhook did not answer in time"
        if isinstance(cause, requests.exceptions.ConnectionError):
            return "Could not connect to the webhook"
        if isinstance(exception, ConfigMissing):
            return "No webhook endpoint configured"

        return f"{type(exception).__name__}: {exception}"

    def get_statistics(self) -> Dict[str, Any]:
        """Get classification counts per kind."""
        return self._stats.copy()

    def reset_statistics(self):
        """Reset classification statistics."""
        self._stats = self._empty_stats()
