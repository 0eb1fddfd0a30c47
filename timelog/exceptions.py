"""
Exception hierarchy for the time logging assistant.
"""

from typing import Optional


class TimeLogError(Exception):
    """Base class for all time logging errors."""

    pass


class DeliveryError(TimeLogError):
    """Raised when a time entry could not be handed to the webhook."""

    pass


class DeliveryTransportError(DeliveryError):
    """Raised on network failure (connection refused, DNS, timeout)."""

    pass


class DeliveryRejected(DeliveryError):
    """Raised when the webhook answers with a non-2xx status."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        """
        Initialize rejection error.

        Args:
            status_code: HTTP status returned by the endpoint
            body: Optional (truncated) response body
        """
        self.status_code = status_code
        self.body = body
        message = f"Webhook rejected entry with HTTP {status_code}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class ConfigMissing(TimeLogError):
    """Raised when no delivery endpoint is configured."""

    pass


class TextGenerationError(TimeLogError):
    """Raised when the text-generation collaborator fails to answer."""

    pass


class SessionStoreError(TimeLogError):
    """Raised when a session snapshot cannot be read or written."""

    pass
