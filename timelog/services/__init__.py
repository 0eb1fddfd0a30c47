"""
Services for the time logging assistant.

This package provides:
- Webhook delivery with bounded retries and exponential backoff
- Delivery error classification
- Whole-snapshot session persistence
- The text-generation client for the open-ended mode
"""

from .delivery_service import (
    DeliveryOutcome,
    DeliveryPayload,
    DeliveryService,
    DeliveryStatus,
    build_payload,
    parse_payload,
)
from .error_classifier import DeliveryErrorClassifier, DeliveryErrorKind
from .llm_client import OpenAIChatClient, TextGenerator, build_system_prompt
from .retry_handler import DeliveryPhase, RetryHandler, RetryRun
from .session_repository import (
    InMemorySessionRepository,
    JsonFileSessionRepository,
    SessionRepository,
)

__all__ = [
    "DeliveryService",
    "DeliveryOutcome",
    "DeliveryPayload",
    "DeliveryStatus",
    "build_payload",
    "parse_payload",
    "DeliveryErrorClassifier",
    "DeliveryErrorKind",
    "RetryHandler",
    "RetryRun",
    "DeliveryPhase",
    "SessionRepository",
    "InMemorySessionRepository",
    "JsonFileSessionRepository",
    "TextGenerator",
    "OpenAIChatClient",
    "build_system_prompt",
]
