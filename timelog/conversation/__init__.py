"""Conversation sessions for the fixed and open-ended modes."""

from timelog.conversation.open_session import OpenConversation, OpenReply
from timelog.conversation.session import (
    ConversationSession,
    DeliveryTracker,
    describe_outcome,
)

__all__ = [
    "ConversationSession",
    "OpenConversation",
    "OpenReply",
    "DeliveryTracker",
    "describe_outcome",
]
