"""Data models for the time logging assistant.

This package contains Pydantic models for all conversation entities:
- BaseDataModel: Base class with common configuration
- TimeEntry / PartialTimeEntry: The reported unit of work
- ConversationState: Fixed-flow session state
- Turn, Prompt, Actor: Conversation plumbing
"""

from timelog.models.base import BaseDataModel
from timelog.models.conversation import Actor, ConversationState, Prompt, Step, Turn
from timelog.models.time_entry import (
    ENERGY_IMPACTS,
    ENJOYMENT_LEVELS,
    TASK_GOALS,
    PartialTimeEntry,
    TimeEntry,
    WorkType,
)

__all__ = [
    "BaseDataModel",
    "TimeEntry",
    "PartialTimeEntry",
    "WorkType",
    "ConversationState",
    "Step",
    "Turn",
    "Prompt",
    "Actor",
    "ENJOYMENT_LEVELS",
    "ENERGY_IMPACTS",
    "TASK_GOALS",
]
