"""Conversation data models.

This module defines the models shared by both conversation modes:
the fixed-flow ConversationState, transcript turns, prompts shown to the
user, and the actor the entry is reported for.
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import Field

from timelog.models.base import BaseDataModel
from timelog.models.time_entry import PartialTimeEntry


class Step(str, Enum):
    """Position in the fixed question sequence."""

    GREETING = "greeting"
    TASK = "task"
    TIME = "time"
    WORK_TYPE = "workType"
    MATTER = "matter"
    COST_CENTRE = "costCentre"
    BUSINESS_AREA = "businessArea"
    SUBCATEGORY = "subcategory"
    ENJOYMENT = "enjoyment"
    ENERGY = "energy"
    GOAL = "goal"
    CONFIRMATION = "confirmation"
    COMPLETE = "complete"


class ConversationState(BaseDataModel):
    """Session-scoped state of the fixed-flow conversation.

    The state is replaced as a whole after every accepted answer; callers
    never patch individual fields of a stored state.

    Attributes:
        step: The question that was asked last
        partial_entry: Everything collected so far
    """

    step: Step = Step.GREETING
    partial_entry: PartialTimeEntry = Field(default_factory=PartialTimeEntry)

    @classmethod
    def initial(cls) -> "ConversationState":
        """Create the state every session starts from."""
        return cls(step=Step.GREETING, partial_entry=PartialTimeEntry())

    @property
    def is_terminal(self) -> bool:
        """Whether the conversation reached the complete step."""
        return self.step == Step.COMPLETE


class Turn(BaseDataModel):
    """One role-tagged message of a transcript."""

    role: Literal["system", "user", "assistant"]
    content: str


class Prompt(BaseDataModel):
    """A question or message to present to the user.

    Attributes:
        text: Message text
        options: Selectable answers (may be empty)
        kind: Presentation hint for the front end
    """

    text: str
    options: List[str] = Field(default_factory=list)
    kind: Literal["text", "select", "confirmation"] = "text"


class Actor(BaseDataModel):
    """The authenticated user an entry is reported for."""

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
