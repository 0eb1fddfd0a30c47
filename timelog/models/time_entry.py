"""Time entry data models.

This module defines the TimeEntry model which represents one unit of
reported work, and PartialTimeEntry which is filled in step by step while
the conversation is in progress.
"""

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from timelog.models.base import BaseDataModel


class WorkType(str, Enum):
    """Classification of a time entry."""

    BILLABLE = "billable"
    NON_BILLABLE = "non_billable"
    PERSONAL = "personal"


ENJOYMENT_LEVELS: List[str] = [
    "Love it/Great at it",
    "Like it/Good at it",
    "Hate it/Good at it",
    "Hate it/Bad at it",
]

ENERGY_IMPACTS: List[str] = ["Gave me energy", "Drained energy", "Neutral"]

TASK_GOALS: List[str] = [
    "Delegate to AI",
    "Delegate to person",
    "Transfer to someone",
    "Keep doing it",
]

BILLABLE_FIELDS = ("matter_name", "cost_centre_name")
NON_BILLABLE_FIELDS = ("business_area_name", "subcategory_name")


def secondary_fields_for(work_type: WorkType) -> tuple:
    """Return the secondary classification fields required by a work type.

    Args:
        work_type: The entry's work type

    Returns:
        Tuple of field names (empty for personal time)
    """
    if work_type == WorkType.BILLABLE:
        return BILLABLE_FIELDS
    if work_type == WorkType.NON_BILLABLE:
        return NON_BILLABLE_FIELDS
    return ()


class PartialTimeEntry(BaseDataModel):
    """A time entry under construction. Every field is optional."""

    task_description: Optional[str] = None
    duration_minutes: Optional[int] = None
    start_time: Optional[dt.datetime] = None
    work_type: Optional[WorkType] = None
    matter_name: Optional[str] = None
    cost_centre_name: Optional[str] = None
    business_area_name: Optional[str] = None
    subcategory_name: Optional[str] = None
    enjoyment_level: Optional[str] = None
    energy_impact: Optional[str] = None
    task_goal: Optional[str] = None

    def is_empty(self) -> bool:
        """Check whether nothing has been collected yet."""
        return all(value is None for value in self.model_dump().values())


class TimeEntry(BaseDataModel):
    """A complete, validated time entry.

    Exactly one pair of secondary fields is populated depending on the
    work type: matter and cost centre for billable work, business area and
    subcategory for non-billable work, and neither for personal time.
    Fields that do not apply are empty strings.

    Attributes:
        task_description: What was worked on
        duration_minutes: Duration in whole minutes
        start_time: When the entry was recorded
        work_type: Billable, non-billable or personal
        matter_name: Matter/client (billable only)
        cost_centre_name: Cost centre (billable only)
        business_area_name: Business area (non-billable only)
        subcategory_name: Subcategory (non-billable only)
        enjoyment_level: How the user feels about the task
        energy_impact: Whether the task gave or drained energy
        task_goal: What to do with this kind of task in the future

    Example:
        >>> entry = TimeEntry(
        ...     task_description="Contract review",
        ...     duration_minutes=90,
        ...     start_time=dt.datetime(2024, 5, 1, 9, 0, tzinfo=dt.timezone.utc),
        ...     work_type=WorkType.BILLABLE,
        ...     matter_name="Client A - Project Alpha",
        ...     cost_centre_name="Development",
        ...     enjoyment_level="Like it/Good at it",
        ...     energy_impact="Neutral",
        ...     task_goal="Keep doing it",
        ... )
        >>> entry.duration_minutes
        90
    """

    task_description: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., gt=0)
    start_time: dt.datetime
    work_type: WorkType
    matter_name: str = ""
    cost_centre_name: str = ""
    business_area_name: str = ""
    subcategory_name: str = ""
    enjoyment_level: str = Field(..., min_length=1)
    energy_impact: str = Field(..., min_length=1)
    task_goal: str = Field(..., min_length=1)

    @field_validator("task_description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only descriptions."""
        if not v.strip():
            raise ValueError("task_description cannot be empty or whitespace")
        return v.strip()

    @model_validator(mode="after")
    def validate_classification(self) -> "TimeEntry":
        """Validate that secondary fields match the work type.

        Returns:
            The validated model instance

        Raises:
            ValueError: If a required secondary field is empty or a field
                belonging to another work type is populated
        """
        required = secondary_fields_for(self.work_type)
        for name in BILLABLE_FIELDS + NON_BILLABLE_FIELDS:
            value = getattr(self, name)
            if name in required and not value.strip():
                raise ValueError(
                    f"{name} is required for {self.work_type.value} entries"
                )
            if name not in required and value:
                raise ValueError(
                    f"{name} must be empty for {self.work_type.value} entries"
                )
        return self

    def to_partial(self) -> PartialTimeEntry:
        """Convert back into a partial entry (non-applicable fields unset)."""
        data = self.model_dump()
        for name in BILLABLE_FIELDS + NON_BILLABLE_FIELDS:
            if not data[name]:
                data[name] = None
        return PartialTimeEntry(**data)
