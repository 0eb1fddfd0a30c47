"""Completeness validation for time entries.

This module provides the EntryValidator which turns a PartialTimeEntry
into a TimeEntry once every field required by its work type is present.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from timelog.models.time_entry import (
    BILLABLE_FIELDS,
    ENERGY_IMPACTS,
    ENJOYMENT_LEVELS,
    NON_BILLABLE_FIELDS,
    TASK_GOALS,
    PartialTimeEntry,
    TimeEntry,
    secondary_fields_for,
)
from timelog.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)

PLACEHOLDER_DESCRIPTION = "(no description provided)"

# Dialogue order; the first missing field decides where the conversation resumes
FIELD_ORDER = [
    "task_description",
    "duration_minutes",
    "start_time",
    "work_type",
    "matter_name",
    "cost_centre_name",
    "business_area_name",
    "subcategory_name",
    "enjoyment_level",
    "energy_impact",
    "task_goal",
]

_VOCABULARIES = {
    "enjoyment_level": ENJOYMENT_LEVELS,
    "energy_impact": ENERGY_IMPACTS,
    "task_goal": TASK_GOALS,
}


@dataclass
class ValidationResult:
    """Outcome of validating a partial entry.

    Exactly one of ``entry`` (when ok) or a non-empty ``missing_fields``
    (when not ok) is meaningful.
    """

    entry: Optional[TimeEntry] = None
    missing_fields: List[str] = field(default_factory=list)
    report: ValidationReport = field(default_factory=ValidationReport)

    @property
    def ok(self) -> bool:
        return self.entry is not None


class EntryValidator:
    """Validator for partial time entries.

    Example:
        >>> validator = EntryValidator()
        >>> result = validator.validate(PartialTimeEntry(task_description="x"))
        >>> result.ok
        False
        >>> result.missing_fields[:2]
        ['duration_minutes', 'start_time']
    """

    def validate(self, partial: PartialTimeEntry) -> ValidationResult:
        """Validate a partial entry against the required-field rules.

        Args:
            partial: Entry collected so far

        Returns:
            ValidationResult holding either the TimeEntry or the missing fields
        """
        report = ValidationReport()
        data = partial.model_dump()

        description = (data["task_description"] or "").strip()
        if not description:
            report.add_warning(
                "task_description",
                "Empty task description replaced by placeholder",
                data["task_description"],
            )
            description = PLACEHOLDER_DESCRIPTION
        data["task_description"] = description

        duration = data["duration_minutes"]
        if duration is None:
            report.add_missing("duration_minutes")
        elif isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            report.add_error(
                "duration_minutes", "Duration must be a positive number of minutes", duration
            )

        for name in ("start_time", "work_type"):
            if data[name] is None:
                report.add_missing(name)

        work_type = data["work_type"]
        required_secondary = secondary_fields_for(work_type) if work_type else ()
        for name in required_secondary:
            if not (data[name] or "").strip():
                report.add_missing(name)

        for name, vocabulary in _VOCABULARIES.items():
            value = (data[name] or "").strip()
            if not value:
                report.add_missing(name)
            elif value not in vocabulary:
                report.add_info(name, "Answer is not one of the offered options", value)

        missing = sorted(set(report.missing_fields), key=FIELD_ORDER.index)
        if missing:
            logger.debug(f"Entry incomplete, missing: {', '.join(missing)}")
            return ValidationResult(missing_fields=missing, report=report)

        # Drop secondary fields that belong to another work type
        for name in BILLABLE_FIELDS + NON_BILLABLE_FIELDS:
            data[name] = data[name].strip() if name in required_secondary else ""

        entry = TimeEntry(**data)
        logger.debug(f"Entry valid ({report.summary()})")
        return ValidationResult(entry=entry, report=report)
