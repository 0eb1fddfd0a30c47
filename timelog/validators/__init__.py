"""Validation layer for time entry completeness."""

from timelog.validators.entry_validator import (
    PLACEHOLDER_DESCRIPTION,
    EntryValidator,
    ValidationResult,
)
from timelog.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)

__all__ = [
    "EntryValidator",
    "ValidationResult",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
    "PLACEHOLDER_DESCRIPTION",
]
