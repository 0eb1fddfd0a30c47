"""Validation report for collecting and formatting entry issues."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, List


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class ValidationIssue:
    """Represents a single validation issue.

    Attributes:
        severity: The severity level of the issue
        field: The entry field the issue refers to
        message: Human-readable description of the issue
        value: The offending value
        missing: Whether the issue means "still needs to be collected"
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any = None
    missing: bool = False

    def __str__(self) -> str:
        return f"[{self.severity.name}] {self.field}: {self.message}"


class ValidationReport:
    """Collects validation issues for one partial time entry.

    Errors make the entry undeliverable; warnings and info messages are
    kept for logging and display only.

    Example:
        >>> report = ValidationReport()
        >>> report.add_missing("matter_name")
        >>> report.is_valid()
        False
        >>> report.missing_fields
        ['matter_name']
    """

    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []

    def _count(self, severity: ValidationSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def error_count(self) -> int:
        return self._count(ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return self._count(ValidationSeverity.INFO)

    @property
    def missing_fields(self) -> List[str]:
        """Fields that still have to be collected, in the order reported."""
        return [issue.field for issue in self.issues if issue.missing]

    def is_valid(self) -> bool:
        """Check if validation passed (no errors).

        Returns:
            True if no errors are present, False otherwise
        """
        return self.error_count == 0

    def add_missing(self, field: str, message: str = "Value is required") -> None:
        """Record a required field that has not been collected."""
        self.issues.append(
            ValidationIssue(ValidationSeverity.ERROR, field, message, None, True)
        )

    def add_error(self, field: str, message: str, value: Any) -> None:
        """Record a field whose value is present but unusable.

        Unusable values count as missing so the conversation asks again.
        """
        self.issues.append(
            ValidationIssue(ValidationSeverity.ERROR, field, message, value, True)
        )

    def add_warning(self, field: str, message: str, value: Any) -> None:
        self.issues.append(
            ValidationIssue(ValidationSeverity.WARNING, field, message, value)
        )

    def add_info(self, field: str, message: str, value: Any) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.INFO, field, message, value))

    def get_errors(self) -> List[ValidationIssue]:
        return [
            issue for issue in self.issues if issue.severity == ValidationSeverity.ERROR
        ]

    def summary(self) -> str:
        """Get a summary of the validation report.

        Returns:
            Summary string with counts of errors, warnings, and info messages
        """
        parts = []
        if self.error_count:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count:
            parts.append(f"{self.warning_count} warning(s)")
        if self.info_count:
            parts.append(f"{self.info_count} info message(s)")
        return ", ".join(parts) if parts else "No issues found"

    def format(self) -> str:
        """Format the report for display, most severe issues first."""
        if not self.issues:
            return "Validation successful - no issues found"

        lines = [f"Validation Report - {self.summary()}"]
        for issue in sorted(self.issues, key=lambda i: i.severity, reverse=True):
            lines.append(f"  - {issue}")
        return "\n".join(lines)
