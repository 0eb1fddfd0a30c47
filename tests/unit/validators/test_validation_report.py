"""Unit tests for ValidationReport."""

from timelog.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)


class TestValidationReport:
    """Test ValidationReport."""

    def test_empty_report_is_valid(self):
        report = ValidationReport()

        assert report.is_valid()
        assert report.summary() == "No issues found"
        assert report.format() == "Validation successful - no issues found"

    def test_missing_field_is_an_error(self):
        report = ValidationReport()
        report.add_missing("matter_name")

        assert not report.is_valid()
        assert report.error_count == 1
        assert report.missing_fields == ["matter_name"]

    def test_unusable_value_counts_as_missing(self):
        report = ValidationReport()
        report.add_error("duration_minutes", "Must be positive", 0)

        assert report.missing_fields == ["duration_minutes"]
        assert report.get_errors()[0].value == 0

    def test_warnings_and_info_do_not_invalidate(self):
        report = ValidationReport()
        report.add_warning("task_description", "Placeholder used", "")
        report.add_info("energy_impact", "Not an offered option", "meh")

        assert report.is_valid()
        assert report.missing_fields == []
        assert report.summary() == "1 warning(s), 1 info message(s)"

    def test_format_lists_errors_first(self):
        report = ValidationReport()
        report.add_info("task_goal", "Not an offered option", "x")
        report.add_missing("work_type")

        lines = report.format().splitlines()

        assert lines[0] == "Validation Report - 1 error(s), 1 info message(s)"
        assert lines[1] == "  - [ERROR] work_type: Value is required"
        assert lines[2].startswith("  - [INFO] task_goal")

    def test_issue_str(self):
        issue = ValidationIssue(ValidationSeverity.WARNING, "field", "message")
        assert str(issue) == "[WARNING] field: message"
