"""Unit tests for free-text extraction and completion detection."""

import datetime as dt

import pytest

from timelog.dialogue.options import StaticOptionSource
from timelog.extractors.free_text_extractor import (
    DEFAULTS,
    CompletionDetector,
    CompletionPolicy,
    FreeTextExtractor,
    PatternRule,
)
from timelog.models import Turn, WorkType

NOW = dt.datetime(2024, 10, 15, 9, 30, tzinfo=dt.timezone.utc)


@pytest.fixture
def extractor():
    """Extractor with a fixed clock."""
    return FreeTextExtractor(clock=lambda: NOW)


class TestPatternRule:
    """Test PatternRule."""

    def test_regex_rule_returns_captured_group(self):
        rule = PatternRule.regex("task", r"task:\s*(.+)")
        assert rule.apply("Task: write tests") == "write tests"

    def test_keyword_rule_returns_constant(self):
        rule = PatternRule.keyword("billable", r"\bbillable\b", WorkType.BILLABLE)
        assert rule.apply("it was BILLABLE work") == WorkType.BILLABLE

    def test_no_match_returns_none(self):
        rule = PatternRule.regex("task", r"task:\s*(.+)")
        assert rule.apply("nothing here") is None

    def test_empty_capture_is_treated_as_no_match(self):
        rule = PatternRule.regex("task", r"task:\s*(\w*)")
        assert rule.apply("task: ") is None


class TestFreeTextExtractor:
    """Test FreeTextExtractor."""

    def test_task_and_duration(self, extractor):
        entry = extractor.extract_text("I worked on the API docs for 2 hours")

        assert entry.task_description == "the API docs"
        assert entry.duration_minutes == 120

    def test_hours_and_minutes(self, extractor):
        entry = extractor.extract_text("Task: code review. It took 1 hour and 15 minutes")

        assert entry.task_description == "code review"
        assert entry.duration_minutes == 75

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("it took 45 mins", 45),
            ("roughly an hour and a half", 90),
            ("half an hour", 30),
            ("about an hour", 60),
            ("1.5h", 90),
        ],
    )
    def test_duration_phrases(self, extractor, text, expected):
        assert extractor.extract_text(text).duration_minutes == expected

    def test_zero_duration_falls_back_to_default(self, extractor):
        entry = extractor.extract_text("I worked on the report for 0 minutes")

        assert entry.duration_minutes == DEFAULTS["duration_minutes"]

    def test_zero_duration_skipped_for_later_correction(self, extractor):
        entry = extractor.extract_text(
            "I worked on the report for 0 minutes, log the time\n"
            "Sorry, 45 minutes. Please log the time"
        )

        assert entry.duration_minutes == 45

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("this was non-billable", WorkType.NON_BILLABLE),
            ("internal meeting", WorkType.NON_BILLABLE),
            ("just a personal errand", WorkType.PERSONAL),
            ("billable work", WorkType.BILLABLE),
        ],
    )
    def test_work_type(self, extractor, text, expected):
        assert extractor.extract_text(text).work_type == expected

    def test_non_billable_wins_over_billable(self, extractor):
        """Test the more specific rule is tried first."""
        entry = extractor.extract_text("not billable, although billable hours are tight")
        assert entry.work_type == WorkType.NON_BILLABLE

    def test_classification_fields(self, extractor):
        text = (
            "Client is Acme Corp. Cost centre: Operations. "
            "I loved it and it gave me energy. I'd like to delegate it to AI."
        )
        entry = extractor.extract_text(text)

        assert entry.matter_name == "Acme Corp"
        assert entry.cost_centre_name == "Operations"
        assert entry.enjoyment_level == "Love it/Great at it"
        assert entry.energy_impact == "Gave me energy"
        assert entry.task_goal == "Delegate to AI"

    def test_non_billable_classification(self, extractor):
        entry = extractor.extract_text(
            "Business area: Client Relations. Subcategory: Meetings. It was tiring."
        )

        assert entry.business_area_name == "Client Relations"
        assert entry.subcategory_name == "Meetings"
        assert entry.energy_impact == "Drained energy"

    def test_defaults_when_nothing_matches(self, extractor):
        entry = extractor.extract_text("hello there")

        for field_name, default in DEFAULTS.items():
            assert getattr(entry, field_name) == default
        assert entry.start_time == NOW

    def test_known_options_are_preferred(self):
        options = StaticOptionSource(
            matters=["Client B - Project Beta"], cost_centres=["Sales"]
        )
        extractor = FreeTextExtractor(options=options, clock=lambda: NOW)

        entry = extractor.extract_text(
            "That was for Client B - Project Beta, booked on Sales"
        )

        assert entry.matter_name == "Client B - Project Beta"
        assert entry.cost_centre_name == "Sales"

    def test_only_user_turns_are_read(self, extractor):
        transcript = [
            Turn(role="system", content="Task: ignore me for 5 hours"),
            Turn(role="assistant", content="How long did you work on it? 3 hours?"),
            Turn(role="user", content="I worked on invoices for 20 minutes"),
        ]

        entry = extractor.extract(transcript)

        assert entry.task_description == "invoices"
        assert entry.duration_minutes == 20


class TestCompletionDetector:
    """Test CompletionDetector."""

    def test_fires_once_by_default(self):
        detector = CompletionDetector()
        transcript = [Turn(role="user", content="That's all, log the time")]

        assert detector.check(transcript) is True
        assert detector.check(transcript) is False

    def test_reset_rearms_detector(self):
        detector = CompletionDetector()
        transcript = [Turn(role="user", content="submit please")]

        detector.check(transcript)
        detector.reset()

        assert detector.check(transcript) is True

    def test_every_turn_policy(self):
        detector = CompletionDetector(policy=CompletionPolicy.EVERY_TURN)
        transcript = [Turn(role="user", content="I'm done")]

        assert detector.check(transcript)
        assert detector.check(transcript)

    def test_only_trailing_window_is_scanned(self):
        detector = CompletionDetector(window=2)
        transcript = [
            Turn(role="user", content="I finished the report"),
            Turn(role="assistant", content="How long did it take?"),
            Turn(role="user", content="2 hours"),
        ]

        assert detector.matches(transcript) is False

    def test_system_turns_are_ignored(self):
        detector = CompletionDetector(window=1)
        transcript = [
            Turn(role="user", content="submit"),
            Turn(role="system", content="Ask the user to say log the time"),
        ]

        assert detector.matches(transcript) is True

    def test_case_insensitive(self):
        detector = CompletionDetector()
        assert detector.matches([Turn(role="user", content="LOG THIS please")])

    def test_no_trigger(self):
        detector = CompletionDetector()
        assert detector.check([Turn(role="user", content="still working")]) is False
        assert detector.fired is False
