"""
Pattern-based recovery of time entry fields from a conversation transcript.

Used by the open-ended conversation mode, where questions are generated by
a language model instead of the fixed sequence. Only user turns are
inspected; assistant turns are opaque text.

Each field has an ordered list of PatternRule objects and the first rule
that matches wins. Fields no rule matches fall back to fixed defaults, so
extraction always yields a fully populated entry.
"""

import datetime as dt
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from timelog.dialogue.options import OptionSource
from timelog.models.conversation import Turn
from timelog.models.time_entry import PartialTimeEntry, WorkType

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "task_description": "General work",
    "duration_minutes": 30,
    "work_type": WorkType.BILLABLE,
    "matter_name": "General",
    "cost_centre_name": "Development",
    "business_area_name": "Software Development",
    "subcategory_name": "General Work",
    "enjoyment_level": "neutral",
    "energy_impact": "neutral",
    "task_goal": "Productivity",
}

TRIGGER_PHRASES = (
    "finished",
    "completed",
    "log the time",
    "log this",
    "save this entry",
    "that's all",
    "i'm done",
    "submit",
)

_FLAGS = re.IGNORECASE | re.MULTILINE
_UNTIL_PUNCT = r"([^.\n,;!?]+)"


def _captured(match: "re.Match") -> str:
    return match.group(1).strip()


def _constant(value: Any) -> Callable[["re.Match"], Any]:
    return lambda match: value


def _positive(minutes: int) -> Optional[int]:
    # "0 minutes" is not a usable duration; let later matches or the default apply
    return minutes if minutes > 0 else None


def _hours_and_minutes(match: "re.Match") -> Optional[int]:
    return _positive(round(float(match.group(1)) * 60) + int(match.group(2)))


def _hours(match: "re.Match") -> Optional[int]:
    return _positive(round(float(match.group(1)) * 60))


def _minutes(match: "re.Match") -> Optional[int]:
    return _positive(int(match.group(1)))


@dataclass(frozen=True)
class PatternRule:
    """A single extraction rule.

    Attributes:
        name: Rule identifier used in debug logs
        pattern: Compiled regular expression
        convert: Turns the match into the field value
    """

    name: str
    pattern: "re.Pattern"
    convert: Callable[["re.Match"], Any] = _captured

    @classmethod
    def regex(
        cls,
        name: str,
        pattern: str,
        convert: Callable[["re.Match"], Any] = _captured,
        flags: int = _FLAGS,
    ) -> "PatternRule":
        return cls(name, re.compile(pattern, flags), convert)

    @classmethod
    def keyword(cls, name: str, pattern: str, value: Any) -> "PatternRule":
        return cls(name, re.compile(pattern, _FLAGS), _constant(value))

    def apply(self, text: str) -> Optional[Any]:
        """Return the first usable converted value, or None when nothing matches.

        A match converting to None or an empty string is skipped in favour
        of the next match.
        """
        for match in self.pattern.finditer(text):
            value = self.convert(match)
            if value is None or (isinstance(value, str) and not value):
                continue
            return value
        return None


DEFAULT_RULES: Dict[str, List[PatternRule]] = {
    "task_description": [
        PatternRule.regex("explicit_task", r"\btask(?:\s+was|\s+is|\s*:)\s*([^.\n;!?]+)"),
        PatternRule.regex(
            "worked_on",
            r"\b(?:worked|working|work) on\s+(.+?)"
            r"(?=\s+for\s+(?:about\s+|around\s+)?(?:\d|an?\b|half)|[.\n,;!?]|$)",
        ),
        PatternRule.regex(
            "was_doing",
            r"\b(?:i was|i've been|i have been|i spent time)\s+(\w+ing\b.*?)"
            r"(?=\s+for\s+(?:about\s+|around\s+)?(?:\d|an?\b|half)|[.\n,;!?]|$)",
        ),
    ],
    "duration_minutes": [
        PatternRule.regex(
            "hours_and_minutes",
            r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)\s*(?:and\s*)?(\d+)\s*(?:minutes?|mins?|m)\b",
            _hours_and_minutes,
        ),
        PatternRule.regex("hours", r"(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)\b", _hours),
        PatternRule.regex("minutes", r"(\d+)\s*(?:minutes?|mins?|m)\b", _minutes),
        PatternRule.keyword("hour_and_a_half", r"\ban hour and a half\b", 90),
        PatternRule.keyword("half_hour", r"\bhalf an hour\b", 30),
        PatternRule.keyword("an_hour", r"\ban hour\b", 60),
    ],
    "work_type": [
        PatternRule.keyword(
            "non_billable",
            r"\bnon[-\s]?billable\b|\bnot billable\b|\binternal\b",
            WorkType.NON_BILLABLE,
        ),
        PatternRule.keyword(
            "personal", r"\bpersonal\b|\bprivate\b|\blunch\b|\bbreak\b", WorkType.PERSONAL
        ),
        PatternRule.keyword(
            "billable",
            r"\bbillable\b|\bclient work\b|\bfor (?:a|the|my) client\b",
            WorkType.BILLABLE,
        ),
    ],
    "matter_name": [
        PatternRule.regex(
            "explicit_matter",
            r"\b(?:matter|client)(?:\s+(?:name\s+)?(?:is|was)|\s*:)\s*" + _UNTIL_PUNCT,
        ),
        PatternRule.regex(
            "for_client",
            r"\b[Ff]or (?:the )?[Cc]lient\s+([A-Z][\w&'-]*(?:\s+[A-Z][\w&'-]*)*)",
            flags=re.MULTILINE,
        ),
        PatternRule.regex(
            "project", r"\bproject(?:\s+(?:is|was|called|named)|\s*:)\s*" + _UNTIL_PUNCT
        ),
    ],
    "cost_centre_name": [
        PatternRule.regex(
            "cost_centre",
            r"\bcost\s*cent(?:re|er)(?:\s+(?:is|was|should be)|\s*:)?\s*" + _UNTIL_PUNCT,
        ),
    ],
    "business_area_name": [
        PatternRule.regex(
            "business_area",
            r"\bbusiness\s+area(?:\s+(?:is|was|should be)|\s*:)?\s*" + _UNTIL_PUNCT,
        ),
        PatternRule.regex("area", r"\barea(?:\s+(?:is|was)|\s*:)\s*" + _UNTIL_PUNCT),
    ],
    "subcategory_name": [
        PatternRule.regex(
            "subcategory",
            r"\bsub-?\s?category(?:\s+(?:is|was|should be)|\s*:)?\s*" + _UNTIL_PUNCT,
        ),
        PatternRule.regex("category", r"\bcategory(?:\s+(?:is|was)|\s*:)\s*" + _UNTIL_PUNCT),
    ],
    "enjoyment_level": [
        PatternRule.keyword(
            "hate_bad",
            r"\bbad at (?:it|this|that)\b",
            "Hate it/Bad at it",
        ),
        PatternRule.keyword(
            "hate_good",
            r"\b(?:hated?|disliked?|(?:didn'?t|don'?t|did not|do not) (?:like|enjoy)"
            r"|boring|tedious)\b",
            "Hate it/Good at it",
        ),
        PatternRule.keyword(
            "love", r"\b(?:loved?|great at|amazing|fantastic)\b", "Love it/Great at it"
        ),
        PatternRule.keyword(
            "like", r"\b(?:liked?|enjoy(?:ed)?|good at|fun)\b", "Like it/Good at it"
        ),
    ],
    "energy_impact": [
        PatternRule.keyword(
            "drained",
            r"\b(?:drain(?:ed|ing)?|exhaust(?:ed|ing)|tir(?:ed|ing)|wiped out)\b",
            "Drained energy",
        ),
        PatternRule.keyword(
            "energised",
            r"\b(?:energi[sz](?:ed|ing)|gave me energy|energetic|motivat(?:ed|ing))\b",
            "Gave me energy",
        ),
        PatternRule.keyword("neutral", r"\bneutral\b", "Neutral"),
    ],
    "task_goal": [
        PatternRule.regex("explicit_goal", r"\bgoal(?:\s+(?:is|was)|\s*:)\s*([^.\n;!?]+)"),
        PatternRule.keyword(
            "delegate_ai",
            r"\bdelegate (?:it |this )?to (?:an? )?ai\b|\bautomate\b",
            "Delegate to AI",
        ),
        PatternRule.keyword("delegate_person", r"\bdelegate\b", "Delegate to person"),
        PatternRule.keyword(
            "transfer",
            r"\btransfer\b|\bhand (?:it |this )?(?:off|over)\b",
            "Transfer to someone",
        ),
        PatternRule.keyword("keep_doing", r"\bkeep doing\b", "Keep doing it"),
    ],
}


def _option_rules(prefix: str, names: List[str]) -> List[PatternRule]:
    return [
        PatternRule.keyword(
            f"{prefix}:{name}", r"(?<!\w)" + re.escape(name) + r"(?!\w)", name
        )
        for name in names
        if name.strip()
    ]


class FreeTextExtractor:
    """Recovers every TimeEntry field from free text.

    Example:
        >>> extractor = FreeTextExtractor()
        >>> entry = extractor.extract_text("I worked on the API docs for 2 hours")
        >>> entry.task_description, entry.duration_minutes
        ('the API docs', 120)
    """

    def __init__(
        self,
        options: Optional[OptionSource] = None,
        rules: Optional[Dict[str, List[PatternRule]]] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ):
        """
        Initialize the extractor.

        Args:
            options: Known option names, tried before the generic patterns
            rules: Replacement rule table (defaults to DEFAULT_RULES)
            clock: Returns the moment recorded as start_time
        """
        self.rules = dict(rules or DEFAULT_RULES)
        self.clock = clock or (lambda: dt.datetime.now(dt.timezone.utc))
        if options is not None:
            known = {
                "matter_name": options.matters(),
                "cost_centre_name": options.cost_centres(),
                "business_area_name": options.business_areas(),
                "subcategory_name": options.subcategories(),
            }
            for field_name, names in known.items():
                self.rules[field_name] = _option_rules(field_name, names) + list(
                    self.rules.get(field_name, [])
                )

    def extract(self, transcript: Sequence[Turn]) -> PartialTimeEntry:
        """Extract an entry from the user turns of a transcript.

        Args:
            transcript: Ordered conversation turns

        Returns:
            PartialTimeEntry with every field populated
        """
        text = "\n".join(turn.content for turn in transcript if turn.role == "user")
        return self.extract_text(text)

    def extract_text(self, text: str) -> PartialTimeEntry:
        """Extract an entry from plain user text."""
        values: Dict[str, Any] = {}
        defaulted = []
        for field_name, default in DEFAULTS.items():
            value = self._first_match(field_name, text)
            if value is None:
                value = default
                defaulted.append(field_name)
            values[field_name] = value

        if defaulted:
            logger.debug(f"Extraction used defaults for: {', '.join(defaulted)}")

        values["start_time"] = self.clock()
        return PartialTimeEntry(**values)

    def _first_match(self, field_name: str, text: str) -> Optional[Any]:
        for rule in self.rules.get(field_name, []):
            value = rule.apply(text)
            if value is not None:
                logger.debug(f"Field {field_name} matched rule '{rule.name}'")
                return value
        return None


class CompletionPolicy(str, Enum):
    """How often completion may fire within one session."""

    ONCE = "once"
    EVERY_TURN = "every_turn"


class CompletionDetector:
    """Detects that an open-ended conversation is finished.

    The most recent ``window`` non-system turns are scanned (case-folded)
    for any trigger phrase. With the default ONCE policy the detector
    fires at most once until reset(), so a trigger phrase that stays inside
    the trailing window does not cause repeated extraction.

    Example:
        >>> detector = CompletionDetector()
        >>> turns = [Turn(role="user", content="I'm finished, log the time")]
        >>> detector.check(turns), detector.check(turns)
        (True, False)
    """

    def __init__(
        self,
        phrases: Sequence[str] = TRIGGER_PHRASES,
        window: int = 3,
        policy: CompletionPolicy = CompletionPolicy.ONCE,
    ):
        self.phrases = tuple(phrase.casefold() for phrase in phrases)
        self.window = window
        self.policy = policy
        self.fired = False

    def matches(self, transcript: Sequence[Turn]) -> bool:
        """Whether a trigger phrase occurs in the trailing window."""
        recent = [turn for turn in transcript if turn.role != "system"][-self.window :]
        text = "\n".join(turn.content.casefold() for turn in recent)
        return any(phrase in text for phrase in self.phrases)

    def check(self, transcript: Sequence[Turn]) -> bool:
        """Apply the policy; returns True when extraction should run now."""
        if self.fired and self.policy == CompletionPolicy.ONCE:
            return False
        if not self.matches(transcript):
            return False
        self.fired = True
        return True

    def reset(self) -> None:
        """Allow completion to fire again (new session or restart)."""
        self.fired = False
