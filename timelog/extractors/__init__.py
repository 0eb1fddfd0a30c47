"""Free-text field extraction and completion detection."""

from timelog.extractors.free_text_extractor import (
    DEFAULTS,
    TRIGGER_PHRASES,
    CompletionDetector,
    CompletionPolicy,
    FreeTextExtractor,
    PatternRule,
)

__all__ = [
    "FreeTextExtractor",
    "PatternRule",
    "CompletionDetector",
    "CompletionPolicy",
    "DEFAULTS",
    "TRIGGER_PHRASES",
]
