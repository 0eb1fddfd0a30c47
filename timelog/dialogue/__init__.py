"""Fixed-flow dialogue engine, prompt templates and option sources."""

from timelog.dialogue.engine import DialogueEngine, Transition, classify_work_type
from timelog.dialogue.options import ConfigOptionSource, OptionSource, StaticOptionSource
from timelog.dialogue.prompts import build_prompt, format_duration, generate_summary

__all__ = [
    "DialogueEngine",
    "Transition",
    "classify_work_type",
    "OptionSource",
    "StaticOptionSource",
    "ConfigOptionSource",
    "build_prompt",
    "generate_summary",
    "format_duration",
]
