"""Prompt templates for the fixed question sequence."""

from typing import Callable, Dict, List, Optional

from timelog.dialogue.options import OptionSource
from timelog.models.conversation import Prompt, Step
from timelog.models.time_entry import (
    ENERGY_IMPACTS,
    ENJOYMENT_LEVELS,
    TASK_GOALS,
    PartialTimeEntry,
)

WORK_TYPE_OPTIONS = ["Billable", "Non-billable", "Personal"]
CONFIRMATION_OPTIONS = ["Yes, save it", "No, let me start over"]

GREETING_TEXT = (
    "Hi! I'm here to help you log your time. Let me ask you a few questions "
    "to update your timesheet. What task did you work on?"
)
RESTART_TEXT = "No problem! Let's start over. What task did you work on?"
DURATION_HINT = "You can tell me in hours and minutes, for example 1h30m or 45m."

# Text and fixed options per step; None means the options come from the OptionSource
_TEMPLATES: Dict[Step, tuple] = {
    Step.GREETING: (GREETING_TEXT, [], "text"),
    Step.TASK: (f"Great! How long did you spend on this task? {DURATION_HINT}", [], "text"),
    Step.TIME: (
        f"Perfect! How long did you spend on this task? {DURATION_HINT}",
        [],
        "text",
    ),
    Step.WORK_TYPE: (
        "Thanks! Was this billable work, non-billable work, or personal time?",
        WORK_TYPE_OPTIONS,
        "select",
    ),
    Step.MATTER: ("Which matter/client is this for?", None, "select"),
    Step.COST_CENTRE: ("What cost centre should this be assigned to?", None, "select"),
    Step.BUSINESS_AREA: ("Which business area does this fall under?", None, "select"),
    Step.SUBCATEGORY: ("What subcategory best describes this work?", None, "select"),
    Step.ENJOYMENT: ("How do you feel about this task?", ENJOYMENT_LEVELS, "select"),
    Step.ENERGY: (
        "Did this task give you energy, drain energy, or feel neutral?",
        ENERGY_IMPACTS,
        "select",
    ),
    Step.GOAL: (
        "What would you like to do with this type of task in the future?",
        TASK_GOALS,
        "select",
    ),
}


def _option_lookup(options: OptionSource) -> Dict[Step, Callable[[], List[str]]]:
    return {
        Step.MATTER: options.matters,
        Step.COST_CENTRE: options.cost_centres,
        Step.BUSINESS_AREA: options.business_areas,
        Step.SUBCATEGORY: options.subcategories,
    }


def format_duration(minutes: Optional[int]) -> str:
    """Format minutes as "<h>h <m>m"."""
    if minutes is None:
        return "-"
    return f"{minutes // 60}h {minutes % 60}m"


def generate_summary(entry: PartialTimeEntry) -> str:
    """Render the bullet list shown before confirmation.

    Secondary classification lines are only included when populated.
    """
    work_type = entry.work_type.value if entry.work_type else "-"
    lines = [
        f"• Task: {entry.task_description or '-'}",
        f"• Duration: {format_duration(entry.duration_minutes)}",
        f"• Work Type: {work_type}",
    ]
    optional_lines = [
        ("Matter", entry.matter_name),
        ("Cost Centre", entry.cost_centre_name),
        ("Business Area", entry.business_area_name),
        ("Subcategory", entry.subcategory_name),
        ("Enjoyment", entry.enjoyment_level),
        ("Energy Impact", entry.energy_impact),
        ("Future Goal", entry.task_goal),
    ]
    lines.extend(f"• {label}: {value}" for label, value in optional_lines if value)
    return "\n".join(lines)


def build_prompt(step: Step, entry: PartialTimeEntry, options: OptionSource) -> Prompt:
    """Build the prompt asked when the conversation enters a step.

    Args:
        step: Step being entered
        entry: Entry collected so far (used by the confirmation summary)
        options: Source of the classification option lists

    Returns:
        Prompt with text, options and presentation kind
    """
    if step == Step.CONFIRMATION:
        return Prompt(
            text=(
                f"Here's a summary of your time entry:\n\n{generate_summary(entry)}"
                "\n\nDoes this look correct? Should I save this to your timesheet?"
            ),
            options=list(CONFIRMATION_OPTIONS),
            kind="confirmation",
        )
    if step == Step.COMPLETE:
        return Prompt(
            text=(
                "Great! I'm sending your time entry for processing. "
                "What else did you work on?"
            )
        )

    text, fixed_options, kind = _TEMPLATES[step]
    if fixed_options is None:
        fixed_options = _option_lookup(options)[step]()
    return Prompt(text=text, options=list(fixed_options), kind=kind)
