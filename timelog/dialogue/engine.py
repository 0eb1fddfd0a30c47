"""Deterministic dialogue engine for the fixed question sequence.

The engine is a pure transition function: given the current
ConversationState and one user answer it returns the next state, the next
prompt and, once the user confirmed a complete entry, the validated
TimeEntry. It never mutates its inputs and performs no I/O; callers persist
the returned state and trigger delivery.

Sequence::

    greeting -> task -> time -> workType -> {matter | businessArea | enjoyment}
    matter -> costCentre -> enjoyment
    businessArea -> subcategory -> enjoyment
    enjoyment -> energy -> goal -> confirmation -> {complete | greeting}
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from timelog.dialogue.options import OptionSource, StaticOptionSource
from timelog.dialogue.prompts import RESTART_TEXT, build_prompt
from timelog.models.conversation import ConversationState, Prompt, Step
from timelog.models.time_entry import PartialTimeEntry, TimeEntry, WorkType
from timelog.parsers.time_parser import has_duration, parse_duration
from timelog.validators.entry_validator import EntryValidator

logger = logging.getLogger(__name__)

# Checked in order: "non-billable" contains "billable"
WORK_TYPE_RULES: List[Tuple[Tuple[str, ...], WorkType]] = [
    (("non-billable", "non billable", "nonbillable"), WorkType.NON_BILLABLE),
    (("billable",), WorkType.BILLABLE),
]

# Steps that only collect a single field; skipped when the field is already set
_STEP_FIELDS = {
    Step.WORK_TYPE: "work_type",
    Step.MATTER: "matter_name",
    Step.COST_CENTRE: "cost_centre_name",
    Step.BUSINESS_AREA: "business_area_name",
    Step.SUBCATEGORY: "subcategory_name",
    Step.ENJOYMENT: "enjoyment_level",
    Step.ENERGY: "energy_impact",
    Step.GOAL: "task_goal",
}

# Where to resume when the validator reports a missing field
FIELD_STEPS = {
    "task_description": Step.GREETING,
    "duration_minutes": Step.TIME,
    "start_time": Step.TIME,
    "work_type": Step.WORK_TYPE,
    "matter_name": Step.MATTER,
    "cost_centre_name": Step.COST_CENTRE,
    "business_area_name": Step.BUSINESS_AREA,
    "subcategory_name": Step.SUBCATEGORY,
    "enjoyment_level": Step.ENJOYMENT,
    "energy_impact": Step.ENERGY,
    "task_goal": Step.GOAL,
}


def classify_work_type(answer: str) -> WorkType:
    """Classify a free-text work type answer.

    Args:
        answer: Raw answer such as "Non-billable" or "it was billable"

    Returns:
        The first matching WorkType, personal when nothing matches

    Example:
        >>> classify_work_type("Non-billable")
        <WorkType.NON_BILLABLE: 'non_billable'>
        >>> classify_work_type("lunch")
        <WorkType.PERSONAL: 'personal'>
    """
    text = answer.lower()
    for phrases, work_type in WORK_TYPE_RULES:
        if any(phrase in text for phrase in phrases):
            return work_type
    return WorkType.PERSONAL


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass(frozen=True)
class Transition:
    """Result of one engine step.

    Attributes:
        state: State to persist for the next turn
        prompt: What to ask or tell the user next
        entry: The validated entry, only set when state.step is complete
    """

    state: ConversationState
    prompt: Prompt
    entry: Optional[TimeEntry] = None

    @property
    def completed(self) -> bool:
        return self.entry is not None


class DialogueEngine:
    """Finite-state machine driving the fixed question sequence.

    Example:
        >>> engine = DialogueEngine()
        >>> state = ConversationState.initial()
        >>> result = engine.transition(state, "Drafting the contract")
        >>> result.state.step
        <Step.TASK: 'task'>
    """

    def __init__(
        self,
        options: Optional[OptionSource] = None,
        validator: Optional[EntryValidator] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ):
        """
        Initialize the engine.

        Args:
            options: Source of matter/cost centre/business area/subcategory lists
            validator: Validator consulted when the user confirms
            clock: Returns the moment recorded as start_time (UTC now by default)
        """
        self.options = options or StaticOptionSource()
        self.validator = validator or EntryValidator()
        self.clock = clock or _utcnow

        self._handlers = {
            Step.GREETING: self._on_greeting,
            Step.TASK: self._on_task,
            Step.TIME: self._on_time,
            Step.WORK_TYPE: self._on_work_type,
            Step.MATTER: self._store("matter_name", Step.MATTER),
            Step.COST_CENTRE: self._store("cost_centre_name", Step.COST_CENTRE),
            Step.BUSINESS_AREA: self._store("business_area_name", Step.BUSINESS_AREA),
            Step.SUBCATEGORY: self._store("subcategory_name", Step.SUBCATEGORY),
            Step.ENJOYMENT: self._store("enjoyment_level", Step.ENJOYMENT),
            Step.ENERGY: self._store("energy_impact", Step.ENERGY),
            Step.GOAL: self._store("task_goal", Step.GOAL),
            Step.CONFIRMATION: self._on_confirmation,
        }

    def start(self) -> Prompt:
        """Prompt shown when a session begins."""
        return self.prompt_for(Step.GREETING, PartialTimeEntry())

    def prompt_for(self, step: Step, entry: PartialTimeEntry) -> Prompt:
        """Prompt associated with entering a step."""
        return build_prompt(step, entry, self.options)

    def transition(self, state: ConversationState, user_input: str) -> Transition:
        """Advance the conversation by one answer.

        Args:
            state: Current state (not modified)
            user_input: The user's answer, typed or transcribed

        Returns:
            Transition with the next state and prompt
        """
        step = state.step
        entry = state.partial_entry
        if state.is_terminal:
            step, entry = Step.GREETING, PartialTimeEntry()

        text = (user_input or "").strip()
        if not text:
            # Nothing to record, ask the same question again
            current = ConversationState(step=step, partial_entry=entry.model_copy())
            return Transition(state=current, prompt=self.prompt_for(step, entry))

        logger.debug(f"Handling answer at step '{step.value}'")
        return self._handlers[step](entry, text)

    # Handlers

    def _on_greeting(self, entry: PartialTimeEntry, text: str) -> Transition:
        updated = entry.model_copy(update={"task_description": text})
        return self._advance(Step.TASK, updated)

    def _on_task(self, entry: PartialTimeEntry, text: str) -> Transition:
        if has_duration(text):
            return self._on_time(entry, text)
        updated = entry.model_copy(update={"task_description": text})
        return self._advance(Step.TIME, updated)

    def _on_time(self, entry: PartialTimeEntry, text: str) -> Transition:
        minutes = parse_duration(text)
        if minutes <= 0:
            prompt = self.prompt_for(Step.TIME, entry)
            return Transition(
                state=ConversationState(step=Step.TIME, partial_entry=entry.model_copy()),
                prompt=prompt.model_copy(
                    update={"text": f"The duration has to be more than zero. {prompt.text}"}
                ),
            )
        updated = entry.model_copy(
            update={"duration_minutes": minutes, "start_time": self.clock()}
        )
        return self._advance(self._successor(Step.TIME, updated), updated)

    def _on_work_type(self, entry: PartialTimeEntry, text: str) -> Transition:
        work_type = classify_work_type(text)
        logger.debug(f"Classified work type answer as {work_type.value}")
        updated = entry.model_copy(update={"work_type": work_type})
        return self._advance(self._successor(Step.WORK_TYPE, updated), updated)

    def _store(self, field_name: str, step: Step) -> Callable[[PartialTimeEntry, str], Transition]:
        def handler(entry: PartialTimeEntry, text: str) -> Transition:
            updated = entry.model_copy(update={field_name: text})
            return self._advance(self._successor(step, updated), updated)

        return handler

    def _on_confirmation(self, entry: PartialTimeEntry, text: str) -> Transition:
        if "yes" not in text.lower():
            logger.info("Draft entry discarded by user")
            return Transition(
                state=ConversationState.initial(), prompt=Prompt(text=RESTART_TEXT)
            )

        result = self.validator.validate(entry)
        if result.ok:
            state = ConversationState(step=Step.COMPLETE, partial_entry=entry.model_copy())
            return Transition(
                state=state,
                prompt=self.prompt_for(Step.COMPLETE, entry),
                entry=result.entry,
            )

        missing = result.missing_fields
        resume_at = FIELD_STEPS[missing[0]]
        logger.info(f"Confirmed entry incomplete, resuming at '{resume_at.value}'")
        prompt = self.prompt_for(resume_at, entry)
        readable = ", ".join(name.replace("_", " ") for name in missing)
        return Transition(
            state=ConversationState(step=resume_at, partial_entry=entry.model_copy()),
            prompt=prompt.model_copy(
                update={"text": f"I still need a few details ({readable}). {prompt.text}"}
            ),
        )

    # Graph

    def _successor(self, step: Step, entry: PartialTimeEntry) -> Step:
        if step == Step.WORK_TYPE:
            if entry.work_type == WorkType.BILLABLE:
                return Step.MATTER
            if entry.work_type == WorkType.NON_BILLABLE:
                return Step.BUSINESS_AREA
            return Step.ENJOYMENT
        return {
            Step.GREETING: Step.TASK,
            Step.TASK: Step.TIME,
            Step.TIME: Step.WORK_TYPE,
            Step.MATTER: Step.COST_CENTRE,
            Step.COST_CENTRE: Step.ENJOYMENT,
            Step.BUSINESS_AREA: Step.SUBCATEGORY,
            Step.SUBCATEGORY: Step.ENJOYMENT,
            Step.ENJOYMENT: Step.ENERGY,
            Step.ENERGY: Step.GOAL,
            Step.GOAL: Step.CONFIRMATION,
        }[step]

    def _advance(self, step: Step, entry: PartialTimeEntry) -> Transition:
        # Answers kept from before a validation re-prompt are not asked again
        while step in _STEP_FIELDS and getattr(entry, _STEP_FIELDS[step]):
            step = self._successor(step, entry)
        return Transition(
            state=ConversationState(step=step, partial_entry=entry),
            prompt=self.prompt_for(step, entry),
        )
