"""
Wizard Engine

Drives a linear question/answer conversation over a question table.

STATES:
- AwaitingAnswer(i) for every question index i
- Completed, once the last question has been answered

One call to submit() performs exactly one transition:
1. The raw answer is appended to the transcript
2. The active question's parser (or the skip shortcut) interprets it
3. Rejected → the message is appended, the step does not move
4. Accepted → the value is merged, the step moves forward by one,
   then the next prompt (or the summary) is appended

DESIGN DECISION: Bad answers never raise.
They come back as assistant messages and the same question stays active.
Only construction and driving mistakes (no questions, submit before start,
a step index out of range) raise WizardStateError.
"""

import threading
from typing import Any, Iterable, Optional

import structlog

from property_intake.config import WizardSettings, get_settings
from property_intake.models.conversation import (
    Accepted,
    ConversationState,
    ParseOutcome,
    QuestionSpec,
    Rejected,
    TranscriptRole,
)
from property_intake.wizard.skip import is_skip
from property_intake.wizard.summary import SummaryBuilder


logger = structlog.get_logger(__name__)


class WizardStateError(AssertionError):
    """The engine was configured or driven incorrectly."""
    pass


def is_completed(state: ConversationState) -> bool:
    """Check whether a conversation has reached its summary."""
    return state.completed


class WizardEngine:
    """
    Owns one ConversationState and applies answers to it.

    Callers read the returned state (transcript, completion flag, record)
    but never mutate it.

    Usage:
        engine = WizardEngine(PROPERTY_QUESTIONS, name="property")
        state = engine.start()
        state = engine.submit("Duplex Ontario")
        state = engine.skip_current()
    """

    def __init__(
        self,
        questions: Iterable[QuestionSpec],
        summary_builder: Optional[SummaryBuilder] = None,
        settings: Optional[WizardSettings] = None,
        name: str = "wizard",
    ):
        """
        Initialize the engine.

        Args:
            questions: Ordered question table
            summary_builder: Renders the final summary.
                            Defaults to a layout derived from the questions.
            settings: Wording and display settings (defaults to global settings)
            name: Identifies the wizard in logs

        Raises:
            WizardStateError: If the table is empty or reuses a field id
        """
        self._questions = tuple(questions)
        self._validate_table(self._questions)

        self._settings = settings or get_settings().wizard
        self._summary_builder = summary_builder or SummaryBuilder.from_questions(
            self._questions,
            missing_placeholder=self._settings.missing_value_placeholder,
            currency_symbol=self._settings.currency_symbol,
        )
        self._extra_skip_phrases = (
            *self._settings.extra_skip_phrases_list,
            self._settings.skip_command,
        )
        self._name = name
        self._state: Optional[ConversationState] = None
        self._in_flight = threading.Lock()
        self._logger = logger.bind(wizard=name)

    @staticmethod
    def _validate_table(questions: tuple[QuestionSpec, ...]) -> None:
        if not questions:
            raise WizardStateError("A question table needs at least one question")

        seen: set[str] = set()
        for question in questions:
            if question.field_id in seen:
                raise WizardStateError(
                    f"Duplicate field id in question table: {question.field_id}"
                )
            seen.add(question.field_id)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def questions(self) -> tuple[QuestionSpec, ...]:
        return self._questions

    @property
    def summary_builder(self) -> SummaryBuilder:
        return self._summary_builder

    @property
    def state(self) -> ConversationState:
        return self._require_state()

    @property
    def current_question(self) -> Optional[QuestionSpec]:
        """The question awaiting an answer, or None once completed."""
        state = self._require_state()
        if state.completed:
            return None
        return self._question_at(state.step_index)

    def record(self) -> dict[str, Any]:
        """Copy of the accumulated record."""
        return dict(self._require_state().accumulated_record)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self) -> ConversationState:
        """
        Begin a new conversation at the first question.

        Any previous conversation held by this engine is discarded.
        """
        state = ConversationState(total_steps=len(self._questions))
        state.append(TranscriptRole.ASSISTANT, self._settings.intro_message)
        state.append(TranscriptRole.ASSISTANT, self._questions[0].prompt_text)
        self._state = state

        self._logger = logger.bind(
            wizard=self._name,
            conversation_id=str(state.conversation_id),
        )
        self._logger.info("wizard_started", total_steps=state.total_steps)
        return state

    def submit(self, raw_input: str) -> ConversationState:
        """
        Apply one answer to the active question.

        No-op once the conversation is completed, and while another
        submission is still being applied.
        """
        state = self._require_state()

        if state.completed:
            self._logger.debug("submit_ignored", reason="completed")
            return state

        if not self._in_flight.acquire(blocking=False):
            self._logger.warning("submit_ignored", reason="in_flight")
            return state

        try:
            self._apply(state, raw_input)
        finally:
            self._in_flight.release()
        return state

    def skip_current(self) -> ConversationState:
        """
        Answer the active question with the skip command.

        Mandatory questions still reject it through their parser.
        """
        return self.submit(self._settings.skip_command)

    def evaluate(self, question: QuestionSpec, raw_input: str) -> ParseOutcome:
        """
        Interpret an answer for a question without touching the state.

        Configured skip phrases reach mandatory parsers as a blank answer,
        so they are rejected like the built-in ones.
        """
        if is_skip(raw_input, self._extra_skip_phrases):
            if question.is_optional:
                return Accepted(value=None, note=self._settings.skip_acknowledgement)
            return question.parse("")
        return question.parse(raw_input)

    def _apply(self, state: ConversationState, raw_input: str) -> None:
        step = state.step_index
        question = self._question_at(step)

        shown = raw_input if raw_input.strip() else self._settings.empty_answer_placeholder
        state.append(TranscriptRole.USER, shown)

        outcome = self.evaluate(question, raw_input)
        log = self._logger.bind(
            step_index=step,
            field_id=question.field_id,
            answer_length=len(raw_input.strip()),
        )

        if isinstance(outcome, Rejected):
            state.append(TranscriptRole.ASSISTANT, outcome.error_message)
            log.info("answer_rejected")
            return

        if not isinstance(outcome, Accepted):
            raise WizardStateError(
                f"Parser for {question.field_id} returned {type(outcome).__name__}"
            )

        if outcome.value is None:
            state.accumulated_record.pop(question.field_id, None)
            log.info("field_skipped")
        else:
            state.accumulated_record[question.field_id] = outcome.value
            log.info("answer_accepted")

        if outcome.note:
            state.append(TranscriptRole.ASSISTANT, outcome.note)

        state.step_index = step + 1
        if state.step_index < state.total_steps:
            state.append(
                TranscriptRole.ASSISTANT,
                self._questions[state.step_index].prompt_text,
            )
            return

        state.completed = True
        state.append(
            TranscriptRole.SUMMARY,
            self._summary_builder.build_summary(dict(state.accumulated_record)),
        )
        self._logger.info(
            "wizard_completed",
            filled_fields=sorted(state.accumulated_record),
        )

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def _require_state(self) -> ConversationState:
        if self._state is None:
            raise WizardStateError("Conversation not started; call start() first")
        return self._state

    def _question_at(self, step: int) -> QuestionSpec:
        if not 0 <= step < len(self._questions):
            raise WizardStateError(
                f"Step index {step} out of range for {len(self._questions)} questions"
            )
        return self._questions[step]
