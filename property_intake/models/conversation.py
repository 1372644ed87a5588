"""
Conversation Models for the Guided Intake Wizard

These models describe one linear question/answer conversation:
- QuestionSpec: the immutable definition of a single step
- ParseOutcome: what a parser made of the user's raw text
- ConversationState: everything the wizard knows at a point in time

DESIGN DECISION: The state is a single owned value.
The engine is the only component allowed to mutate it; the UI only reads
the transcript, the completion flag and the accumulated record.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================

class TranscriptRole(str, Enum):
    """Who produced a transcript entry."""
    ASSISTANT = "assistant"
    USER = "user"
    SUMMARY = "summary"


class FieldKind(str, Enum):
    """
    Kind of value a question collects.

    Used by the summary builder to pick a display format.
    """
    TEXT = "text"
    DATE = "date"
    AMOUNT = "amount"
    INTEGER = "integer"
    PERCENT = "percent"


# =============================================================================
# PARSE OUTCOMES
# =============================================================================

class Accepted(BaseModel):
    """
    The answer was understood.

    `value` is None when an optional field was skipped.
    `note` is an optional acknowledgement shown to the user.
    """
    model_config = ConfigDict(frozen=True)

    value: Any = None
    note: Optional[str] = None


class Rejected(BaseModel):
    """The answer could not be interpreted for this field."""
    model_config = ConfigDict(frozen=True)

    error_message: str = Field(..., min_length=1)


ParseOutcome = Union[Accepted, Rejected]


# =============================================================================
# QUESTIONS
# =============================================================================

class QuestionSpec(BaseModel):
    """
    Immutable definition of one wizard step.

    Defined once when a question table is built; never mutated.
    """
    model_config = ConfigDict(frozen=True)

    field_id: str = Field(
        ...,
        min_length=1,
        description="Key of the value in the accumulated record"
    )
    prompt_text: str = Field(
        ...,
        min_length=1,
        description="Question shown to the user"
    )
    label: str = Field(
        ...,
        min_length=1,
        description="Short label used in the confirmation summary"
    )
    kind: FieldKind = FieldKind.TEXT
    is_optional: bool = False
    parse: Callable[[str], ParseOutcome]


# =============================================================================
# TRANSCRIPT & STATE
# =============================================================================

class TranscriptEntry(BaseModel):
    """A single message in the conversation log."""
    model_config = ConfigDict(frozen=True)

    role: TranscriptRole
    text: str


class ConversationState(BaseModel):
    """
    Complete state of one wizard run.

    Invariants:
    - 0 <= step_index <= total_steps
    - completed is True exactly when step_index == total_steps
    - transcript is append-only, in real turn order
    """

    conversation_id: UUID = Field(
        default_factory=uuid4,
        description="Identifier used to correlate logs and audit events"
    )
    started_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    total_steps: int = Field(
        ...,
        ge=1,
        description="Number of questions in the table driving this run"
    )
    step_index: int = Field(
        default=0,
        ge=0,
        description="Index of the question currently awaiting an answer"
    )
    accumulated_record: dict[str, Any] = Field(
        default_factory=dict,
        description="Accepted values keyed by field id; skipped fields are absent"
    )
    transcript: list[TranscriptEntry] = Field(default_factory=list)
    completed: bool = False

    @model_validator(mode='after')
    def validate_progress(self) -> 'ConversationState':
        """Validate step bounds and the completion flag."""
        if self.step_index > self.total_steps:
            raise ValueError("Step index cannot exceed the number of questions")
        if self.completed != (self.step_index == self.total_steps):
            raise ValueError("Completed flag must match the final step")
        return self

    @property
    def last_entry(self) -> Optional[TranscriptEntry]:
        """Most recent transcript entry, if any."""
        return self.transcript[-1] if self.transcript else None

    def append(self, role: TranscriptRole, text: str) -> None:
        self.transcript.append(TranscriptEntry(role=role, text=text))
