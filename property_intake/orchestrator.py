"""
Main Orchestrator for Property Intake

Ties the wizard engine to the audit trail and the persistence layer:
1. Conversation (start → answer turns → summary)
2. Commit (summary confirmed → draft → backend create)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The engine stays free of I/O; only the flow talks to storage
- Nothing is saved until the conversation is complete AND the user
  explicitly asks to save
- Every turn and every save is audited
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from pydantic import ValidationError

from property_intake.audit import AuditLogger, configure_logging
from property_intake.config import get_settings
from property_intake.models.conversation import ConversationState, QuestionSpec
from property_intake.models.property import (
    MortgageDraft,
    PropertyDraft,
    StoredMortgage,
    StoredProperty,
)
from property_intake.services.storage import (
    InMemoryAuditStorage,
    InMemoryPropertyStorage,
    PropertyStorageInterface,
    RestPropertyStorage,
    StorageConnectionError,
    StorageError,
)
from property_intake.wizard import (
    MORTGAGE_QUESTIONS,
    PROPERTY_QUESTIONS,
    WizardEngine,
)


class IncompleteConversationError(Exception):
    """Commit was requested before the wizard reached its summary."""
    pass


class IntakeFlow(ABC):
    """
    Drives one wizard and commits its record.

    Subclasses bind a question table to a draft model and a storage call.
    """

    entity_type = "record"

    def __init__(
        self,
        engine: WizardEngine,
        storage: Optional[PropertyStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._engine = engine
        self._storage = storage or InMemoryPropertyStorage()
        self._audit_logger = audit_logger
        self._saved: Optional[Union[StoredProperty, StoredMortgage]] = None

    @property
    def engine(self) -> WizardEngine:
        return self._engine

    @property
    def state(self) -> ConversationState:
        return self._engine.state

    @property
    def saved(self) -> Optional[Union[StoredProperty, StoredMortgage]]:
        """What commit() stored, if it ran."""
        return self._saved

    async def start(self) -> ConversationState:
        """Start (or restart) the conversation."""
        self._saved = None
        state = self._engine.start()
        if self._audit_logger:
            await self._audit_logger.log_wizard_started(
                conversation_id=state.conversation_id,
                wizard=self._engine.name,
                total_steps=state.total_steps,
            )
        return state

    async def submit(self, raw_input: str) -> ConversationState:
        """Apply one answer and audit the resulting transition."""
        question = self._engine.current_question
        step = self._engine.state.step_index
        entries = len(self._engine.state.transcript)
        state = self._engine.submit(raw_input)
        await self._audit_turn(question, step, entries, state)
        return state

    async def skip_current(self) -> ConversationState:
        """Skip the active question and audit the resulting transition."""
        question = self._engine.current_question
        step = self._engine.state.step_index
        entries = len(self._engine.state.transcript)
        state = self._engine.skip_current()
        await self._audit_turn(question, step, entries, state)
        return state

    async def _audit_turn(
        self,
        question: Optional[QuestionSpec],
        step: int,
        entries: int,
        state: ConversationState,
    ) -> None:
        if self._audit_logger is None or question is None:
            return
        # Ignored submissions leave the transcript untouched
        if len(state.transcript) == entries:
            return

        if state.step_index == step:
            last = state.last_entry
            await self._audit_logger.log_answer_rejected(
                conversation_id=state.conversation_id,
                field_id=question.field_id,
                step_index=step,
                message=last.text if last else "",
            )
            return

        if question.field_id in state.accumulated_record:
            await self._audit_logger.log_answer_accepted(
                conversation_id=state.conversation_id,
                field_id=question.field_id,
                step_index=step,
            )
        else:
            await self._audit_logger.log_field_skipped(
                conversation_id=state.conversation_id,
                field_id=question.field_id,
                step_index=step,
            )

        if state.completed:
            await self._audit_logger.log_wizard_completed(
                conversation_id=state.conversation_id,
                filled_fields=sorted(state.accumulated_record),
            )

    @abstractmethod
    def build_draft(self) -> Union[PropertyDraft, MortgageDraft]:
        """Turn the accumulated record into the target draft."""

    @abstractmethod
    async def _persist(
        self,
        draft: Union[PropertyDraft, MortgageDraft],
    ) -> Union[StoredProperty, StoredMortgage]:
        """Send the draft to storage."""

    async def commit(self) -> Union[StoredProperty, StoredMortgage]:
        """
        Save the completed record.

        CRITICAL: Call this ONLY after the user confirmed the summary.
        A second call returns the record already saved.

        Raises:
            IncompleteConversationError: If the wizard has not finished
            ValidationError: If the record fails the draft's cross-field checks
            StorageError: If the backend refuses or cannot be reached
        """
        state = self._engine.state
        if not state.completed:
            raise IncompleteConversationError(
                f"Wizard is at step {state.step_index} of {state.total_steps}"
            )
        # One conversation saves at most one record
        if self._saved is not None:
            return self._saved

        try:
            draft = self.build_draft()
            stored = await self._persist(draft)
        except StorageConnectionError as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="property_api",
                    error_message=str(e),
                    correlation_id=state.conversation_id,
                )
                await self._audit_logger.log_save_failed(
                    entity_type=self.entity_type,
                    error_message=str(e),
                    correlation_id=state.conversation_id,
                )
            raise
        except (StorageError, ValidationError) as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    entity_type=self.entity_type,
                    error_message=str(e),
                    correlation_id=state.conversation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_record_saved(
                entity_type=self.entity_type,
                entity_id=str(stored.id),
                correlation_id=state.conversation_id,
            )
        self._saved = stored
        return stored


class PropertyIntakeFlow(IntakeFlow):
    """Guided creation of a property."""

    entity_type = "property"

    def __init__(
        self,
        storage: Optional[PropertyStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        engine: Optional[WizardEngine] = None,
    ):
        super().__init__(
            engine or WizardEngine(PROPERTY_QUESTIONS, name="property"),
            storage=storage,
            audit_logger=audit_logger,
        )

    def build_draft(self) -> PropertyDraft:
        return PropertyDraft.from_record(self._engine.record())

    async def _persist(self, draft: PropertyDraft) -> StoredProperty:
        return await self._storage.create_property(draft)


class MortgageIntakeFlow(IntakeFlow):
    """Guided creation of a mortgage on an existing property."""

    entity_type = "mortgage"

    def __init__(
        self,
        property_id: int,
        storage: Optional[PropertyStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        engine: Optional[WizardEngine] = None,
    ):
        super().__init__(
            engine or WizardEngine(MORTGAGE_QUESTIONS, name="mortgage"),
            storage=storage,
            audit_logger=audit_logger,
        )
        self._property_id = property_id

    @property
    def property_id(self) -> int:
        return self._property_id

    def build_draft(self) -> MortgageDraft:
        return MortgageDraft.from_record(self._engine.record())

    async def _persist(self, draft: MortgageDraft) -> StoredMortgage:
        return await self._storage.create_mortgage(self._property_id, draft)


def create_app_components(
    use_storage: bool = True,
) -> tuple[PropertyStorageInterface, AuditLogger]:
    """
    Factory function to create the shared application components.

    Args:
        use_storage: Whether to use the REST backend when it is configured.
                    Set to False to force in-memory storage.

    Returns:
        (property_storage, audit_logger)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    storage: PropertyStorageInterface
    if use_storage and settings.api.is_configured:
        storage = RestPropertyStorage(settings.api)
    else:
        storage = InMemoryPropertyStorage()

    audit_logger = AuditLogger(InMemoryAuditStorage())
    return storage, audit_logger
