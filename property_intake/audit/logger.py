"""
Audit Logger

DESIGN DECISION: Every wizard turn and every save is logged.
This provides:
1. Traceability of how a record was built (which fields were skipped,
   how many answers were rejected)
2. Debugging capability when users report a confusing conversation
3. A record of what was sent to the backend

The audit logger:
- Is async so it fits the intake flows
- Gracefully handles failures (never breaks the conversation if logging fails)
- Uses the conversation id as correlation id
"""

import logging
from typing import Optional
from uuid import UUID

import structlog

from property_intake.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from property_intake.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_wizard_started(
        self,
        conversation_id: UUID,
        wizard: str,
        total_steps: int,
    ) -> None:
        """Log the start of a conversation."""
        await self.log(AuditEventBuilder.wizard_started(
            conversation_id=conversation_id,
            wizard=wizard,
            total_steps=total_steps,
        ))

    async def log_answer_accepted(
        self,
        conversation_id: UUID,
        field_id: str,
        step_index: int,
    ) -> None:
        """Log an accepted answer."""
        await self.log(AuditEventBuilder.answer_accepted(
            conversation_id=conversation_id,
            field_id=field_id,
            step_index=step_index,
        ))

    async def log_field_skipped(
        self,
        conversation_id: UUID,
        field_id: str,
        step_index: int,
    ) -> None:
        """Log a skipped optional field."""
        await self.log(AuditEventBuilder.field_skipped(
            conversation_id=conversation_id,
            field_id=field_id,
            step_index=step_index,
        ))

    async def log_answer_rejected(
        self,
        conversation_id: UUID,
        field_id: str,
        step_index: int,
        message: str,
    ) -> None:
        """Log a rejected answer."""
        await self.log(AuditEventBuilder.answer_rejected(
            conversation_id=conversation_id,
            field_id=field_id,
            step_index=step_index,
            message=message,
        ))

    async def log_wizard_completed(
        self,
        conversation_id: UUID,
        filled_fields: list[str],
    ) -> None:
        """Log the end of a conversation."""
        await self.log(AuditEventBuilder.wizard_completed(
            conversation_id=conversation_id,
            filled_fields=filled_fields,
        ))

    async def log_record_saved(
        self,
        entity_type: str,
        entity_id: str,
        correlation_id: UUID,
    ) -> None:
        """Log a successful save."""
        await self.log(AuditEventBuilder.record_saved(
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(
        self,
        entity_type: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed save."""
        await self.log(AuditEventBuilder.save_failed(
            entity_type=entity_type,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))
