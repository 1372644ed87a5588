"""
Audit Models for Property Intake

Every wizard run leaves a trail of audit events:
1. When it started and with which question table
2. Each accepted, skipped or rejected answer (never the raw text)
3. Completion and the outcome of the final save

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Conversation
    WIZARD_STARTED = "wizard_started"
    ANSWER_ACCEPTED = "answer_accepted"
    ANSWER_REJECTED = "answer_rejected"
    FIELD_SKIPPED = "field_skipped"
    WIZARD_COMPLETED = "wizard_completed"

    # Persistence
    RECORD_SAVED = "record_saved"
    SAVE_FAILED = "save_failed"

    # System events
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Events of one wizard run share the conversation id as correlation id.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'conversation', 'property', 'mortgage')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.wizard_started(conversation_id, "property", 6)
        event = AuditEventBuilder.record_saved("property", "12", conversation_id)
    """

    @staticmethod
    def wizard_started(
        conversation_id: UUID,
        wizard: str,
        total_steps: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WIZARD_STARTED,
            entity_type="conversation",
            entity_id=str(conversation_id),
            correlation_id=conversation_id,
            description=f"Wizard started: {wizard}",
            details={
                "wizard": wizard,
                "total_steps": total_steps,
            },
            is_user_action=True,
        )

    @staticmethod
    def answer_accepted(
        conversation_id: UUID,
        field_id: str,
        step_index: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANSWER_ACCEPTED,
            entity_type="conversation",
            entity_id=str(conversation_id),
            correlation_id=conversation_id,
            description=f"Answer accepted for {field_id}",
            details={
                "field_id": field_id,
                "step_index": step_index,
            },
            is_user_action=True,
        )

    @staticmethod
    def field_skipped(
        conversation_id: UUID,
        field_id: str,
        step_index: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FIELD_SKIPPED,
            entity_type="conversation",
            entity_id=str(conversation_id),
            correlation_id=conversation_id,
            description=f"Optional field skipped: {field_id}",
            details={
                "field_id": field_id,
                "step_index": step_index,
            },
            is_user_action=True,
        )

    @staticmethod
    def answer_rejected(
        conversation_id: UUID,
        field_id: str,
        step_index: int,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANSWER_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="conversation",
            entity_id=str(conversation_id),
            correlation_id=conversation_id,
            description=f"Answer rejected for {field_id}",
            details={
                "field_id": field_id,
                "step_index": step_index,
                "message": message,
            },
            is_user_action=True,
        )

    @staticmethod
    def wizard_completed(
        conversation_id: UUID,
        filled_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WIZARD_COMPLETED,
            entity_type="conversation",
            entity_id=str(conversation_id),
            correlation_id=conversation_id,
            description=f"Wizard completed with {len(filled_fields)} fields filled",
            details={
                "filled_fields": filled_fields,
            },
        )

    @staticmethod
    def record_saved(
        entity_type: str,
        entity_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Record saved: {entity_type} #{entity_id}",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        entity_type: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Failed to save {entity_type}",
            error_message=error_message,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
