"""
Data Models Package

This package contains all Pydantic models used by the intake wizard:
conversation state, target records and audit events.
"""

from property_intake.models.conversation import (
    Accepted,
    ConversationState,
    FieldKind,
    ParseOutcome,
    QuestionSpec,
    Rejected,
    TranscriptEntry,
    TranscriptRole,
)
from property_intake.models.property import (
    MortgageDraft,
    PropertyDraft,
    StoredMortgage,
    StoredProperty,
)
from property_intake.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Conversation models
    "Accepted",
    "ConversationState",
    "FieldKind",
    "ParseOutcome",
    "QuestionSpec",
    "Rejected",
    "TranscriptEntry",
    "TranscriptRole",
    # Target records
    "MortgageDraft",
    "PropertyDraft",
    "StoredMortgage",
    "StoredProperty",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
