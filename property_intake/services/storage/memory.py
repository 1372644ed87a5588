"""
In-Memory Storage

Keeps properties, mortgages and audit events in process memory.
Used by the tests and when no REST backend is configured; everything is
lost when the process exits.
"""

from collections import deque
from itertools import count
from typing import Optional
from uuid import UUID

from property_intake.models.audit import AuditEvent
from property_intake.models.property import (
    MortgageDraft,
    PropertyDraft,
    StoredMortgage,
    StoredProperty,
)
from property_intake.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    PropertyStorageInterface,
)


class InMemoryPropertyStorage(PropertyStorageInterface):
    """
    Dict-backed property storage.

    Property names are unique (case-insensitive), mirroring the backend's
    conflict response.
    """

    def __init__(self):
        self._properties: dict[int, StoredProperty] = {}
        self._mortgages: dict[int, StoredMortgage] = {}
        self._property_ids = count(1)
        self._mortgage_ids = count(1)

    def _check_unique_name(self, draft: PropertyDraft, exclude_id: Optional[int] = None) -> None:
        for stored in self._properties.values():
            if stored.id != exclude_id and stored.draft.name.lower() == draft.name.lower():
                raise DuplicateError(f"A property named {draft.name!r} already exists")

    async def create_property(self, draft: PropertyDraft) -> StoredProperty:
        self._check_unique_name(draft)
        stored = StoredProperty(id=next(self._property_ids), draft=draft)
        self._properties[stored.id] = stored
        return stored

    async def update_property(
        self,
        property_id: int,
        draft: PropertyDraft,
    ) -> StoredProperty:
        existing = self._properties.get(property_id)
        if existing is None:
            raise NotFoundError(f"Property not found: {property_id}")
        self._check_unique_name(draft, exclude_id=property_id)
        stored = StoredProperty(id=property_id, draft=draft, created_at=existing.created_at)
        self._properties[property_id] = stored
        return stored

    async def get_property(self, property_id: int) -> Optional[StoredProperty]:
        return self._properties.get(property_id)

    async def list_properties(self) -> list[StoredProperty]:
        return [self._properties[key] for key in sorted(self._properties)]

    async def create_mortgage(
        self,
        property_id: int,
        draft: MortgageDraft,
    ) -> StoredMortgage:
        if property_id not in self._properties:
            raise NotFoundError(f"Property not found: {property_id}")
        stored = StoredMortgage(
            id=next(self._mortgage_ids),
            property_id=property_id,
            draft=draft,
        )
        self._mortgages[stored.id] = stored
        return stored

    async def list_mortgages(self, property_id: int) -> list[StoredMortgage]:
        """Mortgages attached to one property, oldest first."""
        return [
            mortgage
            for key, mortgage in sorted(self._mortgages.items())
            if mortgage.property_id == property_id
        ]


class InMemoryAuditStorage(AuditStorageInterface):
    """
    Append-only audit events, capped at the newest max_events.

    Older events are dropped once the cap is reached.
    """

    def __init__(self, max_events: int = 10_000):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
