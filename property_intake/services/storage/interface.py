"""
Abstract Storage Interface

DESIGN DECISION: The wizard never talks to the backend itself.
Completed records go through these interfaces, which allows us to:
1. Use the REST backend in production
2. Use in-memory storage for tests and offline sessions
3. Keep the conversation logic free of I/O

The interface only covers what the intake flows need.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from property_intake.models.audit import AuditEvent
from property_intake.models.property import (
    MortgageDraft,
    PropertyDraft,
    StoredMortgage,
    StoredProperty,
)


class PropertyStorageInterface(ABC):
    """
    Abstract interface for property persistence.

    Any backend (REST API, in-memory, ...) must implement these methods.
    """

    @abstractmethod
    async def create_property(self, draft: PropertyDraft) -> StoredProperty:
        """
        Create a property.

        Args:
            draft: The validated property draft

        Returns:
            The stored property with its backend id

        Raises:
            StorageError: If the create fails
        """
        pass

    @abstractmethod
    async def update_property(
        self,
        property_id: int,
        draft: PropertyDraft,
    ) -> StoredProperty:
        """
        Replace an existing property's fields.

        Raises:
            NotFoundError: If the property doesn't exist
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def get_property(self, property_id: int) -> Optional[StoredProperty]:
        """
        Retrieve a property by id.

        Returns:
            The property if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_properties(self) -> list[StoredProperty]:
        """List all properties, oldest first."""
        pass

    @abstractmethod
    async def create_mortgage(
        self,
        property_id: int,
        draft: MortgageDraft,
    ) -> StoredMortgage:
        """
        Attach a mortgage to an existing property.

        Raises:
            NotFoundError: If the property doesn't exist
            StorageError: If the create fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one wizard run).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
