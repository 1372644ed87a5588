"""
Storage Services Package

Provides abstract interfaces and concrete implementations for persisting
completed wizard records: the REST backend, and in-memory storage for
tests and offline sessions.
"""

from property_intake.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    PropertyStorageInterface,
    StorageConnectionError,
    StorageError,
)
from property_intake.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryPropertyStorage,
)
from property_intake.services.storage.rest_api import RestPropertyStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "PropertyStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryPropertyStorage",
    "RestPropertyStorage",
]
