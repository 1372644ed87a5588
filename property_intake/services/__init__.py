"""Services package."""

from property_intake.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryPropertyStorage,
    NotFoundError,
    PropertyStorageInterface,
    RestPropertyStorage,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryPropertyStorage",
    "NotFoundError",
    "PropertyStorageInterface",
    "RestPropertyStorage",
    "StorageConnectionError",
    "StorageError",
]
