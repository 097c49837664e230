"""Services package."""

from split_engine.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemorySplitStorage,
    NotFoundError,
    SplitStorageInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemorySplitStorage",
    "NotFoundError",
    "SplitStorageInterface",
    "StorageError",
]
