"""
Storage Services Package

Provides abstract interfaces for the persistence collaborator and an
in-memory implementation.
"""

from split_engine.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    SplitStorageInterface,
    StorageError,
)
from split_engine.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySplitStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SplitStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemorySplitStorage",
]
