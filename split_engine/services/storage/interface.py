"""
Abstract Storage Interface

DESIGN DECISION: Persistence is an external collaborator. The engine only
defines the interface it hands finished splits to.
This allows us to:
1. Plug in any database or history service later
2. Use in-memory storage for testing
3. Keep the allocation engine free of I/O

The interface is intentionally simple - just the operations the flows use.
Calls are synchronous and never retried by the engine; failures surface
to the caller as StorageError.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from split_engine.models.audit import AuditEvent
from split_engine.models.split import SplitRequest
from split_engine.models.summary import SplitSummary


class SplitStorageInterface(ABC):
    """
    Abstract interface for split history and template storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def save_summary(self, split_id: UUID, summary: SplitSummary) -> bool:
        """
        Save a finished split.

        Raises:
            DuplicateError: If split_id already exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def get_summary(self, split_id: UUID) -> Optional[SplitSummary]:
        """Return the split if found, None otherwise."""
        pass

    @abstractmethod
    def list_summaries(self, limit: int = 100, offset: int = 0) -> list[SplitSummary]:
        """List saved splits, oldest first."""
        pass

    @abstractmethod
    def delete_summary(self, split_id: UUID) -> bool:
        """
        Delete a saved split.

        Raises:
            NotFoundError: If split_id does not exist
        """
        pass

    @abstractmethod
    def save_template(self, name: str, request: SplitRequest) -> bool:
        """Save (or overwrite) a named request template."""
        pass

    @abstractmethod
    def get_template(self, name: str) -> Optional[SplitRequest]:
        pass

    @abstractmethod
    def list_templates(self) -> list[str]:
        """Template names in insertion order."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event to the log."""
        pass

    @abstractmethod
    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """All events of one user action, in chronological order."""
        pass

    @abstractmethod
    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events first."""
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
