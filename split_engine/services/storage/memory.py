"""
In-Memory Storage Implementation

Used for tests and for running the engine without a history backend.
Follows the abstract interface, so it can be swapped for a real store
without changing any flow code.
"""

from typing import Optional
from uuid import UUID

from split_engine.models.audit import AuditEvent
from split_engine.models.split import SplitRequest
from split_engine.models.summary import SplitSummary
from split_engine.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    SplitStorageInterface,
)


class InMemorySplitStorage(SplitStorageInterface):
    """Dict-backed split and template storage."""

    def __init__(self):
        self._summaries: dict[UUID, SplitSummary] = {}
        self._templates: dict[str, SplitRequest] = {}

    def save_summary(self, split_id: UUID, summary: SplitSummary) -> bool:
        if split_id in self._summaries:
            raise DuplicateError(f"Split {split_id} already exists")
        self._summaries[split_id] = summary
        return True

    def get_summary(self, split_id: UUID) -> Optional[SplitSummary]:
        return self._summaries.get(split_id)

    def list_summaries(self, limit: int = 100, offset: int = 0) -> list[SplitSummary]:
        return list(self._summaries.values())[offset:offset + limit]

    def delete_summary(self, split_id: UUID) -> bool:
        if split_id not in self._summaries:
            raise NotFoundError(f"Split {split_id} not found")
        del self._summaries[split_id]
        return True

    def save_template(self, name: str, request: SplitRequest) -> bool:
        self._templates[name] = request
        return True

    def get_template(self, name: str) -> Optional[SplitRequest]:
        return self._templates.get(name)

    def list_templates(self) -> list[str]:
        return list(self._templates)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: UUID) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
