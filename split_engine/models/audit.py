"""
Audit Models for Split Engine

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of how a split was computed
2. A record of every human decision on uncertain extracted data
3. Debugging information when totals do not reconcile

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step of the calculate / review / export flow has its own type.
    """
    # Allocation
    SPLIT_COMPUTED = "split_computed"
    ALLOCATION_REJECTED = "allocation_rejected"
    RECONCILIATION_MISMATCH = "reconciliation_mismatch"

    # Extraction review (human confirmation)
    FINALIZE_REQUESTED = "finalize_requested"
    LOW_CONFIDENCE_DETECTED = "low_confidence_detected"
    USER_ACCEPTED_ANYWAY = "user_accepted_anyway"
    USER_REQUESTED_CORRECTION = "user_requested_correction"
    EXTRACTION_ACCEPTED = "extraction_accepted"
    EXTRACTION_REJECTED = "extraction_rejected"

    # Export and persistence
    SUMMARY_EXPORTED = "summary_exported"
    SPLIT_SAVED = "split_saved"
    TEMPLATE_SAVED = "template_saved"

    # System events
    SYSTEM_ERROR = "system_error"


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

    This is the core unit of our audit trail.
    Every significant action creates one of these.
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
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'split', 'review_session', 'template')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one receipt review)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.split_computed("equal", 3, "10.00", "0.00", "USD")
        event = AuditEventBuilder.extraction_rejected(reason, correlation_id)
    """

    @staticmethod
    def split_computed(
        mode: str,
        participant_count: int,
        computed_total: str,
        remainder: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_COMPUTED,
            entity_type="split",
            correlation_id=correlation_id,
            description=f"{mode.capitalize()} split computed for {participant_count} participants",
            details={
                "mode": mode,
                "participant_count": participant_count,
                "computed_total": computed_total,
                "remainder": remainder,
                "currency": currency,
            },
        )

    @staticmethod
    def allocation_rejected(
        mode: str,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALLOCATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="split",
            correlation_id=correlation_id,
            description=f"{mode.capitalize()} split rejected: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details={"mode": mode},
        )

    @staticmethod
    def reconciliation_mismatch(
        declared_total: str,
        computed_total: str,
        difference: str,
        balance: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_MISMATCH,
            severity=AuditSeverity.WARNING,
            entity_type="split",
            correlation_id=correlation_id,
            description=f"Totals do not reconcile: {balance} by {difference} {currency}",
            details={
                "declared_total": declared_total,
                "computed_total": computed_total,
                "difference": difference,
                "balance": balance,
                "currency": currency,
            },
        )

    @staticmethod
    def finalize_requested(
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FINALIZE_REQUESTED,
            entity_type="extraction",
            correlation_id=correlation_id,
            description=f"Finalize requested for {item_count} extracted items",
            details={"item_count": item_count},
            is_user_action=True,
        )

    @staticmethod
    def low_confidence_detected(
        session_id: UUID,
        item_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOW_CONFIDENCE_DETECTED,
            severity=AuditSeverity.WARNING,
            entity_type="review_session",
            entity_id=session_id,
            correlation_id=correlation_id,
            description=f"{len(item_ids)} item(s) need a decision before finalizing",
            details={"item_ids": item_ids},
        )

    @staticmethod
    def accepted_anyway(
        session_id: UUID,
        item_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_ACCEPTED_ANYWAY,
            entity_type="review_session",
            entity_id=session_id,
            correlation_id=correlation_id,
            description="User accepted low-confidence items without correction",
            details={"item_ids": item_ids},
            is_user_action=True,
        )

    @staticmethod
    def correction_requested(
        session_id: UUID,
        item_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REQUESTED_CORRECTION,
            entity_type="review_session",
            entity_id=session_id,
            correlation_id=correlation_id,
            description="User chose to correct low-confidence items",
            details={"item_ids": item_ids},
            is_user_action=True,
        )

    @staticmethod
    def extraction_accepted(
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_ACCEPTED,
            entity_type="extraction",
            correlation_id=correlation_id,
            description=f"{item_count} extracted items accepted",
            details={"item_count": item_count},
        )

    @staticmethod
    def extraction_rejected(
        reason: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_REJECTED,
            entity_type="extraction",
            correlation_id=correlation_id,
            description="User rejected extracted receipt items",
            details={"reason": reason or "No reason provided"},
            is_user_action=True,
        )

    @staticmethod
    def summary_exported(
        mode: str,
        subtotal: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_EXPORTED,
            entity_type="split",
            correlation_id=correlation_id,
            description=f"Split summary exported: {subtotal} {currency}",
            details={"mode": mode, "subtotal": subtotal, "currency": currency},
        )

    @staticmethod
    def split_saved(
        split_id: UUID,
        subtotal: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPLIT_SAVED,
            entity_type="split",
            entity_id=split_id,
            correlation_id=correlation_id,
            description=f"Split saved: {subtotal} {currency}",
            details={"subtotal": subtotal, "currency": currency},
        )

    @staticmethod
    def template_saved(
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TEMPLATE_SAVED,
            entity_type="template",
            correlation_id=correlation_id,
            description=f"Template saved: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
