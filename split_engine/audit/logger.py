"""
Audit Logger

DESIGN DECISION: Every significant action in the engine is logged.
This provides:
1. Traceability of how each split was computed
2. Debugging capability when totals do not reconcile
3. A record of every human decision on uncertain receipt data

The audit logger:
- Gracefully handles failures (a broken audit store never fails a split)
- Supports correlation IDs to trace related events
- Is synchronous, matching the rest of the engine
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from split_engine.config import get_settings
from split_engine.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from split_engine.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route structlog output through the stdlib root logger.

    Args:
        level: Log level name. Defaults to LOG_LEVEL from settings.
    """
    if level is None:
        level = get_settings().app.log_level

    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("split_engine.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_split_computed(
        self,
        mode: str,
        participant_count: int,
        computed_total: str,
        remainder: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful allocation."""
        self.log(AuditEventBuilder.split_computed(
            mode=mode,
            participant_count=participant_count,
            computed_total=computed_total,
            remainder=remainder,
            currency=currency,
            correlation_id=correlation_id,
        ))

    def log_allocation_rejected(
        self,
        mode: str,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.allocation_rejected(
            mode=mode,
            error_type=error_type,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_reconciliation_mismatch(
        self,
        declared_total: str,
        computed_total: str,
        difference: str,
        balance: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.reconciliation_mismatch(
            declared_total=declared_total,
            computed_total=computed_total,
            difference=difference,
            balance=balance,
            currency=currency,
            correlation_id=correlation_id,
        ))

    def log_finalize_requested(
        self,
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.finalize_requested(item_count, correlation_id))

    def log_low_confidence_detected(
        self,
        session_id: UUID,
        item_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that finalize was held for a human decision."""
        self.log(AuditEventBuilder.low_confidence_detected(session_id, item_ids, correlation_id))

    def log_accepted_anyway(
        self,
        session_id: UUID,
        item_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.accepted_anyway(session_id, item_ids, correlation_id))

    def log_correction_requested(
        self,
        session_id: UUID,
        item_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.correction_requested(session_id, item_ids, correlation_id))

    def log_extraction_accepted(
        self,
        item_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.extraction_accepted(item_count, correlation_id))

    def log_extraction_rejected(
        self,
        reason: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log user rejection of extracted items."""
        self.log(AuditEventBuilder.extraction_rejected(reason, correlation_id))

    def log_summary_exported(
        self,
        mode: str,
        subtotal: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.summary_exported(mode, subtotal, currency, correlation_id))

    def log_split_saved(
        self,
        split_id: UUID,
        subtotal: str,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.split_saved(split_id, subtotal, currency, correlation_id))

    def log_template_saved(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.template_saved(name, correlation_id))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a receipt review).
    Pass it through all subsequent operations.
    """
    return uuid4()
