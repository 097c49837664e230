"""
Data Models Package

This package contains all Pydantic models used by the Split Engine.
All data flowing through the engine must conform to these schemas.
"""

from split_engine.models.money import (
    CURRENCY_EXPONENTS,
    CurrencyMismatchError,
    Money,
    MoneyError,
    currency_exponent,
)
from split_engine.models.split import (
    MIN_PARTICIPANTS,
    AllocationBalance,
    AllocationResult,
    Participant,
    ReconciliationStatus,
    ReconciliationVerdict,
    RoundingPolicy,
    SplitItem,
    SplitMode,
    SplitRequest,
)
from split_engine.models.extraction import (
    LOW_CONFIDENCE_THRESHOLD,
    ConfidenceLevel,
    CorrectionPhase,
    CorrectionSession,
    ExtractedItem,
    confidence_level,
)
from split_engine.models.summary import (
    SplitSummary,
    SummaryItem,
    SummaryParticipant,
)
from split_engine.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from split_engine.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Money
    "CURRENCY_EXPONENTS",
    "CurrencyMismatchError",
    "Money",
    "MoneyError",
    "currency_exponent",
    # Split models
    "MIN_PARTICIPANTS",
    "AllocationBalance",
    "AllocationResult",
    "Participant",
    "ReconciliationStatus",
    "ReconciliationVerdict",
    "RoundingPolicy",
    "SplitItem",
    "SplitMode",
    "SplitRequest",
    # Extraction models
    "LOW_CONFIDENCE_THRESHOLD",
    "ConfidenceLevel",
    "CorrectionPhase",
    "CorrectionSession",
    "ExtractedItem",
    "confidence_level",
    # Summary models
    "SplitSummary",
    "SummaryItem",
    "SummaryParticipant",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
