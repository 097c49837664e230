"""
Extraction Models

Line items read from a scanned receipt by an external OCR collaborator.

CRITICAL: This is PROPOSED data, NOT verified.
Items below the confidence threshold MUST go through a human decision
(accept anyway or correct) before they are handed on.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from split_engine.models.split import SplitItem


# Fixed design constants, not user-configurable
LOW_CONFIDENCE_THRESHOLD = 50.0
HIGH_CONFIDENCE_THRESHOLD = 80.0
MAX_CONFIDENCE = 100.0


class ConfidenceLevel(str, Enum):
    """Traffic-light bucket for a confidence score."""
    HIGH = "high"      # >= 80
    MEDIUM = "medium"  # >= 50
    LOW = "low"        # < 50, needs a human decision


class CorrectionPhase(str, Enum):
    READY = "ready"
    AWAITING_DECISION = "awaiting_decision"


def confidence_level(confidence: float) -> ConfidenceLevel:
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.HIGH
    if confidence >= LOW_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


class ExtractedItem(BaseModel):
    """
    A receipt line item as extracted by OCR.

    source_region is owned by the extraction collaborator. It is opaque
    here and passed through by reference, never inspected or copied.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique item id"
    )
    name: str = Field(
        default="",
        max_length=200,
    )
    quantity: Decimal = Field(
        default=Decimal("1"),
        ge=0,
    )
    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Unit price in currency units"
    )
    confidence: float = Field(
        ...,
        ge=0.0,
        le=MAX_CONFIDENCE,
        description="Extraction confidence (0-100)"
    )
    source_region: Optional[Any] = Field(
        default=None,
        description="Opaque receipt region supplied by the extraction collaborator"
    )
    reviewed: bool = Field(
        default=False,
        description="A human accepted or corrected this item"
    )

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return confidence_level(self.confidence)

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence < LOW_CONFIDENCE_THRESHOLD

    @property
    def needs_review(self) -> bool:
        """Low confidence and no human has signed off on it yet."""
        return self.is_low_confidence and not self.reviewed

    def to_split_item(self, assigned_to: tuple[str, ...] = ()) -> SplitItem:
        """Convert to an itemized-split line (price becomes the line total)."""
        return SplitItem(
            id=self.id,
            name=self.name,
            price=self.line_total,
            assigned_to=assigned_to,
        )


class CorrectionSession(BaseModel):
    """
    Transient state of one pending human decision.

    Created when finalize runs into unreviewed low-confidence items,
    destroyed when the human accepts anyway or chooses to correct.
    """
    model_config = ConfigDict(frozen=True)

    session_id: UUID = Field(
        default_factory=uuid4,
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
    )
    pending_items: tuple[ExtractedItem, ...] = Field(
        ...,
        description="Low-confidence items waiting for a decision"
    )
    phase: CorrectionPhase = Field(
        default=CorrectionPhase.AWAITING_DECISION,
    )
