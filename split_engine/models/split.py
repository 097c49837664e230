"""
Split Data Models

These models define the inputs and outputs of the allocation engine.
They are designed to:
1. Be immutable snapshots (the caller owns the editable state)
2. Reject structurally broken input at construction time
3. Make conservation of money checkable on every result

DESIGN DECISION: Monetary inputs are Decimals in currency units, exactly
as a person types them. They are converted to Money (integer minor units)
at the strategy boundary, never earlier and never as floats.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from split_engine.models.money import Money


MIN_PARTICIPANTS = 2


# =============================================================================
# ENUMS
# =============================================================================

class SplitMode(str, Enum):
    """The four interchangeable allocation strategies."""
    EQUAL = "equal"
    ITEMIZED = "itemized"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"


class RoundingPolicy(str, Enum):
    """Post-allocation rounding applied by the normalizer."""
    NONE = "none"
    UP = "up"
    DOWN = "down"
    NEAREST = "nearest"


class ReconciliationStatus(str, Enum):
    MATCHED = "matched"
    MISMATCHED = "mismatched"


class AllocationBalance(str, Enum):
    """
    Which side of the declared total the computed total falls on.

    OVER_ALLOCATED means people were asked for more than the declared total.
    """
    BALANCED = "balanced"
    OVER_ALLOCATED = "over_allocated"
    UNDER_ALLOCATED = "under_allocated"


# =============================================================================
# INPUT MODELS
# =============================================================================

class Participant(BaseModel):
    """
    One person taking part in a split.

    Only some fields matter per mode:
    - amount: the caller-assigned share (custom mode)
    - percentage: share of the subtotal (percentage mode)
    - item_refs: ids of the items assigned to this person (itemized mode)
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique participant id"
    )
    name: str = Field(
        default="",
        max_length=100,
        description="Display name"
    )
    amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Caller-assigned amount in currency units (custom mode)"
    )
    percentage: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=100,
        description="Share of the subtotal in percent (percentage mode)"
    )
    item_refs: tuple[str, ...] = Field(
        default=(),
        description="Ids of items assigned to this participant"
    )


class SplitItem(BaseModel):
    """A priced line item shared by the participants it is assigned to."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique item id"
    )
    name: str = Field(
        default="",
        max_length=200,
        description="Item description"
    )
    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Item price in currency units"
    )
    assigned_to: tuple[str, ...] = Field(
        default=(),
        description="Participant ids sharing this item, in assignment order"
    )

    @field_validator('assigned_to')
    @classmethod
    def dedupe_assignments(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Assignment is a set, but order is the remainder tie-break."""
        return tuple(dict.fromkeys(v))

    @property
    def is_assigned(self) -> bool:
        return len(self.assigned_to) > 0


class SplitRequest(BaseModel):
    """
    Immutable input bundle for one allocation.

    CRITICAL: A split always has at least two participants.
    Editing helpers in split_engine.roster return a new request each time;
    nothing mutates a request in place.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    mode: SplitMode = Field(
        default=SplitMode.EQUAL,
        description="Allocation strategy"
    )
    participants: tuple[Participant, ...] = Field(
        ...,
        description="Participants in display order (the tie-break order)"
    )
    items: tuple[SplitItem, ...] = Field(
        default=(),
        description="Line items (itemized mode)"
    )
    total_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Bill amount before tax and tip"
    )
    tax_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
    )
    tip_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
    )
    declared_total: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Total the user (or the receipt) says the split must reach"
    )
    currency: str = Field(
        default="USD",
        pattern="^[A-Z]{3}$",
    )
    rounding: RoundingPolicy = Field(
        default=RoundingPolicy.NONE,
    )
    rounding_unit: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Coarser rounding step in currency units (e.g. 1 for whole units)"
    )

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode='after')
    def validate_structure(self) -> 'SplitRequest':
        """Validate participant/item relationships."""
        if len(self.participants) < MIN_PARTICIPANTS:
            raise ValueError(
                f"A split needs at least {MIN_PARTICIPANTS} participants"
            )

        participant_ids = [p.id for p in self.participants]
        if len(set(participant_ids)) != len(participant_ids):
            raise ValueError("Participant ids must be unique")

        item_ids = [item.id for item in self.items]
        if len(set(item_ids)) != len(item_ids):
            raise ValueError("Item ids must be unique")

        known = set(participant_ids)
        for item in self.items:
            unknown = [pid for pid in item.assigned_to if pid not in known]
            if unknown:
                raise ValueError(
                    f"Item {item.id} is assigned to unknown participants: {unknown}"
                )

        return self

    @property
    def participant_ids(self) -> tuple[str, ...]:
        return tuple(p.id for p in self.participants)

    @property
    def subtotal(self) -> Decimal:
        """Total plus tax plus tip (equal and percentage modes)."""
        return self.total_amount + self.tax_amount + self.tip_amount

    @property
    def expected_total(self) -> Optional[Decimal]:
        """
        The total the split is reconciled against.

        The declared total wins; in custom mode a non-zero bill amount doubles
        as the expected total. None means "reconcile against the computed total".
        """
        if self.declared_total is not None:
            return self.declared_total
        if self.mode == SplitMode.CUSTOM and self.total_amount > 0:
            return self.total_amount
        return None

    def money(self, value) -> Money:
        """Convert an amount in currency units to Money of this request's currency."""
        return Money.from_decimal(value, self.currency)

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def get_item(self, item_id: str) -> Optional[SplitItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


# =============================================================================
# RESULT MODELS
# =============================================================================

class AllocationResult(BaseModel):
    """
    Per-participant breakdown produced by a strategy.

    INVARIANT: sum(per_participant) + remainder == computed_total, exactly.
    A result that breaks it cannot be constructed.
    """
    model_config = ConfigDict(frozen=True)

    mode: SplitMode
    currency: str
    per_participant: dict[str, Money] = Field(
        ...,
        description="Amount owed per participant id, in participant order"
    )
    computed_total: Money = Field(
        ...,
        description="Everything the inputs add up to"
    )
    remainder: Money = Field(
        ...,
        description="Part of computed_total not allocated to anyone"
    )

    @model_validator(mode='after')
    def check_conservation(self) -> 'AllocationResult':
        allocated = Money.total(self.per_participant.values(), self.currency)
        if allocated.add(self.remainder) != self.computed_total:
            raise ValueError(
                f"Allocation does not conserve money: {allocated} + "
                f"{self.remainder} != {self.computed_total}"
            )
        return self

    @property
    def allocated_total(self) -> Money:
        return Money.total(self.per_participant.values(), self.currency)

    def amount_for(self, participant_id: str) -> Money:
        return self.per_participant.get(participant_id, Money.zero(self.currency))


class ReconciliationVerdict(BaseModel):
    """
    Outcome of comparing a declared total with a computed total.

    Derived data: always recomputed, never stored on its own.
    difference is the absolute gap, quantized to the minor unit,
    and is only present when the totals do not match.
    """
    model_config = ConfigDict(frozen=True)

    status: ReconciliationStatus
    currency: str
    declared_total: Decimal
    computed_total: Decimal
    tolerance: Decimal
    difference: Optional[Money] = None
    balance: AllocationBalance = AllocationBalance.BALANCED

    @property
    def is_matched(self) -> bool:
        return self.status == ReconciliationStatus.MATCHED
