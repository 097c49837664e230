"""
Summary Models

The portable record of a finished split, handed to persistence and
export collaborators.

DESIGN DECISION: Field names of SplitSummary are a stable contract:
type, participants, items, subtotal, currency, rounding.
Amounts are Decimals in currency units so the JSON form is readable
without knowing the currency's minor unit.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from split_engine.models.split import RoundingPolicy, SplitMode


class SummaryParticipant(BaseModel):
    """A participant with their final amount."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    amount: Decimal = Field(
        ...,
        description="Final amount owed, in currency units"
    )
    percentage: Decimal = Decimal("0")
    items: list[str] = Field(default_factory=list)


class SummaryItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Decimal
    assigned_to: list[str] = Field(default_factory=list)


class SplitSummary(BaseModel):
    """Flat, serializable snapshot of a split."""
    model_config = ConfigDict(frozen=True)

    type: SplitMode
    participants: list[SummaryParticipant]
    items: list[SummaryItem] = Field(default_factory=list)
    subtotal: Decimal
    currency: str
    rounding: RoundingPolicy
