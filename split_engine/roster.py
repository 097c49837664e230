"""
Roster Editing

Helpers for building up a SplitRequest one edit at a time.

DESIGN DECISION: A SplitRequest is an immutable snapshot. Every helper
returns a NEW request, re-validated through its constructor, and the
caller re-runs the calculation after each edit. Nothing is mutated in
place, so two views holding the old request never see a half-applied edit.

Participant.item_refs is derived from item assignments and is rebuilt on
every edit.
"""

from decimal import Decimal
from typing import Optional, Sequence

from split_engine.config import get_settings
from split_engine.models.split import (
    MIN_PARTICIPANTS,
    Participant,
    RoundingPolicy,
    SplitItem,
    SplitMode,
    SplitRequest,
)


_UNSET = object()


class ParticipantLimitError(ValueError):
    """Removing a participant would leave fewer than the minimum."""

    def __init__(self, minimum: int = MIN_PARTICIPANTS):
        self.minimum = minimum
        super().__init__(f"A split needs at least {minimum} participants")


def _replace(request: SplitRequest, **changes) -> SplitRequest:
    data = {name: getattr(request, name) for name in SplitRequest.model_fields}
    data.update(changes)

    items = tuple(data["items"])
    data["participants"] = tuple(
        participant.model_copy(update={
            "item_refs": tuple(
                item.id for item in items if participant.id in item.assigned_to
            ),
        })
        for participant in data["participants"]
    )
    return SplitRequest(**data)


def _require_participant(request: SplitRequest, participant_id: str) -> Participant:
    participant = request.get_participant(participant_id)
    if participant is None:
        raise KeyError(f"Unknown participant: {participant_id}")
    return participant


def _require_item(request: SplitRequest, item_id: str) -> SplitItem:
    item = request.get_item(item_id)
    if item is None:
        raise KeyError(f"Unknown item: {item_id}")
    return item


def _next_id(prefix: str, taken: Sequence[str]) -> str:
    n = len(taken) + 1
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


def _replace_participant(request: SplitRequest, participant_id: str, **changes) -> SplitRequest:
    _require_participant(request, participant_id)
    participants = tuple(
        p.model_copy(update=changes) if p.id == participant_id else p
        for p in request.participants
    )
    # Round-trip through the constructor so field constraints are enforced
    participants = tuple(Participant(**p.model_dump()) for p in participants)
    return _replace(request, participants=participants)


def _replace_item(request: SplitRequest, item_id: str, **changes) -> SplitRequest:
    _require_item(request, item_id)
    items = tuple(
        SplitItem(**{**item.model_dump(), **changes}) if item.id == item_id else item
        for item in request.items
    )
    return _replace(request, items=items)


# =============================================================================
# REQUEST
# =============================================================================

def new_request(
    mode: SplitMode = SplitMode.EQUAL,
    currency: Optional[str] = None,
) -> SplitRequest:
    """A fresh request with two participants, "Person 1" and "Person 2"."""
    return SplitRequest(
        mode=mode,
        participants=(
            Participant(id="p1", name="Person 1"),
            Participant(id="p2", name="Person 2"),
        ),
        currency=currency or get_settings().allocation.default_currency,
    )


def set_mode(request: SplitRequest, mode: SplitMode) -> SplitRequest:
    return _replace(request, mode=SplitMode(mode))


def set_currency(request: SplitRequest, currency: str) -> SplitRequest:
    return _replace(request, currency=currency)


def set_rounding(
    request: SplitRequest,
    policy: RoundingPolicy,
    unit: Optional[Decimal] = None,
) -> SplitRequest:
    return _replace(request, rounding=RoundingPolicy(policy), rounding_unit=unit)


def set_amounts(
    request: SplitRequest,
    total_amount=_UNSET,
    tax_amount=_UNSET,
    tip_amount=_UNSET,
    declared_total=_UNSET,
) -> SplitRequest:
    """
    Change bill amounts. Arguments left out keep their current value;
    pass declared_total=None to clear the declared total.
    """
    changes = {
        name: value
        for name, value in (
            ("total_amount", total_amount),
            ("tax_amount", tax_amount),
            ("tip_amount", tip_amount),
            ("declared_total", declared_total),
        )
        if value is not _UNSET
    }
    return _replace(request, **changes)


# =============================================================================
# PARTICIPANTS
# =============================================================================

def add_participant(
    request: SplitRequest,
    name: Optional[str] = None,
    participant_id: Optional[str] = None,
) -> SplitRequest:
    """Append a participant. The default name is "Person N"."""
    taken = request.participant_ids
    participant = Participant(
        id=participant_id or _next_id("p", taken),
        name=name if name is not None else f"Person {len(taken) + 1}",
    )
    return _replace(request, participants=(*request.participants, participant))


def remove_participant(request: SplitRequest, participant_id: str) -> SplitRequest:
    """
    Remove a participant and drop them from every item.

    Raises:
        KeyError: If the participant does not exist
        ParticipantLimitError: If fewer than two participants would remain
    """
    _require_participant(request, participant_id)
    if len(request.participants) - 1 < MIN_PARTICIPANTS:
        raise ParticipantLimitError()

    participants = tuple(p for p in request.participants if p.id != participant_id)
    items = tuple(
        item.model_copy(update={
            "assigned_to": tuple(pid for pid in item.assigned_to if pid != participant_id),
        })
        for item in request.items
    )
    return _replace(request, participants=participants, items=items)


def rename_participant(request: SplitRequest, participant_id: str, name: str) -> SplitRequest:
    return _replace_participant(request, participant_id, name=name)


def set_percentage(request: SplitRequest, participant_id: str, percentage) -> SplitRequest:
    return _replace_participant(request, participant_id, percentage=Decimal(str(percentage)))


def set_custom_amount(request: SplitRequest, participant_id: str, amount) -> SplitRequest:
    return _replace_participant(request, participant_id, amount=Decimal(str(amount)))


# =============================================================================
# ITEMS
# =============================================================================

def add_item(
    request: SplitRequest,
    name: str = "",
    price=Decimal("0"),
    assigned_to: Sequence[str] = (),
    item_id: Optional[str] = None,
) -> SplitRequest:
    item = SplitItem(
        id=item_id or _next_id("i", [i.id for i in request.items]),
        name=name,
        price=Decimal(str(price)),
        assigned_to=tuple(assigned_to),
    )
    return _replace(request, items=(*request.items, item))


def remove_item(request: SplitRequest, item_id: str) -> SplitRequest:
    _require_item(request, item_id)
    return _replace(request, items=tuple(i for i in request.items if i.id != item_id))


def update_item(
    request: SplitRequest,
    item_id: str,
    name: Optional[str] = None,
    price=None,
) -> SplitRequest:
    changes = {}
    if name is not None:
        changes["name"] = name
    if price is not None:
        changes["price"] = Decimal(str(price))
    return _replace_item(request, item_id, **changes)


def toggle_assignment(request: SplitRequest, item_id: str, participant_id: str) -> SplitRequest:
    """Assign the participant to the item, or unassign them if already assigned."""
    item = _require_item(request, item_id)
    _require_participant(request, participant_id)

    if participant_id in item.assigned_to:
        assigned_to = tuple(pid for pid in item.assigned_to if pid != participant_id)
    else:
        assigned_to = (*item.assigned_to, participant_id)
    return _replace_item(request, item_id, assigned_to=assigned_to)


def assign_to_all(request: SplitRequest, item_id: str) -> SplitRequest:
    """Share an item between every participant, in participant order."""
    return _replace_item(request, item_id, assigned_to=request.participant_ids)
