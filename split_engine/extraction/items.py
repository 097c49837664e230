"""
Extracted Item Editing

Pure helpers over an ordered sequence of ExtractedItem. Each returns a new
list; the caller owns the editable collection.

IMPORTANT: Any human edit marks the item as reviewed, so the correction
workflow does not hold it back a second time.
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Sequence
from uuid import uuid4

from split_engine.models.extraction import ExtractedItem
from split_engine.models.split import SplitItem


BLANK_ITEM_NAME = "New Item"


def _new_item_id() -> str:
    return uuid4().hex[:12]


def _index_of(items: Sequence[ExtractedItem], item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    raise KeyError(f"Unknown item: {item_id}")


def parsed_total(items: Iterable[ExtractedItem]) -> Decimal:
    """Sum of price * quantity over all items."""
    return sum((item.line_total for item in items), Decimal("0"))


def low_confidence_items(items: Iterable[ExtractedItem]) -> list[ExtractedItem]:
    """Items that still need a human decision before finalizing."""
    return [item for item in items if item.needs_review]


def update_item(
    items: Sequence[ExtractedItem],
    item_id: str,
    changes: Mapping[str, Any],
) -> list[ExtractedItem]:
    """
    Apply a human edit to one item.

    Changes are re-validated; the edited item is marked reviewed.

    Raises:
        KeyError: If item_id is not in items
        pydantic.ValidationError: If the edit produces an invalid item
    """
    index = _index_of(items, item_id)
    data = items[index].model_dump()
    data.update(changes)
    data["id"] = item_id
    data["reviewed"] = True
    # Keep the opaque region by reference
    data["source_region"] = changes.get("source_region", items[index].source_region)

    updated = list(items)
    updated[index] = ExtractedItem(**data)
    return updated


def delete_item(items: Sequence[ExtractedItem], item_id: str) -> list[ExtractedItem]:
    index = _index_of(items, item_id)
    return [item for i, item in enumerate(items) if i != index]


def add_blank_item(
    items: Sequence[ExtractedItem],
    item_id: Optional[str] = None,
) -> list[ExtractedItem]:
    """
    Append an empty line for the human to fill in.

    A blank item has zero confidence, so it is gated until someone edits it.
    """
    blank = ExtractedItem(
        id=item_id or _new_item_id(),
        name=BLANK_ITEM_NAME,
        quantity=Decimal("1"),
        price=Decimal("0"),
        confidence=0.0,
    )
    return [*items, blank]


def duplicate_item(
    items: Sequence[ExtractedItem],
    item_id: str,
    new_id: Optional[str] = None,
) -> list[ExtractedItem]:
    """Insert a copy of an item directly after it."""
    index = _index_of(items, item_id)
    original = items[index]
    copy = original.model_copy(update={"id": new_id or _new_item_id()})

    updated = list(items)
    updated.insert(index + 1, copy)
    return updated


def to_split_items(
    items: Iterable[ExtractedItem],
    assignments: Optional[Mapping[str, Sequence[str]]] = None,
) -> list[SplitItem]:
    """
    Convert accepted items into itemized-split lines.

    Args:
        items: Accepted extracted items
        assignments: Optional item id -> participant ids
    """
    assignments = assignments or {}
    return [
        item.to_split_item(tuple(assignments.get(item.id, ())))
        for item in items
    ]
