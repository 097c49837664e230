"""
Extraction Review Package

Human-in-the-loop review of OCR-extracted receipt items.
"""

from split_engine.extraction.items import (
    add_blank_item,
    delete_item,
    duplicate_item,
    low_confidence_items,
    parsed_total,
    to_split_items,
    update_item,
)
from split_engine.extraction.workflow import (
    ACCEPT_ANYWAY_BOOST,
    CorrectionWorkflow,
    InvalidTransitionError,
)

__all__ = [
    # Item editing
    "add_blank_item",
    "delete_item",
    "duplicate_item",
    "low_confidence_items",
    "parsed_total",
    "to_split_items",
    "update_item",
    # Workflow
    "ACCEPT_ANYWAY_BOOST",
    "CorrectionWorkflow",
    "InvalidTransitionError",
]
