"""
Extraction Correction Workflow

CRITICAL: Uncertain OCR output is never trusted silently.
When finalize runs into items below the confidence threshold, the workflow
stops and waits for a human decision. It never blocks a human override.

State machine:

    READY --finalize (nothing to review)--> on_accept(items)
    READY --finalize (low confidence)-----> AWAITING_DECISION
    AWAITING_DECISION --accept_anyway----> READY, finalize again
    AWAITING_DECISION --correct_items----> READY (pending items handed back)
    any --reject--> on_reject()

DESIGN DECISION: The threshold (50) and the accept-anyway boost (+20) are
fixed constants, not settings.
"""

from typing import Callable, Iterable, Optional
from uuid import UUID

from split_engine.audit import AuditLogger
from split_engine.extraction.items import low_confidence_items
from split_engine.models.extraction import (
    MAX_CONFIDENCE,
    CorrectionPhase,
    CorrectionSession,
    ExtractedItem,
)


ACCEPT_ANYWAY_BOOST = 20.0


AcceptCallback = Callable[[list[ExtractedItem]], None]
RejectCallback = Callable[[], None]


class InvalidTransitionError(Exception):
    """A workflow action was invoked from a phase that does not allow it."""

    def __init__(self, action: str, phase: CorrectionPhase):
        self.action = action
        self.phase = phase
        super().__init__(f"Cannot {action} while {phase.value}")


class CorrectionWorkflow:
    """
    Confidence-gated finalize for one set of extracted receipt items.

    Callbacks are invoked synchronously; exceptions they raise propagate
    to the caller of the action that triggered them.

    Usage:
        workflow = CorrectionWorkflow(on_accept=save_items, on_reject=discard)
        workflow.finalize(items)
        if workflow.phase == CorrectionPhase.AWAITING_DECISION:
            workflow.accept_anyway()   # or workflow.correct_items()
    """

    def __init__(
        self,
        on_accept: AcceptCallback,
        on_reject: RejectCallback,
        items: Iterable[ExtractedItem] = (),
        audit_logger: Optional[AuditLogger] = None,
        correlation_id: Optional[UUID] = None,
    ):
        self._on_accept = on_accept
        self._on_reject = on_reject
        self._items: list[ExtractedItem] = list(items)
        self._audit = audit_logger
        self._correlation_id = correlation_id

        self._phase = CorrectionPhase.READY
        self._session: Optional[CorrectionSession] = None

        # Confident items set aside by correct_items, plus the original order
        self._held: Optional[dict[str, ExtractedItem]] = None
        self._held_order: list[str] = []

    @property
    def phase(self) -> CorrectionPhase:
        return self._phase

    @property
    def items(self) -> list[ExtractedItem]:
        """The active item set."""
        return list(self._items)

    @property
    def session(self) -> Optional[CorrectionSession]:
        """The pending decision, if any."""
        return self._session

    @property
    def low_confidence_items(self) -> list[ExtractedItem]:
        return low_confidence_items(self._items)

    def finalize(self, items: Optional[Iterable[ExtractedItem]] = None) -> CorrectionPhase:
        """
        Hand the item set on, or stop for a human decision.

        Args:
            items: Replacement item set. After correct_items, these are the
                   edited items and the held-aside items are merged back.

        Returns:
            The phase after the action (READY means on_accept was invoked).
        """
        self._require(CorrectionPhase.READY, "finalize")

        if items is not None:
            self._items = list(items)
        if self._held is not None:
            self._items = self._merge_held(self._items)

        if self._audit:
            self._audit.log_finalize_requested(len(self._items), self._correlation_id)

        pending = low_confidence_items(self._items)
        if pending:
            self._session = CorrectionSession(pending_items=tuple(pending))
            self._phase = CorrectionPhase.AWAITING_DECISION
            if self._audit:
                self._audit.log_low_confidence_detected(
                    self._session.session_id,
                    [item.id for item in pending],
                    self._correlation_id,
                )
            return self._phase

        if self._audit:
            self._audit.log_extraction_accepted(len(self._items), self._correlation_id)
        self._on_accept(list(self._items))
        return self._phase

    def accept_anyway(self) -> CorrectionPhase:
        """
        Accept the pending items as they are.

        Each pending item gets +20 confidence (capped at 100) and is marked
        reviewed, then finalize runs again with the full set.
        """
        self._require(CorrectionPhase.AWAITING_DECISION, "accept anyway")
        session = self._session
        pending_ids = {item.id for item in session.pending_items}

        self._items = [
            self._boost(item) if item.id in pending_ids else item
            for item in self._items
        ]
        self._reset()

        if self._audit:
            self._audit.log_accepted_anyway(
                session.session_id, sorted(pending_ids), self._correlation_id
            )
        return self.finalize()

    def correct_items(self) -> list[ExtractedItem]:
        """
        Narrow the active set to the pending items for manual editing.

        No callback is invoked. The human edits the returned items and calls
        finalize(edited_items); the confident items come back at that point.
        """
        self._require(CorrectionPhase.AWAITING_DECISION, "correct items")
        session = self._session
        pending_ids = {item.id for item in session.pending_items}

        self._held_order = [item.id for item in self._items]
        self._held = {
            item.id: item for item in self._items if item.id not in pending_ids
        }
        self._items = [item for item in self._items if item.id in pending_ids]
        self._reset()

        if self._audit:
            self._audit.log_correction_requested(
                session.session_id, sorted(pending_ids), self._correlation_id
            )
        return list(self._items)

    def reject(self, reason: Optional[str] = None) -> None:
        """Discard the extraction. Allowed from any phase."""
        self._reset()
        self._held = None
        self._held_order = []

        if self._audit:
            self._audit.log_extraction_rejected(reason, self._correlation_id)
        self._on_reject()

    def _require(self, phase: CorrectionPhase, action: str) -> None:
        if self._phase != phase:
            raise InvalidTransitionError(action, self._phase)

    def _reset(self) -> None:
        self._phase = CorrectionPhase.READY
        self._session = None

    @staticmethod
    def _boost(item: ExtractedItem) -> ExtractedItem:
        return item.model_copy(update={
            "confidence": min(item.confidence + ACCEPT_ANYWAY_BOOST, MAX_CONFIDENCE),
            "reviewed": True,
        })

    def _merge_held(self, edited: list[ExtractedItem]) -> list[ExtractedItem]:
        """Put held items back in their original slots; new items go last."""
        by_id = {item.id: item for item in edited}
        merged = []
        for item_id in self._held_order:
            if item_id in by_id:
                merged.append(by_id[item_id])
            elif item_id in self._held:
                merged.append(self._held[item_id])

        known = set(self._held_order)
        merged.extend(item for item in edited if item.id not in known)

        self._held = None
        self._held_order = []
        return merged
