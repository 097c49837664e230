"""
Tests for the extraction correction workflow.

CRITICAL: Low-confidence items must never reach the accept callback
without a human decision.
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from split_engine.audit import AuditLogger
from split_engine.extraction import CorrectionWorkflow, InvalidTransitionError
from split_engine.models.audit import AuditEventType
from split_engine.models.extraction import CorrectionPhase, ExtractedItem
from split_engine.services.storage import InMemoryAuditStorage


class Recorder:
    """Collects callback invocations."""

    def __init__(self):
        self.accepted = []
        self.rejected = 0

    def on_accept(self, items):
        self.accepted.append(items)

    def on_reject(self):
        self.rejected += 1


def make_items():
    return [
        ExtractedItem(id="a", name="Burger", price=Decimal("12.00"), confidence=95),
        ExtractedItem(id="b", name="Fries", price=Decimal("4.00"), confidence=30),
    ]


def make_workflow(items=None, **kwargs):
    recorder = Recorder()
    workflow = CorrectionWorkflow(
        on_accept=recorder.on_accept,
        on_reject=recorder.on_reject,
        items=items if items is not None else make_items(),
        **kwargs,
    )
    return workflow, recorder


class TestFinalize:
    """Tests for the finalize action."""

    def test_confident_items_accepted_directly(self):
        """Test that finalize without low-confidence items calls on_accept."""
        items = [ExtractedItem(id="a", price=Decimal("1.00"), confidence=80)]
        workflow, recorder = make_workflow(items)

        phase = workflow.finalize()

        assert phase == CorrectionPhase.READY
        assert recorder.accepted == [items]

    def test_low_confidence_enters_awaiting_decision(self):
        """Test that a confidence below 50 stops finalize."""
        workflow, recorder = make_workflow()

        phase = workflow.finalize()

        assert phase == CorrectionPhase.AWAITING_DECISION
        assert workflow.session is not None
        assert [item.id for item in workflow.session.pending_items] == ["b"]
        assert recorder.accepted == []

    def test_threshold_is_exclusive(self):
        """Test that exactly 50 does not need review."""
        items = [ExtractedItem(id="a", price=Decimal("1.00"), confidence=50)]
        workflow, recorder = make_workflow(items)
        workflow.finalize()
        assert len(recorder.accepted) == 1

    def test_finalize_with_new_items(self):
        """Test that finalize can replace the active item set."""
        workflow, recorder = make_workflow([])
        replacement = [ExtractedItem(id="x", price=Decimal("2.00"), confidence=99)]
        workflow.finalize(replacement)
        assert recorder.accepted == [replacement]

    def test_finalize_while_awaiting_rejected(self):
        """Test that finalize cannot bypass a pending decision."""
        workflow, _ = make_workflow()
        workflow.finalize()
        with pytest.raises(InvalidTransitionError):
            workflow.finalize()


class TestAcceptAnyway:
    """Tests for the accept-anyway decision."""

    def test_boosts_confidence_and_accepts(self):
        """Test that 30 becomes 50 and both items are accepted."""
        workflow, recorder = make_workflow()
        workflow.finalize()

        phase = workflow.accept_anyway()

        assert phase == CorrectionPhase.READY
        assert len(recorder.accepted) == 1
        accepted = recorder.accepted[0]
        assert [item.id for item in accepted] == ["a", "b"]
        assert accepted[0].confidence == 95
        assert accepted[1].confidence == 50
        assert accepted[1].reviewed

    def test_boost_is_capped(self):
        """Test that a boosted confidence never exceeds 100."""
        workflow, recorder = make_workflow()
        workflow.finalize()
        workflow.accept_anyway()
        assert all(item.confidence <= 100 for item in recorder.accepted[0])

    def test_very_low_confidence_still_accepted(self):
        """Test that a human override is never blocked by the boost size."""
        items = [ExtractedItem(id="a", price=Decimal("1.00"), confidence=5)]
        workflow, recorder = make_workflow(items)
        workflow.finalize()
        workflow.accept_anyway()
        assert recorder.accepted[0][0].confidence == 25
        assert recorder.accepted[0][0].reviewed

    def test_source_region_passed_through(self):
        """Test that the opaque region is kept by reference."""
        region = {"page": 1, "box": [0, 0, 10, 10]}
        items = [ExtractedItem(id="a", price=Decimal("1.00"), confidence=10, source_region=region)]
        workflow, recorder = make_workflow(items)
        workflow.finalize()
        workflow.accept_anyway()
        assert recorder.accepted[0][0].source_region is region

    def test_not_allowed_from_ready(self):
        """Test that accept-anyway needs a pending decision."""
        workflow, _ = make_workflow()
        with pytest.raises(InvalidTransitionError):
            workflow.accept_anyway()


class TestCorrectItems:
    """Tests for the correct-items decision."""

    def test_returns_only_low_confidence_items(self):
        """Test that the caller receives only the second item and no callback fires."""
        workflow, recorder = make_workflow()
        workflow.finalize()

        pending = workflow.correct_items()

        assert [item.id for item in pending] == ["b"]
        assert workflow.items == pending
        assert workflow.phase == CorrectionPhase.READY
        assert recorder.accepted == []
        assert recorder.rejected == 0

    def test_edited_items_merged_back_in_order(self):
        """Test that confident items return around the corrected ones."""
        items = [
            ExtractedItem(id="a", price=Decimal("1.00"), confidence=40),
            ExtractedItem(id="b", price=Decimal("2.00"), confidence=90),
            ExtractedItem(id="c", price=Decimal("3.00"), confidence=90),
        ]
        workflow, recorder = make_workflow(items)
        workflow.finalize()
        pending = workflow.correct_items()

        edited = [pending[0].model_copy(update={"price": Decimal("1.50"), "reviewed": True})]
        workflow.finalize(edited)

        accepted = recorder.accepted[0]
        assert [item.id for item in accepted] == ["a", "b", "c"]
        assert accepted[0].price == Decimal("1.50")

    def test_unedited_items_gate_again(self):
        """Test that finalizing unreviewed low-confidence items stops again."""
        workflow, recorder = make_workflow()
        workflow.finalize()
        workflow.correct_items()

        phase = workflow.finalize()

        assert phase == CorrectionPhase.AWAITING_DECISION
        assert [item.id for item in workflow.items] == ["a", "b"]
        assert recorder.accepted == []


class TestReject:
    """Tests for the reject action."""

    def test_reject_from_ready(self):
        """Test that reject works without a pending decision."""
        workflow, recorder = make_workflow()
        workflow.reject()
        assert recorder.rejected == 1

    def test_reject_from_awaiting_decision(self):
        """Test that reject is never gated."""
        workflow, recorder = make_workflow()
        workflow.finalize()
        workflow.reject("Wrong receipt")
        assert recorder.rejected == 1
        assert workflow.phase == CorrectionPhase.READY
        assert workflow.session is None
        assert recorder.accepted == []


class TestWorkflowAudit:
    """Tests that workflow decisions are audited."""

    def test_events_recorded_with_correlation_id(self):
        """Test the audit trail of a gated finalize and an override."""
        storage = InMemoryAuditStorage()
        correlation_id = uuid4()
        workflow, _ = make_workflow(
            audit_logger=AuditLogger(storage),
            correlation_id=correlation_id,
        )

        workflow.finalize()
        workflow.accept_anyway()

        types = [event.event_type for event in storage.get_events_by_correlation_id(correlation_id)]
        assert types == [
            AuditEventType.FINALIZE_REQUESTED,
            AuditEventType.LOW_CONFIDENCE_DETECTED,
            AuditEventType.USER_ACCEPTED_ANYWAY,
            AuditEventType.FINALIZE_REQUESTED,
            AuditEventType.EXTRACTION_ACCEPTED,
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
