"""
Main Orchestrator for Split Engine

This module ties together all the components and defines the
end-to-end flows for:
1. Split calculation (request → validate → allocate → normalize → reconcile)
2. Receipt review (extracted items → human decision → itemized request)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Engine errors become value-level outcomes the UI can display
- Reconciliation mismatches are results, never exceptions
- No extracted item reaches a split without passing the confidence gate
- Every step is audited

The flows are recomputed from scratch on every edit; they hold no
state about previous calculations.
"""

from decimal import Decimal
from typing import Callable, Iterable, Mapping, Optional, Sequence
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from split_engine.allocation import AllocationError, compute_allocation
from split_engine.audit import AuditLogger, create_correlation_id
from split_engine.export import SummaryExporter
from split_engine.extraction import (
    CorrectionWorkflow,
    parsed_total,
    to_split_items,
)
from split_engine.models.extraction import CorrectionPhase, ExtractedItem
from split_engine.models.money import MoneyError
from split_engine.models.split import (
    AllocationResult,
    Participant,
    ReconciliationVerdict,
    SplitMode,
    SplitRequest,
)
from split_engine.models.summary import SplitSummary
from split_engine.models.validation import ValidationResult
from split_engine.reconciliation import ReconciliationEvaluator
from split_engine.rounding import NormalizationResult, RoundingNormalizer
from split_engine.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemorySplitStorage,
    SplitStorageInterface,
    StorageError,
)
from split_engine.validation import SplitRequestValidator


class SplitCalculation(BaseModel):
    """
    Everything one calculation produced.

    success=False means the request could not be allocated; error_message
    says why and allocation is None. A reconciliation mismatch is still
    a successful calculation.
    """
    model_config = ConfigDict(frozen=True)

    correlation_id: UUID
    request: SplitRequest
    validation: ValidationResult
    allocation: Optional[AllocationResult] = None
    normalization: Optional[NormalizationResult] = None
    verdict: Optional[ReconciliationVerdict] = None
    success: bool = Field(
        ...,
        description="Was an allocation produced?"
    )
    error_message: Optional[str] = None


class SplitCalculationFlow:
    """
    Orchestrates one split calculation.

    Flow:
    1. Validate → Two-stage validation (reports, never fixes)
    2. Allocate → Strategy selected by request.mode
    3. Normalize → Rounding policy, difference always reported
    4. Reconcile → Expected total vs allocated total
    5. Export / Save → Only on explicit request
    """

    def __init__(
        self,
        validator: Optional[SplitRequestValidator] = None,
        normalizer: Optional[RoundingNormalizer] = None,
        evaluator: Optional[ReconciliationEvaluator] = None,
        exporter: Optional[SummaryExporter] = None,
        split_storage: Optional[SplitStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._validator = validator or SplitRequestValidator()
        self._normalizer = normalizer or RoundingNormalizer()
        self._evaluator = evaluator or ReconciliationEvaluator()
        self._exporter = exporter or SummaryExporter()
        self._split_storage = split_storage
        self._audit_logger = audit_logger

    def calculate(
        self,
        request: SplitRequest,
        correlation_id: Optional[UUID] = None,
    ) -> SplitCalculation:
        """
        Run the full calculation for a request.

        Never raises for bad input: failures come back as success=False.
        """
        correlation_id = correlation_id or create_correlation_id()

        validation = self._validator.validate(request)
        if not validation.can_compute:
            message = "; ".join(issue.message for issue in validation.errors)
            if self._audit_logger:
                self._audit_logger.log_allocation_rejected(
                    mode=request.mode.value,
                    error_type="validation_failed",
                    error_message=message,
                    correlation_id=correlation_id,
                )
            return SplitCalculation(
                correlation_id=correlation_id,
                request=request,
                validation=validation,
                success=False,
                error_message=message,
            )

        try:
            allocation = compute_allocation(request)
            normalization = self._normalizer.normalize(
                allocation, request.rounding, request.rounding_unit
            )
            verdict = self.reconcile(request, allocation)
        except (AllocationError, MoneyError) as e:
            if self._audit_logger:
                self._audit_logger.log_allocation_rejected(
                    mode=request.mode.value,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return SplitCalculation(
                correlation_id=correlation_id,
                request=request,
                validation=validation,
                success=False,
                error_message=str(e),
            )

        if self._audit_logger:
            self._audit_logger.log_split_computed(
                mode=allocation.mode.value,
                participant_count=len(allocation.per_participant),
                computed_total=str(allocation.computed_total.to_decimal()),
                remainder=str(allocation.remainder.to_decimal()),
                currency=allocation.currency,
                correlation_id=correlation_id,
            )
            if not verdict.is_matched:
                self._audit_logger.log_reconciliation_mismatch(
                    declared_total=str(verdict.declared_total),
                    computed_total=str(verdict.computed_total),
                    difference=str(verdict.difference.to_decimal()),
                    balance=verdict.balance.value,
                    currency=verdict.currency,
                    correlation_id=correlation_id,
                )

        return SplitCalculation(
            correlation_id=correlation_id,
            request=request,
            validation=validation,
            allocation=allocation,
            normalization=normalization,
            verdict=verdict,
            success=True,
        )

    def reconcile(
        self,
        request: SplitRequest,
        allocation: AllocationResult,
    ) -> ReconciliationVerdict:
        """
        Compare what people were asked to pay with what the split must reach.

        The expected total is the declared total if there is one, otherwise
        the computed total. Unallocated remainder therefore shows up as a
        mismatch.
        """
        expected = request.expected_total
        if expected is None:
            expected = allocation.computed_total
        return self._evaluator.evaluate(
            declared_total=expected,
            computed_total=allocation.allocated_total,
            currency=request.currency,
        )

    def export(
        self,
        calculation: SplitCalculation,
    ) -> SplitSummary:
        """
        Build the portable summary of a successful calculation.

        Raises:
            ValueError: If the calculation did not produce an allocation
        """
        if not calculation.success:
            raise ValueError(f"Cannot export a failed calculation: {calculation.error_message}")

        summary = self._exporter.to_record(
            calculation.allocation,
            calculation.request,
            calculation.normalization,
        )

        if self._audit_logger:
            self._audit_logger.log_summary_exported(
                mode=summary.type.value,
                subtotal=str(summary.subtotal),
                currency=summary.currency,
                correlation_id=calculation.correlation_id,
            )

        return summary

    def share_token(self, calculation: SplitCalculation) -> str:
        return self._exporter.to_share_token(self.export(calculation))

    def save(
        self,
        summary: SplitSummary,
        split_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> UUID:
        """
        Hand a summary to split storage.

        CRITICAL: Called ONLY on an explicit user action. Storage errors
        are not retried; they propagate to the caller.

        Returns:
            The id the split was stored under
        """
        self._require_storage()
        split_id = split_id or uuid4()

        try:
            self._split_storage.save_summary(split_id, summary)
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"split_id": str(split_id)},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_split_saved(
                split_id=split_id,
                subtotal=str(summary.subtotal),
                currency=summary.currency,
                correlation_id=correlation_id,
            )

        return split_id

    def save_template(
        self,
        name: str,
        request: SplitRequest,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Store a request so the same group and mode can be reused."""
        self._require_storage()
        self._split_storage.save_template(name, request)

        if self._audit_logger:
            self._audit_logger.log_template_saved(name, correlation_id)

    def load_template(self, name: str) -> Optional[SplitRequest]:
        self._require_storage()
        return self._split_storage.get_template(name)

    def list_templates(self) -> list[str]:
        self._require_storage()
        return self._split_storage.list_templates()

    def _require_storage(self) -> None:
        if self._split_storage is None:
            raise StorageError("Split storage is not configured")


class ReceiptReviewFlow:
    """
    Orchestrates the review of OCR-extracted receipt items.

    Flow:
    1. Review → Live reconciliation of parsed total vs receipt total
    2. Finalize → Confidence gate (PAUSE on low-confidence items)
    3. Decide → Accept anyway, or correct and finalize again
    4. Build → Accepted items become an itemized SplitRequest

    Human review of low-confidence items (step 3) is MANDATORY.
    """

    def __init__(
        self,
        items: Iterable[ExtractedItem],
        receipt_total: Optional[Decimal] = None,
        currency: Optional[str] = None,
        on_accept: Optional[Callable[[list[ExtractedItem]], None]] = None,
        on_reject: Optional[Callable[[], None]] = None,
        evaluator: Optional[ReconciliationEvaluator] = None,
        audit_logger: Optional[AuditLogger] = None,
        correlation_id: Optional[UUID] = None,
    ):
        self._receipt_total = receipt_total
        self._currency = currency
        self._on_accept = on_accept
        self._on_reject = on_reject
        self._evaluator = evaluator or ReconciliationEvaluator()
        self.correlation_id = correlation_id or create_correlation_id()

        self.accepted_items: Optional[list[ExtractedItem]] = None
        self.rejected = False

        self._workflow = CorrectionWorkflow(
            on_accept=self._accepted,
            on_reject=self._rejected,
            items=items,
            audit_logger=audit_logger,
            correlation_id=self.correlation_id,
        )

    @property
    def workflow(self) -> CorrectionWorkflow:
        return self._workflow

    @property
    def phase(self) -> CorrectionPhase:
        return self._workflow.phase

    @property
    def items(self) -> list[ExtractedItem]:
        return self._workflow.items

    def reconcile(
        self,
        items: Optional[Iterable[ExtractedItem]] = None,
    ) -> Optional[ReconciliationVerdict]:
        """
        Parsed total vs receipt total, for the banner shown while editing.

        Returns None when no receipt total was extracted.
        """
        if self._receipt_total is None:
            return None
        current = self.items if items is None else list(items)
        return self._evaluator.evaluate(
            declared_total=self._receipt_total,
            computed_total=parsed_total(current),
            currency=self._currency,
        )

    def finalize(self, items: Optional[Iterable[ExtractedItem]] = None) -> CorrectionPhase:
        return self._workflow.finalize(items)

    def accept_anyway(self) -> CorrectionPhase:
        return self._workflow.accept_anyway()

    def correct_items(self) -> list[ExtractedItem]:
        return self._workflow.correct_items()

    def reject(self, reason: Optional[str] = None) -> None:
        self._workflow.reject(reason)

    def build_itemized_request(
        self,
        participants: Sequence[Participant],
        assignments: Optional[Mapping[str, Sequence[str]]] = None,
        tax_amount: Decimal = Decimal("0"),
        tip_amount: Decimal = Decimal("0"),
        currency: Optional[str] = None,
    ) -> SplitRequest:
        """
        Turn the accepted items into an itemized split.

        The receipt total becomes the declared total, so a receipt that
        does not add up is flagged by reconciliation.

        Raises:
            ValueError: If the items have not been accepted yet
        """
        if self.accepted_items is None:
            raise ValueError("Receipt items have not been accepted yet")

        items = tuple(to_split_items(self.accepted_items, assignments))
        participants = tuple(
            p.model_copy(update={
                "item_refs": tuple(i.id for i in items if p.id in i.assigned_to),
            })
            for p in participants
        )

        data = dict(
            mode=SplitMode.ITEMIZED,
            participants=participants,
            items=items,
            tax_amount=tax_amount,
            tip_amount=tip_amount,
            declared_total=self._receipt_total,
        )
        code = currency or self._currency
        if code:
            data["currency"] = code
        return SplitRequest(**data)

    def _accepted(self, items: list[ExtractedItem]) -> None:
        self.accepted_items = items
        if self._on_accept:
            self._on_accept(items)

    def _rejected(self) -> None:
        self.rejected = True
        self.accepted_items = None
        if self._on_reject:
            self._on_reject()


def create_calculation_flow(
    use_storage: bool = True,
    split_storage: Optional[SplitStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> SplitCalculationFlow:
    """
    Factory function to create a wired calculation flow.

    Args:
        use_storage: Whether to attach storage. When no backends are
                    passed, in-memory storage is used.
                    Set to False for local-only logging and no history.
    """
    if use_storage:
        split_storage = split_storage or InMemorySplitStorage()
        audit_storage = audit_storage or InMemoryAuditStorage()
        audit_logger = AuditLogger(audit_storage)
    else:
        split_storage = None
        audit_logger = AuditLogger()  # Local-only logging

    return SplitCalculationFlow(
        split_storage=split_storage,
        audit_logger=audit_logger,
    )
