"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - STRUCTURAL VALIDATION:
- Percentages add up to 100
- Rounding unit is representable in the currency
- This catches requests a strategy would refuse to compute

STAGE 2 - SEMANTIC VALIDATION:
- Items nobody is assigned to
- Custom amounts that do not reach the expected total
- Blank or duplicate participant names
- This catches requests that compute fine but will surprise the user

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from collections import Counter
from decimal import Decimal
from typing import Optional

from split_engine.config import get_settings
from split_engine.models.split import SplitMode, SplitRequest
from split_engine.models.validation import ValidationIssue, ValidationResult
from split_engine.rounding import RoundingNormalizer


class SplitRequestValidator:
    """
    Validates a SplitRequest through a two-stage pipeline.

    Stage 1: Structural validation
    Stage 2: Semantic validation (only when stage 1 passes)
    """

    def __init__(self, percentage_tolerance: Optional[Decimal] = None):
        if percentage_tolerance is None:
            percentage_tolerance = get_settings().allocation.percentage_tolerance
        self._percentage_tolerance = Decimal(percentage_tolerance)

    def _validate_structure(
        self,
        request: SplitRequest,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Structural validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if request.mode == SplitMode.PERCENTAGE:
            total_percentage = sum(
                (p.percentage for p in request.participants), Decimal("0")
            )
            if abs(total_percentage - Decimal("100")) > self._percentage_tolerance:
                issues.append(ValidationIssue(
                    field="percentage",
                    issue_type="invalid_sum",
                    message=f"Percentages add up to {total_percentage}%, not 100%",
                    severity="error",
                    suggested_fix="Adjust the percentages so they total 100%",
                ))

        if request.rounding_unit is not None:
            try:
                RoundingNormalizer().increment_for(request.currency, request.rounding_unit)
            except ValueError:
                issues.append(ValidationIssue(
                    field="rounding_unit",
                    issue_type="invalid_value",
                    message=(
                        f"Rounding unit {request.rounding_unit} is not a whole "
                        f"number of the smallest {request.currency} unit"
                    ),
                    severity="error",
                    suggested_fix="Pick a rounding unit such as 0.05, 0.10 or 1",
                ))

        if request.mode == SplitMode.ITEMIZED and not request.items:
            issues.append(ValidationIssue(
                field="items",
                issue_type="empty",
                message="No items have been added yet",
                severity="warning",
                suggested_fix="Add the items from the receipt",
            ))
        elif request.mode in (SplitMode.EQUAL, SplitMode.PERCENTAGE) and request.subtotal == 0:
            issues.append(ValidationIssue(
                field="total_amount",
                issue_type="empty",
                message="There is nothing to split yet",
                severity="warning",
                suggested_fix="Enter the bill amount",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        request: SplitRequest,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        # Participant names
        names = [p.name.strip().lower() for p in request.participants if p.name.strip()]
        for name, count in Counter(names).items():
            if count > 1:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="duplicate_name",
                    message=f"{count} participants are called '{name}'",
                    severity="warning",
                    suggested_fix="Give each participant a distinct name",
                ))

        blank = [p.id for p in request.participants if not p.name.strip()]
        if blank:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="missing_name",
                message=f"{len(blank)} participant(s) have no name",
                severity="info",
            ))

        if request.mode == SplitMode.ITEMIZED:
            issues.extend(self._check_items(request))

        if request.mode == SplitMode.CUSTOM:
            issues.extend(self._check_custom_amounts(request))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _check_items(self, request: SplitRequest) -> list[ValidationIssue]:
        issues = []

        for item in request.items:
            label = item.name or item.id
            if not item.is_assigned:
                issues.append(ValidationIssue(
                    field=f"items.{item.id}",
                    issue_type="unassigned",
                    message=f"'{label}' is not assigned to anyone",
                    severity="warning",
                    suggested_fix="Assign it, or its cost will stay unallocated",
                ))
            if item.price == 0:
                issues.append(ValidationIssue(
                    field=f"items.{item.id}",
                    issue_type="zero_price",
                    message=f"'{label}' has no price",
                    severity="info",
                ))

        items_total = sum((item.price for item in request.items), Decimal("0"))
        extras = request.tax_amount + request.tip_amount
        if items_total == 0 and extras > 0:
            issues.append(ValidationIssue(
                field="tax_amount",
                issue_type="undistributable",
                message="Tax and tip cannot be shared out while items total zero",
                severity="warning",
                suggested_fix="Enter item prices first",
            ))

        assigned = {pid for item in request.items for pid in item.assigned_to}
        idle = [p.name or p.id for p in request.participants if p.id not in assigned]
        if request.items and idle:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="no_items",
                message=f"No items assigned to: {', '.join(idle)}",
                severity="info",
            ))

        return issues

    def _check_custom_amounts(self, request: SplitRequest) -> list[ValidationIssue]:
        expected = request.expected_total
        if not expected:
            return []

        assigned = sum((p.amount for p in request.participants), Decimal("0"))
        if assigned == expected:
            return []

        direction = "over" if assigned > expected else "under"
        return [ValidationIssue(
            field="amount",
            issue_type="unbalanced",
            message=(
                f"Custom amounts add up to {assigned} {request.currency}, "
                f"{direction} the total of {expected} {request.currency}"
            ),
            severity="warning",
            suggested_fix="Adjust the amounts until they match the total",
        )]

    def validate(self, request: SplitRequest) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        # Stage 1: Structural validation
        structure_valid, structure_issues = self._validate_structure(request)
        all_issues.extend(structure_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if structure_valid:
            semantic_valid, semantic_issues = self._validate_semantic(request)
            all_issues.extend(semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            structure_valid=structure_valid,
            semantic_valid=semantic_valid,
            is_valid=structure_valid and semantic_valid,
            can_compute=structure_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the split.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if not result.structure_valid:
            lines.append("❌ This split cannot be calculated yet:")
            for issue in result.errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            lines.append("")
            lines.append("⚠️ Please check the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        lines.append("")
        if result.can_compute:
            lines.append("The split can still be calculated.")
        else:
            lines.append("Please fix the issues above before continuing.")

        return "\n".join(lines)
