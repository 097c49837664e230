"""Tests for the two-stage split request validator."""

import pytest
from decimal import Decimal

from split_engine.models.split import (
    Participant,
    RoundingPolicy,
    SplitItem,
    SplitMode,
    SplitRequest,
)
from split_engine.validation import SplitRequestValidator


def issue_types(result) -> list[str]:
    return [issue.issue_type for issue in result.issues]


class TestStructuralValidation:
    """Stage 1: can the request be computed?"""

    def test_valid_equal_split(self):
        """Test that a plain equal split passes every check."""
        request = SplitRequest(
            participants=(Participant(id="a", name="Ana"), Participant(id="b", name="Ben")),
            total_amount=Decimal("20.00"),
        )
        result = SplitRequestValidator().validate(request)
        assert result.is_valid
        assert result.can_compute
        assert result.issues == []

    def test_percentage_sum_error(self):
        """Test that percentages off 100 block the calculation."""
        request = SplitRequest(
            mode=SplitMode.PERCENTAGE,
            participants=(
                Participant(id="a", name="Ana", percentage=Decimal("50")),
                Participant(id="b", name="Ben", percentage=Decimal("49")),
            ),
            total_amount=Decimal("10"),
        )
        result = SplitRequestValidator().validate(request)
        assert not result.structure_valid
        assert not result.can_compute
        assert "invalid_sum" in issue_types(result)
        assert not result.semantic_valid

    def test_rounding_unit_too_fine(self):
        """Test that a sub-cent rounding unit is an error."""
        request = SplitRequest(
            participants=(Participant(id="a", name="Ana"), Participant(id="b", name="Ben")),
            total_amount=Decimal("10"),
            rounding_unit=Decimal("0.001"),
        )
        result = SplitRequestValidator().validate(request)
        assert not result.can_compute
        assert "invalid_value" in issue_types(result)

    @pytest.mark.parametrize("unit", ["0.005", "0.015"])
    def test_rounding_unit_not_whole_cents(self, unit):
        """Test that units that are not whole cents are errors, not rounded."""
        request = SplitRequest(
            participants=(Participant(id="a", name="Ana"), Participant(id="b", name="Ben")),
            total_amount=Decimal("10"),
            rounding=RoundingPolicy.NEAREST,
            rounding_unit=Decimal(unit),
        )
        result = SplitRequestValidator().validate(request)
        assert not result.can_compute
        assert [issue.field for issue in result.errors] == ["rounding_unit"]

    def test_nothing_to_split_is_a_warning(self):
        """Test that a zero subtotal warns but still computes."""
        request = SplitRequest(
            participants=(Participant(id="a", name="Ana"), Participant(id="b", name="Ben")),
        )
        result = SplitRequestValidator().validate(request)
        assert result.can_compute
        assert "empty" in issue_types(result)
        assert result.warnings


class TestSemanticValidation:
    """Stage 2: will the result surprise the user?"""

    def test_unassigned_item_warning(self):
        """Test that items nobody is assigned to are flagged."""
        request = SplitRequest(
            mode=SplitMode.ITEMIZED,
            participants=(Participant(id="a", name="Ana"), Participant(id="b", name="Ben")),
            items=(
                SplitItem(id="i1", name="Soup", price=Decimal("5"), assigned_to=("a", "b")),
                SplitItem(id="i2", name="Bread", price=Decimal("5")),
            ),
        )
        result = SplitRequestValidator().validate(request)
        assert result.can_compute
        assert "unassigned" in issue_types(result)
        assert any("Bread" in warning for warning in result.warnings)

    def test_tax_without_item_prices(self):
        """Test the warning for undistributable tax and tip."""
        request = SplitRequest(
            mode=SplitMode.ITEMIZED,
            participants=(Participant(id="a", name="Ana"), Participant(id="b", name="Ben")),
            items=(SplitItem(id="i1", name="Free", assigned_to=("a",)),),
            tax_amount=Decimal("2"),
        )
        result = SplitRequestValidator().validate(request)
        assert "undistributable" in issue_types(result)
        assert "zero_price" in issue_types(result)
        assert "no_items" in issue_types(result)

    def test_custom_amounts_off_total(self):
        """Test that custom amounts not reaching the total are flagged."""
        request = SplitRequest(
            mode=SplitMode.CUSTOM,
            participants=(
                Participant(id="a", name="Ana", amount=Decimal("10")),
                Participant(id="b", name="Ben", amount=Decimal("5")),
            ),
            total_amount=Decimal("20"),
        )
        result = SplitRequestValidator().validate(request)
        assert "unbalanced" in issue_types(result)
        assert "under" in result.warnings[0]

    def test_duplicate_and_blank_names(self):
        """Test name checks."""
        request = SplitRequest(
            participants=(
                Participant(id="a", name="Ana"),
                Participant(id="b", name="ana"),
                Participant(id="c"),
            ),
            total_amount=Decimal("9"),
        )
        result = SplitRequestValidator().validate(request)
        assert "duplicate_name" in issue_types(result)
        assert "missing_name" in issue_types(result)
        assert result.can_compute


class TestUserFriendlySummary:
    """Tests for the display text."""

    def test_all_checks_passed(self):
        """Test the message for a clean request."""
        validator = SplitRequestValidator()
        request = SplitRequest(
            participants=(Participant(id="a", name="Ana"), Participant(id="b", name="Ben")),
            total_amount=Decimal("20.00"),
        )
        assert "All checks passed" in validator.get_user_friendly_summary(validator.validate(request))

    def test_blocking_errors_listed(self):
        """Test that errors and a fix hint appear in the summary."""
        validator = SplitRequestValidator()
        request = SplitRequest(
            mode=SplitMode.PERCENTAGE,
            participants=(
                Participant(id="a", name="Ana", percentage=Decimal("10")),
                Participant(id="b", name="Ben", percentage=Decimal("10")),
            ),
            total_amount=Decimal("10"),
        )
        text = validator.get_user_friendly_summary(validator.validate(request))
        assert "cannot be calculated" in text
        assert "Percentages add up to 20%" in text
        assert "Please fix the issues above" in text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
