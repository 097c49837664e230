"""Tests for roster editing helpers."""

import pytest
from decimal import Decimal

from split_engine.models.split import RoundingPolicy, SplitMode
from split_engine.roster import (
    ParticipantLimitError,
    add_item,
    add_participant,
    assign_to_all,
    new_request,
    remove_item,
    remove_participant,
    rename_participant,
    set_amounts,
    set_currency,
    set_custom_amount,
    set_mode,
    set_percentage,
    set_rounding,
    toggle_assignment,
    update_item,
)


class TestParticipants:
    """Tests for participant edits."""

    def test_new_request_has_two_people(self):
        """Test the starting roster."""
        request = new_request()
        assert [p.name for p in request.participants] == ["Person 1", "Person 2"]
        assert request.mode == SplitMode.EQUAL
        assert request.currency == "USD"

    def test_new_request_currency(self):
        """Test that a currency can be chosen up front."""
        assert new_request(currency="eur").currency == "EUR"

    def test_add_participant_default_name(self):
        """Test that new participants are numbered."""
        request = add_participant(new_request())
        assert request.participants[-1].name == "Person 3"
        assert request.participants[-1].id == "p3"

    def test_add_participant_ids_stay_unique(self):
        """Test that ids are not reused after a removal."""
        request = add_participant(add_participant(new_request()))
        request = remove_participant(request, "p2")
        request = add_participant(request)
        ids = request.participant_ids
        assert len(ids) == len(set(ids))

    def test_returns_new_request(self):
        """Test that edits never mutate the input."""
        original = new_request()
        add_participant(original, name="Cleo")
        assert len(original.participants) == 2

    def test_cannot_go_below_two(self):
        """Test the minimum participant count."""
        with pytest.raises(ParticipantLimitError):
            remove_participant(new_request(), "p1")

    def test_remove_unknown(self):
        """Test that removing a missing participant raises KeyError."""
        with pytest.raises(KeyError):
            remove_participant(add_participant(new_request()), "zzz")

    def test_remove_drops_assignments(self):
        """Test that a removed participant leaves every item."""
        request = add_participant(new_request(SplitMode.ITEMIZED))
        request = add_item(request, "Nachos", Decimal("9"), assigned_to=("p1", "p3"))
        request = remove_participant(request, "p3")
        assert request.items[0].assigned_to == ("p1",)

    def test_rename(self):
        """Test renaming a participant."""
        request = rename_participant(new_request(), "p1", "  Ana ")
        assert request.participants[0].name == "Ana"

    def test_percentage_and_amount(self):
        """Test setting mode-specific values."""
        request = set_percentage(new_request(SplitMode.PERCENTAGE), "p1", "60")
        request = set_custom_amount(request, "p2", "12.50")
        assert request.participants[0].percentage == Decimal("60")
        assert request.participants[1].amount == Decimal("12.50")

    def test_percentage_out_of_range(self):
        """Test that percentages above 100 are rejected."""
        with pytest.raises(ValueError):
            set_percentage(new_request(), "p1", 120)


class TestItems:
    """Tests for item edits."""

    def test_add_item_and_sync_refs(self):
        """Test that item_refs follow assignments."""
        request = add_item(new_request(SplitMode.ITEMIZED), "Tea", "3.00", assigned_to=("p2",))
        assert request.items[0].id == "i1"
        assert request.get_participant("p2").item_refs == ("i1",)
        assert request.get_participant("p1").item_refs == ()

    def test_add_item_unknown_participant(self):
        """Test that assignments must reference known participants."""
        with pytest.raises(ValueError):
            add_item(new_request(), "Tea", "3.00", assigned_to=("ghost",))

    def test_toggle_assignment(self):
        """Test assigning and unassigning."""
        request = add_item(new_request(SplitMode.ITEMIZED), "Tea", "3.00")
        request = toggle_assignment(request, "i1", "p1")
        assert request.items[0].assigned_to == ("p1",)
        assert request.get_participant("p1").item_refs == ("i1",)
        request = toggle_assignment(request, "i1", "p1")
        assert request.items[0].assigned_to == ()
        assert request.get_participant("p1").item_refs == ()

    def test_assign_to_all(self):
        """Test sharing an item with everyone."""
        request = add_participant(add_item(new_request(SplitMode.ITEMIZED), "Cake", "6"))
        request = assign_to_all(request, "i1")
        assert request.items[0].assigned_to == ("p1", "p2", "p3")

    def test_update_and_remove_item(self):
        """Test editing and deleting items."""
        request = add_item(new_request(SplitMode.ITEMIZED), "Tea", "3.00", assigned_to=("p1",))
        request = update_item(request, "i1", name="Green tea", price="3.50")
        assert request.items[0].name == "Green tea"
        assert request.items[0].price == Decimal("3.50")
        assert request.items[0].assigned_to == ("p1",)

        request = remove_item(request, "i1")
        assert request.items == ()
        assert request.get_participant("p1").item_refs == ()


class TestRequestSettings:
    """Tests for request-level edits."""

    def test_set_amounts_partial(self):
        """Test that omitted amounts keep their values."""
        request = set_amounts(new_request(), total_amount=Decimal("50"), tip_amount=Decimal("5"))
        request = set_amounts(request, tax_amount=Decimal("4"))
        assert request.total_amount == Decimal("50")
        assert request.tip_amount == Decimal("5")
        assert request.tax_amount == Decimal("4")

    def test_declared_total_can_be_cleared(self):
        """Test that declared_total=None removes the declared total."""
        request = set_amounts(new_request(), declared_total=Decimal("10"))
        assert request.declared_total == Decimal("10")
        request = set_amounts(request, declared_total=None)
        assert request.declared_total is None

    def test_mode_currency_rounding(self):
        """Test switching mode, currency and rounding."""
        request = set_mode(new_request(), "custom")
        request = set_currency(request, "jpy")
        request = set_rounding(request, RoundingPolicy.NEAREST, Decimal("100"))
        assert request.mode == SplitMode.CUSTOM
        assert request.currency == "JPY"
        assert request.rounding == RoundingPolicy.NEAREST
        assert request.rounding_unit == Decimal("100")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
