"""Tests for the summary exporter."""

import json

import pytest
from decimal import Decimal

from split_engine.allocation import compute_allocation
from split_engine.export import ShareTokenError, SummaryExporter
from split_engine.models.split import (
    Participant,
    RoundingPolicy,
    SplitItem,
    SplitMode,
    SplitRequest,
)
from split_engine.rounding import RoundingNormalizer


def itemized_request():
    return SplitRequest(
        mode=SplitMode.ITEMIZED,
        participants=(
            Participant(id="p1", name="Ana"),
            Participant(id="p2", name="Ben"),
        ),
        items=(
            SplitItem(id="i1", name="Pasta", price=Decimal("14.00"), assigned_to=("p1",)),
            SplitItem(id="i2", name="Wine", price=Decimal("20.00"), assigned_to=("p1", "p2")),
        ),
    )


class TestSummaryExporter:
    """Tests for projecting allocations into summaries."""

    def test_record_fields(self):
        """Test that the record carries the stable field set."""
        request = itemized_request()
        summary = SummaryExporter().to_record(compute_allocation(request), request)

        data = json.loads(SummaryExporter().to_json(summary))
        assert set(data) == {"type", "participants", "items", "subtotal", "currency", "rounding"}
        assert data["type"] == "itemized"
        assert data["currency"] == "USD"
        assert data["rounding"] == "none"

    def test_record_amounts(self):
        """Test that participant amounts are copied from the allocation."""
        request = itemized_request()
        summary = SummaryExporter().to_record(compute_allocation(request), request)

        assert summary.subtotal == Decimal("34.00")
        assert [p.amount for p in summary.participants] == [Decimal("24.00"), Decimal("10.00")]
        assert summary.participants[0].items == ["i1", "i2"]
        assert summary.participants[1].items == ["i2"]
        assert summary.items[1].assigned_to == ["p1", "p2"]

    def test_normalized_amounts_used_when_given(self):
        """Test that final amounts come from the rounding pass."""
        request = SplitRequest(
            participants=tuple(Participant(id=f"p{n}") for n in range(1, 4)),
            total_amount=Decimal("10.00"),
        )
        allocation = compute_allocation(request)
        normalization = RoundingNormalizer().normalize(
            allocation, RoundingPolicy.UP, Decimal("1")
        )

        summary = SummaryExporter().to_record(allocation, request, normalization)

        assert [p.amount for p in summary.participants] == [Decimal("4.00")] * 3
        assert summary.subtotal == Decimal("10.00")
        assert summary.rounding == RoundingPolicy.UP

    def test_share_token_round_trip(self):
        """Test that a share token decodes to the same summary."""
        request = itemized_request()
        exporter = SummaryExporter()
        summary = exporter.to_record(compute_allocation(request), request)

        token = exporter.to_share_token(summary)

        assert "=" not in token
        assert SummaryExporter.from_share_token(token) == summary

    def test_invalid_share_token(self):
        """Test that garbage tokens raise ShareTokenError."""
        with pytest.raises(ShareTokenError):
            SummaryExporter.from_share_token("not-a-token")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
