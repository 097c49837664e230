"""
Summary Exporter

Pure projection of an allocation into a portable SplitSummary.
No computation happens here: amounts are copied, never re-derived.

Share tokens are the URL-safe base64 form of the JSON record, so a
split can be handed around as a link parameter.
"""

import base64
from typing import Optional

from split_engine.models.split import AllocationResult, SplitRequest
from split_engine.models.summary import SplitSummary, SummaryItem, SummaryParticipant
from split_engine.rounding import NormalizationResult


class ShareTokenError(ValueError):
    """A share token could not be decoded into a split summary."""
    pass


class SummaryExporter:
    """Builds and serializes SplitSummary records."""

    def to_record(
        self,
        allocation: AllocationResult,
        request: SplitRequest,
        normalization: Optional[NormalizationResult] = None,
    ) -> SplitSummary:
        """
        Project an allocation and its request into a flat record.

        Args:
            allocation: Strategy output
            request: The request the allocation was computed from
            normalization: If given, its rounded amounts are the final amounts
        """
        amounts = normalization.amounts if normalization else allocation.per_participant

        participants = [
            SummaryParticipant(
                id=participant.id,
                name=participant.name,
                amount=amounts[participant.id].to_decimal(),
                percentage=participant.percentage,
                items=[
                    item.id for item in request.items
                    if participant.id in item.assigned_to
                ],
            )
            for participant in request.participants
        ]

        items = [
            SummaryItem(
                id=item.id,
                name=item.name,
                price=request.money(item.price).to_decimal(),
                assigned_to=list(item.assigned_to),
            )
            for item in request.items
        ]

        return SplitSummary(
            type=allocation.mode,
            participants=participants,
            items=items,
            subtotal=allocation.computed_total.to_decimal(),
            currency=allocation.currency,
            rounding=normalization.policy if normalization else request.rounding,
        )

    def to_json(self, summary: SplitSummary, indent: Optional[int] = None) -> str:
        return summary.model_dump_json(indent=indent)

    def to_share_token(self, summary: SplitSummary) -> str:
        """Encode a summary as an unpadded URL-safe token."""
        raw = summary.model_dump_json().encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    @staticmethod
    def from_share_token(token: str) -> SplitSummary:
        """
        Decode a share token.

        Raises:
            ShareTokenError: If the token is not a valid encoded summary
        """
        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.urlsafe_b64decode(padded.encode("ascii"))
            return SplitSummary.model_validate_json(raw)
        except ValueError as e:
            raise ShareTokenError(f"Invalid share token: {e}") from e
