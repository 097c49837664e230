"""
Validation Models

Issues found in a split request before it is computed.
Validation reports problems for the human; it never fixes them.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'invalid_sum', 'unassigned', 'duplicate_name')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Structural validation (can the request be computed at all?)
    Stage 2: Semantic validation (will the result surprise the user?)
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )

    # Stage results
    structure_valid: bool = Field(
        ...,
        description="Did structural validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )

    # Overall result
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )
    can_compute: bool = Field(
        ...,
        description="Can the request be handed to its strategy?"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Warning messages, for display"
    )

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]
