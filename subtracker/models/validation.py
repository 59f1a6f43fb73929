"""
Form and validation models.

SubscriptionForm holds what the user typed, as strings. Only the
validator turns it into a typed SubscriptionDraft.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from subtracker.models.subscription import RenewalType, Subscription, SubscriptionDraft


class SubscriptionForm(BaseModel):
    """Raw form fields, exactly as entered."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    price: str = ""
    renewal_type: str = RenewalType.MONTHLY.value
    start_date: str = ""
    description: str = ""
    category: str = ""

    @classmethod
    def from_subscription(cls, subscription: Subscription) -> "SubscriptionForm":
        """Prefill the form for editing an existing record."""
        return cls(
            name=subscription.name,
            price=str(subscription.price) if subscription.price is not None else "",
            renewal_type=subscription.renewal_type.value,
            start_date=(
                subscription.start_date.isoformat() if subscription.start_date else ""
            ),
            description=subscription.description,
            category=subscription.category,
        )


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
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
    Result of the two-stage form validation.

    Stage 1: Schema validation (required fields, formats)
    Stage 2: Semantic validation (plausibility checks, duplicates)
    """

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool = Field(
        ...,
        description="True when no error-level issues were found"
    )

    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    # Present only when is_valid
    draft: Optional[SubscriptionDraft] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
