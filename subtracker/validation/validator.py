"""
Two-Stage Form Validation

DESIGN DECISION: Form input is validated here, once, before anything
reaches the store. The renewal calculator assumes clean input and never
re-checks it.

STAGE 1 - SCHEMA VALIDATION:
- Required fields (name, price, start date, category)
- Free-text fields within the store's length limits
- Price is a non-negative number with at most two decimals
- Start date is an ISO date
- Cadence is monthly or yearly

STAGE 2 - SEMANTIC VALIDATION:
- Start date far in the future
- Zero or unusually high price
- Same name already tracked

IMPORTANT: Validation NEVER silently fixes issues. An unknown cadence is
an error, not a guess at one of the two valid values.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from pydantic import ValidationError

from subtracker.models.subscription import (
    FIELD_MAX_LENGTHS,
    RenewalType,
    Subscription,
    SubscriptionDraft,
)
from subtracker.models.validation import (
    SubscriptionForm,
    ValidationIssue,
    ValidationResult,
)

# Prices above this are flagged for a second look
SUSPICIOUS_PRICE = Decimal("10000")
# Start dates further ahead than this are flagged
FUTURE_START_TOLERANCE_DAYS = 365

CENT = Decimal("0.01")


class SubscriptionValidator:
    """
    Validates subscription form input through a two-stage pipeline.

    Stage 1: Schema validation
    Stage 2: Semantic validation (only if stage 1 passes)
    """

    def _parse_price(self, raw: str) -> Optional[Decimal]:
        # Accept "9,99" as typed with a pt-PT keyboard
        try:
            price = Decimal(raw.replace(",", "."))
        except InvalidOperation:
            return None
        return price if price.is_finite() else None

    def _to_cents(self, price: Decimal) -> Optional[Decimal]:
        try:
            return price.quantize(CENT)
        except InvalidOperation:
            return None

    def _validate_schema(
        self,
        form: SubscriptionForm,
    ) -> tuple[bool, list[ValidationIssue], dict]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues, parsed_values)
        """
        issues = []
        parsed = {}

        for field in ("name", "price", "start_date", "category"):
            if not getattr(form, field):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field.replace('_', ' ').capitalize()} is required",
                    severity="error",
                    suggested_fix="Please fill in all required fields",
                ))

        for field, limit in FIELD_MAX_LENGTHS.items():
            value = getattr(form, field)
            if len(value) > limit:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="too_long",
                    message=(
                        f"{field.capitalize()} is {len(value)} characters long "
                        f"(at most {limit} allowed)"
                    ),
                    severity="error",
                    suggested_fix=f"Shorten the {field} to {limit} characters or fewer",
                ))

        if form.price:
            price = self._parse_price(form.price)
            if price is None:
                issues.append(ValidationIssue(
                    field="price",
                    issue_type="invalid_format",
                    message=f"Price '{form.price}' is not a number",
                    severity="error",
                    suggested_fix="Enter the amount using digits, e.g. 9.99",
                ))
            elif price.normalize().as_tuple().exponent < -2:
                issues.append(ValidationIssue(
                    field="price",
                    issue_type="invalid_format",
                    message=f"Price '{form.price}' has more than two decimal places",
                    severity="error",
                    suggested_fix="Enter the amount in whole cents, e.g. 9.99",
                ))
            elif price < 0:
                issues.append(ValidationIssue(
                    field="price",
                    issue_type="invalid_value",
                    message="Price cannot be negative",
                    severity="error",
                ))
            elif self._to_cents(price) is None:
                issues.append(ValidationIssue(
                    field="price",
                    issue_type="invalid_value",
                    message=f"Price '{form.price}' is too large",
                    severity="error",
                ))
            else:
                parsed["price"] = self._to_cents(price)

        if form.start_date:
            try:
                parsed["start_date"] = date.fromisoformat(form.start_date)
            except ValueError:
                issues.append(ValidationIssue(
                    field="start_date",
                    issue_type="invalid_format",
                    message=f"Start date '{form.start_date}' is not a valid date",
                    severity="error",
                    suggested_fix="Use the format YYYY-MM-DD",
                ))

        try:
            parsed["renewal_type"] = RenewalType.parse(form.renewal_type)
        except ValueError:
            issues.append(ValidationIssue(
                field="renewal_type",
                issue_type="invalid_value",
                message=f"Unknown renewal type '{form.renewal_type}'",
                severity="error",
                suggested_fix="Choose monthly or yearly",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues, parsed

    def _validate_semantic(
        self,
        form: SubscriptionForm,
        parsed: dict,
        existing: Iterable[Subscription],
        editing_id: Optional[str],
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Everything here is a warning; the user may still save.
        """
        issues = []

        start = parsed["start_date"]
        if start > today + timedelta(days=FUTURE_START_TOLERANCE_DAYS):
            issues.append(ValidationIssue(
                field="start_date",
                issue_type="future_date",
                message=f"Start date ({start}) is more than a year away",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        price = parsed["price"]
        if price == 0:
            issues.append(ValidationIssue(
                field="price",
                issue_type="suspicious_value",
                message="Price is zero",
                severity="warning",
                suggested_fix="Free plans are fine; otherwise check the amount",
            ))
        elif price > SUSPICIOUS_PRICE:
            issues.append(ValidationIssue(
                field="price",
                issue_type="suspicious_value",
                message=f"Price ({price:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        name = form.name.casefold()
        for sub in existing:
            if sub.id != editing_id and sub.name.casefold() == name:
                issues.append(ValidationIssue(
                    field="name",
                    issue_type="potential_duplicate",
                    message=f"A subscription named '{sub.name}' already exists",
                    severity="warning",
                    suggested_fix="Please verify this isn't a duplicate entry",
                ))
                break

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        form: SubscriptionForm,
        existing: Iterable[Subscription] = (),
        editing_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run the full validation pipeline.

        Args:
            form: Raw form input
            existing: Current subscriptions, for duplicate detection
            editing_id: Id of the record being edited (excluded from
                duplicate detection)
            today: Reference date for the future-date check

        Returns:
            ValidationResult; `draft` is set only when is_valid
        """
        today = today or date.today()
        all_issues = []

        schema_valid, schema_issues, parsed = self._validate_schema(form)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                form, parsed, existing, editing_id, today,
            )
            all_issues.extend(semantic_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]
        is_valid = schema_valid and semantic_valid

        draft = None
        if is_valid:
            try:
                draft = SubscriptionDraft(
                    name=form.name,
                    category=form.category,
                    description=form.description,
                    price=parsed["price"],
                    renewal_type=parsed["renewal_type"],
                    start_date=parsed["start_date"],
                )
            except ValidationError as e:
                for error in e.errors():
                    all_issues.append(ValidationIssue(
                        field=".".join(str(part) for part in error["loc"]) or "form",
                        issue_type="invalid_value",
                        message=error["msg"],
                        severity="error",
                    ))
                schema_valid = False
                is_valid = False

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=is_valid,
            issues=all_issues,
            warnings=warnings,
            draft=draft,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary shown under the form."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
