"""Tests for the two-stage subscription form validator."""

import pytest
from datetime import date
from decimal import Decimal

from subtracker.models.subscription import RenewalType, Subscription
from subtracker.models.validation import SubscriptionForm
from subtracker.validation import SubscriptionValidator

TODAY = date(2024, 6, 10)


def valid_form(**overrides) -> SubscriptionForm:
    fields = {
        "name": "Netflix",
        "price": "9.99",
        "renewal_type": "monthly",
        "start_date": "2024-01-15",
        "description": "Family plan",
        "category": "Streaming",
    }
    fields.update(overrides)
    return SubscriptionForm(**fields)


@pytest.fixture
def validator():
    return SubscriptionValidator()


class TestSchemaValidation:
    """Stage 1: required fields and formats."""

    def test_valid_form_produces_draft(self, validator):
        result = validator.validate(valid_form(), today=TODAY)
        assert result.is_valid is True
        assert result.issues == []
        assert result.draft is not None
        assert result.draft.price == Decimal("9.99")
        assert result.draft.renewal_type == RenewalType.MONTHLY
        assert result.draft.start_date == date(2024, 1, 15)

    def test_empty_form_reports_each_required_field(self, validator):
        result = validator.validate(SubscriptionForm(), today=TODAY)
        assert result.is_valid is False
        assert result.draft is None
        missing = {i.field for i in result.issues if i.issue_type == "missing"}
        assert missing == {"name", "price", "start_date", "category"}
        assert result.error_count == 4

    def test_description_is_optional(self, validator):
        result = validator.validate(valid_form(description=""), today=TODAY)
        assert result.is_valid is True

    def test_non_numeric_price(self, validator):
        result = validator.validate(valid_form(price="abc"), today=TODAY)
        assert result.is_valid is False
        assert result.issues[0].field == "price"
        assert result.issues[0].issue_type == "invalid_format"

    def test_negative_price(self, validator):
        result = validator.validate(valid_form(price="-5"), today=TODAY)
        assert result.is_valid is False
        assert result.issues[0].issue_type == "invalid_value"

    def test_comma_decimal_separator(self, validator):
        result = validator.validate(valid_form(price="9,99"), today=TODAY)
        assert result.draft.price == Decimal("9.99")

    def test_invalid_date(self, validator):
        result = validator.validate(valid_form(start_date="2023-02-30"), today=TODAY)
        assert result.is_valid is False
        assert result.issues[0].field == "start_date"

    def test_unknown_cadence_is_error(self, validator):
        """An unknown cadence is rejected, never mapped to monthly or yearly."""
        result = validator.validate(valid_form(renewal_type="weekly"), today=TODAY)
        assert result.is_valid is False
        assert result.issues[0].field == "renewal_type"

    def test_extra_decimal_places_are_rejected_not_rounded(self, validator):
        result = validator.validate(valid_form(price="9.999"), today=TODAY)
        assert result.is_valid is False
        assert result.draft is None
        assert result.issues[0].field == "price"
        assert result.issues[0].issue_type == "invalid_format"

    def test_trailing_zero_decimals_are_accepted(self, validator):
        result = validator.validate(valid_form(price="9.990"), today=TODAY)
        assert result.draft.price == Decimal("9.99")

    def test_huge_price_is_rejected(self, validator):
        result = validator.validate(valid_form(price="1E+30"), today=TODAY)
        assert result.is_valid is False
        assert result.issues[0].field == "price"

    @pytest.mark.parametrize(
        "field, limit",
        [("name", 200), ("category", 100), ("description", 1000)],
    )
    def test_too_long_text_is_an_issue_not_an_exception(self, validator, field, limit):
        result = validator.validate(valid_form(**{field: "x" * (limit + 1)}), today=TODAY)
        assert result.is_valid is False
        assert result.draft is None
        assert [(i.field, i.issue_type) for i in result.issues] == [(field, "too_long")]

    def test_text_at_limit_is_accepted(self, validator):
        result = validator.validate(valid_form(name="x" * 200), today=TODAY)
        assert result.is_valid is True
        assert len(result.draft.name) == 200

    def test_store_alias_cadence(self, validator):
        result = validator.validate(valid_form(renewal_type="anual"), today=TODAY)
        assert result.draft.renewal_type == RenewalType.YEARLY


class TestSemanticValidation:
    """Stage 2: plausibility warnings. None of these block saving."""

    def test_far_future_start_warns(self, validator):
        result = validator.validate(valid_form(start_date="2026-01-01"), today=TODAY)
        assert result.is_valid is True
        assert any("more than a year" in w for w in result.warnings)

    def test_zero_price_warns(self, validator):
        result = validator.validate(valid_form(price="0"), today=TODAY)
        assert result.is_valid is True
        assert "Price is zero" in result.warnings

    def test_high_price_warns(self, validator):
        result = validator.validate(valid_form(price="25000"), today=TODAY)
        assert result.is_valid is True
        assert any("unusually high" in w for w in result.warnings)

    def test_duplicate_name_warns(self, validator):
        existing = [
            Subscription(id="1", name="netflix", renewal_type=RenewalType.MONTHLY),
        ]
        result = validator.validate(valid_form(), existing=existing, today=TODAY)
        assert result.is_valid is True
        assert result.issues[0].issue_type == "potential_duplicate"

    def test_editing_same_record_is_not_duplicate(self, validator):
        existing = [
            Subscription(id="1", name="Netflix", renewal_type=RenewalType.MONTHLY),
        ]
        result = validator.validate(
            valid_form(), existing=existing, editing_id="1", today=TODAY,
        )
        assert result.warnings == []

    def test_semantic_stage_skipped_on_schema_errors(self, validator):
        result = validator.validate(valid_form(price="0", name=""), today=TODAY)
        assert result.semantic_valid is False
        assert result.warnings == []


class TestUserFriendlySummary:
    def test_all_passed(self, validator):
        result = validator.validate(valid_form(), today=TODAY)
        assert validator.get_user_friendly_summary(result).startswith("✅")

    def test_lists_errors_and_fixes(self, validator):
        result = validator.validate(valid_form(price="abc"), today=TODAY)
        summary = validator.get_user_friendly_summary(result)
        assert "❌" in summary
        assert "Price 'abc' is not a number" in summary

    def test_lists_warnings(self, validator):
        result = validator.validate(valid_form(price="0"), today=TODAY)
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("⚠️")
        assert "Price is zero" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
