"""Tests for list filtering and display formatting."""

import pytest
from datetime import date
from decimal import Decimal

from subtracker.core.presentation import (
    SubscriptionFilter,
    cadence_suffix,
    display_next_renewal,
    filter_subscriptions,
    format_date,
    format_price,
    renewal_label,
)
from subtracker.models.subscription import RenewalType, Subscription

REFERENCE = date(2024, 6, 10)

SUBSCRIPTIONS = [
    Subscription(id="1", name="Netflix", renewal_type=RenewalType.MONTHLY,
                 start_date=date(2024, 1, 15)),
    Subscription(id="2", name="Domain", renewal_type=RenewalType.YEARLY,
                 start_date=date(2023, 3, 1)),
    Subscription(id="3", name="Gym", renewal_type=RenewalType.MONTHLY,
                 start_date=date(2024, 1, 25)),
]


class TestFilterSubscriptions:
    def test_all_keeps_everything(self):
        result = filter_subscriptions(SUBSCRIPTIONS, SubscriptionFilter.ALL, REFERENCE)
        assert result == SUBSCRIPTIONS

    @pytest.mark.parametrize(
        "active_filter, expected",
        [
            (SubscriptionFilter.MONTHLY, ["1", "3"]),
            (SubscriptionFilter.YEARLY, ["2"]),
            (SubscriptionFilter.NOTIFICATIONS, ["1"]),
        ],
    )
    def test_filters(self, active_filter, expected):
        result = filter_subscriptions(SUBSCRIPTIONS, active_filter, REFERENCE)
        assert [s.id for s in result] == expected

    def test_labels(self):
        assert SubscriptionFilter.NOTIFICATIONS.label == "With notifications"


class TestDisplayNextRenewal:
    def test_computed_when_store_sends_none(self):
        assert display_next_renewal(SUBSCRIPTIONS[0], REFERENCE) == date(2024, 6, 15)

    def test_store_value_wins(self):
        sub = Subscription(
            id="1",
            name="Netflix",
            renewal_type=RenewalType.MONTHLY,
            start_date=date(2024, 1, 15),
            next_renewal=date(2024, 6, 20),
        )
        assert display_next_renewal(sub, REFERENCE) == date(2024, 6, 20)


class TestFormatting:
    @pytest.mark.parametrize(
        "price, expected",
        [
            (Decimal("9.99"), "9,99 €"),
            (Decimal("1234.5"), "1.234,50 €"),
            (Decimal("0.005"), "0,01 €"),
            (None, "0,00 €"),
        ],
    )
    def test_format_price(self, price, expected):
        assert format_price(price) == expected

    def test_format_price_custom_symbol(self):
        assert format_price(Decimal("5"), symbol="$") == "5,00 $"

    def test_format_date(self):
        assert format_date(date(2024, 3, 1)) == "01/03/2024"
        assert format_date(date(2024, 3, 1), "%Y-%m-%d") == "2024-03-01"
        assert format_date(None) == ""

    def test_cadence_suffix(self):
        assert cadence_suffix(RenewalType.MONTHLY) == "month"
        assert cadence_suffix(RenewalType.YEARLY) == "year"

    def test_renewal_label(self):
        assert renewal_label(1) == "Renews in 1 day"
        assert renewal_label(5) == "Renews in 5 days"
        assert renewal_label(0) == "Renews in 0 days"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
