"""Renewal calculation and presentation helpers."""

from subtracker.core.presentation import (
    SubscriptionFilter,
    cadence_suffix,
    display_next_renewal,
    filter_subscriptions,
    format_date,
    format_price,
    renewal_label,
)
from subtracker.core.renewal import (
    NOTIFICATION_THRESHOLDS,
    add_months,
    advance,
    compute_next_renewal,
    days_until,
    evaluate_notification,
    subscriptions_needing_notification,
    total_for_cadence,
)

__all__ = [
    # Renewal calculator
    "NOTIFICATION_THRESHOLDS",
    "add_months",
    "advance",
    "compute_next_renewal",
    "days_until",
    "evaluate_notification",
    "subscriptions_needing_notification",
    "total_for_cadence",
    # Presentation
    "SubscriptionFilter",
    "cadence_suffix",
    "display_next_renewal",
    "filter_subscriptions",
    "format_date",
    "format_price",
    "renewal_label",
]
