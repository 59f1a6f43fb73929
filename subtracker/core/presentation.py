"""
Presentation helpers.

List filtering and display formatting shared by the Streamlit UI.
These only read Subscription values; they never change them.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from subtracker.core.renewal import (
    Reference,
    compute_next_renewal,
    evaluate_notification,
)
from subtracker.models.subscription import RenewalType, Subscription


class SubscriptionFilter(str, Enum):
    """Filters offered above the subscription list."""
    ALL = "all"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NOTIFICATIONS = "notifications"

    @property
    def label(self) -> str:
        return _FILTER_LABELS[self]


_FILTER_LABELS = {
    SubscriptionFilter.ALL: "All",
    SubscriptionFilter.MONTHLY: "Monthly",
    SubscriptionFilter.YEARLY: "Yearly",
    SubscriptionFilter.NOTIFICATIONS: "With notifications",
}


def filter_subscriptions(
    subscriptions: Iterable[Subscription],
    active_filter: SubscriptionFilter,
    reference: Optional[Reference] = None,
) -> list[Subscription]:
    """Apply a list filter, preserving input order."""
    if active_filter == SubscriptionFilter.ALL:
        return list(subscriptions)
    if active_filter == SubscriptionFilter.NOTIFICATIONS:
        return [
            sub for sub in subscriptions
            if evaluate_notification(sub, reference) is not None
        ]
    cadence = RenewalType(active_filter.value)
    return [sub for sub in subscriptions if sub.renewal_type == cadence]


def display_next_renewal(
    subscription: Subscription,
    reference: Optional[Reference] = None,
) -> date:
    """Next renewal to show: the store's value if it sent one, else computed."""
    if subscription.next_renewal is not None:
        return subscription.next_renewal
    return compute_next_renewal(
        subscription.start_date,
        subscription.renewal_type,
        reference,
    )


def format_price(
    price: Optional[Decimal],
    symbol: str = "€",
) -> str:
    """
    Format an amount in the pt-PT style: "1.234,50 €".

    A missing price is shown as zero.
    """
    amount = (price or Decimal("0")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    grouped = f"{amount:,.2f}"
    # swap separators: 1,234.50 -> 1.234,50
    localized = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{localized} {symbol}"


def format_date(value: Optional[date], fmt: str = "%d/%m/%Y") -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


def cadence_suffix(renewal_type: RenewalType) -> str:
    return "month" if renewal_type == RenewalType.MONTHLY else "year"


def renewal_label(days: int) -> str:
    """Human label for a notice, e.g. "Renews in 3 days"."""
    unit = "day" if days == 1 else "days"
    return f"Renews in {days} {unit}"
