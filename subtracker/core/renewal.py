"""
Renewal Calculator

Pure functions that work out when a subscription renews next and
whether that renewal is close enough to surface as a notification.

DESIGN DECISION: Nothing here is cached or stateful. Every call is a
function of its inputs and the reference date, so the UI can simply
re-evaluate on each render.

Month arithmetic follows calendar normalization: when the day-of-month
does not exist in the target month, the surplus days spill into the
following month (Jan 31 + 1 month = Mar 3 in a non-leap year). Each
advance starts from the previous candidate, so the spill carries forward.

Input validation is NOT done here. Records reach this module already
parsed by the store boundary (see models.subscription).
"""

import calendar
import math
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional, Union

from subtracker.models.subscription import (
    PrecomputedNotification,
    RenewalNotice,
    RenewalType,
    Subscription,
)


Reference = Union[date, datetime]

# (notification window, urgent threshold) in days, per cadence
NOTIFICATION_THRESHOLDS: dict[RenewalType, tuple[int, int]] = {
    RenewalType.MONTHLY: (7, 3),
    RenewalType.YEARLY: (30, 7),
}

_PERIOD_MONTHS = {
    RenewalType.MONTHLY: 1,
    RenewalType.YEARLY: 12,
}

_SECONDS_PER_DAY = 24 * 60 * 60


def add_months(start: date, months: int) -> date:
    """
    Advance a date by whole calendar months.

    Day-of-month overflow rolls into the next month instead of being
    clamped to the month's last day.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    if start.day <= last_day:
        return date(year, month, start.day)
    return date(year, month, last_day) + timedelta(days=start.day - last_day)


def advance(candidate: date, renewal_type: RenewalType) -> date:
    """Advance a date by exactly one cadence period."""
    return add_months(candidate, _PERIOD_MONTHS[renewal_type])


def _today() -> date:
    return date.today()


def _reference_date(reference: Reference) -> date:
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def _is_on_or_before(candidate: date, reference: Reference) -> bool:
    if isinstance(reference, datetime):
        midnight = datetime.combine(candidate, time.min, tzinfo=reference.tzinfo)
        return midnight <= reference
    return candidate <= reference


def compute_next_renewal(
    start_date: Optional[date],
    renewal_type: RenewalType,
    reference: Optional[Reference] = None,
) -> date:
    """
    First renewal strictly after the reference date.

    Args:
        start_date: First billing date. If None, the reference date
            itself is returned ("renews now").
        renewal_type: Monthly or yearly cadence.
        reference: The "now" to measure against; defaults to today.
            A datetime compares candidates as midnight of their date.

    Returns:
        start_date advanced by the smallest whole number of periods
        that lands after the reference (zero periods if start_date is
        already in the future).
    """
    if reference is None:
        reference = _today()
    if start_date is None:
        return _reference_date(reference)

    candidate = start_date
    while _is_on_or_before(candidate, reference):
        candidate = advance(candidate, renewal_type)
    return candidate


def days_until(renewal: date, reference: Reference) -> int:
    """Whole days from reference to renewal, rounding partial days up."""
    if isinstance(reference, datetime):
        midnight = datetime.combine(renewal, time.min, tzinfo=reference.tzinfo)
        seconds = (midnight - reference).total_seconds()
        return math.ceil(seconds / _SECONDS_PER_DAY)
    return (renewal - reference).days


def evaluate_notification(
    subscription: Subscription,
    reference: Optional[Reference] = None,
) -> Optional[RenewalNotice]:
    """
    Decide whether a subscription's next renewal should be surfaced.

    A notice precomputed by the store takes precedence and is returned
    as-is. Otherwise the notice is derived from start date and cadence:

        Monthly: notify within 7 days, urgent within 3
        Yearly:  notify within 30 days, urgent within 7

    Returns None when the renewal is outside the window.
    """
    if isinstance(subscription.notification, PrecomputedNotification):
        return subscription.notification.notice

    if reference is None:
        reference = _today()

    next_renewal = compute_next_renewal(
        subscription.start_date,
        subscription.renewal_type,
        reference,
    )
    days = days_until(next_renewal, reference)

    window, urgent_within = NOTIFICATION_THRESHOLDS[subscription.renewal_type]
    if days > window:
        return None
    return RenewalNotice(urgent=days <= urgent_within, days_until=days)


def subscriptions_needing_notification(
    subscriptions: Iterable[Subscription],
    reference: Optional[Reference] = None,
) -> list[Subscription]:
    """Subscriptions with an active notice, in input order."""
    if reference is None:
        reference = _today()
    return [
        sub for sub in subscriptions
        if evaluate_notification(sub, reference) is not None
    ]


def total_for_cadence(
    subscriptions: Iterable[Subscription],
    cadence: RenewalType,
) -> Decimal:
    """Sum of prices for one cadence; a missing price counts as zero."""
    return sum(
        (
            sub.price or Decimal("0")
            for sub in subscriptions
            if sub.renewal_type == cadence
        ),
        Decimal("0"),
    )
