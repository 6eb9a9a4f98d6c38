"""Billing period arithmetic.

Billing cycles map to whole calendar months. Adding months keeps the time
of day and timezone and clamps the day of month to the last day of the
target month, so Jan 31 + 1 month is Feb 28 (Feb 29 in leap years) and
Feb 29 + 1 year is Feb 28.
"""

import calendar
from datetime import datetime
from typing import Union

from membership_service.models.plan import BillingCycle

MONTHS_PER_CYCLE = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.YEARLY: 12,
}


def parse_billing_cycle(cycle: Union[str, BillingCycle]) -> BillingCycle:
    """Parse a billing cycle value.

    Args:
        cycle: BillingCycle or its string value (case-insensitive)

    Returns:
        BillingCycle

    Raises:
        ValueError: If the value is not a known cycle

    Examples:
        >>> parse_billing_cycle("Monthly")
        <BillingCycle.MONTHLY: 'monthly'>
    """
    if isinstance(cycle, BillingCycle):
        return cycle
    if not cycle or not isinstance(cycle, str):
        raise ValueError("Billing cycle must be a non-empty string")
    try:
        return BillingCycle(cycle.strip().lower())
    except ValueError:
        raise ValueError(
            f"Unsupported billing cycle: '{cycle}'. "
            f"Supported cycles: {[c.value for c in BillingCycle]}"
        )


def months_in_cycle(cycle: Union[str, BillingCycle]) -> int:
    """Number of calendar months in a billing cycle."""
    return MONTHS_PER_CYCLE[parse_billing_cycle(cycle)]


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length.

    Examples:
        >>> add_months(datetime(2026, 1, 31), 1)
        datetime.datetime(2026, 2, 28, 0, 0)

        >>> add_months(datetime(2024, 2, 29), 12)
        datetime.datetime(2025, 2, 28, 0, 0)
    """
    if months < 0:
        raise ValueError("Months must be non-negative")

    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def period_end(start: datetime, cycle: Union[str, BillingCycle]) -> datetime:
    """End of the billing period that begins at ``start``."""
    return add_months(start, months_in_cycle(cycle))


def monthly_equivalent(price: float, cycle: Union[str, BillingCycle]) -> float:
    """Spread a per-cycle price over its months."""
    return price / months_in_cycle(cycle)
