"""Pay-period arithmetic: where the current period starts and how much of it has elapsed"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from ewa_gateway.utils.date_utils import as_date, clamped_day, shift_month, start_of_month


class PayPeriodPolicy(str, Enum):
    """How the start of the current pay period is anchored"""

    CALENDAR_MONTH = "calendar_month"  # 1st of the month containing now
    PAYROLL_DAY = "payroll_day"  # most recent employer payroll day on or before now


def elapsed_working_days(now: Union[date, datetime], period_start: date) -> int:
    """
    Whole calendar days between the period start and now.

    Returns 0 when now precedes the period start. On the 11th of a month with a
    period starting on the 1st this is 10.
    """
    days = (as_date(now) - as_date(period_start)).days
    return max(days, 0)


def pay_period_start(
    now: Union[date, datetime],
    payroll_day: Optional[int] = None,
    policy: PayPeriodPolicy = PayPeriodPolicy.CALENDAR_MONTH,
) -> date:
    """
    Start of the pay period containing now.

    CALENDAR_MONTH ignores payroll_day. PAYROLL_DAY starts the period on the
    last payroll date that is not after now; payroll days past the end of a
    short month fall on its last day.
    """
    today = as_date(now)
    if policy is PayPeriodPolicy.CALENDAR_MONTH:
        return start_of_month(today)

    if payroll_day is None:
        raise ValueError("payroll_day is required for the payroll_day policy")

    this_month = clamped_day(today.year, today.month, payroll_day)
    if this_month <= today:
        return this_month
    year, month = shift_month(today.year, today.month, -1)
    return clamped_day(year, month, payroll_day)


def next_payroll_date(now: Union[date, datetime], payroll_day: int) -> date:
    """First payroll date on or after now"""
    today = as_date(now)
    this_month = clamped_day(today.year, today.month, payroll_day)
    if this_month >= today:
        return this_month
    year, month = shift_month(today.year, today.month, 1)
    return clamped_day(year, month, payroll_day)
