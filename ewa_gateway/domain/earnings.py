"""Earnings engine - earned-to-date and advanceable ceiling"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Union

from ewa_gateway.domain.models import Employer, User
from ewa_gateway.domain.period import (
    PayPeriodPolicy,
    elapsed_working_days,
    next_payroll_date,
    pay_period_start,
)

# Policy approximation: every elapsed calendar day counts as one 8-hour shift.
# Not timesheet-accurate.
ASSUMED_DAILY_HOURS = 8


@dataclass
class EarningsSummary:
    """Dashboard figures for the current pay period"""

    period_start: date
    elapsed_days: int
    earned_cents: int
    available_cents: int
    next_payroll_date: date


def earned_to_date(
    user: User,
    now: Union[date, datetime],
    period_start: Optional[date] = None,
) -> int:
    """
    Wages accrued in the current pay period, in cents.

    Example:
        10 elapsed days x 8h x R150.00/h = R12,000.00 (1_200_000 cents)
    """
    if period_start is None:
        period_start = pay_period_start(now)
    days = elapsed_working_days(now, period_start)
    return days * ASSUMED_DAILY_HOURS * user.hourly_rate_cents


def advanceable_ceiling(
    user: User,
    employer: Employer,
    now: Union[date, datetime],
    policy: PayPeriodPolicy = PayPeriodPolicy.CALENDAR_MONTH,
) -> int:
    """
    Maximum advance right now: earned-to-date x employer advance cap.

    Rounded down to the cent so an approved amount never exceeds the cap.
    Resets to 0 at the start of every pay period.
    """
    period_start = pay_period_start(now, employer.payroll_day, policy)
    earned = earned_to_date(user, now, period_start)
    ceiling = (Decimal(earned) * Decimal(str(employer.advance_cap))).to_integral_value(rounding=ROUND_DOWN)
    return max(int(ceiling), 0)


def earnings_summary(
    user: User,
    employer: Employer,
    now: Union[date, datetime],
    policy: PayPeriodPolicy = PayPeriodPolicy.CALENDAR_MONTH,
) -> EarningsSummary:
    period_start = pay_period_start(now, employer.payroll_day, policy)
    return EarningsSummary(
        period_start=period_start,
        elapsed_days=elapsed_working_days(now, period_start),
        earned_cents=earned_to_date(user, now, period_start),
        available_cents=advanceable_ceiling(user, employer, now, policy),
        next_payroll_date=next_payroll_date(now, employer.payroll_day),
    )
