"""Unit tests for earned-to-date and advanceable ceiling"""

from dataclasses import replace
from datetime import datetime, timedelta
from ewa_gateway.domain.earnings import (
    ASSUMED_DAILY_HOURS,
    advanceable_ceiling,
    earned_to_date,
    earnings_summary,
)
from ewa_gateway.domain.period import PayPeriodPolicy


def test_assumed_daily_hours():
    assert ASSUMED_DAILY_HOURS == 8


def test_earned_to_date_worked_example(user):
    """10 days x 8h x R150/h = R12,000"""
    assert earned_to_date(user, datetime(2024, 3, 11, 10, 0)) == 1_200_000


def test_advanceable_ceiling_worked_example(user, employer):
    """R12,000 earned x 25% cap = R3,000"""
    assert advanceable_ceiling(user, employer, datetime(2024, 3, 11, 10, 0)) == 300_000


def test_ceiling_zero_on_first_day_of_period(user, employer):
    assert advanceable_ceiling(user, employer, datetime(2024, 3, 1, 9, 0)) == 0


def test_earnings_monotonic_within_period(user):
    """Earned-to-date never decreases as time moves forward within a month"""
    start = datetime(2024, 3, 1, 0, 0)
    previous = -1
    for hours in range(0, 31 * 24, 7):
        now = start + timedelta(hours=hours)
        if now.month != 3:
            break
        earned = earned_to_date(user, now)
        assert earned >= previous
        previous = earned


def test_earnings_reset_at_new_period(user, employer):
    end_of_march = datetime(2024, 3, 31, 23, 0)
    start_of_april = datetime(2024, 4, 1, 1, 0)
    assert advanceable_ceiling(user, employer, end_of_march) > 0
    assert advanceable_ceiling(user, employer, start_of_april) == 0


def test_ceiling_rounds_down_to_cent(user, employer):
    """1 day x 8h x R123.45/h = R987.60; a 33.3% cap gives R328.8708, kept as R328.87"""
    odd_user = replace(user, hourly_rate_cents=12_345)
    odd_employer = replace(employer, advance_cap=0.333)
    ceiling = advanceable_ceiling(odd_user, odd_employer, datetime(2024, 3, 2, 8, 0))
    assert ceiling == 32_887  # 98_760 x 0.333 = 32_887.08


def test_payroll_day_policy_accrues_from_previous_payroll(user, employer):
    """On Mar 11 with payroll on the 25th: 15 days since Feb 25"""
    now = datetime(2024, 3, 11, 10, 0)
    ceiling = advanceable_ceiling(user, employer, now, PayPeriodPolicy.PAYROLL_DAY)
    assert ceiling == 15 * 8 * 15_000 // 4


def test_earnings_summary(user, employer):
    summary = earnings_summary(user, employer, datetime(2024, 3, 11, 10, 0))
    assert summary.elapsed_days == 10
    assert summary.earned_cents == 1_200_000
    assert summary.available_cents == 300_000
    assert summary.period_start.isoformat() == "2024-03-01"
    assert summary.next_payroll_date.isoformat() == "2024-03-25"
