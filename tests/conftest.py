"""
Shared fixtures for curvelib tests.
"""

from datetime import date, timedelta
import math

import pytest

from curvelib.conventions import Calendar, DayCount
from curvelib.curves import (
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    InterpolatedCurve,
    SwapRateHelper,
)


@pytest.fixture
def reference_date():
    """A Monday, so spot-starting helpers start on it with zero fixing days."""
    return date(2024, 1, 15)


@pytest.fixture
def calendar():
    return Calendar()


@pytest.fixture
def flat_curve(reference_date):
    """Flat 3% continuously-compounded discount curve out to 10 years."""
    dates = [reference_date + timedelta(days=365 * i) for i in range(11)]
    values = [math.exp(-0.03 * i) for i in range(11)]
    return InterpolatedCurve(reference_date, DayCount.ACT_365, dates=dates, values=values)


@pytest.fixture
def make_helpers(calendar):
    """Factory for a realistic helper set built against an evaluation date."""

    def _make(evaluation_date):
        return [
            DepositRateHelper(0.050, "1M", evaluation_date, fixing_days=0, calendar=calendar),
            DepositRateHelper(0.051, "3M", evaluation_date, fixing_days=0, calendar=calendar),
            DepositRateHelper(0.052, "6M", evaluation_date, fixing_days=0, calendar=calendar),
            FraRateHelper(0.049, 6, 9, evaluation_date, fixing_days=0, calendar=calendar),
            SwapRateHelper(0.047, "1Y", evaluation_date, calendar=calendar, settlement_days=0),
            SwapRateHelper(0.045, "2Y", evaluation_date, calendar=calendar, settlement_days=0),
            SwapRateHelper(0.043, "5Y", evaluation_date, calendar=calendar, settlement_days=0),
        ]

    return _make


@pytest.fixture
def helpers(make_helpers, reference_date):
    return make_helpers(reference_date)


@pytest.fixture
def futures_helper(calendar):
    """December 2024 IMM contract priced at 95.50."""
    return FuturesRateHelper(95.5, date(2024, 12, 18), calendar=calendar)
