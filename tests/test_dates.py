"""
Unit tests for dates module.
"""

from datetime import date
import pytest

from curvelib.conventions import BusinessDayConvention, Calendar, DayCount, Frequency
from curvelib.dates import (
    DateUtils,
    add_months,
    generate_leg_schedule,
    is_end_of_month,
    is_imm_date,
    next_imm_date,
)


class TestDateUtils:
    """Tests for DateUtils class."""

    def test_parse_tenor(self):
        """Test tenor parsing."""
        assert DateUtils.parse_tenor("3M") == (3, 'M')
        assert DateUtils.parse_tenor("10Y") == (10, 'Y')
        assert DateUtils.parse_tenor("2W") == (2, 'W')
        assert DateUtils.parse_tenor("1d") == (1, 'D')

    def test_parse_tenor_invalid(self):
        """Malformed tenors raise ValueError."""
        with pytest.raises(ValueError):
            DateUtils.parse_tenor("invalid")
        with pytest.raises(ValueError):
            DateUtils.parse_tenor("3X")

    def test_add_tenor_months(self):
        """Test adding month tenors."""
        base = date(2024, 1, 15)
        assert DateUtils.add_tenor(base, "3M") == date(2024, 4, 15)
        assert DateUtils.add_tenor(base, "1Y") == date(2025, 1, 15)
        assert DateUtils.add_tenor(base, "2W") == date(2024, 1, 29)

    def test_add_tenor_clips_month_end(self):
        """Day is clipped to the target month length."""
        assert DateUtils.add_tenor(date(2024, 1, 31), "1M") == date(2024, 2, 29)

    def test_add_tenor_end_of_month(self):
        """End-of-month dates stay at month end."""
        result = DateUtils.add_tenor(date(2024, 2, 29), "1M", end_of_month=True)
        assert result == date(2024, 3, 31)

    def test_add_tenor_business_days(self):
        """Day tenors count business days with a calendar."""
        # Friday + 2 business days
        result = DateUtils.add_tenor(date(2024, 1, 12), "2D", Calendar())
        assert result == date(2024, 1, 16)

    def test_add_tenor_adjusts(self):
        """Result is rolled by the convention."""
        # 2024-06-30 is a Sunday
        base = date(2024, 5, 30)
        following = DateUtils.add_tenor(base, "1M", Calendar(), BusinessDayConvention.FOLLOWING)
        modified = DateUtils.add_tenor(base, "1M", Calendar(), BusinessDayConvention.MODIFIED_FOLLOWING)
        assert following == date(2024, 7, 1)
        assert modified == date(2024, 6, 28)

    def test_tenor_to_months(self):
        """Test tenor to months conversion."""
        assert DateUtils.tenor_to_months("18M") == 18
        assert DateUtils.tenor_to_months("2Y") == 24
        with pytest.raises(ValueError):
            DateUtils.tenor_to_months("10D")

    def test_tenor_to_years(self):
        """Test tenor to years conversion."""
        assert DateUtils.tenor_to_years("6M") == 0.5


class TestSchedule:
    """Tests for schedule generation."""

    def test_regular_quarterly(self):
        """Test quarterly schedule generation."""
        dates = DateUtils.generate_schedule(date(2024, 1, 15), date(2025, 1, 15), Frequency.QUARTERLY)
        assert dates == [
            date(2024, 1, 15),
            date(2024, 4, 15),
            date(2024, 7, 15),
            date(2024, 10, 15),
            date(2025, 1, 15),
        ]

    def test_short_front_stub(self):
        """Odd periods leave a short first period."""
        dates = DateUtils.generate_schedule(date(2024, 2, 1), date(2025, 1, 15), Frequency.SEMIANNUAL)
        assert dates == [date(2024, 2, 1), date(2024, 7, 15), date(2025, 1, 15)]

    def test_adjusted_with_calendar(self):
        """Weekend dates are rolled."""
        # 2024-06-15 is a Saturday
        dates = DateUtils.generate_schedule(
            date(2024, 3, 15), date(2024, 9, 15), Frequency.QUARTERLY, Calendar(),
            BusinessDayConvention.MODIFIED_FOLLOWING
        )
        assert dates[1] == date(2024, 6, 17)
        # 2024-09-15 is a Sunday
        assert dates[-1] == date(2024, 9, 16)

    def test_end_before_start(self):
        """Test invalid schedule bounds."""
        with pytest.raises(ValueError):
            DateUtils.generate_schedule(date(2024, 1, 15), date(2024, 1, 15), Frequency.ANNUAL)

    def test_leg_schedule(self):
        """Leg pays on accrual ends; fractions add up to the tenor."""
        sched = generate_leg_schedule(
            date(2024, 1, 15), date(2026, 1, 15), Frequency.SEMIANNUAL, DayCount.THIRTY_360
        )
        assert len(sched) == 4
        assert sched.payment_dates == sched.accrual_ends
        assert sched.accrual_starts[1:] == sched.accrual_ends[:-1]
        assert abs(sum(sched.year_fractions) - 2.0) < 1e-12


class TestMonthsAndIMM:

    def test_add_months(self):
        """Test month arithmetic."""
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_is_end_of_month(self):
        """Test month-end detection."""
        assert is_end_of_month(date(2024, 2, 29))
        assert not is_end_of_month(date(2023, 2, 27))

    def test_is_imm_date(self):
        """IMM dates are third Wednesdays of quarterly months."""
        assert is_imm_date(date(2024, 3, 20))
        assert not is_imm_date(date(2024, 3, 13))
        assert not is_imm_date(date(2024, 4, 17))

    def test_next_imm_date(self):
        """Test next IMM date."""
        assert next_imm_date(date(2024, 1, 15)) == date(2024, 3, 20)
        assert next_imm_date(date(2024, 3, 20)) == date(2024, 6, 19)
        assert next_imm_date(date(2024, 3, 20), include_today=True) == date(2024, 3, 20)
        assert next_imm_date(date(2024, 12, 20)) == date(2025, 3, 19)
