"""
Date utilities for rates calculations.

Provides:
- Tenor parsing and date arithmetic
- Schedule generation for swap legs
- IMM date helpers for futures
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple
import calendar as _calendar
import re

from .conventions import (
    BusinessDayConvention,
    Calendar,
    DayCount,
    Frequency,
    year_fraction
)


class DateUtils:
    """Utility class for date manipulation in rates contexts."""

    # Tenor regex pattern: number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^(\d+)([DWMY])$', re.IGNORECASE)

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).

        Args:
            tenor: Tenor string like "1D", "3M", "2Y"

        Returns:
            Tuple of (amount, unit) where unit is D/W/M/Y

        Raises:
            ValueError: If tenor format is invalid
        """
        match = DateUtils.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")

        return int(match.group(1)), match.group(2).upper()

    @staticmethod
    def add_tenor(
        start: date,
        tenor: str,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.UNADJUSTED,
        end_of_month: bool = False
    ) -> date:
        """
        Add a tenor to a date.

        Day tenors count business days on the calendar (calendar days if no
        calendar is given). Week, month and year tenors are added on the
        calendar and then adjusted with the given convention.

        Args:
            start: Starting date
            tenor: Tenor string (e.g., "1D", "3M", "2Y")
            calendar: Business day calendar
            convention: Adjustment applied to W/M/Y results
            end_of_month: Roll month-end start dates to month-end results

        Returns:
            End date
        """
        amount, unit = DateUtils.parse_tenor(tenor)

        if unit == 'D':
            if calendar is None:
                return start + timedelta(days=amount)
            return calendar.advance(start, amount)

        if unit == 'W':
            result = start + timedelta(weeks=amount)
        elif unit == 'M':
            result = add_months(start, amount)
        elif unit == 'Y':
            result = add_months(start, 12 * amount)
        else:
            raise ValueError(f"Unknown tenor unit: {unit}")

        if end_of_month and unit in ('M', 'Y') and is_end_of_month(start):
            result = date(result.year, result.month, _days_in_month(result.year, result.month))

        if calendar is not None:
            result = calendar.adjust(result, convention)
        return result

    @staticmethod
    def tenor_to_years(tenor: str) -> float:
        """
        Convert tenor to approximate year fraction.

        Args:
            tenor: Tenor string

        Returns:
            Approximate years as float
        """
        amount, unit = DateUtils.parse_tenor(tenor)

        if unit == 'D':
            return amount / 365.0
        elif unit == 'W':
            return amount * 7 / 365.0
        elif unit == 'M':
            return amount / 12.0
        elif unit == 'Y':
            return float(amount)
        else:
            raise ValueError(f"Unknown tenor unit: {unit}")

    @staticmethod
    def tenor_to_months(tenor: str) -> int:
        """Length of a month or year tenor in months."""
        amount, unit = DateUtils.parse_tenor(tenor)
        if unit == 'M':
            return amount
        if unit == 'Y':
            return 12 * amount
        raise ValueError(f"Tenor {tenor} is not a whole number of months")

    @staticmethod
    def generate_schedule(
        start: date,
        end: date,
        frequency: Frequency,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        termination_convention: Optional[BusinessDayConvention] = None
    ) -> List[date]:
        """
        Generate schedule dates between start and end, inclusive.

        Dates are rolled backward from the unadjusted end date, so any
        stub period is a short front stub.

        Args:
            start: Schedule start (accrual start)
            end: Schedule end (maturity, unadjusted)
            frequency: Period frequency
            calendar: Business day calendar
            convention: Adjustment for all dates but the last
            termination_convention: Adjustment for the last date
                (defaults to convention)

        Returns:
            Adjusted dates [start, ..., end]
        """
        if end <= start:
            raise ValueError(f"Schedule end {end} must be after start {start}")

        if frequency == Frequency.ONCE:
            unadjusted = [start, end]
        else:
            months = frequency.months
            unadjusted = [end]
            periods = 1
            while True:
                prev_date = add_months(end, -months * periods)
                if prev_date <= start:
                    break
                unadjusted.insert(0, prev_date)
                periods += 1
            unadjusted.insert(0, start)

        if calendar is None:
            return unadjusted

        if termination_convention is None:
            termination_convention = convention
        adjusted = [calendar.adjust(d, convention) for d in unadjusted[:-1]]
        adjusted.append(calendar.adjust(unadjusted[-1], termination_convention))

        # adjustment can collapse a short stub onto its neighbour
        result = [adjusted[0]]
        for d in adjusted[1:]:
            if d > result[-1]:
                result.append(d)
        return result


@dataclass
class ScheduleInfo:
    """Container for a leg schedule with accrual information."""
    payment_dates: List[date]
    accrual_starts: List[date]
    accrual_ends: List[date]
    year_fractions: List[float]
    day_count: DayCount

    def __len__(self) -> int:
        return len(self.payment_dates)


def generate_leg_schedule(
    start: date,
    end: date,
    frequency: Frequency,
    day_count: DayCount,
    calendar: Optional[Calendar] = None,
    convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
    termination_convention: Optional[BusinessDayConvention] = None
) -> ScheduleInfo:
    """
    Generate a swap leg schedule with accrual periods.

    Payments fall on accrual end dates.
    """
    dates = DateUtils.generate_schedule(
        start, end, frequency, calendar, convention, termination_convention
    )

    accrual_starts = dates[:-1]
    accrual_ends = dates[1:]
    yfs = [year_fraction(s, e, day_count) for s, e in zip(accrual_starts, accrual_ends)]

    return ScheduleInfo(
        payment_dates=list(accrual_ends),
        accrual_starts=list(accrual_starts),
        accrual_ends=list(accrual_ends),
        year_fractions=yfs,
        day_count=day_count
    )


def add_months(d: date, months: int) -> date:
    """Add calendar months, clipping the day to the target month length."""
    year = d.year + (d.month + months - 1) // 12
    month = (d.month + months - 1) % 12 + 1
    day = min(d.day, _days_in_month(year, month))
    return date(year, month, day)


def is_end_of_month(d: date) -> bool:
    return d.day == _days_in_month(d.year, d.month)


def is_imm_date(d: date) -> bool:
    """True for the third Wednesday of March, June, September or December."""
    return d.month in (3, 6, 9, 12) and d.weekday() == 2 and 15 <= d.day <= 21


def next_imm_date(d: date, include_today: bool = False) -> date:
    """
    Next IMM date on or after d.

    Args:
        d: Reference date
        include_today: Return d itself when it is an IMM date
    """
    if include_today and is_imm_date(d):
        return d
    year, month = d.year, d.month
    while True:
        if month in (3, 6, 9, 12):
            candidate = _third_wednesday(year, month)
            if candidate > d:
                return candidate
        month += 1
        if month > 12:
            month = 1
            year += 1


def _third_wednesday(year: int, month: int) -> date:
    first = date(year, month, 1)
    offset = (2 - first.weekday()) % 7
    return first + timedelta(days=offset + 14)


def _days_in_month(year: int, month: int) -> int:
    """Return number of days in a month."""
    return _calendar.monthrange(year, month)[1]


__all__ = [
    "DateUtils",
    "ScheduleInfo",
    "generate_leg_schedule",
    "add_months",
    "is_end_of_month",
    "is_imm_date",
    "next_imm_date",
]
