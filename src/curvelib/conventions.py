"""
Day count, compounding and business day conventions.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets, OIS)
- ACT/365: Actual days / 365 (fixed)
- ACT/ACT: Actual days / actual days in year (ISDA)
- 30/360: 30 days per month / 360 (US bond basis)

Business Day Conventions:
- Following, Modified Following, Preceding, Modified Preceding, Unadjusted

The Calendar knows weekends plus an optional holiday set, which is
enough for rate helpers to roll value and maturity dates.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Optional
import calendar


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/365F": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    FOLLOWING = "Following"
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    PRECEDING = "Preceding"
    MODIFIED_PRECEDING = "ModifiedPreceding"
    UNADJUSTED = "Unadjusted"


class Compounding(Enum):
    """Interest rate compounding rule."""
    SIMPLE = "Simple"
    COMPOUNDED = "Compounded"
    CONTINUOUS = "Continuous"
    SIMPLE_THEN_COMPOUNDED = "SimpleThenCompounded"


class Frequency(Enum):
    """Payments (or compounding periods) per year."""
    NO_FREQUENCY = -1
    ONCE = 0
    ANNUAL = 1
    SEMIANNUAL = 2
    QUARTERLY = 4
    MONTHLY = 12

    @property
    def months(self) -> int:
        """Length of one period in months."""
        if self.value <= 0:
            raise ValueError(f"{self.name} has no period length")
        return 12 // self.value

    @classmethod
    def from_string(cls, s: str) -> "Frequency":
        mapping = {
            "ANNUAL": cls.ANNUAL,
            "SEMI": cls.SEMIANNUAL,
            "SEMIANNUAL": cls.SEMIANNUAL,
            "SEMI_ANNUAL": cls.SEMIANNUAL,
            "QUARTERLY": cls.QUARTERLY,
            "MONTHLY": cls.MONTHLY,
            "ONCE": cls.ONCE,
        }
        key = s.upper().replace(" ", "").replace("-", "_")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown frequency: {s}")


@dataclass(frozen=True)
class Calendar:
    """
    Business day calendar.

    Saturdays and Sundays are always holidays; extra holidays can be
    supplied explicitly.

    Attributes:
        name: Calendar identifier (informational)
        holidays: Additional non-business dates
    """
    name: str = "WEEKENDS"
    holidays: FrozenSet[date] = field(default_factory=frozenset)

    @classmethod
    def with_holidays(cls, name: str, holidays: Iterable[date]) -> "Calendar":
        return cls(name=name, holidays=frozenset(holidays))

    def is_business_day(self, d: date) -> bool:
        return is_business_day(d, self.holidays)

    def adjust(
        self,
        d: date,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    ) -> date:
        return adjust_business_day(d, convention, self.holidays)

    def advance(self, d: date, business_days: int) -> date:
        """
        Move a date by a number of business days.

        A zero move returns the date adjusted to the following business day.
        """
        if business_days == 0:
            return self.adjust(d, BusinessDayConvention.FOLLOWING)
        step = timedelta(days=1 if business_days > 0 else -1)
        remaining = abs(business_days)
        result = d
        while remaining > 0:
            result += step
            if self.is_business_day(result):
                remaining -= 1
        return result


@dataclass
class Conventions:
    """
    Container for instrument conventions.

    Attributes:
        day_count: Day count convention for accrual
        business_day: Business day adjustment rule
        compounding: Rate compounding convention
        payment_frequency: Payment frequency of the (fixed) leg
        settlement_days: Days to settle from trade date
    """
    day_count: DayCount = DayCount.ACT_360
    business_day: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    compounding: Compounding = Compounding.CONTINUOUS
    payment_frequency: Frequency = Frequency.ANNUAL
    settlement_days: int = 2

    @classmethod
    def usd_ois(cls) -> "Conventions":
        """Standard USD OIS conventions."""
        return cls(
            day_count=DayCount.ACT_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            payment_frequency=Frequency.ANNUAL,
            settlement_days=2
        )

    @classmethod
    def usd_swap(cls) -> "Conventions":
        """Standard USD IRS conventions (fixed leg)."""
        return cls(
            day_count=DayCount.THIRTY_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            payment_frequency=Frequency.SEMIANNUAL,
            settlement_days=2
        )

    @classmethod
    def eur_swap(cls) -> "Conventions":
        """Standard EUR IRS conventions (fixed leg)."""
        return cls(
            day_count=DayCount.THIRTY_360,
            business_day=BusinessDayConvention.MODIFIED_FOLLOWING,
            compounding=Compounding.COMPOUNDED,
            payment_frequency=Frequency.ANNUAL,
            settlement_days=2
        )


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction as float; negative when end precedes start
    """
    if start == end:
        return 0.0
    if end < start:
        return -year_fraction(end, start, day_count)

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0

    elif day_count == DayCount.ACT_ACT:
        # ISDA: split the period at year boundaries
        if start.year == end.year:
            return actual_days / _days_in_year(start.year)
        total = (date(start.year + 1, 1, 1) - start).days / _days_in_year(start.year)
        total += end.year - start.year - 1
        total += (end - date(end.year, 1, 1)).days / _days_in_year(end.year)
        return total

    elif day_count == DayCount.THIRTY_360:
        d1 = min(start.day, 30)
        d2 = end.day
        if d2 == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def is_business_day(d: date, holidays: Optional[Iterable[date]] = None) -> bool:
    """
    Check if a date is a business day.

    Saturday and Sunday are never business days.
    """
    if d.weekday() >= 5:
        return False
    if holidays and d in holidays:
        return False
    return True


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[Iterable[date]] = None
) -> date:
    """
    Adjust a date according to business day convention.

    Args:
        d: Date to adjust
        convention: Business day adjustment rule
        holidays: Optional set of holiday dates

    Returns:
        Adjusted date
    """
    if convention == BusinessDayConvention.UNADJUSTED or is_business_day(d, holidays):
        return d

    if convention in (BusinessDayConvention.FOLLOWING, BusinessDayConvention.MODIFIED_FOLLOWING):
        adjusted = _roll(d, 1, holidays)
        if convention == BusinessDayConvention.MODIFIED_FOLLOWING and adjusted.month != d.month:
            adjusted = _roll(d, -1, holidays)
        return adjusted

    if convention in (BusinessDayConvention.PRECEDING, BusinessDayConvention.MODIFIED_PRECEDING):
        adjusted = _roll(d, -1, holidays)
        if convention == BusinessDayConvention.MODIFIED_PRECEDING and adjusted.month != d.month:
            adjusted = _roll(d, 1, holidays)
        return adjusted

    raise ValueError(f"Unknown business day convention: {convention}")


def _roll(d: date, direction: int, holidays: Optional[Iterable[date]]) -> date:
    step = timedelta(days=direction)
    while not is_business_day(d, holidays):
        d += step
    return d


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "Calendar",
    "Conventions",
    "year_fraction",
    "is_business_day",
    "adjust_business_day",
]
