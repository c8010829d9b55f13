"""
Yield curve representation and operations.

YieldTermStructure provides, from a single discount function:
- Discount factor P(0,t)
- Zero rate z(t)
- Forward rate f(t1, t2)
- Instantaneous forward rate f(t)
- Par rate over a strip of dates

InterpolatedCurve stores one value per node (discount factor, zero rate
or instantaneous forward depending on its trait) and interpolates between
them. Times are year fractions from the reference date.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple, Union
import copy
import numpy as np
import pandas as pd

from ..conventions import Calendar, Compounding, DayCount, Frequency, year_fraction
from ..errors import ConfigurationError, DomainError
from ..interest_rate import InterestRate
from ..observable import EvaluationDate
from .interpolation import Interpolator
from .traits import Discount, Trait

DateOrTime = Union[date, float]

# Time step used for rates at a single date
_DT = 1e-4
# Slack when comparing a time with the last node time
_TIME_EPS = 1e-12


@dataclass
class ExtrapolationPolicy:
    """Whether queries beyond the last node are answered."""
    enabled: bool = False


class YieldTermStructure:
    """
    Base class for yield curves.

    The reference date is either fixed, or derived from an evaluation
    date moved forward by a number of settlement business days.

    Attributes:
        day_count: Day count used to convert dates into times
        calendar: Calendar used for settlement (optional)
        extrapolation: Extrapolation policy
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        day_count: DayCount = DayCount.ACT_365,
        calendar: Optional[Calendar] = None,
        settlement_days: Optional[int] = None,
        evaluation_date: Optional[EvaluationDate] = None
    ):
        if reference_date is None:
            if settlement_days is None or evaluation_date is None:
                raise ConfigurationError(
                    "either a reference date or settlement days with an "
                    "evaluation date is required"
                )
            if settlement_days < 0:
                raise ConfigurationError(f"negative settlement days: {settlement_days}")
            if calendar is None:
                calendar = Calendar()
        self._fixed_reference_date = reference_date
        self._settlement_days = settlement_days
        self._evaluation_date = evaluation_date
        self.day_count = day_count
        self.calendar = calendar
        self.extrapolation = ExtrapolationPolicy()

    # ------------------------------------------------------------------
    # reference date and time conversion

    @property
    def moving(self) -> bool:
        """True when the reference date follows an evaluation date."""
        return self._fixed_reference_date is None

    @property
    def reference_date(self) -> date:
        if self._fixed_reference_date is not None:
            return self._fixed_reference_date
        return self.calendar.advance(self._evaluation_date.value, self._settlement_days)

    @property
    def settlement_days(self) -> Optional[int]:
        return self._settlement_days

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.reference_date, d, self.day_count)

    def _to_time(self, t: DateOrTime) -> float:
        if isinstance(t, date):
            return self.time_from_reference(t)
        return float(t)

    # ------------------------------------------------------------------
    # extrapolation

    @property
    def allows_extrapolation(self) -> bool:
        return self.extrapolation.enabled

    def enable_extrapolation(self) -> None:
        self.extrapolation.enabled = True

    def disable_extrapolation(self) -> None:
        self.extrapolation.enabled = False

    def max_date(self) -> date:
        raise NotImplementedError

    def max_time(self) -> float:
        return self.time_from_reference(self.max_date())

    def _check_range(self, t: float, extrapolate: bool) -> None:
        if t < 0.0:
            raise DomainError(f"negative time ({t}) given")
        if extrapolate or self.allows_extrapolation:
            return
        max_time = self.max_time()
        if t > max_time + _TIME_EPS:
            raise DomainError(
                f"time ({t}) is past max curve time ({max_time}); "
                f"max date is {self.max_date().isoformat()}"
            )

    # ------------------------------------------------------------------
    # discount factors

    def _discount_impl(self, t: float) -> float:
        raise NotImplementedError

    def discount(self, t: DateOrTime, extrapolate: bool = False) -> float:
        """
        Get discount factor P(0,t).

        Args:
            t: Year fraction or date
            extrapolate: Answer beyond max_time() for this call

        Returns:
            Discount factor

        Raises:
            DomainError: Negative time, or past max_time() without
                extrapolation
        """
        time = self._to_time(t)
        self._check_range(time, extrapolate)
        return self._discount_impl(time)

    # ------------------------------------------------------------------
    # zero rates

    def zero_rate(
        self,
        d: date,
        day_count: Optional[DayCount] = None,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> InterestRate:
        """
        Zero rate from the reference date to d.

        Args:
            d: Target date
            day_count: Day count of the result (defaults to the curve's)
            compounding: Compounding of the result
            frequency: Frequency of the result
            extrapolate: Allow dates past max_date()
        """
        day_count = day_count or self.day_count
        if d == self.reference_date:
            compound = 1.0 / self.discount(_DT, extrapolate)
            return InterestRate.implied_rate(compound, day_count, compounding, frequency, _DT)
        compound = 1.0 / self.discount(d, extrapolate)
        t = year_fraction(self.reference_date, d, day_count)
        return InterestRate.implied_rate(compound, day_count, compounding, frequency, t)

    def zero_rate_t(
        self,
        t: float,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> InterestRate:
        """Zero rate for a time measured with the curve's day count."""
        if t == 0.0:
            t = _DT
        compound = 1.0 / self.discount(t, extrapolate)
        return InterestRate.implied_rate(compound, self.day_count, compounding, frequency, t)

    # ------------------------------------------------------------------
    # forward rates

    def forward_rate(
        self,
        d1: date,
        d2: date,
        day_count: Optional[DayCount] = None,
        compounding: Compounding = Compounding.SIMPLE,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> InterestRate:
        """
        Forward rate between two dates.

        Args:
            d1: Start date
            d2: End date (not before d1)
            day_count: Day count of the result (defaults to the curve's)
            compounding: Compounding of the result
            frequency: Frequency of the result
            extrapolate: Allow dates past max_date()
        """
        if d1 > d2:
            raise DomainError(f"d1 ({d1}) later than d2 ({d2})")
        day_count = day_count or self.day_count
        if d1 == d2:
            t1 = max(self.time_from_reference(d1) - _DT / 2.0, 0.0)
            t2 = t1 + _DT
            compound = self.discount(t1, extrapolate) / self.discount(t2, extrapolate)
            return InterestRate.implied_rate(compound, day_count, compounding, frequency, _DT)
        compound = self.discount(d1, extrapolate) / self.discount(d2, extrapolate)
        t = year_fraction(d1, d2, day_count)
        return InterestRate.implied_rate(compound, day_count, compounding, frequency, t)

    def forward_rate_t(
        self,
        t1: float,
        t2: float,
        compounding: Compounding = Compounding.SIMPLE,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> InterestRate:
        """Forward rate between two times measured with the curve's day count."""
        if t2 < t1:
            raise DomainError(f"t1 ({t1}) later than t2 ({t2})")
        if t2 == t1:
            t1 = max(t1 - _DT / 2.0, 0.0)
            t2 = t1 + _DT
        compound = self.discount(t1, extrapolate) / self.discount(t2, extrapolate)
        return InterestRate.implied_rate(compound, self.day_count, compounding, frequency, t2 - t1)

    def instantaneous_forward(self, t: DateOrTime, extrapolate: bool = False) -> float:
        """
        Continuously-compounded instantaneous forward rate f(t).

        f(t) = -d/dt [log P(0,t)], estimated with a central difference.
        """
        time = self._to_time(t)
        t1 = max(time - _DT / 2.0, 0.0)
        t2 = t1 + _DT
        return float(np.log(self.discount(t1, extrapolate) / self.discount(t2, extrapolate)) / _DT)

    # ------------------------------------------------------------------
    # par rates

    def par_rate(
        self,
        dates: Sequence[DateOrTime],
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> float:
        """
        Par rate of a strip of regular periods.

        The first element is the start of the strip, the others are the
        payment dates. Each period is assumed to last 1/frequency years.

        Returns:
            Par rate compounded at the given frequency
        """
        if len(dates) < 2:
            raise DomainError("at least two dates are required for a par rate")
        if frequency.value <= 0:
            raise DomainError(f"par rate requires a periodic frequency, got {frequency.name}")
        times = [self._to_time(d) for d in dates]
        for t in times:
            self._check_range(t, extrapolate)
        annuity = sum(self._discount_impl(t) for t in times[1:])
        result = self._discount_impl(times[0]) - self._discount_impl(times[-1])
        return result / annuity * frequency.value


class InterpolatedCurve(YieldTermStructure):
    """
    Yield curve with interpolation between nodes.

    Stores one value per node and interpolates between them using the
    given interpolator. What the value means depends on the trait.

    Attributes:
        trait: Stored quantity (Discount, ZeroYield, ForwardRate)
        interpolator: Interpolation method over (times, data); a private
            copy of the one passed in

    Conventions:
        - Times are year fractions from the reference date
        - The first node sits at the reference date
        - Discount-trait curves have a value of 1.0 at the first node
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        day_count: DayCount = DayCount.ACT_365,
        trait: Optional[Trait] = None,
        interpolator: Optional[Interpolator] = None,
        calendar: Optional[Calendar] = None,
        dates: Optional[Sequence[date]] = None,
        values: Optional[Sequence[float]] = None,
        settlement_days: Optional[int] = None,
        evaluation_date: Optional[EvaluationDate] = None
    ):
        if reference_date is None and dates:
            reference_date = dates[0]
        super().__init__(reference_date, day_count, calendar, settlement_days, evaluation_date)

        self.trait = trait or Discount()
        # fitted in place, so each curve works on its own copy
        if interpolator is None:
            self.interpolator = self.trait.default_interpolator()
        else:
            self.interpolator = copy.deepcopy(interpolator)
        if not self.trait.supports(self.interpolator):
            raise ConfigurationError(
                f"{type(self.interpolator).__name__} is not supported "
                f"for the {self.trait.name} trait"
            )

        self._dates: List[date] = []
        self._times: List[float] = []
        self._data: List[float] = []

        if dates is not None or values is not None:
            self._set_nodes(dates or [], values or [])

    def _set_nodes(self, dates: Sequence[date], values: Sequence[float]) -> None:
        if len(dates) < self.interpolator.required_points:
            raise ConfigurationError(f"too few dates: {len(dates)}")
        if len(dates) != len(values):
            raise ConfigurationError(
                f"dates/values count mismatch: {len(dates)} vs {len(values)}"
            )
        if dates[0] != self.reference_date:
            raise ConfigurationError("the first date must be the reference date")
        for prev, curr in zip(dates, dates[1:]):
            if curr <= prev:
                raise ConfigurationError(f"dates must be in ascending order: {prev} >= {curr}")
        if isinstance(self.trait, Discount):
            if values[0] != 1.0:
                raise ConfigurationError("the first discount factor must be 1.0")
            if any(v <= 0.0 for v in values):
                raise ConfigurationError("discount factors must be positive")

        self._dates = list(dates)
        self._times = [self.time_from_reference(d) for d in dates]
        self._data = [float(v) for v in values]
        self.build_interpolation()

    # ------------------------------------------------------------------
    # low-level mutators used while bootstrapping

    def set_dates(self, dates: Sequence[date]) -> None:
        self._dates = list(dates)

    def set_times(self, times: Sequence[float]) -> None:
        self._times = list(times)

    def set_data(self, data: Sequence[float]) -> None:
        self._data = list(data)

    def build_interpolation(self, n_points: Optional[int] = None) -> Interpolator:
        """
        Fit the interpolator over the first n_points nodes (all by default).
        """
        n = len(self._times) if n_points is None else n_points
        self.interpolator.fit(self._times[:n], self._data[:n])
        return self.interpolator

    # ------------------------------------------------------------------
    # inspectors

    @property
    def interpolation(self) -> Interpolator:
        return self.interpolator

    @property
    def times(self) -> List[float]:
        return list(self._times)

    @property
    def dates(self) -> List[date]:
        return list(self._dates)

    @property
    def data(self) -> List[float]:
        return list(self._data)

    def nodes(self) -> List[Tuple[date, float]]:
        """
        Get all curve nodes.

        Returns:
            List of (date, value) tuples; the value's meaning depends on the trait
        """
        return list(zip(self._dates, self._data))

    def max_date(self) -> date:
        if not self._dates:
            raise DomainError("curve has no nodes")
        return self._dates[-1]

    def max_time(self) -> float:
        if not self._times:
            raise DomainError("curve has no nodes")
        return self._times[-1]

    def _discount_impl(self, t: float) -> float:
        return self.trait.discount(self.interpolator, t)

    def instantaneous_forward(self, t: DateOrTime, extrapolate: bool = False) -> float:
        time = self._to_time(t)
        self._check_range(time, extrapolate)
        return self.trait.instantaneous_forward(self.interpolator, time)

    def to_frame(self) -> pd.DataFrame:
        """
        Node table with discount factors and continuous zero rates.

        Returns:
            DataFrame with columns date, time, value, discount_factor, zero_rate
        """
        dates = self.dates
        times = self.times
        values = self.data
        dfs = [self.discount(t, True) for t in times]
        zeros = [
            -np.log(df) / t if t > 0 else np.nan
            for t, df in zip(times, dfs)
        ]
        return pd.DataFrame({
            "date": dates,
            "time": times,
            "value": values,
            "discount_factor": dfs,
            "zero_rate": zeros,
        })

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(reference={self.reference_date}, "
                f"trait={self.trait.name}, nodes={len(self._times)}, "
                f"interpolator={type(self.interpolator).__name__})")


__all__ = [
    "ExtrapolationPolicy",
    "YieldTermStructure",
    "InterpolatedCurve",
]
