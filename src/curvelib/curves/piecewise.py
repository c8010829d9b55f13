"""
Piecewise yield curve bootstrapped from rate helpers.

The curve observes its helpers, its jump quotes and (for moving curves)
the evaluation date. Any change marks it dirty; the next read rebuilds
all nodes with its bootstrap.

Optional jumps overlay the bootstrapped discount function: for a time t,
every jump whose time lies in [0, t) multiplies the discount factor.
Without explicit jump dates, jump i sits on December 31st of the
reference year plus i (turn-of-year effects).
"""

from datetime import date
from typing import List, Optional, Sequence, Tuple, Union
import copy
import logging

from ..conventions import Calendar, DayCount
from ..errors import ConfigurationError, DomainError
from ..observable import EvaluationDate, LazyObject, QuoteHandle, SimpleQuote, make_quote_handle
from .bootstrap import BootstrapResult, IterativeBootstrap
from .curve import DateOrTime, InterpolatedCurve
from .instruments import RateHelper
from .interpolation import Interpolator
from .traits import Trait

logger = logging.getLogger(__name__)

JumpLike = Union[float, SimpleQuote, QuoteHandle]


class PiecewiseYieldCurve(InterpolatedCurve, LazyObject):
    """
    Yield curve whose nodes reprice a set of instruments.

    Args:
        reference_date: Fixed reference date; None for a moving curve
        instruments: Rate helpers, one per node
        day_count: Day count used to convert dates into times
        jumps: Discount factor jumps, each in (0, 1]
        jump_dates: Dates of the jumps (default: turn of each year)
        accuracy: Solver tolerance on node values
        interpolator: Interpolation method (default: trait's default)
        trait: Stored quantity (default: discount factors)
        bootstrap: Bootstrap engine (default: IterativeBootstrap with Brent)
        settlement_days: Business days from evaluation date to reference date
        calendar: Calendar for settlement
        evaluation_date: Evaluation date followed by a moving curve
    """

    def __init__(
        self,
        reference_date: Optional[date],
        instruments: Sequence[RateHelper],
        day_count: DayCount = DayCount.ACT_365,
        jumps: Sequence[JumpLike] = (),
        jump_dates: Sequence[date] = (),
        accuracy: float = 1e-12,
        interpolator: Optional[Interpolator] = None,
        trait: Optional[Trait] = None,
        bootstrap: Optional[IterativeBootstrap] = None,
        settlement_days: Optional[int] = None,
        calendar: Optional[Calendar] = None,
        evaluation_date: Optional[EvaluationDate] = None
    ):
        InterpolatedCurve.__init__(
            self,
            reference_date=reference_date,
            day_count=day_count,
            trait=trait,
            interpolator=interpolator,
            calendar=calendar,
            settlement_days=settlement_days,
            evaluation_date=evaluation_date,
        )
        LazyObject.__init__(self)

        if accuracy <= 0.0:
            raise ConfigurationError(f"accuracy must be positive, got {accuracy}")
        self.accuracy = accuracy

        self._instruments: List[RateHelper] = list(instruments)
        if not self._instruments:
            raise ConfigurationError("no instruments given")
        pillars = [h.pillar_date for h in self._instruments]
        if len(set(pillars)) != len(pillars):
            duplicates = sorted({d for d in pillars if pillars.count(d) > 1})
            raise ConfigurationError(
                "more than one instrument with pillar date "
                + ", ".join(d.isoformat() for d in duplicates)
            )

        self._jumps: List[QuoteHandle] = [make_quote_handle(j) for j in jumps]
        self._explicit_jump_dates: List[date] = list(jump_dates)
        if self._explicit_jump_dates and len(self._explicit_jump_dates) != len(self._jumps):
            raise ConfigurationError(
                f"mismatch between number of jumps ({len(self._jumps)}) "
                f"and jump dates ({len(self._explicit_jump_dates)})"
            )
        self._jump_dates: List[date] = []
        self._jump_times: List[float] = []
        self._latest_reference: Optional[date] = None
        self._set_jumps()

        # the engine is attached to this curve, so a shared one is copied
        self.bootstrap = copy.copy(bootstrap) if bootstrap is not None else IterativeBootstrap()
        self.bootstrap.setup(self)
        self._last_result: Optional[BootstrapResult] = None

        for helper in self._instruments:
            helper.register_observer(self.update)
        for jump in self._jumps:
            jump.register_observer(self.update)
        if self.moving:
            evaluation_date.register_observer(self.update)

    # ------------------------------------------------------------------
    # observer interface

    def update(self) -> None:
        """Mark the curve dirty; regenerate jump times if the reference date moved."""
        LazyObject.update(self)
        if self.reference_date != self._latest_reference:
            self._set_jumps()

    def _set_jumps(self) -> None:
        reference = self.reference_date
        if self._explicit_jump_dates:
            self._jump_dates = list(self._explicit_jump_dates)
        else:
            self._jump_dates = [date(reference.year + i, 12, 31) for i in range(len(self._jumps))]
        self._jump_times = [self.time_from_reference(d) for d in self._jump_dates]
        self._latest_reference = reference

    def _check_jumps(self) -> None:
        for handle, jump_date in zip(self._jumps, self._jump_dates):
            if not handle.is_valid():
                raise DomainError(f"invalid jump quote at {jump_date}")
            value = handle.value
            if not 0.0 < value <= 1.0:
                raise DomainError(f"invalid jump value {value} at {jump_date}; must be in (0, 1]")

    def _perform_calculations(self) -> None:
        self._check_jumps()
        logger.debug("Bootstrapping %s from %d instruments", self, len(self._instruments))
        self._last_result = self.bootstrap.calculate()

    # ------------------------------------------------------------------
    # discount function

    def _discount_impl(self, t: float) -> float:
        self.calculate()
        base = InterpolatedCurve._discount_impl(self, t)
        if not self._jumps:
            return base
        jump_effect = 1.0
        for handle, jump_time in zip(self._jumps, self._jump_times):
            if 0.0 <= jump_time < t:
                if not handle.is_valid():
                    raise DomainError("invalid jump quote")
                value = handle.value
                if not 0.0 < value <= 1.0:
                    raise DomainError(f"invalid jump value: {value}")
                jump_effect *= value
        return jump_effect * base

    def instantaneous_forward(self, t: DateOrTime, extrapolate: bool = False) -> float:
        self.calculate()
        if self._jumps:
            return super(InterpolatedCurve, self).instantaneous_forward(t, extrapolate)
        return InterpolatedCurve.instantaneous_forward(self, t, extrapolate)

    # ------------------------------------------------------------------
    # inspectors; each read brings the nodes up to date first

    @property
    def instruments(self) -> Tuple[RateHelper, ...]:
        return tuple(self._instruments)

    @property
    def jumps(self) -> Tuple[QuoteHandle, ...]:
        return tuple(self._jumps)

    @property
    def jump_dates(self) -> List[date]:
        return list(self._jump_dates)

    @property
    def jump_times(self) -> List[float]:
        return list(self._jump_times)

    @property
    def interpolation(self) -> Interpolator:
        self.calculate()
        return self.interpolator

    @property
    def times(self) -> List[float]:
        self.calculate()
        return list(self._times)

    @property
    def dates(self) -> List[date]:
        self.calculate()
        return list(self._dates)

    @property
    def data(self) -> List[float]:
        self.calculate()
        return list(self._data)

    def nodes(self) -> List[Tuple[date, float]]:
        self.calculate()
        return InterpolatedCurve.nodes(self)

    def max_date(self) -> date:
        self.calculate()
        return InterpolatedCurve.max_date(self)

    def max_time(self) -> float:
        self.calculate()
        return InterpolatedCurve.max_time(self)

    @property
    def last_bootstrap(self) -> Optional[BootstrapResult]:
        """Diagnostics of the most recent bootstrap pass."""
        self.calculate()
        return self._last_result


__all__ = ["PiecewiseYieldCurve"]
