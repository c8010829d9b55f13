"""
Rate helpers: market quotes used to bootstrap yield curves.

Defines the instruments used to build yield curves:
- DepositRateHelper: money market deposits
- FraRateHelper: forward rate agreements
- FuturesRateHelper: interest rate futures (price quotes)
- SwapRateHelper: vanilla fixed/floating swaps

Each helper knows:
1. Its earliest and latest relevant dates (the latest is its pillar)
2. The quote a given curve implies for it
3. The difference between that implied quote and the market quote

Helpers only read the curve they are given, and only at dates up to
their pillar, so a curve can be solved one pillar at a time.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import TYPE_CHECKING, Optional, Union

from ..conventions import (
    BusinessDayConvention,
    Calendar,
    DayCount,
    Frequency,
    year_fraction,
)
from ..dates import DateUtils, ScheduleInfo, generate_leg_schedule, is_imm_date
from ..errors import ConfigurationError
from ..observable import (
    EvaluationDate,
    Observable,
    QuoteHandle,
    SimpleQuote,
    make_quote_handle,
)

if TYPE_CHECKING:
    from .curve import YieldTermStructure

QuoteLike = Union[float, SimpleQuote, QuoteHandle]
DateLike = Union[date, EvaluationDate]


class RateHelper(Observable, ABC):
    """
    Abstract base for curve construction instruments.

    A helper observes its quote and forwards every change to the curves
    registered on it.

    Attributes:
        quote_handle: Handle on the market quote
        earliest_date: First date the helper reads from the curve
        latest_date: Last date the helper reads from the curve
    """

    def __init__(self, quote: QuoteLike):
        super().__init__()
        self._quote = make_quote_handle(quote)
        self._quote.register_observer(self.update)
        self._earliest_date: Optional[date] = None
        self._latest_date: Optional[date] = None

    def update(self) -> None:
        self.notify_observers()

    @property
    def quote_handle(self) -> QuoteHandle:
        return self._quote

    @property
    def quote(self) -> float:
        """Current market quote; raises DomainError on an empty handle."""
        return self._quote.value

    @property
    def earliest_date(self) -> date:
        return self._earliest_date

    @property
    def latest_date(self) -> date:
        return self._latest_date

    @property
    def pillar_date(self) -> date:
        """Date of the curve node this helper determines."""
        return self._latest_date

    def _set_dates(self, earliest: date, latest: date) -> None:
        if earliest > latest:
            raise ConfigurationError(
                f"{type(self).__name__}: earliest date {earliest} is after "
                f"latest date {latest}"
            )
        self._earliest_date = earliest
        self._latest_date = latest

    @abstractmethod
    def implied_quote(self, curve: "YieldTermStructure") -> float:
        """Quote implied by the given (possibly partially built) curve."""

    def quote_error(self, curve: "YieldTermStructure") -> float:
        """Implied quote minus market quote: the bootstrap residual."""
        return self.implied_quote(curve) - self.quote

    def __repr__(self) -> str:
        quote = self._quote.value if self._quote.is_valid() else None
        return f"{type(self).__name__}(quote={quote}, pillar={self.pillar_date})"


class RelativeDateRateHelper(RateHelper):
    """
    Helper whose dates are set relative to an evaluation date.

    With an EvaluationDate the dates are regenerated whenever it moves;
    with a plain date they are fixed at construction.
    """

    def __init__(self, quote: QuoteLike, evaluation_date: DateLike):
        super().__init__(quote)
        self._evaluation = evaluation_date
        if isinstance(evaluation_date, EvaluationDate):
            evaluation_date.register_observer(self._on_evaluation_date_change)

    @property
    def evaluation_date(self) -> date:
        if isinstance(self._evaluation, EvaluationDate):
            return self._evaluation.value
        return self._evaluation

    def _on_evaluation_date_change(self) -> None:
        self._initialize_dates()
        self.update()

    @abstractmethod
    def _initialize_dates(self) -> None:
        ...


class DepositRateHelper(RelativeDateRateHelper):
    """
    Money market deposit.

    Simple interest instrument: the depositor receives (1 + R*tau) at maturity.

    Implied quote: R = (P(start)/P(end) - 1) / tau
    where tau is the year fraction using the deposit day count.
    """

    def __init__(
        self,
        quote: QuoteLike,
        tenor: str,
        evaluation_date: DateLike,
        fixing_days: int = 2,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        day_count: DayCount = DayCount.ACT_360
    ):
        super().__init__(quote, evaluation_date)
        if fixing_days < 0:
            raise ConfigurationError(f"negative fixing days: {fixing_days}")
        DateUtils.parse_tenor(tenor)
        self.tenor = tenor
        self.fixing_days = fixing_days
        self.calendar = calendar or Calendar()
        self.convention = convention
        self.end_of_month = end_of_month
        self.day_count = day_count
        self._initialize_dates()

    def _initialize_dates(self) -> None:
        start = self.calendar.advance(self.evaluation_date, self.fixing_days)
        end = DateUtils.add_tenor(
            start, self.tenor, self.calendar, self.convention, self.end_of_month
        )
        self._set_dates(start, end)

    @property
    def year_fraction(self) -> float:
        return year_fraction(self.earliest_date, self.latest_date, self.day_count)

    def implied_quote(self, curve: "YieldTermStructure") -> float:
        df_start = curve.discount(self.earliest_date, True)
        df_end = curve.discount(self.latest_date, True)
        return (df_start / df_end - 1.0) / self.year_fraction


class FraRateHelper(RelativeDateRateHelper):
    """
    Forward Rate Agreement.

    The forward period runs from spot + months_to_start to
    spot + months_to_end.

    Implied quote: F = (P(T1)/P(T2) - 1) / tau
    """

    def __init__(
        self,
        quote: QuoteLike,
        months_to_start: int,
        months_to_end: int,
        evaluation_date: DateLike,
        fixing_days: int = 2,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        day_count: DayCount = DayCount.ACT_360
    ):
        super().__init__(quote, evaluation_date)
        if months_to_start < 0:
            raise ConfigurationError(f"negative months to start: {months_to_start}")
        if months_to_end <= months_to_start:
            raise ConfigurationError(
                f"months to end ({months_to_end}) must be greater than "
                f"months to start ({months_to_start})"
            )
        self.months_to_start = months_to_start
        self.months_to_end = months_to_end
        self.fixing_days = fixing_days
        self.calendar = calendar or Calendar()
        self.convention = convention
        self.end_of_month = end_of_month
        self.day_count = day_count
        self._initialize_dates()

    def _initialize_dates(self) -> None:
        spot = self.calendar.advance(self.evaluation_date, self.fixing_days)
        start = DateUtils.add_tenor(
            spot, f"{self.months_to_start}M", self.calendar, self.convention, self.end_of_month
        )
        end = DateUtils.add_tenor(
            spot, f"{self.months_to_end}M", self.calendar, self.convention, self.end_of_month
        )
        self._set_dates(start, end)

    def implied_quote(self, curve: "YieldTermStructure") -> float:
        df_start = curve.discount(self.earliest_date, True)
        df_end = curve.discount(self.latest_date, True)
        tau = year_fraction(self.earliest_date, self.latest_date, self.day_count)
        return (df_start / df_end - 1.0) / tau


class FuturesRateHelper(RateHelper):
    """
    Interest rate future (e.g., SOFR 3M, Euribor 3M).

    Quote is a price: 100 * (1 - futures rate). The futures rate is the
    curve forward over the contract period plus a convexity adjustment.

    Implied quote: 100 * (1 - (F + convexity))
    """

    def __init__(
        self,
        price: QuoteLike,
        imm_date: date,
        length_in_months: int = 3,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        day_count: DayCount = DayCount.ACT_360,
        convexity_adjustment: Optional[QuoteLike] = None
    ):
        super().__init__(price)
        if not is_imm_date(imm_date):
            raise ConfigurationError(f"{imm_date} is not a valid IMM date")
        if length_in_months <= 0:
            raise ConfigurationError(f"non-positive contract length: {length_in_months}")
        self.length_in_months = length_in_months
        self.calendar = calendar or Calendar()
        self.day_count = day_count
        self._convexity = make_quote_handle(convexity_adjustment)
        self._convexity.register_observer(self.update)

        end = DateUtils.add_tenor(
            imm_date, f"{length_in_months}M", self.calendar, convention, end_of_month
        )
        self._set_dates(imm_date, end)

    @property
    def convexity_adjustment(self) -> float:
        return 0.0 if self._convexity.empty else self._convexity.value

    def implied_quote(self, curve: "YieldTermStructure") -> float:
        df_start = curve.discount(self.earliest_date, True)
        df_end = curve.discount(self.latest_date, True)
        tau = year_fraction(self.earliest_date, self.latest_date, self.day_count)
        forward = (df_start / df_end - 1.0) / tau
        return 100.0 * (1.0 - (forward + self.convexity_adjustment))


class SwapRateHelper(RelativeDateRateHelper):
    """
    Vanilla fixed-for-floating swap.

    Single-curve pricing: floating coupons are projected from the curve
    being built and discounted on it.

    Par swap rate:
        R = (PV_float + spread * BPS_float) / BPS_fixed
        PV_float  = sum F_i * tau_i * P(T_i)
        BPS_fixed = sum delta_j * P(T_j)
    """

    def __init__(
        self,
        rate: QuoteLike,
        tenor: str,
        evaluation_date: DateLike,
        calendar: Optional[Calendar] = None,
        fixed_frequency: Frequency = Frequency.ANNUAL,
        fixed_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        fixed_day_count: DayCount = DayCount.THIRTY_360,
        float_frequency: Frequency = Frequency.QUARTERLY,
        float_day_count: DayCount = DayCount.ACT_360,
        float_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        settlement_days: int = 2,
        spread: Optional[QuoteLike] = None,
        forward_start: str = "0D"
    ):
        super().__init__(rate, evaluation_date)
        DateUtils.parse_tenor(tenor)
        DateUtils.parse_tenor(forward_start)
        if settlement_days < 0:
            raise ConfigurationError(f"negative settlement days: {settlement_days}")
        self.tenor = tenor
        self.calendar = calendar or Calendar()
        self.fixed_frequency = fixed_frequency
        self.fixed_convention = fixed_convention
        self.fixed_day_count = fixed_day_count
        self.float_frequency = float_frequency
        self.float_day_count = float_day_count
        self.float_convention = float_convention
        self.settlement_days = settlement_days
        self._forward_start = forward_start
        self._spread = make_quote_handle(spread)
        self._spread.register_observer(self.update)
        self.fixed_schedule: Optional[ScheduleInfo] = None
        self.float_schedule: Optional[ScheduleInfo] = None
        self._initialize_dates()

    def _initialize_dates(self) -> None:
        start = self.calendar.advance(self.evaluation_date, self.settlement_days)
        if DateUtils.parse_tenor(self._forward_start)[0] > 0:
            start = DateUtils.add_tenor(
                start, self._forward_start, self.calendar, self.fixed_convention
            )
        maturity = DateUtils.add_tenor(start, self.tenor)

        self.fixed_schedule = generate_leg_schedule(
            start, maturity, self.fixed_frequency, self.fixed_day_count,
            self.calendar, self.fixed_convention
        )
        self.float_schedule = generate_leg_schedule(
            start, maturity, self.float_frequency, self.float_day_count,
            self.calendar, self.float_convention
        )
        latest = max(self.fixed_schedule.payment_dates[-1], self.float_schedule.payment_dates[-1])
        self._set_dates(start, latest)

    @property
    def spread(self) -> float:
        return 0.0 if self._spread.empty else self._spread.value

    @property
    def forward_start(self) -> str:
        return self._forward_start

    def fixed_leg_bps(self, curve: "YieldTermStructure") -> float:
        """Fixed leg annuity per unit rate: sum delta_j * P(T_j)."""
        return sum(
            tau * curve.discount(pay, True)
            for pay, tau in zip(self.fixed_schedule.payment_dates, self.fixed_schedule.year_fractions)
        )

    def floating_leg_bps(self, curve: "YieldTermStructure") -> float:
        """Floating leg annuity per unit spread: sum tau_i * P(T_i)."""
        return sum(
            tau * curve.discount(pay, True)
            for pay, tau in zip(self.float_schedule.payment_dates, self.float_schedule.year_fractions)
        )

    def floating_leg_npv(self, curve: "YieldTermStructure") -> float:
        """PV of projected floating coupons (per unit notional, no spread)."""
        sched = self.float_schedule
        npv = 0.0
        for start, end, pay, tau in zip(
            sched.accrual_starts, sched.accrual_ends, sched.payment_dates, sched.year_fractions
        ):
            df_start = curve.discount(start, True)
            df_end = curve.discount(end, True)
            forward = (df_start / df_end - 1.0) / tau
            npv += forward * tau * curve.discount(pay, True)
        return npv

    def implied_quote(self, curve: "YieldTermStructure") -> float:
        float_npv = self.floating_leg_npv(curve)
        spread_npv = self.spread * self.floating_leg_bps(curve)
        return (float_npv + spread_npv) / self.fixed_leg_bps(curve)


__all__ = [
    "RateHelper",
    "RelativeDateRateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
]
