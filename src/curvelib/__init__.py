"""
CurveLib: Piecewise Yield Curve Bootstrapping Library

A modular library for:
- Day counts, business-day calendars, tenors and schedules
- Rate helpers for deposits, FRAs, futures and swaps
- Piecewise yield curves that reprice their helpers exactly, with
  pluggable traits, interpolation and root finders
- Lazy, observer-driven recalculation when quotes change
- Historical volatility from OHLC bars

Scope: single-curve bootstrapping; linear instruments only.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import (
    DayCount,
    BusinessDayConvention,
    Compounding,
    Frequency,
    Calendar,
    Conventions,
    year_fraction,
)
from .dates import DateUtils, ScheduleInfo
from .errors import CurveError, ConfigurationError, BootstrapError, DomainError
from .interest_rate import InterestRate
from .observable import Observable, SimpleQuote, QuoteHandle, EvaluationDate, LazyObject

# Curves
from .curves import (
    InterpolatedCurve,
    PiecewiseYieldCurve,
    IterativeBootstrap,
    Discount,
    ZeroYield,
    ForwardRate,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    SwapRateHelper,
    bootstrap_from_quotes,
)

# Volatility
from .vol import GarmanKlassSimpleSigma, ParkinsonSigma, GarmanKlassOpenClose

__all__ = [
    "__version__",
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "Calendar",
    "Conventions",
    "year_fraction",
    "DateUtils",
    "ScheduleInfo",
    "CurveError",
    "ConfigurationError",
    "BootstrapError",
    "DomainError",
    "InterestRate",
    "Observable",
    "SimpleQuote",
    "QuoteHandle",
    "EvaluationDate",
    "LazyObject",
    "InterpolatedCurve",
    "PiecewiseYieldCurve",
    "IterativeBootstrap",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
    "bootstrap_from_quotes",
    "GarmanKlassSimpleSigma",
    "ParkinsonSigma",
    "GarmanKlassOpenClose",
]
