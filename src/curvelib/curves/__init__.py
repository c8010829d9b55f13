"""
Curves package - yield curve construction and bootstrapping.

Provides:
- YieldTermStructure / InterpolatedCurve: discount, zero and forward queries
- Traits: Discount, ZeroYield, ForwardRate
- Rate helpers: deposits, FRAs, futures, swaps
- IterativeBootstrap and its 1-D solvers
- PiecewiseYieldCurve: lazy curve that reprices its helpers
"""

from .interpolation import (
    Interpolator,
    LinearInterpolator,
    LogLinearInterpolator,
    BackwardFlatInterpolator,
    CubicSplineInterpolator,
    create_interpolator,
)
from .traits import Trait, Discount, ZeroYield, ForwardRate, create_trait
from .curve import ExtrapolationPolicy, YieldTermStructure, InterpolatedCurve
from .instruments import (
    RateHelper,
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    SwapRateHelper,
)
from .bootstrap import (
    SolverResult,
    Solver1D,
    BrentSolver,
    BisectionSolver,
    SecantSolver,
    NewtonSolver,
    create_solver,
    BootstrapResult,
    IterativeBootstrap,
)
from .piecewise import PiecewiseYieldCurve
from .quotes import load_quotes_csv, build_helpers, bootstrap_from_quotes

__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
    "Trait",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "create_trait",
    "ExtrapolationPolicy",
    "YieldTermStructure",
    "InterpolatedCurve",
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "FuturesRateHelper",
    "SwapRateHelper",
    "SolverResult",
    "Solver1D",
    "BrentSolver",
    "BisectionSolver",
    "SecantSolver",
    "NewtonSolver",
    "create_solver",
    "BootstrapResult",
    "IterativeBootstrap",
    "PiecewiseYieldCurve",
    "load_quotes_csv",
    "build_helpers",
    "bootstrap_from_quotes",
]
