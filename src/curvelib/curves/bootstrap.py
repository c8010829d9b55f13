"""
Curve bootstrapping engine.

Implements the sequential bootstrap used by piecewise curves:
1. Sort helpers by pillar date and check the pillars are distinct
2. Anchor the first node at the reference date
3. Solve each node in pillar order with a 1-D root finder until the
   node's helper reprices within the curve accuracy, tightening the
   solver tolerance if needed; solved nodes are never revisited
4. Record per-segment diagnostics and repricing errors

Solvers wrap scipy.optimize:
- BrentSolver: bracketed Brent (default)
- BisectionSolver: bracketed bisection
- SecantSolver: secant started from the trait's guess
- NewtonSolver: Newton with a central-difference derivative
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Callable, Dict, List, Optional
import logging
import math

import pandas as pd
from scipy.optimize import bisect, brentq, newton

from ..errors import BootstrapError, ConfigurationError

if TYPE_CHECKING:
    from .instruments import RateHelper
    from .piecewise import PiecewiseYieldCurve

logger = logging.getLogger(__name__)

Objective = Callable[[float], float]

# solver tolerances tried, from the curve accuracy down to MIN_TOLERANCE
TOLERANCE_STEP = 0.01
MIN_TOLERANCE = 1e-16


@dataclass
class SolverResult:
    """Outcome of a single 1-D solve."""
    root: float
    evaluations: int
    converged: bool
    message: str = ""


class Solver1D(ABC):
    """One-dimensional root finder used for each bootstrap segment."""

    name: str = ""

    @abstractmethod
    def solve(
        self,
        f: Objective,
        accuracy: float,
        guess: float,
        lower: float,
        upper: float,
        max_evaluations: int
    ) -> SolverResult:
        """
        Find x in [lower, upper] with f(x) = 0.

        Args:
            f: Objective function
            accuracy: Absolute tolerance on x
            guess: Starting point
            lower: Lower end of the search bracket
            upper: Upper end of the search bracket
            max_evaluations: Iteration limit
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _BracketedSolver(Solver1D):
    """Solvers that need a sign change between the bracket ends."""

    def solve(self, f, accuracy, guess, lower, upper, max_evaluations):
        f_lower = f(lower)
        f_upper = f(upper)
        if f_lower == 0.0:
            return SolverResult(lower, 2, True)
        if f_upper == 0.0:
            return SolverResult(upper, 2, True)
        if f_lower * f_upper > 0.0:
            return SolverResult(
                guess, 2, False,
                f"root not bracketed: f({lower:.6g})={f_lower:.6g}, f({upper:.6g})={f_upper:.6g}"
            )
        root, info = self._find(f, lower, upper, accuracy, max_evaluations)
        message = "" if info.converged else info.flag
        return SolverResult(root, info.function_calls + 2, info.converged, message)

    @abstractmethod
    def _find(self, f, lower, upper, accuracy, max_evaluations):
        ...


class BrentSolver(_BracketedSolver):
    name = "brent"

    def _find(self, f, lower, upper, accuracy, max_evaluations):
        return brentq(
            f, lower, upper, xtol=accuracy, maxiter=max_evaluations,
            full_output=True, disp=False
        )


class BisectionSolver(_BracketedSolver):
    name = "bisection"

    def _find(self, f, lower, upper, accuracy, max_evaluations):
        return bisect(
            f, lower, upper, xtol=accuracy, maxiter=max_evaluations,
            full_output=True, disp=False
        )


class SecantSolver(Solver1D):
    """Secant method; the result must stay inside the bracket."""

    name = "secant"

    def _fprime(self, f: Objective) -> Optional[Objective]:
        return None

    def solve(self, f, accuracy, guess, lower, upper, max_evaluations):
        root, info = newton(
            f, guess, fprime=self._fprime(f), tol=accuracy,
            maxiter=max_evaluations, full_output=True, disp=False
        )
        root = float(root)
        if not info.converged:
            return SolverResult(root, info.function_calls, False, info.flag)
        if not (lower <= root <= upper) or not math.isfinite(root):
            return SolverResult(
                root, info.function_calls, False,
                f"root {root:.6g} outside [{lower:.6g}, {upper:.6g}]"
            )
        return SolverResult(root, info.function_calls, True)


class NewtonSolver(SecantSolver):
    """Newton's method with a central-difference derivative."""

    name = "newton"

    def __init__(self, step: float = 1e-7):
        self.step = step

    def _fprime(self, f: Objective) -> Objective:
        h = self.step

        def derivative(x: float) -> float:
            return (f(x + h) - f(x - h)) / (2.0 * h)

        return derivative


def create_solver(name: str) -> Solver1D:
    """
    Factory function to create a solver by name.

    Args:
        name: One of "brent", "bisection", "secant", "newton"
    """
    key = name.lower()
    solvers = {
        "brent": BrentSolver,
        "bisection": BisectionSolver,
        "bisect": BisectionSolver,
        "secant": SecantSolver,
        "newton": NewtonSolver,
    }
    if key not in solvers:
        raise ValueError(f"Unknown solver: {name}")
    return solvers[key]()


@dataclass
class SegmentResult:
    """Diagnostics of one solved segment."""
    segment: int
    pillar_date: date
    value: float
    evaluations: int
    residual: float


@dataclass
class BootstrapResult:
    """
    Diagnostics of one bootstrap pass.

    Attributes:
        segments: One entry per solved node, in pillar order
        repricing_errors: Implied minus market quote per pillar, measured
            on the final curve
    """
    segments: List[SegmentResult] = field(default_factory=list)
    repricing_errors: Dict[date, float] = field(default_factory=dict)

    @property
    def total_evaluations(self) -> int:
        return sum(s.evaluations for s in self.segments)

    @property
    def max_error(self) -> float:
        if not self.repricing_errors:
            return 0.0
        return max(abs(e) for e in self.repricing_errors.values())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "segment": [s.segment for s in self.segments],
            "pillar_date": [s.pillar_date for s in self.segments],
            "value": [s.value for s in self.segments],
            "evaluations": [s.evaluations for s in self.segments],
            "residual": [s.residual for s in self.segments],
            "repricing_error": [self.repricing_errors.get(s.pillar_date) for s in self.segments],
        })


class IterativeBootstrap:
    """
    Sequential bootstrap of a piecewise curve.

    Each pass starts from scratch: nothing from a previous pass is
    reused, so repeating a pass on unchanged inputs gives identical nodes.

    Attributes:
        solver: Root finder used for every segment
        max_evaluations: Iteration limit per segment
    """

    def __init__(self, solver: Optional[Solver1D] = None, max_evaluations: int = 100):
        if max_evaluations <= 0:
            raise ConfigurationError(f"max evaluations must be positive, got {max_evaluations}")
        self.solver = solver or BrentSolver()
        self.max_evaluations = max_evaluations
        self._curve: Optional["PiecewiseYieldCurve"] = None

    def setup(self, curve: "PiecewiseYieldCurve") -> None:
        """Attach to a curve and check it has enough helpers."""
        self._curve = curve
        n = len(curve.instruments)
        required = curve.interpolator.required_points
        if n + 1 < required:
            raise ConfigurationError(
                f"not enough instruments: {n} provided, {required - 1} required"
            )

    @staticmethod
    def sorted_helpers(helpers: List["RateHelper"], reference_date: date) -> List["RateHelper"]:
        """
        Helpers in pillar order.

        Raises:
            ConfigurationError: Two helpers share a pillar date, or a pillar
                is not after the reference date
        """
        ordered = sorted(helpers, key=lambda h: h.pillar_date)
        for prev, curr in zip(ordered, ordered[1:]):
            if prev.pillar_date == curr.pillar_date:
                raise ConfigurationError(
                    f"more than one instrument with pillar date {curr.pillar_date}"
                )
        for helper in ordered:
            if helper.pillar_date <= reference_date:
                raise ConfigurationError(
                    f"{type(helper).__name__} has pillar date {helper.pillar_date} "
                    f"not after the reference date {reference_date}"
                )
        return ordered

    def calculate(self) -> BootstrapResult:
        """
        Run one bootstrap pass on the attached curve.

        Raises:
            ConfigurationError: Invalid helper set
            BootstrapError: A segment could not be solved
        """
        curve = self._curve
        if curve is None:
            raise ConfigurationError("bootstrap is not attached to a curve")

        trait = curve.trait
        accuracy = curve.accuracy
        reference_date = curve.reference_date
        helpers = self.sorted_helpers(list(curve.instruments), reference_date)

        dates = [reference_date] + [h.pillar_date for h in helpers]
        times = [curve.time_from_reference(d) for d in dates]
        for prev, curr in zip(times, times[1:]):
            if curr <= prev:
                raise ConfigurationError(f"pillar times are not increasing: {prev} >= {curr}")
        data = [trait.initial_value()] * len(dates)

        curve.set_dates(dates)
        curve.set_times(times)
        curve.set_data(data)

        result = BootstrapResult()
        for i, helper in enumerate(helpers, start=1):

            def error(x: float, i: int = i, helper: "RateHelper" = helper) -> float:
                trait.update_guess(data, x, i)
                curve.set_data(data)
                curve.build_interpolation(i + 1)
                return helper.quote_error(curve)

            guess = trait.guess(i, times, data)
            lower = trait.min_value_after(i, times, data)
            upper = trait.max_value_after(i, times, data)
            if not lower <= guess <= upper:
                guess = 0.5 * (lower + upper)

            solved = self.solver.solve(error, accuracy, guess, lower, upper, self.max_evaluations)
            residual = error(solved.root)
            if not solved.converged:
                raise BootstrapError(
                    f"{type(helper).__name__} could not be bootstrapped with the "
                    f"{self.solver.name} solver: {solved.message}",
                    segment=i,
                    pillar_date=helper.pillar_date,
                    residual=residual,
                )
            root, evaluations = solved.root, solved.evaluations

            # the tolerance is on the node value; tighten it until the quote reprices
            tolerance = accuracy
            while abs(residual) > accuracy and tolerance > MIN_TOLERANCE:
                tolerance = max(tolerance * TOLERANCE_STEP, MIN_TOLERANCE)
                logger.debug(
                    "Segment %d residual %.3e above accuracy, retrying with tolerance %.1e",
                    i, residual, tolerance
                )
                retry = self.solver.solve(error, tolerance, root, lower, upper, self.max_evaluations)
                evaluations += retry.evaluations
                if not retry.converged:
                    break
                retry_residual = error(retry.root)
                if abs(retry_residual) < abs(residual):
                    root, residual = retry.root, retry_residual
            residual = error(root)
            if abs(residual) > accuracy:
                raise BootstrapError(
                    f"{type(helper).__name__} reprices to {residual:.3e}, "
                    f"outside the curve accuracy {accuracy:.1e}",
                    segment=i,
                    pillar_date=helper.pillar_date,
                    residual=residual,
                )

            logger.debug(
                "Segment %d (%s) solved: value=%.12g, evaluations=%d, residual=%.3e",
                i, helper.pillar_date, data[i], evaluations, residual
            )
            result.segments.append(
                SegmentResult(i, helper.pillar_date, data[i], evaluations, residual)
            )

        curve.set_data(data)
        curve.build_interpolation()

        for helper in helpers:
            result.repricing_errors[helper.pillar_date] = helper.quote_error(curve)

        logger.debug(
            "Bootstrapped %d segments in %d evaluations, max repricing error %.3e",
            len(helpers), result.total_evaluations, result.max_error
        )
        if curve.interpolator.is_global and result.max_error > accuracy:
            logger.info(
                "%s is not local; earlier instruments reprice within %.3e only",
                type(curve.interpolator).__name__, result.max_error
            )
        return result


__all__ = [
    "SolverResult",
    "Solver1D",
    "BrentSolver",
    "BisectionSolver",
    "SecantSolver",
    "NewtonSolver",
    "create_solver",
    "SegmentResult",
    "BootstrapResult",
    "IterativeBootstrap",
]
