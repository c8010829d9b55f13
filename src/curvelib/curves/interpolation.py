"""
Interpolation methods for yield curves.

Provides:
- LinearInterpolator: piecewise linear values
- LogLinearInterpolator: linear in log(value), i.e. piecewise constant
  forwards when used on discount factors
- BackwardFlatInterpolator: each value holds on the interval ending at
  its node
- CubicSplineInterpolator: natural cubic spline

Every interpolator exposes the value, its first derivative and its
primitive (integral from the first node), and extrapolates by extending
the boundary segment. Whether extrapolation is allowed is decided by the
curve, not here.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
import numpy as np


class Interpolator(ABC):
    """Abstract base class for curve interpolation."""

    #: Minimum number of points needed by fit()
    required_points: int = 2
    #: True when moving one node changes the curve outside its neighbours
    is_global: bool = False

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None

    def fit(self, times: Sequence[float], values: Sequence[float]) -> "Interpolator":
        """
        Fit the interpolator to data points.

        Args:
            times: Strictly increasing x-coordinates (year fractions)
            values: Values at those times

        Returns:
            self, so that the fitted interpolator can be called directly
        """
        times = np.asarray(times, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if times.shape != values.shape:
            raise ValueError("Times and values must have same length")
        if len(times) < self.required_points:
            raise ValueError(
                f"Need at least {self.required_points} points for "
                f"{type(self).__name__}, got {len(times)}"
            )
        if np.any(np.diff(times) <= 0):
            raise ValueError("Times must be strictly increasing")

        self.times = times.copy()
        self.values = values.copy()
        self._calibrate()
        return self

    def _calibrate(self) -> None:
        """Precompute coefficients after times/values are set."""

    def _check_fitted(self) -> None:
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")

    def _segment(self, t: float) -> int:
        """Index i of the segment [t_i, t_i+1] used for t, clamped to the ends."""
        idx = int(np.searchsorted(self.times, t, side='right')) - 1
        return max(0, min(idx, len(self.times) - 2))

    @property
    def x_min(self) -> float:
        self._check_fitted()
        return float(self.times[0])

    @property
    def x_max(self) -> float:
        self._check_fitted()
        return float(self.times[-1])

    @abstractmethod
    def interpolate(self, t: float) -> float:
        """
        Interpolate at a single point.

        Args:
            t: Year fraction

        Returns:
            Interpolated value
        """

    def __call__(self, t: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(t)

    @abstractmethod
    def derivative(self, t: float) -> float:
        """First derivative at t."""

    @abstractmethod
    def primitive(self, t: float) -> float:
        """Integral of the interpolant from the first node to t."""


class LinearInterpolator(Interpolator):
    """
    Linear interpolation.

    Extrapolates by extending the first and last segments.
    """

    def _calibrate(self) -> None:
        self._slopes = np.diff(self.values) / np.diff(self.times)
        h = np.diff(self.times)
        pieces = self.values[:-1] * h + 0.5 * self._slopes * h * h
        self._primitive_at_nodes = np.concatenate(([0.0], np.cumsum(pieces)))

    def interpolate(self, t: float) -> float:
        self._check_fitted()
        i = self._segment(t)
        return float(self.values[i] + self._slopes[i] * (t - self.times[i]))

    def derivative(self, t: float) -> float:
        self._check_fitted()
        return float(self._slopes[self._segment(t)])

    def primitive(self, t: float) -> float:
        self._check_fitted()
        i = self._segment(t)
        dx = t - self.times[i]
        return float(
            self._primitive_at_nodes[i] + self.values[i] * dx + 0.5 * self._slopes[i] * dx * dx
        )


class LogLinearInterpolator(Interpolator):
    """
    Log-linear interpolation.

    Interpolates linearly in log space, which on discount factors
    corresponds to piecewise constant forward rates. Values must be
    strictly positive.
    """

    def _calibrate(self) -> None:
        if np.any(self.values <= 0):
            raise ValueError("Log-linear interpolation requires positive values")
        self._log_values = np.log(self.values)
        self._slopes = np.diff(self._log_values) / np.diff(self.times)
        pieces = np.array([
            _exp_integral(self._log_values[i], self._slopes[i], self.times[i + 1] - self.times[i])
            for i in range(len(self.times) - 1)
        ])
        self._primitive_at_nodes = np.concatenate(([0.0], np.cumsum(pieces)))

    def interpolate(self, t: float) -> float:
        self._check_fitted()
        i = self._segment(t)
        return float(np.exp(self._log_values[i] + self._slopes[i] * (t - self.times[i])))

    def derivative(self, t: float) -> float:
        self._check_fitted()
        i = self._segment(t)
        return float(self._slopes[i] * self.interpolate(t))

    def primitive(self, t: float) -> float:
        self._check_fitted()
        i = self._segment(t)
        return float(
            self._primitive_at_nodes[i]
            + _exp_integral(self._log_values[i], self._slopes[i], t - self.times[i])
        )


class BackwardFlatInterpolator(Interpolator):
    """
    Backward-flat interpolation.

    The value at node i holds on (t_i-1, t_i]; beyond the last node the
    last value holds, before the first node the first value holds.
    """

    def _calibrate(self) -> None:
        pieces = self.values[1:] * np.diff(self.times)
        self._primitive_at_nodes = np.concatenate(([0.0], np.cumsum(pieces)))

    def interpolate(self, t: float) -> float:
        self._check_fitted()
        if t <= self.times[0]:
            return float(self.values[0])
        if t > self.times[-1]:
            return float(self.values[-1])
        i = int(np.searchsorted(self.times, t, side='left'))
        return float(self.values[i])

    def derivative(self, t: float) -> float:
        self._check_fitted()
        return 0.0

    def primitive(self, t: float) -> float:
        self._check_fitted()
        if t <= self.times[0]:
            return float(self.values[0] * (t - self.times[0]))
        if t > self.times[-1]:
            return float(self._primitive_at_nodes[-1] + self.values[-1] * (t - self.times[-1]))
        i = int(np.searchsorted(self.times, t, side='left'))
        return float(self._primitive_at_nodes[i - 1] + self.values[i] * (t - self.times[i - 1]))


class CubicSplineInterpolator(Interpolator):
    """
    Cubic spline interpolation.

    Uses natural cubic splines (second derivative = 0 at boundaries).
    Provides smooth first and second derivatives. Moving any node changes
    the whole spline.
    """

    is_global = True

    def _calibrate(self) -> None:
        """
        Solve the tridiagonal system for second derivatives,
        then compute polynomial coefficients for each interval.
        """
        n = len(self.times)
        h = np.diff(self.times)

        if n == 2:
            # Degenerate to linear
            slope = (self.values[1] - self.values[0]) / h[0]
            self.coefficients = np.array([[self.values[0], slope, 0.0, 0.0]])
        else:
            # Natural spline: M[0] = M[n-1] = 0
            A = np.zeros((n, n))
            b = np.zeros(n)
            A[0, 0] = 1.0
            A[n-1, n-1] = 1.0

            for i in range(1, n-1):
                A[i, i-1] = h[i-1]
                A[i, i] = 2 * (h[i-1] + h[i])
                A[i, i+1] = h[i]
                b[i] = 6 * ((self.values[i+1] - self.values[i]) / h[i] -
                           (self.values[i] - self.values[i-1]) / h[i-1])

            M = np.linalg.solve(A, b)

            # S_i(x) = a_i + b_i*(x-x_i) + c_i*(x-x_i)^2 + d_i*(x-x_i)^3
            self.coefficients = np.zeros((n-1, 4))
            for i in range(n-1):
                self.coefficients[i, 0] = self.values[i]
                self.coefficients[i, 1] = (self.values[i+1] - self.values[i]) / h[i] - h[i] * (M[i+1] + 2*M[i]) / 6
                self.coefficients[i, 2] = M[i] / 2
                self.coefficients[i, 3] = (M[i+1] - M[i]) / (6 * h[i])

        pieces = np.array([self._segment_primitive(i, h[i]) for i in range(n - 1)])
        self._primitive_at_nodes = np.concatenate(([0.0], np.cumsum(pieces)))

    def _segment_primitive(self, i: int, dx: float) -> float:
        a, b, c, d = self.coefficients[i]
        return a*dx + b*dx**2/2 + c*dx**3/3 + d*dx**4/4

    def interpolate(self, t: float) -> float:
        """Evaluate cubic spline at point t."""
        self._check_fitted()
        i = self._segment(t)
        dx = t - self.times[i]
        a, b, c, d = self.coefficients[i]
        return float(a + b*dx + c*dx**2 + d*dx**3)

    def derivative(self, t: float) -> float:
        """First derivative of cubic spline at point t."""
        self._check_fitted()
        i = self._segment(t)
        dx = t - self.times[i]
        _, b, c, d = self.coefficients[i]
        return float(b + 2*c*dx + 3*d*dx**2)

    def second_derivative(self, t: float) -> float:
        """Second derivative of cubic spline at point t."""
        self._check_fitted()
        i = self._segment(t)
        dx = t - self.times[i]
        _, _, c, d = self.coefficients[i]
        return float(2*c + 6*d*dx)

    def primitive(self, t: float) -> float:
        self._check_fitted()
        i = self._segment(t)
        return float(self._primitive_at_nodes[i] + self._segment_primitive(i, t - self.times[i]))


def _exp_integral(log_start: float, slope: float, dx: float) -> float:
    """Integral of exp(log_start + slope * x) for x in [0, dx]."""
    if abs(slope * dx) < 1e-12:
        return float(np.exp(log_start) * dx)
    return float((np.exp(log_start + slope * dx) - np.exp(log_start)) / slope)


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "log_linear", "backward_flat", "cubic_spline"

    Returns:
        Interpolator instance
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator()
    elif method in ("cubic_spline", "cubic", "spline"):
        return CubicSplineInterpolator()
    elif method in ("log_linear", "loglinear"):
        return LogLinearInterpolator()
    elif method in ("backward_flat", "backwardflat"):
        return BackwardFlatInterpolator()
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "BackwardFlatInterpolator",
    "CubicSplineInterpolator",
    "create_interpolator",
]
