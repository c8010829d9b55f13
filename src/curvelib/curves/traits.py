"""
Curve traits: which quantity a bootstrapped curve stores.

A trait tells the curve and the bootstrapper
- the anchor value at the reference date,
- how to guess and bracket the unknown value of each new segment,
- how to turn the interpolated quantity into a discount factor,
- which interpolation it uses by default.

| Trait       | stored value            | discount(t)          |
|-------------|-------------------------|----------------------|
| Discount    | discount factor         | P(t)                 |
| ZeroYield   | continuous zero rate    | exp(-z(t) * t)       |
| ForwardRate | instantaneous forward   | exp(-integral f)     |
"""

from abc import ABC, abstractmethod
from typing import List, Sequence
import math

from .interpolation import (
    Interpolator,
    LinearInterpolator,
    LogLinearInterpolator,
    BackwardFlatInterpolator,
)

# Typical rate level used for first guesses
AVG_RATE = 0.05
# Largest absolute continuously-compounded rate the solver will search
MAX_RATE = 1.0


class Trait(ABC):
    """Strategy describing the stored curve quantity."""

    name: str = ""

    @abstractmethod
    def initial_value(self) -> float:
        """Value stored at the reference date before solving."""

    @abstractmethod
    def guess(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        """Starting value for point i given solved points 0..i-1."""

    @abstractmethod
    def min_value_after(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        """Lower end of the search bracket for point i."""

    @abstractmethod
    def max_value_after(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        """Upper end of the search bracket for point i."""

    def update_guess(self, data: List[float], value: float, i: int) -> None:
        """Store a trial value for point i."""
        data[i] = value

    @abstractmethod
    def discount(self, interpolation: Interpolator, t: float) -> float:
        """Discount factor implied by the interpolated quantity at t."""

    @abstractmethod
    def instantaneous_forward(self, interpolation: Interpolator, t: float) -> float:
        """Continuously-compounded instantaneous forward at t."""

    @abstractmethod
    def default_interpolator(self) -> Interpolator:
        ...

    def supports(self, interpolator: Interpolator) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Discount(Trait):
    """Curve stores discount factors; anchor is 1.0."""

    name = "discount"

    def initial_value(self) -> float:
        return 1.0

    def guess(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        if i == 1:
            return 1.0 / (1.0 + AVG_RATE * times[1])
        return data[i - 1]

    def min_value_after(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        dt = times[i] - times[i - 1]
        return data[i - 1] * math.exp(-MAX_RATE * dt)

    def max_value_after(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        dt = times[i] - times[i - 1]
        return data[i - 1] * math.exp(MAX_RATE * dt)

    def discount(self, interpolation: Interpolator, t: float) -> float:
        return interpolation(t)

    def instantaneous_forward(self, interpolation: Interpolator, t: float) -> float:
        return -interpolation.derivative(t) / interpolation(t)

    def default_interpolator(self) -> Interpolator:
        return LogLinearInterpolator()


class _RateTrait(Trait):
    """Shared guessing/bracketing for traits that store rates."""

    def initial_value(self) -> float:
        # placeholder; overwritten by the first solved rate
        return AVG_RATE

    def guess(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        if i == 1:
            return AVG_RATE
        return data[i - 1]

    def min_value_after(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        return -MAX_RATE

    def max_value_after(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        return MAX_RATE

    def update_guess(self, data: List[float], value: float, i: int) -> None:
        data[i] = value
        if i == 1:
            # the rate at t=0 is not observable; extend the first segment
            data[0] = value

    def supports(self, interpolator: Interpolator) -> bool:
        # rates may cross zero
        return not isinstance(interpolator, LogLinearInterpolator)


class ZeroYield(_RateTrait):
    """Curve stores continuously-compounded zero rates."""

    name = "zero_yield"

    def discount(self, interpolation: Interpolator, t: float) -> float:
        return math.exp(-interpolation(t) * t)

    def instantaneous_forward(self, interpolation: Interpolator, t: float) -> float:
        return interpolation(t) + t * interpolation.derivative(t)

    def default_interpolator(self) -> Interpolator:
        return LinearInterpolator()


class ForwardRate(_RateTrait):
    """Curve stores instantaneous forward rates."""

    name = "forward_rate"

    def discount(self, interpolation: Interpolator, t: float) -> float:
        # primitive integrates from the first node, which sits at t=0
        return math.exp(-interpolation.primitive(t))

    def instantaneous_forward(self, interpolation: Interpolator, t: float) -> float:
        return interpolation(t)

    def default_interpolator(self) -> Interpolator:
        return BackwardFlatInterpolator()


def create_trait(name: str) -> Trait:
    """
    Factory function to create a trait by name.

    Args:
        name: One of "discount", "zero_yield", "forward_rate"
    """
    key = name.lower().replace("-", "_").replace(" ", "_")
    if key in ("discount", "df"):
        return Discount()
    if key in ("zero_yield", "zero", "zero_rate"):
        return ZeroYield()
    if key in ("forward_rate", "forward", "fwd"):
        return ForwardRate()
    raise ValueError(f"Unknown curve trait: {name}")


__all__ = [
    "AVG_RATE",
    "MAX_RATE",
    "Trait",
    "Discount",
    "ZeroYield",
    "ForwardRate",
    "create_trait",
]
