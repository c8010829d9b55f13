"""
Interest rate value type.

An InterestRate bundles a rate with the conventions needed to turn it
into a compound factor: day count, compounding rule and frequency.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
import math

from .conventions import Compounding, DayCount, Frequency, year_fraction


@dataclass(frozen=True)
class InterestRate:
    """
    Interest rate with its conventions.

    Attributes:
        rate: Rate in decimal
        day_count: Day count used to measure periods
        compounding: Compounding rule
        frequency: Compounding frequency (ignored for simple/continuous)
    """
    rate: float
    day_count: DayCount = DayCount.ACT_365
    compounding: Compounding = Compounding.CONTINUOUS
    frequency: Frequency = Frequency.ANNUAL

    def __post_init__(self):
        needs_frequency = self.compounding in (
            Compounding.COMPOUNDED, Compounding.SIMPLE_THEN_COMPOUNDED
        )
        if needs_frequency and self.frequency.value <= 0:
            raise ValueError(f"{self.compounding.value} compounding requires a frequency")

    def __float__(self) -> float:
        return self.rate

    def compound_factor(self, t: float) -> float:
        """
        Growth of one unit over time t.

        Args:
            t: Time in years (must be non-negative)
        """
        if t < 0.0:
            raise ValueError(f"negative time not allowed: {t}")
        r = self.rate
        if self.compounding == Compounding.SIMPLE:
            return 1.0 + r * t
        if self.compounding == Compounding.CONTINUOUS:
            return math.exp(r * t)
        f = self.frequency.value
        if self.compounding == Compounding.COMPOUNDED:
            return (1.0 + r / f) ** (f * t)
        # simple up to one period, compounded afterwards
        if t <= 1.0 / f:
            return 1.0 + r * t
        return (1.0 + r / f) ** (f * t)

    def compound_factor_between(self, d1: date, d2: date) -> float:
        return self.compound_factor(year_fraction(d1, d2, self.day_count))

    def discount_factor(self, t: float) -> float:
        return 1.0 / self.compound_factor(t)

    @classmethod
    def implied_rate(
        cls,
        compound: float,
        day_count: DayCount,
        compounding: Compounding,
        frequency: Frequency,
        t: float
    ) -> "InterestRate":
        """
        Rate that produces the given compound factor over time t.

        Args:
            compound: Compound factor (must be positive)
            day_count: Day count of the result
            compounding: Compounding rule of the result
            frequency: Frequency of the result
            t: Time in years (must be positive unless compound == 1)
        """
        if compound <= 0.0:
            raise ValueError(f"positive compound factor required, got {compound}")

        if compound == 1.0:
            if t < 0.0:
                raise ValueError(f"non-negative time required, got {t}")
            return cls(0.0, day_count, compounding, frequency)

        if t <= 0.0:
            raise ValueError(f"positive time required, got {t}")

        if compounding == Compounding.SIMPLE:
            r = (compound - 1.0) / t
        elif compounding == Compounding.CONTINUOUS:
            r = math.log(compound) / t
        elif compounding == Compounding.COMPOUNDED:
            f = frequency.value
            r = (compound ** (1.0 / (f * t)) - 1.0) * f
        elif compounding == Compounding.SIMPLE_THEN_COMPOUNDED:
            f = frequency.value
            if t <= 1.0 / f:
                r = (compound - 1.0) / t
            else:
                r = (compound ** (1.0 / (f * t)) - 1.0) * f
        else:
            raise ValueError(f"unknown compounding: {compounding}")
        return cls(r, day_count, compounding, frequency)

    def equivalent_rate(
        self,
        compounding: Compounding,
        frequency: Frequency,
        t: float,
        day_count: Optional[DayCount] = None
    ) -> "InterestRate":
        """Rate with other conventions giving the same compound factor over t."""
        return InterestRate.implied_rate(
            self.compound_factor(t),
            day_count or self.day_count,
            compounding,
            frequency,
            t
        )

    def __str__(self) -> str:
        text = f"{self.rate * 100:.6f} % {self.day_count.value} {self.compounding.value.lower()}"
        if self.compounding in (Compounding.COMPOUNDED, Compounding.SIMPLE_THEN_COMPOUNDED):
            text += f" {self.frequency.name.lower()}"
        return text


__all__ = ["InterestRate"]
