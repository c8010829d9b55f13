"""
Historical volatility from OHLC bars.

Provides:
- GarmanKlassSimpleSigma: sqrt(0.5*(h-l)^2 - (2 ln 2 - 1)*c^2)
- ParkinsonSigma: sqrt((h-l)^2 / (4 ln 2))
- GarmanKlassOpenClose: blends the open-to-close move with another
  estimator for markets that are closed part of the day

h, l, c are log prices relative to the open. Each bar gives one
annualized estimate, sigma = point / sqrt(year_fraction), where
year_fraction is the length of one bar in years. The first bar of a
series has no estimate.
"""

from abc import ABC, abstractmethod
import math

import numpy as np
import pandas as pd

from ..errors import ConfigurationError, DomainError

OHLC_COLUMNS = ("open", "high", "low", "close")


class OHLCVolatilityEstimator(ABC):
    """
    Local volatility estimator over a series of OHLC bars.

    Attributes:
        year_fraction: Length of one bar in years (e.g. 1/252 for daily bars)
    """

    def __init__(self, year_fraction: float):
        if year_fraction <= 0.0:
            raise ConfigurationError(f"year fraction must be positive, got {year_fraction}")
        self.year_fraction = year_fraction

    @abstractmethod
    def calculate_point(self, bars: pd.DataFrame) -> np.ndarray:
        """Unannualized volatility of each bar."""

    def calculate(self, prices: pd.DataFrame) -> pd.Series:
        """
        Annualized volatility per bar.

        Args:
            prices: DataFrame with columns open, high, low, close

        Returns:
            Series indexed like prices, without the first bar
        """
        bars = _validate(prices)
        points = self.calculate_point(bars.iloc[1:])
        return pd.Series(
            points / math.sqrt(self.year_fraction),
            index=bars.index[1:],
            name="volatility",
        )


def _validate(prices: pd.DataFrame) -> pd.DataFrame:
    columns = {c.lower(): c for c in prices.columns}
    missing = [c for c in OHLC_COLUMNS if c not in columns]
    if missing:
        raise ConfigurationError(f"Missing OHLC columns: {missing}")
    bars = prices[[columns[c] for c in OHLC_COLUMNS]].astype(float)
    bars.columns = list(OHLC_COLUMNS)
    if (bars <= 0.0).any().any():
        raise DomainError("OHLC prices must be positive")
    if (bars["high"] < bars["low"]).any():
        raise DomainError("high below low in OHLC data")
    for column in ("open", "close"):
        outside = (bars[column] > bars["high"]) | (bars[column] < bars["low"])
        if outside.any():
            raise DomainError(f"{column} outside the high-low range in OHLC data")
    return bars


def _log_ranges(bars: pd.DataFrame):
    log_open = np.log(bars["open"].to_numpy())
    h = np.log(bars["high"].to_numpy()) - log_open
    l = np.log(bars["low"].to_numpy()) - log_open
    c = np.log(bars["close"].to_numpy()) - log_open
    return h, l, c


class GarmanKlassSimpleSigma(OHLCVolatilityEstimator):
    """
    Garman-Klass estimator from the high, low and close of each bar.

    Not clamped: with open and close inside [low, high] the variance
    is at least 0.11 * (h - l)^2, and _validate rejects other bars.
    """

    def calculate_point(self, bars: pd.DataFrame) -> np.ndarray:
        h, l, c = _log_ranges(bars)
        variance = 0.5 * (h - l) ** 2 - (2.0 * math.log(2.0) - 1.0) * c ** 2
        return np.sqrt(variance)


class ParkinsonSigma(OHLCVolatilityEstimator):

    def calculate_point(self, bars: pd.DataFrame) -> np.ndarray:
        h, l, _ = _log_ranges(bars)
        return np.sqrt((h - l) ** 2 / (4.0 * math.log(2.0)))


class GarmanKlassOpenClose(OHLCVolatilityEstimator):
    """
    Open/close weighted estimator.

    sigma^2 = a * c^2 / f + (1 - a) * s^2 / (1 - f)

    where c is the log open-to-close move, s the inner estimator's
    point, f the fraction of the day the market is closed and a the
    weight given to the open-to-close move.
    """

    def __init__(
        self,
        year_fraction: float,
        market_closed_fraction: float,
        weight: float,
        inner: OHLCVolatilityEstimator = None
    ):
        super().__init__(year_fraction)
        if not 0.0 < market_closed_fraction < 1.0:
            raise ConfigurationError(
                f"market closed fraction must be in (0, 1), got {market_closed_fraction}"
            )
        if not 0.0 <= weight <= 1.0:
            raise ConfigurationError(f"weight must be in [0, 1], got {weight}")
        self.market_closed_fraction = market_closed_fraction
        self.weight = weight
        self.inner = inner or GarmanKlassSimpleSigma(year_fraction)

    def calculate_point(self, bars: pd.DataFrame) -> np.ndarray:
        _, _, c = _log_ranges(bars)
        s = self.inner.calculate_point(bars)
        f = self.market_closed_fraction
        a = self.weight
        return np.sqrt(a * c ** 2 / f + (1.0 - a) * s ** 2 / (1.0 - f))


__all__ = [
    "OHLC_COLUMNS",
    "OHLCVolatilityEstimator",
    "GarmanKlassSimpleSigma",
    "ParkinsonSigma",
    "GarmanKlassOpenClose",
]
