"""
Volatility package - historical volatility from OHLC prices.
"""

from .garman_klass import (
    OHLCVolatilityEstimator,
    GarmanKlassSimpleSigma,
    ParkinsonSigma,
    GarmanKlassOpenClose,
)

__all__ = [
    "OHLCVolatilityEstimator",
    "GarmanKlassSimpleSigma",
    "ParkinsonSigma",
    "GarmanKlassOpenClose",
]
