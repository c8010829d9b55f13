"""
Unit tests for OHLC volatility estimators.
"""

import math
import numpy as np
import pandas as pd
import pytest

from curvelib.errors import ConfigurationError, DomainError
from curvelib.vol import (
    GarmanKlassOpenClose,
    GarmanKlassSimpleSigma,
    ParkinsonSigma,
)

DAILY = 1.0 / 252.0


@pytest.fixture
def bars():
    index = pd.date_range("2024-01-15", periods=3, freq="B")
    return pd.DataFrame(
        {
            "open": [100.0, 101.0, 102.0],
            "high": [102.0, 103.0, 104.5],
            "low": [99.0, 100.0, 101.0],
            "close": [101.0, 102.0, 101.5],
        },
        index=index,
    )


def log_ranges(o, h, l, c):
    return math.log(h / o), math.log(l / o), math.log(c / o)


class TestGarmanKlass:

    def test_simple_sigma(self, bars):
        """Test Garman-Klass estimate."""
        vol = GarmanKlassSimpleSigma(DAILY).calculate(bars)
        h, l, c = log_ranges(101.0, 103.0, 100.0, 102.0)
        expected = math.sqrt(0.5 * (h - l) ** 2 - (2 * math.log(2) - 1) * c ** 2) / math.sqrt(DAILY)
        assert vol.iloc[0] == pytest.approx(expected)

    def test_first_bar_skipped(self, bars):
        """The first bar has no estimate."""
        vol = GarmanKlassSimpleSigma(DAILY).calculate(bars)
        assert len(vol) == 2
        assert list(vol.index) == list(bars.index[1:])

    def test_parkinson(self, bars):
        """Test Parkinson estimate."""
        vol = ParkinsonSigma(DAILY).calculate(bars)
        h, l, _ = log_ranges(102.0, 104.5, 101.0, 101.5)
        expected = math.sqrt((h - l) ** 2 / (4 * math.log(2))) / math.sqrt(DAILY)
        assert vol.iloc[1] == pytest.approx(expected)

    def test_open_close(self, bars):
        """Test open/close weighted estimate."""
        estimator = GarmanKlassOpenClose(DAILY, market_closed_fraction=0.3, weight=0.2)
        vol = estimator.calculate(bars)
        h, l, c = log_ranges(101.0, 103.0, 100.0, 102.0)
        s2 = 0.5 * (h - l) ** 2 - (2 * math.log(2) - 1) * c ** 2
        expected = math.sqrt(0.2 * c ** 2 / 0.3 + 0.8 * s2 / 0.7) / math.sqrt(DAILY)
        assert vol.iloc[0] == pytest.approx(expected)

    def test_open_close_with_parkinson(self, bars):
        """Zero weight scales the inner estimator."""
        inner = ParkinsonSigma(DAILY)
        estimator = GarmanKlassOpenClose(DAILY, 0.5, 0.0, inner=inner)
        # zero weight: only the inner estimator, scaled by 1 / (1 - f)
        expected = inner.calculate(bars) / math.sqrt(0.5)
        np.testing.assert_allclose(estimator.calculate(bars).to_numpy(), expected.to_numpy())

    def test_flat_bar(self):
        """A bar with no range has zero volatility."""
        flat = pd.DataFrame({column: [100.0, 100.0] for column in ("open", "high", "low", "close")})
        vol = GarmanKlassSimpleSigma(DAILY).calculate(flat)
        assert vol.iloc[0] == 0.0

    def test_column_names_case_insensitive(self, bars):
        """Test capitalized column names."""
        renamed = bars.rename(columns=str.capitalize)
        vol = ParkinsonSigma(DAILY).calculate(renamed)
        assert len(vol) == 2


class TestValidation:

    def test_missing_columns(self, bars):
        """Test missing OHLC columns."""
        with pytest.raises(ConfigurationError):
            ParkinsonSigma(DAILY).calculate(bars.drop(columns=["close"]))

    def test_non_positive_prices(self, bars):
        """Test non-positive prices."""
        bars.loc[bars.index[1], "low"] = 0.0
        with pytest.raises(DomainError):
            ParkinsonSigma(DAILY).calculate(bars)

    def test_high_below_low(self, bars):
        """Test high below low."""
        bars.loc[bars.index[2], "high"] = 100.0
        with pytest.raises(DomainError):
            GarmanKlassSimpleSigma(DAILY).calculate(bars)

    def test_close_outside_range(self, bars):
        """Close above the high is rejected."""
        bars.loc[bars.index[1], "close"] = 104.0
        with pytest.raises(DomainError):
            GarmanKlassSimpleSigma(DAILY).calculate(bars)

    def test_year_fraction(self):
        """Test year fraction validation."""
        with pytest.raises(ConfigurationError):
            ParkinsonSigma(0.0)

    def test_open_close_parameters(self):
        """Test fraction and weight bounds."""
        with pytest.raises(ConfigurationError):
            GarmanKlassOpenClose(DAILY, 1.0, 0.5)
        with pytest.raises(ConfigurationError):
            GarmanKlassOpenClose(DAILY, 0.5, 1.5)
