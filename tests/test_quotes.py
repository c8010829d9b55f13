"""
Unit tests for building curves from quote tables.
"""

from datetime import date
import pandas as pd
import pytest

from curvelib.curves import (
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    PiecewiseYieldCurve,
    SwapRateHelper,
    ZeroYield,
    bootstrap_from_quotes,
    build_helpers,
    load_quotes_csv,
)
from curvelib.conventions import DayCount, Frequency
from curvelib.errors import ConfigurationError


QUOTES = [
    {"instrument_type": "DEPOSIT", "tenor": "1M", "quote": 0.050},
    {"instrument_type": "DEPOSIT", "tenor": "3M", "quote": 0.051},
    {"instrument_type": "FRA", "start_tenor": "3M", "tenor": "6M", "quote": 0.050},
    {"instrument_type": "FUTURE", "imm_date": "2024-09-18", "quote": 95.2},
    {"instrument_type": "OIS", "tenor": "1Y", "quote": 0.048},
    {"instrument_type": "SWAP", "tenor": "2Y", "quote": 0.046, "conventions": "usd_swap"},
]


def max_error(curve):
    return max(abs(helper.quote_error(curve)) for helper in curve.instruments)


class TestBuildHelpers:

    def test_helper_types(self, reference_date):
        """One helper of the right type per row."""
        helpers = build_helpers(reference_date, QUOTES)
        assert [type(h) for h in helpers] == [
            DepositRateHelper,
            DepositRateHelper,
            FraRateHelper,
            FuturesRateHelper,
            SwapRateHelper,
            SwapRateHelper,
        ]

    def test_conventions(self, reference_date):
        """OIS and swap rows pick up preset conventions."""
        helpers = build_helpers(reference_date, QUOTES)
        ois, swap = helpers[4], helpers[5]
        assert ois.fixed_frequency == Frequency.ANNUAL
        assert ois.float_frequency == Frequency.ANNUAL
        assert ois.fixed_day_count == DayCount.ACT_360
        assert swap.fixed_frequency == Frequency.SEMIANNUAL
        assert swap.fixed_day_count == DayCount.THIRTY_360
        assert swap.float_frequency == Frequency.QUARTERLY

    def test_fra_months(self, reference_date):
        """Test FRA tenors."""
        fra = build_helpers(reference_date, QUOTES)[2]
        assert (fra.months_to_start, fra.months_to_end) == (3, 6)

    def test_futures_without_date_use_successive_imm_dates(self, reference_date):
        """Futures rows without dates take consecutive IMM dates."""
        rows = [
            {"instrument_type": "FUT", "quote": 95.0},
            {"instrument_type": "FUT", "quote": 95.1},
        ]
        first, second = build_helpers(reference_date, rows)
        assert first.earliest_date == date(2024, 3, 20)
        assert second.earliest_date == date(2024, 6, 19)

    def test_unknown_instrument(self, reference_date):
        """Test unknown instrument type."""
        with pytest.raises(ConfigurationError):
            build_helpers(reference_date, [{"instrument_type": "CAP", "tenor": "1Y", "quote": 0.01}])

    def test_unknown_preset(self, reference_date):
        """Test unknown conventions preset."""
        rows = [{"instrument_type": "SWAP", "tenor": "1Y", "quote": 0.05, "conventions": "jpy_swap"}]
        with pytest.raises(ConfigurationError):
            build_helpers(reference_date, rows)


class TestBootstrapFromQuotes:

    def test_from_dicts(self, reference_date):
        """Test bootstrapping from a list of dicts."""
        curve = bootstrap_from_quotes(reference_date, QUOTES)
        assert isinstance(curve, PiecewiseYieldCurve)
        assert len(curve.nodes()) == len(QUOTES) + 1
        assert max_error(curve) <= curve.accuracy

    def test_from_dataframe(self, reference_date):
        """DataFrame input builds the same curve."""
        from_dicts = bootstrap_from_quotes(reference_date, QUOTES)
        from_frame = bootstrap_from_quotes(reference_date, pd.DataFrame(QUOTES))
        assert from_frame.data == from_dicts.data

    def test_options(self, reference_date):
        """Test interpolation, trait and solver options."""
        curve = bootstrap_from_quotes(
            reference_date, QUOTES, interpolation="linear", trait="zero_yield", solver="bisection"
        )
        assert isinstance(curve.trait, ZeroYield)
        assert max_error(curve) <= curve.accuracy


class TestLoadQuotesCsv:

    @pytest.fixture
    def csv_path(self, tmp_path):
        path = tmp_path / "quotes.csv"
        path.write_text(
            "Date,Instrument_Type,Tenor,Quote\n"
            "2024-01-15,deposit,1M,0.050\n"
            "2024-01-15,deposit,3M,0.051\n"
            "2024-01-15,swap,1Y,0.048\n"
            "2024-01-16,deposit,1M,0.060\n"
        )
        return path

    def test_load(self, csv_path):
        """Test CSV loading."""
        df = load_quotes_csv(str(csv_path))
        assert len(df) == 4
        assert list(df["instrument_type"].unique()) == ["DEPOSIT", "SWAP"]
        assert df["date"].iloc[0] == date(2024, 1, 15)

    def test_filter_by_date(self, csv_path, reference_date):
        """Test filtering quotes by date."""
        df = load_quotes_csv(str(csv_path), quote_date=reference_date)
        assert len(df) == 3
        curve = bootstrap_from_quotes(reference_date, df)
        assert max_error(curve) <= curve.accuracy

    def test_missing_columns(self, tmp_path):
        """Test missing required columns."""
        path = tmp_path / "bad.csv"
        path.write_text("date,tenor\n2024-01-15,1M\n")
        with pytest.raises(ConfigurationError):
            load_quotes_csv(str(path))
