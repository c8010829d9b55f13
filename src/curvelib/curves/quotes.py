"""
Building curves from tabular market quotes.

Provides:
- load_quotes_csv: read and normalize a CSV of curve quotes
- build_helpers: turn quote rows into rate helpers
- bootstrap_from_quotes: quote rows (dicts or a DataFrame) to a
  PiecewiseYieldCurve

Quote row format:
    {"instrument_type": "DEPOSIT", "tenor": "3M", "quote": 0.053}
    {"instrument_type": "FRA", "start_tenor": "3M", "tenor": "6M", "quote": 0.051}
    {"instrument_type": "FUTURE", "imm_date": "2024-03-20", "quote": 94.8}
    {"instrument_type": "SWAP", "tenor": "5Y", "quote": 0.045, "conventions": "usd_swap"}
    {"instrument_type": "OIS", "tenor": "2Y", "quote": 0.048}
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from ..conventions import Calendar, Conventions, DayCount, Frequency
from ..dates import DateUtils, next_imm_date
from ..errors import ConfigurationError
from .bootstrap import IterativeBootstrap, create_solver
from .instruments import (
    DepositRateHelper,
    FraRateHelper,
    FuturesRateHelper,
    RateHelper,
    SwapRateHelper,
)
from .interpolation import create_interpolator
from .piecewise import PiecewiseYieldCurve
from .traits import create_trait

QuoteRows = Union[pd.DataFrame, Iterable[Dict[str, Any]]]

REQUIRED_COLUMNS = {"instrument_type", "quote"}


def load_quotes_csv(filepath: str, quote_date: Optional[date] = None) -> pd.DataFrame:
    """
    Load curve quotes from a CSV file.

    Expected CSV format:
    date, instrument_type, tenor, quote[, start_tenor, imm_date, day_count, ...]

    Args:
        filepath: Path to CSV file
        quote_date: Optional filter for a specific date

    Returns:
        DataFrame with lower-case column names, one row per quote
    """
    df = pd.read_csv(filepath)

    # Standardize column names
    df.columns = [c.strip().lower() for c in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ConfigurationError(f"Missing required quote columns: {sorted(missing)}")

    for column in ("date", "imm_date"):
        if column in df.columns:
            df[column] = pd.to_datetime(df[column]).dt.date

    if quote_date is not None and "date" in df.columns:
        df = df[df["date"] == quote_date]

    df["instrument_type"] = df["instrument_type"].astype(str).str.strip().str.upper()
    return df.reset_index(drop=True)


def _rows(quotes: QuoteRows) -> List[Dict[str, Any]]:
    if isinstance(quotes, pd.DataFrame):
        records = quotes.to_dict("records")
    else:
        records = [dict(q) for q in quotes]
    # empty CSV cells arrive as NaN
    return [{k: v for k, v in r.items() if not _is_missing(v)} for r in records]


def _is_missing(value: Any) -> bool:
    return isinstance(value, float) and pd.isna(value)


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


def build_helpers(
    reference_date: date,
    quotes: QuoteRows,
    calendar: Optional[Calendar] = None,
    fixing_days: int = 0
) -> List[RateHelper]:
    """
    Create rate helpers from quote rows.

    Args:
        reference_date: Evaluation date the helpers are built against
        quotes: Quote rows (see module docstring)
        calendar: Calendar for all helpers
        fixing_days: Default fixing/settlement days, overridable per row

    Returns:
        One helper per row, in input order
    """
    calendar = calendar or Calendar()
    helpers: List[RateHelper] = []
    last_imm = reference_date

    for q in _rows(quotes):
        inst_type = str(q.get("instrument_type", "")).upper()
        quote = float(q["quote"])
        days = int(q.get("fixing_days", q.get("settlement_days", fixing_days)))

        if inst_type == "DEPOSIT":
            helpers.append(DepositRateHelper(
                quote,
                q["tenor"],
                reference_date,
                fixing_days=days,
                calendar=calendar,
                day_count=DayCount.from_string(q.get("day_count", "ACT/360")),
            ))
        elif inst_type == "FRA":
            helpers.append(FraRateHelper(
                quote,
                DateUtils.tenor_to_months(q.get("start_tenor", "0M")),
                DateUtils.tenor_to_months(q["tenor"]),
                reference_date,
                fixing_days=days,
                calendar=calendar,
                day_count=DayCount.from_string(q.get("day_count", "ACT/360")),
            ))
        elif inst_type in ("FUT", "FUTURE"):
            if "imm_date" in q:
                imm = _as_date(q["imm_date"])
            else:
                imm = next_imm_date(last_imm)
            last_imm = imm
            helpers.append(FuturesRateHelper(
                quote,
                imm,
                length_in_months=int(q.get("length_in_months", 3)),
                calendar=calendar,
                day_count=DayCount.from_string(q.get("day_count", "ACT/360")),
                convexity_adjustment=float(q.get("convexity", 0.0)),
            ))
        elif inst_type in ("SWAP", "IRS", "OIS"):
            preset = q.get("conventions", "usd_ois" if inst_type == "OIS" else "usd_swap")
            helpers.append(_swap_helper(reference_date, q, quote, inst_type, preset, calendar, days))
        else:
            raise ConfigurationError(f"Unknown instrument type: {inst_type!r}")

    return helpers


def _swap_helper(
    reference_date: date,
    q: Dict[str, Any],
    quote: float,
    inst_type: str,
    preset: str,
    calendar: Calendar,
    settlement_days: int
) -> SwapRateHelper:
    presets = {
        "usd_ois": Conventions.usd_ois,
        "usd_swap": Conventions.usd_swap,
        "eur_swap": Conventions.eur_swap,
    }
    if preset not in presets:
        raise ConfigurationError(f"Unknown conventions preset: {preset!r}")
    conv = presets[preset]()

    # OIS: both legs pay at the fixed frequency with the same day count
    float_default = conv.payment_frequency if inst_type == "OIS" else Frequency.QUARTERLY
    fixed_day_count = DayCount.from_string(q.get("day_count", conv.day_count.value))
    float_day_count = DayCount.from_string(
        q.get("float_day_count", fixed_day_count.value if inst_type == "OIS" else "ACT/360")
    )

    return SwapRateHelper(
        quote,
        q["tenor"],
        reference_date,
        calendar=calendar,
        fixed_frequency=Frequency.from_string(q.get("fixed_frequency", conv.payment_frequency.name)),
        fixed_convention=conv.business_day,
        fixed_day_count=fixed_day_count,
        float_frequency=Frequency.from_string(q.get("float_frequency", float_default.name)),
        float_day_count=float_day_count,
        float_convention=conv.business_day,
        settlement_days=settlement_days,
        spread=float(q.get("spread", 0.0)),
        forward_start=q.get("forward_start", "0D"),
    )


def bootstrap_from_quotes(
    reference_date: date,
    quotes: QuoteRows,
    interpolation: Optional[str] = None,
    trait: str = "discount",
    day_count: DayCount = DayCount.ACT_365,
    calendar: Optional[Calendar] = None,
    fixing_days: int = 0,
    jumps: Sequence[float] = (),
    jump_dates: Sequence[date] = (),
    accuracy: float = 1e-12,
    solver: str = "brent"
) -> PiecewiseYieldCurve:
    """
    Convenience function to bootstrap a curve from quote rows.

    Args:
        reference_date: Valuation date (also the curve reference date)
        quotes: List of dicts or a DataFrame (see module docstring)
        interpolation: Interpolation method (default: trait's default)
        trait: "discount", "zero_yield" or "forward_rate"
        day_count: Curve day count
        calendar: Calendar used by the helpers
        fixing_days: Default fixing/settlement days for the helpers
        jumps: Optional discount factor jumps
        jump_dates: Optional jump dates
        accuracy: Solver tolerance
        solver: "brent", "bisection", "secant" or "newton"

    Returns:
        Bootstrapped curve (calculated on first use)
    """
    helpers = build_helpers(reference_date, quotes, calendar, fixing_days)
    return PiecewiseYieldCurve(
        reference_date,
        helpers,
        day_count=day_count,
        jumps=jumps,
        jump_dates=jump_dates,
        accuracy=accuracy,
        interpolator=create_interpolator(interpolation) if interpolation else None,
        trait=create_trait(trait),
        bootstrap=IterativeBootstrap(create_solver(solver)),
        calendar=calendar,
    )


__all__ = [
    "load_quotes_csv",
    "build_helpers",
    "bootstrap_from_quotes",
]
