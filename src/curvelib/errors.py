"""
Exception hierarchy for curve construction and queries.

- ConfigurationError: bad inputs detected when a curve or helper is built
- BootstrapError: a segment could not be solved during calculation
- DomainError: a query outside what the curve can answer
"""

from datetime import date
from typing import Optional


class CurveError(Exception):
    """Base class for curvelib errors."""


class ConfigurationError(CurveError, ValueError):
    """Invalid construction inputs (duplicate pillars, count mismatches, ...)."""


class DomainError(CurveError, ValueError):
    """Query outside the curve's domain or with invalid market data."""


class BootstrapError(CurveError, RuntimeError):
    """
    Root finding failed for one curve segment.

    Attributes:
        segment: 1-based index of the curve point being solved
        pillar_date: Pillar date of the offending instrument
        residual: Last quote error seen, if any
    """

    def __init__(
        self,
        message: str,
        segment: Optional[int] = None,
        pillar_date: Optional[date] = None,
        residual: Optional[float] = None
    ):
        self.segment = segment
        self.pillar_date = pillar_date
        self.residual = residual
        details = []
        if segment is not None:
            details.append(f"segment {segment}")
        if pillar_date is not None:
            details.append(f"pillar {pillar_date.isoformat()}")
        if residual is not None:
            details.append(f"residual {residual:.6e}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


__all__ = [
    "CurveError",
    "ConfigurationError",
    "DomainError",
    "BootstrapError",
]
