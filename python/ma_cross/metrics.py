"""Performance metrics over a daily equity curve.

All functions take an index-aligned sequence of portfolio values. A year is
252 trading days.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .exceptions import MetricsError
from .indicators import ArrayLike
from .types import PerformanceReport

TRADING_DAYS_PER_YEAR = 252


def _as_curve(equity: ArrayLike) -> np.ndarray:
    x = np.asarray(equity, dtype=float).ravel()
    if len(x) == 0:
        raise MetricsError("equity curve is empty")
    return x


def total_return(equity: ArrayLike, initial: Optional[float] = None) -> float:
    """(final - initial) / initial; ``initial`` defaults to the first point."""
    x = _as_curve(equity)
    start = float(x[0]) if initial is None else float(initial)
    if start == 0:
        raise MetricsError("total return is undefined for a zero starting value")
    return (float(x[-1]) - start) / start


def cagr(equity: ArrayLike, initial: Optional[float] = None, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> float:
    """Compound annual growth rate with years = len(curve) / periods_per_year."""
    x = _as_curve(equity)
    years = len(x) / float(periods_per_year)
    if years <= 0:
        raise MetricsError("CAGR is undefined for a zero-length holding period")
    start = float(x[0]) if initial is None else float(initial)
    if start <= 0:
        raise MetricsError(f"CAGR is undefined for a non-positive starting value ({start})")
    growth = float(x[-1]) / start
    if growth < 0:
        raise MetricsError(f"CAGR is undefined for a negative ending value ({float(x[-1])})")
    return growth ** (1.0 / years) - 1.0


def max_drawdown(equity: ArrayLike) -> float:
    """Maximum drawdown (as positive fraction) from the running peak."""
    x = _as_curve(equity)
    peak = np.maximum.accumulate(x)
    if np.any(peak <= 0):
        raise MetricsError("drawdown is undefined once the running peak is non-positive")
    dd = (peak - x) / peak
    return float(max(0.0, np.max(dd)))


def daily_returns(equity: ArrayLike) -> np.ndarray:
    x = np.asarray(equity, dtype=float).ravel()
    if len(x) < 2:
        return np.empty(0, dtype=float)
    prev = x[:-1]
    if np.any(prev == 0):
        raise MetricsError("daily return is undefined after a zero equity value")
    return np.diff(x) / prev


def sharpe_ratio(equity: ArrayLike, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> float:
    """Annualized mean / sample std of daily returns (no risk-free rate).

    Fewer than two equity points, or zero volatility, gives 0.
    """
    r = daily_returns(equity)
    if len(r) < 2:
        # one return has no sample deviation
        return 0.0
    std = float(np.std(r, ddof=1))
    if not std > 0:
        return 0.0
    return float(np.mean(r)) / std * float(np.sqrt(periods_per_year))


def performance_report(equity: ArrayLike, initial: Optional[float] = None) -> PerformanceReport:
    return PerformanceReport(
        total_return=total_return(equity, initial),
        cagr=cagr(equity, initial),
        max_drawdown=max_drawdown(equity),
        sharpe_ratio=sharpe_ratio(equity),
    )
