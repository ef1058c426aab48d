"""Passive buy-and-hold benchmark curve."""

from __future__ import annotations

import numpy as np

from .config import CostConfig
from .cost_model import CostModel
from .indicators import ArrayLike


def buy_and_hold_curve(
    close: ArrayLike,
    initial_capital: float,
    cost_cfg: CostConfig = CostConfig(),
) -> np.ndarray:
    """Equity of buying whole shares at the first close and never trading again.

    Leftover cash stays idle; dividends accrue into cash daily. No fees or
    slippage are charged on the single allocation. An empty price series
    gives an empty curve.
    """
    x = np.asarray(close, dtype=float).ravel()
    n = len(x)
    if n == 0:
        return np.empty(0, dtype=float)

    model = CostModel(cost_cfg)
    first = float(x[0])
    shares = int(initial_capital / first) if first > 0 else 0
    cash = float(initial_capital) - shares * first

    out = np.empty(n, dtype=float)
    for i in range(n):
        cash += model.daily_dividend(shares, x[i])
        out[i] = cash + shares * x[i]
    return out
