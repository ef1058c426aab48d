"""Crossover signal detection.

Signals are lag-free: ``signals[i]`` uses information through bar ``i``.
The one-day execution lag is applied by the driver via
:func:`next_day_signals`.
"""

from __future__ import annotations

import numpy as np

from .types import Signal


def crossover_signals(short_ma: np.ndarray, long_ma: np.ndarray) -> np.ndarray:
    """Golden cross -> BUY (+1), death cross -> SELL (-1), else NONE (0).

    Index 0 is always NONE, and so is any index where either average is
    undefined (NaN) at ``i-1`` or ``i``.
    """
    fast = np.asarray(short_ma, dtype=float)
    slow = np.asarray(long_ma, dtype=float)
    if len(fast) != len(slow):
        raise ValueError(f"moving averages must be index-aligned (got {len(fast)} vs {len(slow)})")

    n = len(fast)
    out = np.full(n, int(Signal.NONE), dtype=np.int8)
    for i in range(1, n):
        s_prev, l_prev, s_cur, l_cur = fast[i - 1], slow[i - 1], fast[i], slow[i]
        if not (np.isfinite(s_prev) and np.isfinite(l_prev) and np.isfinite(s_cur) and np.isfinite(l_cur)):
            continue
        if s_prev <= l_prev and s_cur > l_cur:
            out[i] = int(Signal.BUY)
        elif s_prev >= l_prev and s_cur < l_cur:
            out[i] = int(Signal.SELL)
    return out


def next_day_signals(signals: np.ndarray, lag: int = 1) -> np.ndarray:
    """Shift signals forward so bar ``i``'s decision executes on ``i + lag``."""
    x = np.asarray(signals, dtype=np.int8)
    if lag < 0:
        raise ValueError("lag must be non-negative")
    out = np.full(len(x), int(Signal.NONE), dtype=np.int8)
    if lag == 0:
        out[:] = x
    elif lag < len(x):
        out[lag:] = x[:-lag]
    return out
