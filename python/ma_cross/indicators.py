"""Moving-average computation utilities.

Both averages run on the CLOSE series only. Positions before the window is
full are NaN (never zero, which is a legitimate price-derived value). An empty
array is returned when no average can be formed at all.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
import pandas as pd

from .exceptions import ConfigError
from .types import MAType

ArrayLike = Union[Sequence[float], np.ndarray, pd.Series]


def _as_close_array(close: ArrayLike) -> np.ndarray:
    return np.asarray(close, dtype=float).ravel()


def sma(close: ArrayLike, window: int) -> np.ndarray:
    """Simple moving average kept with a running sum.

    The incoming close is added and the close leaving the window is
    subtracted, so each step is O(1).
    """
    x = _as_close_array(close)
    n = len(x)
    if window <= 0 or n < window:
        return np.empty(0, dtype=float)

    out = np.full(n, np.nan, dtype=float)
    running = 0.0
    for i in range(n):
        running += x[i]
        if i >= window:
            running -= x[i - window]
        if i >= window - 1:
            out[i] = running / window
    return out


def wma(close: ArrayLike, window: int) -> np.ndarray:
    """Linearly weighted moving average.

    The newest bar in the window carries weight ``window`` and the oldest
    weight 1; weights sum to ``window * (window + 1) / 2``.
    """
    x = _as_close_array(close)
    n = len(x)
    if window <= 0 or n < window:
        return np.empty(0, dtype=float)

    weights = np.arange(1, window + 1, dtype=float)  # oldest -> newest
    denom = window * (window + 1) / 2.0

    out = np.full(n, np.nan, dtype=float)
    for i in range(window - 1, n):
        out[i] = float(np.dot(x[i - window + 1 : i + 1], weights)) / denom
    return out


def parse_ma_type(kind: str | MAType) -> MAType:
    """Normalize an MA type string ('sma', 'WMA', ...) to :class:`MAType`."""
    if isinstance(kind, MAType):
        return kind
    try:
        return MAType(str(kind).strip().upper())
    except ValueError:
        raise ConfigError(f"Unknown moving-average type: {kind!r} (expected SMA or WMA)") from None


def moving_average(close: ArrayLike, window: int, kind: str | MAType = MAType.SMA) -> np.ndarray:
    """Dispatch to :func:`sma` or :func:`wma`."""
    ma_type = parse_ma_type(kind)
    if ma_type is MAType.WMA:
        return wma(close, window)
    return sma(close, window)
