"""Shared types for the crossover backtester.

The guiding principle is to keep the runtime objects small and explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


@dataclass(frozen=True)
class PriceRecord:
    """One daily OHLCV row.

    ``date`` is kept as the calendar-date string found in the source file.
    """

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int


class Signal(IntEnum):
    """Directional signal emitted by the crossover detector."""

    SELL = -1
    NONE = 0
    BUY = 1


class MAType(str, Enum):
    SMA = "SMA"
    WMA = "WMA"


class PositionState(Enum):
    """Account states of the single-position replay."""

    FLAT = "FLAT"
    LONG = "LONG"


@dataclass(frozen=True)
class Trade:
    """A single executed order (entry/exit/final liquidation)."""

    date: str
    action: str  # 'BUY'/'SELL'
    price: float
    shares: int
    cash: float
    portfolio_value: float
    reason: str  # SignalEntry / SignalExit / FinalLiquidation


@dataclass(frozen=True)
class PerformanceReport:
    total_return: float
    cagr: float
    max_drawdown: float
    sharpe_ratio: float
