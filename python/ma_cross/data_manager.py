"""Data manager: computes moving averages and crossover signals for one frame."""

from __future__ import annotations

import logging

import numpy as np

from .config import IndicatorConfig
from .data_provider import OhlcvFrame
from .indicators import moving_average
from .signals import crossover_signals, next_day_signals

logger = logging.getLogger(__name__)


class CrossoverDataManager:
    """Holds the price series plus its short/long averages and signals.

    ``short_ma`` / ``long_ma`` are the raw calculator outputs (possibly empty
    when the window cannot be filled). Signal generation sees them as
    all-undefined series of the full length instead.
    """

    def __init__(self, frame: OhlcvFrame, ind_cfg: IndicatorConfig):
        self.symbol = frame.symbol
        self.frame = frame
        self.ind_cfg = ind_cfg

        self._compute_indicators()

    def _compute_indicators(self) -> None:
        cfg = self.ind_cfg
        close = self.frame.close
        n = len(close)

        self.short_ma = moving_average(close, cfg.short_ma_window, cfg.short_ma_type)
        self.long_ma = moving_average(close, cfg.long_ma_window, cfg.long_ma_type)

        if len(self.short_ma) == 0 or len(self.long_ma) == 0:
            logger.info(
                "%s: %s needs more history than %d bars; no crossover signals",
                self.symbol,
                cfg.label,
                n,
            )

        self.signals = crossover_signals(self._aligned(self.short_ma), self._aligned(self.long_ma))

    def _aligned(self, ma: np.ndarray) -> np.ndarray:
        if len(ma) == 0:
            return np.full(len(self), np.nan, dtype=float)
        return ma

    def __len__(self) -> int:
        return len(self.frame)

    def executable_signals(self, lag: int = 1) -> np.ndarray:
        """Signals as acted upon by the trader (decided on t, filled on t+lag)."""
        return next_day_signals(self.signals, lag=lag)
