"""Single-symbol, long-only crossover trader.

Replays executable signals bar by bar over a cash/shares account:
- accrues dividends on held shares at each close
- fills BUY/SELL at the close adjusted for slippage, paying per-order fees
- marks-to-market every bar (one equity value per bar, trade or not)
- liquidates any open position after the last bar
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import BacktestConfig, CostConfig
from .cost_model import CostModel
from .data_provider import OhlcvFrame
from .types import PositionState, Signal, Trade

logger = logging.getLogger(__name__)


@dataclass
class _AccountState:
    cash: float
    shares: int = 0
    position: PositionState = PositionState.FLAT


# (state, signal) -> order side. Every other pair is a hold.
_TRANSITIONS = {
    (PositionState.FLAT, Signal.BUY): "BUY",
    (PositionState.LONG, Signal.SELL): "SELL",
}


class CrossoverTrader:
    """Replays a signal array against a FLAT/LONG account.

    ``signals`` must already carry the execution lag: ``signals[t]`` is the
    order filled on bar ``t``.
    """

    def __init__(
        self,
        frame: OhlcvFrame,
        signals: np.ndarray,
        cost_cfg: CostConfig = CostConfig(),
        bt_cfg: BacktestConfig = BacktestConfig(),
    ):
        if len(signals) != len(frame):
            raise ValueError(f"signals must be index-aligned to prices (got {len(signals)} vs {len(frame)})")

        self.symbol = frame.symbol
        self.bt_cfg = bt_cfg
        self.cost_model = CostModel(cost_cfg)

        self._dates = frame.dates
        self._closes = frame.close
        self._signals = np.asarray(signals, dtype=np.int8)

        self.initial_capital = float(bt_cfg.initial_capital)
        self.account = _AccountState(cash=self.initial_capital)

        self.trade_log: List[Trade] = []
        self.equity_curve: List[float] = []
        self._finalized = False

    def __len__(self) -> int:
        return len(self._closes)

    def _equity_value(self, price: float) -> float:
        return float(self.account.cash + float(self.account.shares) * float(price))

    # ---------- public API ----------

    @property
    def equity(self) -> np.ndarray:
        return np.asarray(self.equity_curve, dtype=float)

    @property
    def final_cash(self) -> float:
        return float(self.account.cash)

    @property
    def buy_count(self) -> int:
        return sum(1 for tr in self.trade_log if tr.action == "BUY")

    def run_full_backtest(self) -> None:
        """Replay every bar, then close out any open position."""
        for t in range(len(self)):
            self.step(t)
        self.finalize()

    def step(self, t: int) -> None:
        """Process bar index t."""
        date = self._dates[t]
        close = float(self._closes[t])
        acct = self.account

        # 1) Dividend on shares held into this close
        acct.cash += self.cost_model.daily_dividend(acct.shares, close)

        # 2) Transition
        valuation = close
        side = _TRANSITIONS.get((acct.position, Signal(int(self._signals[t]))))
        if side == "BUY":
            valuation = self._enter_long(date, close)
        elif side == "SELL":
            valuation = self._exit_long(date, close, reason="SignalExit")

        # 3) Mark to market
        self.equity_curve.append(self._equity_value(valuation))

    def finalize(self) -> Optional[Trade]:
        """Forced liquidation at the last close (sell-side slippage and fees)."""
        if self._finalized:
            return None
        self._finalized = True
        if self.account.position is not PositionState.LONG or len(self) == 0:
            return None
        self._exit_long(self._dates[-1], float(self._closes[-1]), reason="FinalLiquidation")
        return self.trade_log[-1]

    # ---------- execution/accounting ----------

    def _enter_long(self, date: str, close: float) -> float:
        """Buy as many whole shares as cash allows.

        Returns the valuation price for the bar: the fill price when filled,
        the close when the order is skipped.
        """
        acct = self.account
        fill = self.cost_model.fill("BUY", close)
        if not np.isfinite(fill.price) or fill.price <= 0:
            logger.debug("%s %s: BUY skipped, non-positive price %.4f", self.symbol, date, fill.price)
            return close

        # int() truncates toward zero: never round a share count up
        qty = int((acct.cash - fill.fee) / fill.price)
        if qty > 0 and qty * fill.price + fill.fee > acct.cash:
            qty -= 1
        if qty <= 0:
            logger.debug(
                "%s %s: BUY skipped, cash %.2f cannot cover one share at %.4f plus fee %.2f",
                self.symbol,
                date,
                acct.cash,
                fill.price,
                fill.fee,
            )
            return close

        acct.cash -= qty * fill.price + fill.fee
        acct.shares = qty
        acct.position = PositionState.LONG

        self.trade_log.append(
            Trade(
                date=date,
                action="BUY",
                price=float(fill.price),
                shares=int(qty),
                cash=float(acct.cash),
                portfolio_value=self._equity_value(fill.price),
                reason="SignalEntry",
            )
        )
        logger.debug("%s %s: BUY %d @ %.4f", self.symbol, date, qty, fill.price)
        return fill.price

    def _exit_long(self, date: str, close: float, reason: str) -> float:
        """Sell the whole position. Returns the fill price."""
        acct = self.account
        fill = self.cost_model.fill("SELL", close)
        qty = acct.shares

        acct.cash += qty * fill.price - fill.fee
        acct.shares = 0
        acct.position = PositionState.FLAT

        self.trade_log.append(
            Trade(
                date=date,
                action="SELL",
                price=float(fill.price),
                shares=int(qty),
                cash=float(acct.cash),
                portfolio_value=float(acct.cash),
                reason=reason,
            )
        )
        logger.debug("%s %s: SELL %d @ %.4f (%s)", self.symbol, date, qty, fill.price, reason)
        return fill.price
