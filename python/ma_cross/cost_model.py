"""Execution cost model: slippage, per-order fees and daily dividend accrual."""

from __future__ import annotations

from dataclasses import dataclass

from .config import CostConfig


@dataclass(frozen=True)
class Fill:
    price: float
    fee: float


class CostModel:
    """Costs:
    - slippage: BUY fills at close*(1+s), SELL fills at close*(1-s)
    - fee: flat_fee + percent_fee * execution price, charged once per order
    - dividend: annual yield / day count, credited on held notional each day
    """

    def __init__(self, cfg: CostConfig):
        self.cfg = cfg

    def execution_price(self, side: str, close: float) -> float:
        side_u = side.upper()
        if side_u == "BUY":
            return float(close) * (1.0 + self.cfg.slippage)
        if side_u == "SELL":
            return float(close) * (1.0 - self.cfg.slippage)
        raise ValueError(f"side must be BUY or SELL, got {side!r}")

    def order_fee(self, price: float) -> float:
        return float(self.cfg.flat_fee) + float(self.cfg.percent_fee) * float(price)

    def fill(self, side: str, close: float) -> Fill:
        """Execution price and total fee for one order at the given close."""
        px = self.execution_price(side, close)
        return Fill(price=px, fee=self.order_fee(px))

    def dividend_daily_rate(self) -> float:
        return float(self.cfg.dividend_yield) / float(self.cfg.trading_days_per_year)

    def daily_dividend(self, shares: int, close: float) -> float:
        """Cash credited for holding ``shares`` through a bar closing at ``close``."""
        if shares <= 0 or self.cfg.dividend_yield <= 0:
            return 0.0
        return float(shares) * float(close) * self.dividend_daily_rate()
