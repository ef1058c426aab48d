"""Exhaustive grid sweep over moving-average windows and types.

Every (short, long, short_type, long_type) combination with short < long is
backtested on the same frame and ranked by CAGR.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from .backtest import run_backtest
from .config import BacktestConfig, CostConfig, IndicatorConfig
from .data_provider import OhlcvFrame
from .exceptions import DataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    params: IndicatorConfig
    total_return: float
    cagr: float
    sharpe_ratio: float
    max_drawdown: float
    trades: int

    def __str__(self) -> str:
        p = self.params
        return (
            f"{p.short_ma_window:3d}/{p.long_ma_window:3d} {p.short_ma_type:>3s}/{p.long_ma_type:>3s}  "
            f"CAGR: {self.cagr * 100:.2f}%  Sharpe: {self.sharpe_ratio:.2f}  "
            f"MaxDD: {self.max_drawdown * 100:.2f}%  Return: {self.total_return * 100:.2f}%"
        )


def parameter_grid(
    short_windows: Iterable[int],
    long_windows: Iterable[int],
    ma_types: Iterable[str] = ("SMA", "WMA"),
) -> list[IndicatorConfig]:
    types = list(ma_types)
    grid = []
    for short_w, long_w in itertools.product(short_windows, long_windows):
        if short_w >= long_w:
            continue
        for st, lt in itertools.product(types, types):
            grid.append(IndicatorConfig(short_ma_window=short_w, long_ma_window=long_w, short_ma_type=st, long_ma_type=lt))
    return grid


def parameter_sweep(
    frame: OhlcvFrame,
    short_windows: Iterable[int],
    long_windows: Iterable[int],
    ma_types: Iterable[str] = ("SMA", "WMA"),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: BacktestConfig = BacktestConfig(),
    output_dir: Optional[str | Path] = None,
) -> list[SweepResult]:
    """Backtest every grid point; results sorted best CAGR first.

    Points whose strategy metrics are undefined are logged and left out.
    """
    if len(frame) == 0:
        raise DataError("cannot sweep parameters over an empty price series")

    results: list[SweepResult] = []
    for cfg in parameter_grid(short_windows, long_windows, ma_types):
        res = run_backtest(frame, cfg, cost_cfg, bt_cfg)
        rep = res.strategy_report
        if rep is None:
            logger.warning("sweep %s skipped: %s", cfg.label, res.strategy_report_error)
            continue
        results.append(
            SweepResult(
                params=cfg,
                total_return=rep.total_return,
                cagr=rep.cagr,
                sharpe_ratio=rep.sharpe_ratio,
                max_drawdown=rep.max_drawdown,
                trades=res.buy_count,
            )
        )
        logger.debug("sweep %s -> CAGR %.4f", cfg.label, rep.cagr)

    # sort best-first
    results.sort(key=lambda r: r.cagr, reverse=True)

    if output_dir is not None:
        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        rows = []
        for r in results:
            d = asdict(r.params)
            d.update(
                {
                    "total_return": r.total_return,
                    "cagr": r.cagr,
                    "sharpe_ratio": r.sharpe_ratio,
                    "max_drawdown": r.max_drawdown,
                    "trades": r.trades,
                }
            )
            rows.append(d)
        pd.DataFrame(rows).to_csv(out_dir / "sweep_results.csv", index=False, encoding="utf-8")

    logger.info("swept %d parameter sets for %s", len(results), frame.symbol)
    return results
