"""Backtest runner utilities."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from .benchmark import buy_and_hold_curve
from .config import BacktestConfig, CostConfig, IndicatorConfig
from .data_manager import CrossoverDataManager
from .data_provider import CsvProvider, OhlcvFrame, YfinanceProvider
from .exceptions import MetricsError
from .metrics import performance_report
from .trader import CrossoverTrader
from .types import PerformanceReport, Trade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestResult:
    symbol: str
    dates: List[str]
    signals: np.ndarray  # raw (lag-free) crossover signals
    trades: List[Trade]
    equity: np.ndarray
    benchmark: np.ndarray
    strategy_report: Optional[PerformanceReport]
    benchmark_report: Optional[PerformanceReport]
    final_cash: float
    # why a report is None on a non-empty run (e.g. a zero close in the curve)
    strategy_report_error: Optional[str] = None
    benchmark_report_error: Optional[str] = None

    @property
    def buy_count(self) -> int:
        return sum(1 for tr in self.trades if tr.action == "BUY")

    def equity_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"Date": self.dates, "Equity": self.equity, "Benchmark": self.benchmark}).set_index("Date")

    def trades_frame(self) -> pd.DataFrame:
        columns = ["date", "action", "price", "shares", "cash", "portfolio_value", "reason"]
        return pd.DataFrame([asdict(x) for x in self.trades], columns=columns)


def run_backtest(
    frame: OhlcvFrame,
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: BacktestConfig = BacktestConfig(),
) -> BacktestResult:
    """Averages -> signals -> next-day execution -> strategy & benchmark curves -> metrics."""
    dm = CrossoverDataManager(frame, ind_cfg)
    trader = CrossoverTrader(frame, dm.executable_signals(bt_cfg.execution_lag), cost_cfg=cost_cfg, bt_cfg=bt_cfg)
    trader.run_full_backtest()

    equity = trader.equity
    benchmark = buy_and_hold_curve(frame.close, bt_cfg.initial_capital, cost_cfg)

    strategy_report = benchmark_report = None
    strategy_error = benchmark_error = None
    if len(frame) > 0:
        # returns are measured against the configured capital
        strategy_report, strategy_error = _report_or_reason(frame.symbol, "strategy", equity, bt_cfg.initial_capital)
        benchmark_report, benchmark_error = _report_or_reason(frame.symbol, "benchmark", benchmark, bt_cfg.initial_capital)

    result = BacktestResult(
        symbol=frame.symbol,
        dates=frame.dates,
        signals=dm.signals,
        trades=list(trader.trade_log),
        equity=equity,
        benchmark=benchmark,
        strategy_report=strategy_report,
        benchmark_report=benchmark_report,
        final_cash=trader.final_cash,
        strategy_report_error=strategy_error,
        benchmark_report_error=benchmark_error,
    )
    logger.info(
        "%s %s: %d bars, %d trades, final cash %.2f",
        frame.symbol,
        ind_cfg.label,
        len(frame),
        len(result.trades),
        result.final_cash,
    )
    return result


def _report_or_reason(
    symbol: str, name: str, curve: np.ndarray, initial_capital: float
) -> tuple[Optional[PerformanceReport], Optional[str]]:
    try:
        return performance_report(curve, initial=initial_capital), None
    except MetricsError as e:
        logger.warning("%s: %s metrics unavailable: %s", symbol, name, e)
        return None, str(e)


def log_skipped_rows(frame: OhlcvFrame) -> None:
    """Surface ingestion diagnostics as warnings."""
    for row in frame.skipped:
        logger.warning("%s: skipped malformed line %d (%s): %s", frame.symbol, row.line_number, row.reason, row.line)


def export_result(result: BacktestResult, output_dir: str | Path) -> dict[str, Path]:
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    stem = result.symbol.replace(".", "_")
    eq_path = out_dir / f"equity_{stem}.csv"
    tr_path = out_dir / f"trades_{stem}.csv"
    result.equity_frame().to_csv(eq_path, encoding="utf-8")
    result.trades_frame().to_csv(tr_path, index=False, encoding="utf-8")
    return {"equity": eq_path, "trades": tr_path}


def run_from_csv(
    csv_path: str | Path,
    symbol: str = "ASSET",
    output_dir: str | Path = "outputs",
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: Optional[BacktestConfig] = None,
) -> tuple[BacktestResult, dict[str, Path]]:
    frame = CsvProvider().fetch(csv_path=csv_path, symbol=symbol)
    return _run_core(frame, output_dir, ind_cfg, cost_cfg, bt_cfg)


def run_from_yfinance(
    symbol: str,
    start: str,
    end: str,
    output_dir: str | Path = "outputs",
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    cost_cfg: CostConfig = CostConfig(),
    bt_cfg: Optional[BacktestConfig] = None,
    auto_adjust: bool = False,
) -> tuple[BacktestResult, dict[str, Path]]:
    """Convenience runner using yfinance daily bars."""
    frame = YfinanceProvider().fetch(symbol=symbol, start=start, end=end, auto_adjust=auto_adjust)
    return _run_core(frame, output_dir, ind_cfg, cost_cfg, bt_cfg)


def _run_core(
    frame: OhlcvFrame,
    output_dir: str | Path,
    ind_cfg: IndicatorConfig,
    cost_cfg: CostConfig,
    bt_cfg: Optional[BacktestConfig],
) -> tuple[BacktestResult, dict[str, Path]]:
    if bt_cfg is None:
        bt_cfg = BacktestConfig(symbol=frame.symbol)
    log_skipped_rows(frame)
    result = run_backtest(frame, ind_cfg, cost_cfg, bt_cfg)
    return result, export_result(result, output_dir)
