"""Run one crossover backtest and print trades plus strategy/benchmark metrics.

Example (config file with csv_file):
    python -m scripts.run_backtest --config data/config.json

Example (overrides):
    python -m scripts.run_backtest --csv data/SPX.csv --short 20 --long 100 \
      --short_type WMA --flat_fee 5 --percent_fee 0.001 --slippage 0.001
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from ma_cross.backtest import BacktestResult, run_from_csv, run_from_yfinance
from ma_cross.config import Settings
from ma_cross.types import PerformanceReport

# argparse dest -> Settings key
_OVERRIDES = {
    "short": "short_ma_window",
    "long": "long_ma_window",
    "short_type": "short_ma_type",
    "long_type": "long_ma_type",
    "capital": "initial_capital",
    "flat_fee": "flat_fee",
    "percent_fee": "percent_fee",
    "slippage": "slippage",
    "dividend_yield": "dividend_yield",
    "symbol": "symbol",
    "csv": "csv_file",
}


def build_settings(args: argparse.Namespace) -> Settings:
    base = Settings.from_json(args.config) if args.config else Settings()
    d = base.to_dict()
    for dest, key in _OVERRIDES.items():
        value = getattr(args, dest)
        if value is not None:
            d[key] = value
    return Settings.from_dict(d)


def _print_trades(result: BacktestResult, label: str, limit: int = 10) -> None:
    print(f"\nFirst {limit} trades ({label} crossover, next-day execution):")
    print(f"{'Date':<12}{'Action':<8}{'Price':>12}{'Shares':>9}{'Cash':>14}{'PortfolioValue':>16}")
    for t in result.trades[:limit]:
        print(f"{t.date:<12}{t.action:<8}{t.price:>12.2f}{t.shares:>9d}{t.cash:>14.2f}{t.portfolio_value:>16.2f}")
    if result.trades:
        print(f"\nFinal Portfolio Value: ${result.trades[-1].portfolio_value:.2f}")


def _print_report(
    title: str, rep: Optional[PerformanceReport], trades: Optional[int] = None, reason: Optional[str] = None
) -> None:
    print(f"\nPerformance Metrics ({title}):")
    if rep is None:
        print(f"n/a ({reason or 'empty price series'})")
        return
    print(f"Total Return: {rep.total_return * 100:.2f}%")
    print(f"CAGR: {rep.cagr * 100:.2f}%")
    print(f"Max Drawdown: {rep.max_drawdown * 100:.2f}%")
    print(f"Sharpe Ratio: {rep.sharpe_ratio:.2f}")
    if trades is not None:
        print(f"Number of Trades: {trades}")


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--config", type=str, default=None, help="JSON config (flat keys, may include csv_file).")
    p.add_argument("--csv", type=str, default=None, help="OHLCV CSV path (Date,Open,High,Low,Close,Volume).")
    p.add_argument("--symbol", type=str, default=None)
    p.add_argument("--short", type=int, default=None, help="Short MA window.")
    p.add_argument("--long", type=int, default=None, help="Long MA window.")
    p.add_argument("--short_type", type=str, default=None, help="SMA or WMA.")
    p.add_argument("--long_type", type=str, default=None, help="SMA or WMA.")
    p.add_argument("--capital", type=float, default=None, help="Initial capital.")
    p.add_argument("--flat_fee", type=float, default=None)
    p.add_argument("--percent_fee", type=float, default=None, help="e.g. 0.001 = 0.1%% of the fill price")
    p.add_argument("--slippage", type=float, default=None, help="e.g. 0.001 = 0.1%%")
    p.add_argument("--dividend_yield", type=float, default=None, help="Annual, e.g. 0.02 = 2%%")
    p.add_argument("--yfinance", action="store_true", help="Download daily bars for --symbol instead of reading a CSV.")
    p.add_argument("--start", type=str, default=None, help="yfinance start date.")
    p.add_argument("--end", type=str, default=None, help="yfinance end date.")
    p.add_argument("--output_dir", type=str, default="outputs")
    p.add_argument("--log_level", type=str, default="INFO")
    args = p.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = build_settings(args)
    bt_cfg = settings.backtest

    if args.yfinance:
        if not (args.start and args.end):
            raise SystemExit("--yfinance needs --start and --end.")
        result, paths = run_from_yfinance(
            symbol=bt_cfg.symbol,
            start=args.start,
            end=args.end,
            output_dir=args.output_dir,
            ind_cfg=settings.indicator,
            cost_cfg=settings.cost,
            bt_cfg=bt_cfg,
        )
    else:
        if not settings.csv_file:
            raise SystemExit("Provide --csv, a config with csv_file, or --yfinance.")
        result, paths = run_from_csv(
            csv_path=settings.csv_file,
            symbol=bt_cfg.symbol,
            output_dir=args.output_dir,
            ind_cfg=settings.indicator,
            cost_cfg=settings.cost,
            bt_cfg=bt_cfg,
        )

    if not result.dates:
        raise SystemExit("No usable price rows.")

    print(f"Parsed {len(result.dates)} rows.")
    _print_trades(result, settings.indicator.label)
    _print_report("Strategy", result.strategy_report, trades=result.buy_count, reason=result.strategy_report_error)
    _print_report("Buy & Hold Benchmark", result.benchmark_report, reason=result.benchmark_report_error)
    print()
    print(paths["equity"])
    print(paths["trades"])


if __name__ == "__main__":
    main()
