"""Grid-sweep MA windows/types on one CSV and print the ranking.

Example:
    python -m scripts.sweep_parameters --csv data/SPX.csv \
      --short 10,20,50 --long 100,150,200 --types SMA,WMA \
      --flat_fee 5 --percent_fee 0.001 --slippage 0.001 --dividend_yield 0.02 \
      --out outputs_sweep
"""

from __future__ import annotations

import argparse
import logging

from ma_cross.backtest import log_skipped_rows
from ma_cross.config import BacktestConfig, CostConfig
from ma_cross.data_provider import CsvProvider
from ma_cross.optimize import parameter_sweep


def _int_list(s: str) -> list[int]:
    return [int(x) for x in s.split(",") if x.strip()]


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--csv", type=str, required=True)
    p.add_argument("--symbol", type=str, default="ASSET")
    p.add_argument("--short", type=_int_list, default=[10, 20, 50])
    p.add_argument("--long", type=_int_list, default=[100, 150, 200])
    p.add_argument("--types", type=str, default="SMA,WMA")
    p.add_argument("--capital", type=float, default=10_000.0)
    p.add_argument("--flat_fee", type=float, default=0.0)
    p.add_argument("--percent_fee", type=float, default=0.0)
    p.add_argument("--slippage", type=float, default=0.0)
    p.add_argument("--dividend_yield", type=float, default=0.0)
    p.add_argument("--top", type=int, default=10)
    p.add_argument("--out", type=str, default="outputs_sweep")
    p.add_argument("--log_level", type=str, default="WARNING")
    args = p.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    frame = CsvProvider().fetch(args.csv, symbol=args.symbol)
    log_skipped_rows(frame)

    cost_cfg = CostConfig(
        flat_fee=args.flat_fee,
        percent_fee=args.percent_fee,
        slippage=args.slippage,
        dividend_yield=args.dividend_yield,
    )
    bt_cfg = BacktestConfig(symbol=args.symbol, initial_capital=args.capital)

    results = parameter_sweep(
        frame,
        short_windows=args.short,
        long_windows=args.long,
        ma_types=[t.strip() for t in args.types.split(",") if t.strip()],
        cost_cfg=cost_cfg,
        bt_cfg=bt_cfg,
        output_dir=args.out,
    )

    print(f"Top {min(args.top, len(results))} of {len(results)} by CAGR:")
    for r in results[: args.top]:
        print(r)
    print("Saved outputs to:", args.out)


if __name__ == "__main__":
    main()
