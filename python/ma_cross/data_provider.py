"""Data providers (CSV / yfinance) and a standardized daily OHLCV schema.

The standardized frame has columns ``Date, Open, High, Low, Close, Volume``
with ``Date`` kept as the calendar-date string and rows kept in source order
(chronological order is assumed, never re-sorted here).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from .exceptions import DataError
from .types import PriceRecord

PRICE_COLUMNS = ["Open", "High", "Low", "Close"]
COLUMNS = ["Date"] + PRICE_COLUMNS + ["Volume"]


@dataclass(frozen=True)
class MalformedRow:
    """A CSV row that was dropped during ingestion."""

    line_number: int  # 1-based, header is line 1
    line: str
    reason: str


@dataclass(frozen=True)
class OhlcvFrame:
    """Standard OHLCV dataframe wrapper (the price series of one symbol)."""

    df: pd.DataFrame  # columns: Date (str), Open, High, Low, Close (float), Volume (int)
    symbol: str
    skipped: tuple[MalformedRow, ...] = ()

    def __len__(self) -> int:
        return int(len(self.df))

    @property
    def close(self) -> np.ndarray:
        return self.df["Close"].to_numpy(dtype=float)

    @property
    def dates(self) -> list[str]:
        return [str(x) for x in self.df["Date"]]

    def records(self) -> list[PriceRecord]:
        return [
            PriceRecord(
                date=str(row.Date),
                open=float(row.Open),
                high=float(row.High),
                low=float(row.Low),
                close=float(row.Close),
                volume=int(row.Volume),
            )
            for row in self.df.itertuples(index=False)
        ]

    @classmethod
    def from_records(cls, records: Iterable[PriceRecord], symbol: str = "ASSET") -> "OhlcvFrame":
        rows = [(r.date, r.open, r.high, r.low, r.close, r.volume) for r in records]
        df = pd.DataFrame(rows, columns=COLUMNS)
        return cls(df=_typed(df), symbol=symbol)


def _typed(df: pd.DataFrame) -> pd.DataFrame:
    df = df[COLUMNS].copy()
    df["Date"] = df["Date"].astype(str)
    df[PRICE_COLUMNS] = df[PRICE_COLUMNS].astype(float)
    df["Volume"] = df["Volume"].astype(np.int64)
    return df.reset_index(drop=True)


def _empty_frame() -> pd.DataFrame:
    return _typed(pd.DataFrame({c: [] for c in COLUMNS}))


class CsvProvider:
    """Load daily OHLCV rows from a CSV file.

    Rules (per row):
    - the header maps column names to positions; only exact names
      ``Date, Open, High, Low, Close, Volume`` are recognized
    - a missing/empty Date drops the row
    - a missing or empty numeric field defaults to 0
    - a non-numeric or non-finite (inf, nan) numeric field drops the row
    - short rows are padded, extra trailing fields are ignored

    Dropped rows are returned on ``OhlcvFrame.skipped``; this class never
    reports them itself.
    """

    def fetch(self, csv_path: str | Path, symbol: str = "ASSET") -> OhlcvFrame:
        path = Path(csv_path)
        if not path.exists():
            raise FileNotFoundError(str(path))

        try:
            header = pd.read_csv(path, nrows=0, dtype=str)
        except pd.errors.EmptyDataError:
            return OhlcvFrame(df=_empty_frame(), symbol=symbol)
        n_cols = len(header.columns)

        raw = pd.read_csv(
            path,
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=False,
            engine="python",
            on_bad_lines=lambda fields: fields[:n_cols],
        ).fillna("")
        if raw.empty:
            return OhlcvFrame(df=_empty_frame(), symbol=symbol)

        return _parse_rows(raw, symbol)


def _parse_rows(raw: pd.DataFrame, symbol: str) -> OhlcvFrame:
    def column(name: str) -> pd.Series:
        if name in raw.columns:
            return raw[name].astype(str)
        return pd.Series([""] * len(raw), index=raw.index, dtype=str)

    dates = column("Date")
    reasons = pd.Series([""] * len(raw), index=raw.index, dtype=object)
    reasons[dates == ""] = "missing date"

    parsed: dict[str, pd.Series] = {}
    for name in PRICE_COLUMNS + ["Volume"]:
        text = column(name).str.strip()
        values = pd.to_numeric(text.where(text != "", "0"), errors="coerce")
        bad = values.isna() & (reasons == "")
        reasons[bad] = f"non-numeric {name}"
        # "inf"/"nan" parse as floats but are not usable prices or volumes
        bad = ~np.isfinite(values.astype(float)) & (reasons == "")
        reasons[bad] = f"non-finite {name}"
        parsed[name] = values

    keep = reasons == ""
    df = pd.DataFrame(
        {
            "Date": dates[keep],
            **{name: parsed[name][keep] for name in PRICE_COLUMNS},
            # integer share volume: truncate toward zero
            "Volume": np.trunc(parsed["Volume"][keep]),
        }
    )

    skipped = tuple(
        MalformedRow(
            line_number=int(i) + 2,
            line=",".join(str(v) for v in raw.loc[i].tolist()),
            reason=str(reasons[i]),
        )
        for i in raw.index[~keep]
    )
    return OhlcvFrame(df=_typed(df), symbol=symbol, skipped=skipped)


def _standardize_ohlcv_columns(df: pd.DataFrame) -> pd.DataFrame:
    # yfinance can return MultiIndex columns depending on options/version.
    # We standardize to a simple 1-level column index.
    if isinstance(df.columns, pd.MultiIndex):
        df = df.copy()
        # Common yfinance layout: (field, ticker)
        tickers = list(dict.fromkeys(df.columns.get_level_values(-1)))
        if len(tickers) == 1:
            df.columns = df.columns.get_level_values(0)
        else:
            df = df.xs(tickers[0], axis=1, level=-1, drop_level=True)

    rename_map = {}
    for col in df.columns:
        c = str(col).strip().lower()
        if c in {"open", "high", "low", "close", "volume"}:
            rename_map[col] = c.capitalize()
        elif c in {"adj close", "adjclose"}:
            # Keep adjusted close separate to avoid duplicate "Close" columns.
            rename_map[col] = "AdjClose"
    df = df.rename(columns=rename_map).copy()

    # If provider only has AdjClose, use it as Close.
    if "Close" not in df.columns and "AdjClose" in df.columns:
        df = df.rename(columns={"AdjClose": "Close"})

    missing = [c for c in PRICE_COLUMNS + ["Volume"] if c not in df.columns]
    if missing:
        raise DataError(f"Missing required OHLCV columns: {missing}")

    df = df[~df.index.duplicated(keep="last")].sort_index()
    out = df[PRICE_COLUMNS + ["Volume"]].fillna(0.0)
    out.insert(0, "Date", pd.DatetimeIndex(out.index).strftime("%Y-%m-%d"))
    return _typed(out)


class YfinanceProvider:
    """Fetch daily bars from yfinance (optional dependency)."""

    def fetch(self, symbol: str, start: str, end: str, auto_adjust: bool = False) -> OhlcvFrame:
        import yfinance as yf  # local import to keep dependency optional in some environments

        df = yf.download(
            tickers=symbol,
            start=start,
            end=end,
            interval="1d",
            auto_adjust=auto_adjust,
            progress=False,
        )
        if df is None or len(df) == 0:
            raise DataError(f"yfinance returned empty data for symbol={symbol}")

        return OhlcvFrame(df=_standardize_ohlcv_columns(df), symbol=symbol)
