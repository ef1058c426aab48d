"""Configuration objects.

Style rules:
- keep signatures stable (no alias chaos)
- prefer explicit field names
- validate at construction (ConfigError)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigError
from .indicators import parse_ma_type


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return value


def _non_negative(name: str, value: Any) -> float:
    try:
        x = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if x < 0:
        raise ConfigError(f"{name} must be non-negative, got {x}")
    return x


@dataclass(frozen=True)
class IndicatorConfig:
    """Moving-average window configuration."""

    short_ma_window: int = 50
    long_ma_window: int = 200
    short_ma_type: str = "SMA"
    long_ma_type: str = "SMA"

    def __post_init__(self) -> None:
        _positive_int("short_ma_window", self.short_ma_window)
        _positive_int("long_ma_window", self.long_ma_window)
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "short_ma_type", parse_ma_type(self.short_ma_type).value)
        object.__setattr__(self, "long_ma_type", parse_ma_type(self.long_ma_type).value)

    @property
    def label(self) -> str:
        return f"{self.short_ma_type}-{self.short_ma_window}/{self.long_ma_type}-{self.long_ma_window}"


@dataclass(frozen=True)
class CostConfig:
    """Per-order costs and holding income.

    - flat_fee: fixed charge per executed order
    - percent_fee: fraction of the execution price, per order
    - slippage: adverse fractional price adjustment on fills
    - dividend_yield: annual yield, accrued daily (yield / 252) while long
    """

    flat_fee: float = 0.0
    percent_fee: float = 0.0
    slippage: float = 0.0
    dividend_yield: float = 0.0

    # Day-count convention for converting the annual yield to a daily rate.
    trading_days_per_year: int = 252

    def __post_init__(self) -> None:
        for name in ("flat_fee", "percent_fee", "slippage", "dividend_yield"):
            object.__setattr__(self, name, _non_negative(name, getattr(self, name)))
        _positive_int("trading_days_per_year", self.trading_days_per_year)


@dataclass(frozen=True)
class BacktestConfig:
    """Run-level settings."""

    symbol: str = "ASSET"
    initial_capital: float = 10_000.0

    # Signal computed on bar t is executed on bar t + execution_lag.
    execution_lag: int = 1

    def __post_init__(self) -> None:
        try:
            capital = float(self.initial_capital)
        except (TypeError, ValueError):
            raise ConfigError(f"initial_capital must be a number, got {self.initial_capital!r}") from None
        if capital <= 0:
            raise ConfigError(f"initial_capital must be positive, got {capital}")
        object.__setattr__(self, "initial_capital", capital)
        if isinstance(self.execution_lag, bool) or not isinstance(self.execution_lag, int) or self.execution_lag < 0:
            raise ConfigError(f"execution_lag must be a non-negative integer, got {self.execution_lag!r}")


@dataclass(frozen=True)
class Settings:
    """Everything one run needs, as loaded from a flat key/value file."""

    indicator: IndicatorConfig = field(default_factory=IndicatorConfig)
    cost: CostConfig = field(default_factory=CostConfig)
    backtest: BacktestConfig = field(default_factory=BacktestConfig)
    csv_file: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Settings":
        """Create Settings from a flat dict (e.g. the JSON config file).

        Keys match the dataclass field names. Unknown keys are ignored and
        missing keys keep their defaults.
        """
        d = dict(d or {})

        def pick(config_cls) -> dict:
            names = {f.name for f in fields(config_cls)}
            return {k: v for k, v in d.items() if k in names}

        return cls(
            indicator=IndicatorConfig(**pick(IndicatorConfig)),
            cost=CostConfig(**pick(CostConfig)),
            backtest=BacktestConfig(**pick(BacktestConfig)),
            csv_file=d.get("csv_file"),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "Settings":
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(str(p))
        try:
            d = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {p}: {e}") from e
        if not isinstance(d, dict):
            raise ConfigError(f"Config file {p} must contain a JSON object")
        return cls.from_dict(d)

    def to_dict(self) -> dict:
        out: dict = {}
        for part in (self.indicator, self.cost, self.backtest):
            out.update({f.name: getattr(part, f.name) for f in fields(part)})
        if self.csv_file is not None:
            out["csv_file"] = self.csv_file
        return out
