from __future__ import annotations

from typing import Callable, Sequence

import numpy as np
import pytest

from ma_cross.data_provider import OhlcvFrame
from ma_cross.types import PriceRecord


def frame_from_closes(closes: Sequence[float], symbol: str = "TEST") -> OhlcvFrame:
    records = [
        PriceRecord(date=f"D{i:04d}", open=c, high=c, low=c, close=c, volume=1000)
        for i, c in enumerate(closes)
    ]
    return OhlcvFrame.from_records(records, symbol=symbol)


@pytest.fixture
def make_frame() -> Callable[..., OhlcvFrame]:
    return frame_from_closes


@pytest.fixture
def random_walk() -> np.ndarray:
    rng = np.random.default_rng(7)
    return 100.0 * np.exp(np.cumsum(rng.normal(0.0003, 0.015, size=400)))


CSV_HEADER = "Date,Open,High,Low,Close,Volume\n"


@pytest.fixture
def write_csv(tmp_path):
    def _write(body: str, header: str = CSV_HEADER, name: str = "prices.csv"):
        path = tmp_path / name
        path.write_text(header + body, encoding="utf-8")
        return path

    return _write
