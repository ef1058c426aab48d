import pytest

from ma_cross.config import CostConfig
from ma_cross.cost_model import CostModel


def test_slippage_is_adverse_on_both_sides():
    model = CostModel(CostConfig(slippage=0.02))
    assert model.execution_price("BUY", 50.0) == pytest.approx(51.0)
    assert model.execution_price("sell", 50.0) == pytest.approx(49.0)
    with pytest.raises(ValueError):
        model.execution_price("HOLD", 50.0)


def test_fee_is_flat_plus_percent_of_fill_price():
    model = CostModel(CostConfig(flat_fee=5.0, percent_fee=0.001, slippage=0.01))
    fill = model.fill("BUY", 200.0)
    assert fill.price == pytest.approx(202.0)
    assert fill.fee == pytest.approx(5.0 + 0.202)


def test_daily_dividend():
    model = CostModel(CostConfig(dividend_yield=0.0504))
    assert model.dividend_daily_rate() == pytest.approx(0.0002)
    assert model.daily_dividend(10, 100.0) == pytest.approx(0.2)
    assert model.daily_dividend(0, 100.0) == 0.0
    assert CostModel(CostConfig()).daily_dividend(10, 100.0) == 0.0
