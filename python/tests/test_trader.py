import numpy as np
import pytest

from ma_cross.config import BacktestConfig, CostConfig, IndicatorConfig
from ma_cross.data_manager import CrossoverDataManager
from ma_cross.trader import CrossoverTrader
from ma_cross.types import PositionState


def _run(frame, signals, capital=100.0, **costs):
    trader = CrossoverTrader(
        frame,
        np.asarray(signals, dtype=np.int8),
        cost_cfg=CostConfig(**costs),
        bt_cfg=BacktestConfig(initial_capital=capital),
    )
    trader.run_full_backtest()
    return trader


def test_buy_then_sell_without_costs(make_frame):
    frame = make_frame([10.0, 10.0, 10.0, 10.0])
    trader = _run(frame, [0, 1, 0, -1])

    buy, sell = trader.trade_log
    assert (buy.date, buy.action, buy.price, buy.shares) == ("D0001", "BUY", 10.0, 10)
    assert buy.cash == pytest.approx(0.0)
    assert buy.portfolio_value == pytest.approx(100.0)
    assert (sell.date, sell.action, sell.shares, sell.reason) == ("D0003", "SELL", 10, "SignalExit")
    assert sell.cash == pytest.approx(100.0)
    assert sell.portfolio_value == sell.cash
    assert trader.equity.tolist() == pytest.approx([100.0] * 4)
    assert trader.account.position is PositionState.FLAT


def test_fees_and_slippage_compose_per_order(make_frame):
    frame = make_frame([100.0, 100.0, 110.0])
    trader = _run(frame, [1, 0, -1], capital=1000.0, flat_fee=5.0, percent_fee=0.01, slippage=0.01)

    buy, sell = trader.trade_log
    assert buy.price == pytest.approx(101.0)
    # fee = 5 + 0.01 * 101; floor((1000 - 6.01) / 101) = 9
    assert buy.shares == 9
    assert buy.cash == pytest.approx(1000.0 - 9 * 101.0 - 6.01)
    assert sell.price == pytest.approx(108.9)
    assert sell.cash == pytest.approx(84.99 + 9 * 108.9 - (5.0 + 1.089))

    # buy day is valued at the fill price, later days at the close
    assert trader.equity.tolist() == pytest.approx([84.99 + 9 * 101.0, 84.99 + 9 * 100.0, sell.cash])


def test_buy_while_long_and_sell_while_flat_are_no_ops(make_frame):
    frame = make_frame([10.0] * 5)
    trader = _run(frame, [-1, 1, 1, -1, -1])
    assert [t.action for t in trader.trade_log] == ["BUY", "SELL"]
    assert [t.date for t in trader.trade_log] == ["D0001", "D0003"]


def test_unaffordable_buy_is_skipped(make_frame):
    frame = make_frame([100.0, 100.0])
    trader = _run(frame, [1, 0], capital=50.0)
    assert trader.trade_log == []
    assert trader.equity.tolist() == [50.0, 50.0]
    assert trader.final_cash == 50.0


def test_skipped_buy_is_valued_at_close(make_frame):
    frame = make_frame([100.0, 100.0])
    trader = _run(frame, [1, 0], capital=50.0, slippage=0.01)
    assert trader._enter_long("D0000", 100.0) == 100.0
    assert trader.equity.tolist() == [50.0, 50.0]


def test_fee_larger_than_cash_forbids_buy(make_frame):
    frame = make_frame([10.0, 10.0])
    trader = _run(frame, [1, 0], capital=100.0, flat_fee=200.0)
    assert trader.trade_log == []
    assert trader.final_cash == 100.0
    assert trader.account.shares == 0


def test_zero_close_never_buys(make_frame):
    frame = make_frame([0.0, 10.0])
    trader = _run(frame, [1, 0])
    assert trader.trade_log == []


def test_share_count_rounds_down(make_frame):
    frame = make_frame([30.0, 30.0])
    trader = _run(frame, [1, 0], capital=100.0)
    assert trader.trade_log[0].shares == 3
    assert trader.trade_log[0].cash == pytest.approx(10.0)


def test_open_position_is_liquidated_after_last_bar(make_frame):
    frame = make_frame([10.0, 12.0])
    trader = _run(frame, [1, 0], slippage=0.1)

    buy, final = trader.trade_log
    assert buy.price == pytest.approx(11.0)
    assert buy.shares == 9
    assert final.reason == "FinalLiquidation"
    assert final.date == "D0001"
    assert final.price == pytest.approx(10.8)
    assert final.shares == 9
    assert final.cash == pytest.approx(1.0 + 9 * 10.8)
    assert trader.account.shares == 0
    # the curve is not rewritten by the liquidation
    assert trader.equity.tolist() == pytest.approx([1.0 + 9 * 11.0, 1.0 + 9 * 12.0])


def test_finalize_is_idempotent(make_frame):
    frame = make_frame([10.0, 12.0])
    trader = _run(frame, [1, 0])
    assert trader.finalize() is None
    assert len(trader.trade_log) == 2


def test_dividends_accrue_daily_while_holding(make_frame):
    frame = make_frame([100.0] * 253)
    trader = _run(frame, [1] + [0] * 252, capital=10_000.0, dividend_yield=0.05)

    assert trader.trade_log[0].shares == 100
    # bar 0 buys after the (empty) accrual; bars 1..252 each pay 100*100*0.05/252
    assert trader.equity[252] - 10_000.0 == pytest.approx(500.0)
    assert trader.final_cash == pytest.approx(10_500.0)


def test_no_dividend_when_flat(make_frame):
    frame = make_frame([100.0] * 10)
    trader = _run(frame, [0] * 10, capital=1000.0, dividend_yield=0.05)
    assert trader.equity.tolist() == [1000.0] * 10


def test_account_invariants_on_random_walk(make_frame, random_walk):
    frame = make_frame(random_walk)
    dm = CrossoverDataManager(frame, IndicatorConfig(short_ma_window=5, long_ma_window=20, short_ma_type="WMA"))
    trader = _run(
        frame,
        dm.executable_signals(),
        capital=10_000.0,
        flat_fee=1.0,
        percent_fee=0.001,
        slippage=0.001,
        dividend_yield=0.02,
    )

    assert len(trader.equity) == len(frame)
    assert len(trader.trade_log) >= 2
    actions = [t.action for t in trader.trade_log]
    assert actions[0] == "BUY"
    assert actions[-1] == "SELL"
    assert all(a != b for a, b in zip(actions, actions[1:]))
    assert all(t.cash >= 0 for t in trader.trade_log)
    assert all(t.shares > 0 for t in trader.trade_log)
    assert trader.account.shares == 0
    assert trader.buy_count == actions.count("BUY")


def test_misaligned_signals_raise(make_frame):
    with pytest.raises(ValueError):
        CrossoverTrader(make_frame([1.0, 2.0]), np.array([0], dtype=np.int8))


def test_empty_series(make_frame):
    trader = _run(make_frame([]), [])
    assert len(trader.equity) == 0
    assert trader.trade_log == []
