import numpy as np
import pytest

from ma_cross.exceptions import MetricsError
from ma_cross.metrics import cagr, daily_returns, max_drawdown, performance_report, sharpe_ratio, total_return


def test_total_return():
    assert total_return([100.0, 120.0, 150.0]) == pytest.approx(0.5)
    assert total_return([100.0, 150.0], initial=200.0) == pytest.approx(-0.25)


def test_cagr_uses_252_day_years():
    one_year = np.linspace(100.0, 110.0, 252)
    assert cagr(one_year) == pytest.approx(0.10)
    two_years = np.linspace(100.0, 121.0, 504)
    assert cagr(two_years) == pytest.approx(0.10)


@pytest.mark.parametrize(
    "curve, initial",
    [
        ([], None),
        ([0.0, 10.0], None),
        ([100.0, 10.0], 0.0),
        ([100.0, -5.0], None),
    ],
)
def test_cagr_degenerate_inputs_raise(curve, initial):
    with pytest.raises(MetricsError):
        cagr(curve, initial=initial)


def test_max_drawdown():
    assert max_drawdown([1.0, 2.0, 3.0, 3.0, 4.0]) == 0.0
    assert max_drawdown([100.0, 50.0, 100.0]) == 0.5
    assert max_drawdown([100.0, 120.0, 90.0, 130.0]) == pytest.approx(0.25)
    assert max_drawdown([5.0]) == 0.0


def test_sharpe_matches_sample_statistics():
    equity = [100.0, 110.0, 99.0, 108.9]
    r = np.array([0.1, -0.1, 0.1])
    expected = r.mean() / r.std(ddof=1) * np.sqrt(252)
    assert sharpe_ratio(equity) == pytest.approx(expected)


@pytest.mark.parametrize("equity", [[100.0], [100.0, 101.0], [100.0, 100.0, 100.0]])
def test_sharpe_degenerate_cases_are_zero(equity):
    assert sharpe_ratio(equity) == 0.0


def test_daily_returns_after_zero_value_raise():
    with pytest.raises(MetricsError):
        daily_returns([100.0, 0.0, 10.0])


def test_performance_report():
    rep = performance_report([100.0, 50.0, 100.0], initial=100.0)
    assert rep.total_return == 0.0
    assert rep.max_drawdown == 0.5
    assert rep.cagr == pytest.approx(0.0)
    assert np.isfinite(rep.sharpe_ratio)
