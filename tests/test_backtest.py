"""
Tests for the backtest simulator and its metrics.
"""
import math

import pytest

from analytics.backtest import (
    BacktestConfig,
    compute_metrics,
    max_drawdown_pct,
    run_backtest,
    run_simple_backtest,
    sharpe_ratio,
)
from analytics.models import PositionType, TradeLabel
from conftest import make_series, BASE_TS, MINUTE

NO_COSTS = BacktestConfig(threshold=0.5, commission=0.0, slippage=0.0)


def test_long_entry_and_zero_cross_exit():
    series = make_series([0.1, 0.6, 0.6, -0.1], spots=[100, 101, 102, 103])
    metrics = run_backtest(series, NO_COSTS)

    assert metrics.total_trades == 1
    (trade,) = metrics.trades
    assert trade.type == PositionType.LONG
    assert trade.entry_price == 101
    assert trade.exit_price == 103
    assert trade.entry_time == series[1].timestamp
    assert trade.exit_time == series[3].timestamp
    assert trade.spread == 0.6
    assert trade.profit == pytest.approx(2.0)


def test_short_entry_and_exit():
    series = make_series([0.0, -0.7, -0.3, 0.2], spots=[100, 100, 98, 97])
    (trade,) = run_backtest(series, NO_COSTS).trades

    assert trade.type == PositionType.SHORT
    assert trade.entry_price == 100
    assert trade.exit_price == 97
    assert trade.profit == pytest.approx(3.0)


def test_first_sample_never_enters():
    series = make_series([0.9, 0.0, -0.1])
    assert run_backtest(series, NO_COSTS).total_trades == 0


def test_open_position_at_end_is_discarded():
    series = make_series([0.0, 0.8, 0.9, 0.7], spots=[100, 100, 110, 120])
    metrics = run_backtest(series, NO_COSTS)

    assert metrics.total_trades == 0
    assert metrics.trades == []
    assert metrics.final_capital == NO_COSTS.initial_capital


def test_transaction_costs():
    config = BacktestConfig(threshold=0.5, commission=0.1, slippage=0.05)
    series = make_series([0.0, 0.6, -0.1], spots=[100, 100, 110])
    (trade,) = run_backtest(series, config).trades

    costs = (100 + 110) * 0.15 / 100
    assert trade.profit == pytest.approx(10 - costs)
    assert trade.profit_percent == pytest.approx((10 - costs) / 100 * 100)


def test_stop_loss_exit():
    config = BacktestConfig(threshold=0.5, stop_loss=2.0, commission=0, slippage=0)
    series = make_series([0.0, 0.6, 0.7, 0.8], spots=[100, 100, 99, 97])
    (trade,) = run_backtest(series, config).trades

    assert trade.exit_price == 97
    assert trade.profit == pytest.approx(-3.0)


def test_take_profit_exit():
    config = BacktestConfig(threshold=0.5, take_profit=5.0, commission=0, slippage=0)
    series = make_series([0.0, -0.6, -0.7, -0.8], spots=[100, 100, 97, 94])
    (trade,) = run_backtest(series, config).trades

    assert trade.type == PositionType.SHORT
    assert trade.exit_price == 94


def test_ledger_consistency():
    config = BacktestConfig(threshold=0.3, commission=0.05, slippage=0.02)
    spreads = [0.0, 0.5, 0.2, -0.1, -0.5, -0.2, 0.1, 0.6, 0.4, -0.3, -0.4, 0.5]
    spots = [100, 101, 103, 102, 100, 98, 99, 101, 104, 103, 101, 102]
    metrics = run_backtest(make_series(spreads, spots), config)

    assert metrics.total_trades > 1
    for trade in metrics.trades:
        costs = config.transaction_cost(trade.entry_price, trade.exit_price)
        assert trade.profit == pytest.approx(trade.gross_profit - costs)


def test_single_position_at_a_time():
    spreads = [0.0, 0.6, -0.1, -0.7, 0.2, 0.8, 0.9, -0.5, -0.9, 0.4]
    metrics = run_backtest(make_series(spreads), NO_COSTS)

    for prev, nxt in zip(metrics.trades, metrics.trades[1:]):
        assert prev.exit_time < nxt.entry_time
    for trade in metrics.trades:
        assert trade.entry_time < trade.exit_time


def test_zero_trades_metrics_are_zero():
    metrics = run_backtest(make_series([0.1, 0.2, 0.1]), NO_COSTS)

    assert metrics.total_trades == 0
    assert metrics.win_rate == 0
    assert metrics.profit_factor == 0
    assert metrics.sharpe_ratio == 0
    assert metrics.max_drawdown == 0
    assert metrics.return_percent == 0
    for value in (metrics.win_rate, metrics.profit_factor, metrics.sharpe_ratio, metrics.max_drawdown):
        assert math.isfinite(value)


@pytest.mark.parametrize("points", [[], make_series([0.9])])
def test_empty_and_single_point_series(points):
    metrics = run_backtest(points, NO_COSTS)
    assert metrics.total_trades == 0
    assert metrics.final_capital == NO_COSTS.initial_capital


def test_profit_factor_infinite_without_losses():
    series = make_series([0.0, 0.6, -0.1], spots=[100, 100, 105])
    metrics = run_backtest(series, NO_COSTS)

    assert metrics.profit_factor == float('inf')
    assert metrics.to_dict()['profit_factor'] is None


def test_aggregate_metrics():
    # two round trips: +5 then -3
    spreads = [0.0, 0.6, -0.1, 0.7, -0.2]
    spots = [100, 100, 105, 105, 102]
    config = BacktestConfig(initial_capital=1000, threshold=0.5, commission=0, slippage=0)
    metrics = run_backtest(make_series(spreads, spots), config)

    assert metrics.total_trades == 2
    assert metrics.winning_trades == 1
    assert metrics.losing_trades == 1
    assert metrics.win_rate == pytest.approx(50)
    assert metrics.total_profit == pytest.approx(5)
    assert metrics.total_loss == pytest.approx(3)
    assert metrics.net_profit == pytest.approx(2)
    assert metrics.profit_factor == pytest.approx(5 / 3)
    assert metrics.avg_win == pytest.approx(5)
    assert metrics.avg_loss == pytest.approx(3)
    assert metrics.largest_win == pytest.approx(5)
    assert metrics.largest_loss == pytest.approx(-3)
    assert metrics.final_capital == pytest.approx(1002)
    assert metrics.return_percent == pytest.approx(0.2)
    assert metrics.max_drawdown == pytest.approx(3 / 1005 * 100)

    returns = [5 / 1000, -3 / 1005]
    mean = sum(returns) / 2
    std = math.sqrt(sum((r - mean) ** 2 for r in returns) / 2)
    assert metrics.sharpe_ratio == pytest.approx(mean / std * math.sqrt(252))


def test_max_drawdown_of_equity_curve():
    assert max_drawdown_pct([100, 120, 90, 130, 117]) == pytest.approx(25.0)
    assert max_drawdown_pct([100]) == 0
    assert max_drawdown_pct([100, 110, 120]) == 0


def test_sharpe_zero_when_returns_constant():
    assert sharpe_ratio([]) == 0
    assert sharpe_ratio([0.01, 0.01, 0.01]) == 0


def test_compute_metrics_without_trades():
    metrics = compute_metrics([], [5000.0], 5000.0)
    assert metrics.final_capital == 5000.0
    assert metrics.trades == []


# =============================================================================
# Simplified variant
# =============================================================================

def test_simple_backtest_round_trip():
    series = make_series([0.2, 0.6, 0.4, 0.05, 0.7, 0.0], spots=[100, 100, 101, 102, 102, 101])
    result = run_simple_backtest(series, buy_threshold=0.5, sell_threshold=0.1, initial_capital=10_000, symbol="TCS")

    assert result.total_trades == 2
    first, second = result.trades
    assert first.pnl == pytest.approx(200)
    assert first.type == TradeLabel.BUY
    assert first.quantity == 100
    assert first.symbol == "TCS"
    assert second.pnl == pytest.approx(-100)
    assert second.type == TradeLabel.SELL
    assert result.profitable_trades == 1
    assert result.total_pnl == pytest.approx(100)
    assert result.final_capital == pytest.approx(10_100)
    assert result.win_rate == pytest.approx(50)
    assert result.max_drawdown == pytest.approx(100 / 10_200 * 100)


def test_simple_backtest_closes_on_last_sample():
    series = make_series([0.0, 0.6, 0.4], spots=[100, 100, 103])
    result = run_simple_backtest(series)

    assert result.total_trades == 1
    assert result.trades[0].pnl == pytest.approx(300)


def test_simple_backtest_window_filter():
    series = make_series([0.6, 0.0, 0.6, 0.0], spots=[100, 101, 102, 104])
    result = run_simple_backtest(series, start_ms=BASE_TS + 2 * MINUTE)

    assert result.total_trades == 1
    assert result.trades[0].pnl == pytest.approx(200)


def test_simple_backtest_empty_window():
    result = run_simple_backtest(make_series([0.6, 0.0]), start_ms=BASE_TS + 10 * MINUTE, initial_capital=500)

    assert result.total_trades == 0
    assert result.final_capital == 500
    assert result.sharpe_ratio == 0
