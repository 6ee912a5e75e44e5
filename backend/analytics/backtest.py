"""
Backtest Simulator
Replays a spread series through a single-position threshold strategy.

Strategy:
    - LONG when spread > threshold
    - SHORT when spread < -threshold
    - EXIT on stop-loss, take-profit, or when the spread crosses zero
      against the position

Only closed trades count: a position still open after the last
sample is discarded, it never reaches the ledger or the metrics.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from core.models import TimePoint
from .models import (
    BacktestMetrics,
    PositionType,
    SimpleBacktestResult,
    SimpleTrade,
    Trade,
    TradeLabel,
)

logger = logging.getLogger(__name__)

ANNUALIZATION = np.sqrt(252)


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class BacktestConfig:
    """
    Strategy parameters. Percent units throughout.

    stop_loss / take_profit of None (or 0) disable that exit.
    """
    initial_capital: float = 100_000.0
    threshold: float = 0.5
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    commission: float = 0.05
    slippage: float = 0.02

    def transaction_cost(self, entry_price: float, exit_price: float) -> float:
        """Commission + slippage on both legs of the round trip"""
        return (entry_price + exit_price) * (self.commission + self.slippage) / 100


@dataclass(frozen=True)
class _OpenPosition:
    type: PositionType
    entry_price: float
    entry_time: int
    spread: float

    @property
    def direction(self) -> int:
        return 1 if self.type == PositionType.LONG else -1

    def unrealized_pct(self, price: float) -> float:
        if self.entry_price == 0:
            return 0.0
        return (price - self.entry_price) / self.entry_price * 100 * self.direction


# =============================================================================
# Replay
# =============================================================================

def _entry_signal(point: TimePoint, threshold: float) -> Optional[_OpenPosition]:
    if point.spread > threshold:
        side = PositionType.LONG
    elif point.spread < -threshold:
        side = PositionType.SHORT
    else:
        return None
    return _OpenPosition(
        type=side,
        entry_price=point.spot,
        entry_time=point.timestamp,
        spread=point.spread
    )


def _should_exit(position: _OpenPosition, point: TimePoint, config: BacktestConfig) -> bool:
    pnl_pct = position.unrealized_pct(point.spot)

    if config.stop_loss and pnl_pct < -config.stop_loss:
        return True
    if config.take_profit and pnl_pct > config.take_profit:
        return True

    if position.type == PositionType.LONG:
        return point.spread < 0
    return point.spread > 0


def _close(position: _OpenPosition, point: TimePoint, config: BacktestConfig) -> Trade:
    gross = (point.spot - position.entry_price) * position.direction
    net = gross - config.transaction_cost(position.entry_price, point.spot)

    return Trade(
        entry_time=position.entry_time,
        exit_time=point.timestamp,
        entry_price=position.entry_price,
        exit_price=point.spot,
        spread=position.spread,
        type=position.type,
        profit=net,
        profit_percent=net / position.entry_price * 100 if position.entry_price else 0.0,
    )


def run_backtest(points: List[TimePoint], config: BacktestConfig = BacktestConfig()) -> BacktestMetrics:
    """
    Replay a series and compute performance metrics.

    The first sample only seeds the replay; signals are evaluated
    from the second sample on. A position opened on a sample is
    checked for exit on that same sample.

    Never raises on empty or degenerate input.

    Args:
        points: Chronological series (cleaned)
        config: Strategy parameters

    Returns:
        BacktestMetrics with the closed-trade ledger
    """
    trades: List[Trade] = []
    capital = config.initial_capital
    equity = [capital]
    position: Optional[_OpenPosition] = None

    for point in points[1:]:
        if position is None:
            position = _entry_signal(point, config.threshold)

        if position is not None and _should_exit(position, point, config):
            trade = _close(position, point, config)
            trades.append(trade)
            capital += trade.profit
            equity.append(capital)
            position = None

    if position is not None:
        logger.debug("Discarding %s position still open at series end", position.type.value)

    return compute_metrics(trades, equity, config.initial_capital)


# =============================================================================
# Metrics
# =============================================================================

def max_drawdown_pct(equity: List[float]) -> float:
    """Largest peak-to-trough decline of the equity curve, in percent"""
    if len(equity) < 2:
        return 0.0
    curve = pd.Series(equity, dtype=float)
    running_max = curve.cummax()
    drawdown = ((running_max - curve) / running_max.where(running_max > 0)) * 100
    drawdown = drawdown.fillna(0)
    return float(max(drawdown.max(), 0.0))


def sharpe_ratio(returns: np.ndarray) -> float:
    """
    Annualized Sharpe over per-period returns (population σ).

    √252 assumes daily periods; for trade-by-trade returns this
    is only a rough proxy.
    """
    if len(returns) == 0:
        return 0.0
    std = float(np.std(returns))
    if std < 1e-12:
        return 0.0
    return float(np.mean(returns) / std * ANNUALIZATION)


def compute_metrics(trades: List[Trade], equity: List[float], initial_capital: float) -> BacktestMetrics:
    """
    Derive aggregate statistics from the ledger and equity curve.

    equity[0] is the initial capital; equity[k] the capital
    after the k-th closed trade.
    """
    final_capital = equity[-1] if equity else initial_capital

    if not trades:
        return BacktestMetrics(final_capital=final_capital)

    profits = np.array([t.profit for t in trades])
    wins = profits[profits > 0]
    losses = profits[profits < 0]

    total_profit = float(wins.sum())
    total_loss = float(abs(losses.sum()))

    if total_loss > 0:
        profit_factor = total_profit / total_loss
    elif total_profit > 0:
        profit_factor = float('inf')
    else:
        profit_factor = 0.0

    curve = pd.Series(equity, dtype=float)
    period_returns = (curve.diff() / curve.shift(1)).iloc[1:]
    period_returns = period_returns.replace([np.inf, -np.inf], np.nan).dropna().values

    return BacktestMetrics(
        total_trades=len(trades),
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=len(wins) / len(trades) * 100,
        total_profit=total_profit,
        total_loss=total_loss,
        net_profit=total_profit - total_loss,
        profit_factor=profit_factor,
        sharpe_ratio=sharpe_ratio(period_returns),
        max_drawdown=max_drawdown_pct(equity),
        avg_win=total_profit / len(wins) if len(wins) else 0.0,
        avg_loss=total_loss / len(losses) if len(losses) else 0.0,
        largest_win=float(wins.max()) if len(wins) else 0.0,
        largest_loss=float(losses.min()) if len(losses) else 0.0,
        final_capital=final_capital,
        return_percent=(final_capital - initial_capital) / initial_capital * 100 if initial_capital else 0.0,
        trades=list(trades),
    )


# =============================================================================
# Simplified variant (interactive backtest)
# =============================================================================

def run_simple_backtest(
    points: List[TimePoint],
    buy_threshold: float = 0.5,
    sell_threshold: float = 0.1,
    initial_capital: float = 100_000.0,
    quantity: float = 100,
    symbol: str = "",
    start_ms: Optional[int] = None,
    end_ms: Optional[int] = None
) -> SimpleBacktestResult:
    """
    Long-only threshold backtest with a fixed quantity and no costs.

    - Enter when spread >= buy_threshold
    - Exit when spread <= sell_threshold, or on the last sample of the window
    - Each trade is labelled buy/sell by the sign of its P&L

    Args:
        points: Chronological series
        buy_threshold: Entry spread
        sell_threshold: Exit spread
        initial_capital: Starting capital
        quantity: Units per trade
        symbol: Copied onto each ledger row
        start_ms / end_ms: Optional inclusive timestamp window

    Returns:
        SimpleBacktestResult (zeroed when the window is empty)
    """
    window = [
        p for p in points
        if (start_ms is None or p.timestamp >= start_ms)
        and (end_ms is None or p.timestamp <= end_ms)
    ]

    if not window:
        logger.info("No data in backtest window")
        return SimpleBacktestResult(final_capital=initial_capital)

    in_position = False
    entry_price = 0.0
    capital = initial_capital
    trades: List[SimpleTrade] = []
    last_index = len(window) - 1

    for index, point in enumerate(window):
        if not in_position and point.spread >= buy_threshold:
            in_position = True
            entry_price = point.spot
        elif in_position and (point.spread <= sell_threshold or index == last_index):
            pnl = (point.spot - entry_price) * quantity
            capital += pnl
            trades.append(SimpleTrade(
                timestamp=point.timestamp,
                symbol=symbol,
                type=TradeLabel.BUY if pnl > 0 else TradeLabel.SELL,
                spot_price=point.spot,
                futures_price=point.futures,
                quantity=quantity,
                spread=point.spread,
                pnl=pnl,
            ))
            in_position = False

    if not trades:
        return SimpleBacktestResult(final_capital=capital)

    pnls = np.array([t.pnl for t in trades])
    equity = list(initial_capital + np.cumsum(pnls))
    profitable = int((pnls > 0).sum())
    returns = pnls / initial_capital * 100 if initial_capital else np.zeros(len(pnls))

    return SimpleBacktestResult(
        total_trades=len(trades),
        profitable_trades=profitable,
        total_pnl=float(pnls.sum()),
        max_drawdown=max_drawdown_pct([initial_capital] + equity),
        sharpe_ratio=sharpe_ratio(returns),
        win_rate=profitable / len(trades) * 100,
        final_capital=capital,
        trades=trades,
    )
