"""
Analytics Output Types
Dataclasses for analytics results.

All results are value objects: built fresh per call,
never mutated after return.
"""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


# =============================================================================
# ENUMS
# =============================================================================

class PositionType(str, Enum):
    """Direction of an open position"""
    LONG = "LONG"
    SHORT = "SHORT"


class Recommendation(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ForecastMethod(str, Enum):
    """Available spread estimators"""
    SMA = "SMA"
    EMA = "EMA"
    LINEAR = "LINEAR"


class SpreadTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class TradeLabel(str, Enum):
    """Reporting label of the simplified backtest (not a strategy side)"""
    BUY = "buy"
    SELL = "sell"


def _finite_or_none(value: float) -> Optional[float]:
    """JSON has no Infinity; serialize it as null"""
    return value if math.isfinite(value) else None


# =============================================================================
# FORECAST OUTPUT TYPES
# =============================================================================

@dataclass(frozen=True)
class ForecastPoint:
    """
    One projected spread value.

    Invariant: lower_bound <= predicted_spread <= upper_bound
    """
    timestamp: int
    predicted_spread: float
    confidence: float    # 0-100, non-increasing over the horizon
    upper_bound: float
    lower_bound: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LinearFit:
    """
    OLS fit of spread against sample index.

    spread = slope * index + intercept + ε
    """
    slope: float
    intercept: float
    std_error: float     # Residual standard error
    r_squared: float
    n: int


@dataclass(frozen=True)
class ProfitPrediction:
    """Forecast converted to a trade recommendation"""
    expected_profit: float
    confidence: float
    best_case_profit: float
    worst_case_profit: float
    recommendation: Recommendation
    risk_level: RiskLevel

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['recommendation'] = self.recommendation.value
        data['risk_level'] = self.risk_level.value
        return data


# =============================================================================
# BACKTEST OUTPUT TYPES
# =============================================================================

@dataclass(frozen=True)
class Trade:
    """
    A closed position. Created only on exit, never modified.

    profit is net of commission and slippage.
    """
    entry_time: int
    exit_time: int
    entry_price: float
    exit_price: float
    spread: float        # Spread at entry
    type: PositionType
    profit: float
    profit_percent: float

    @property
    def direction(self) -> int:
        return 1 if self.type == PositionType.LONG else -1

    @property
    def gross_profit(self) -> float:
        return (self.exit_price - self.entry_price) * self.direction

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['type'] = self.type.value
        return data


@dataclass
class BacktestMetrics:
    """
    Aggregate statistics derived from the trade ledger.

    profit_factor is +inf when there are wins and no losses.
    """
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    net_profit: float = 0.0
    profit_factor: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    final_capital: float = 0.0
    return_percent: float = 0.0
    trades: List[Trade] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if k != 'trades'}
        data['profit_factor'] = _finite_or_none(self.profit_factor)
        data['trades'] = [t.to_dict() for t in self.trades]
        return data


@dataclass(frozen=True)
class SimpleTrade:
    """Ledger row of the simplified (interactive) backtest"""
    timestamp: int
    symbol: str
    type: TradeLabel
    spot_price: float
    futures_price: float
    quantity: float
    spread: float
    pnl: float

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['type'] = self.type.value
        return data


@dataclass
class SimpleBacktestResult:
    total_trades: int = 0
    profitable_trades: int = 0
    total_pnl: float = 0.0
    max_drawdown: float = 0.0
    sharpe_ratio: float = 0.0
    win_rate: float = 0.0
    final_capital: float = 0.0
    trades: List[SimpleTrade] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if k != 'trades'}
        data['trades'] = [t.to_dict() for t in self.trades]
        return data


# =============================================================================
# POSITION / ARBITRAGE OUTPUT TYPES
# =============================================================================

@dataclass(frozen=True)
class PositionPnL:
    """What-if P&L of a long-spot / short-futures pair trade"""
    spot_pnl: float
    futures_pnl: float
    gross_pnl: float
    total_fees: float
    net_pnl: float
    margin: float
    roi: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProfitMetrics:
    """Lot-size based profit of one cash-futures spread"""
    lot_size: int
    gross_profit: float
    margin_required: float
    roi_percentage: float


@dataclass(frozen=True)
class ArbitrageResult:
    """Opportunity check for one symbol snapshot"""
    opportunity: bool
    symbol: str
    spot_price: float
    futures_price: float
    spread: float
    spread_percentage: float
    action: str
    details: str
    lot_size: int
    gross_profit: float
    margin_required: float
    roi_percentage: float
    spread_trend: SpreadTrend
    last_update: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['spread_trend'] = self.spread_trend.value
        return data
