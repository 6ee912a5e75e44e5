"""
Analytics Module
Strategy analytics for cash-futures spreads.

Structure:
    analytics/
    ├── models.py      → Output types (dataclasses)
    ├── forecast.py    → SMA / EMA / OLS spread forecasts
    ├── projection.py  → Forecast → profit + recommendation
    ├── backtest.py    → Threshold strategy replay + metrics
    ├── position.py    → Pair-trade P&L calculator
    ├── arbitrage.py   → Snapshot opportunity detector
    └── trend.py       → Per-symbol spread trend

Usage:
    from analytics import forecast, projection, backtest

    points = forecast.predict_ema(history, alpha=0.3, horizon_steps=5)
    call = projection.project(spot, points, quantity=1, threshold=0.5)
    metrics = backtest.run_backtest(history, backtest.BacktestConfig())

Design Principles:
    ✓ Functions are PURE (inputs → computation → outputs)
    ✓ NO persistence
    ✓ NO shared state (SpreadTrendTracker is owned by its caller)
    ✓ NO HTTP handling
"""

from . import forecast
from . import projection
from . import backtest
from . import position
from . import arbitrage
from . import trend

from .models import (
    PositionType,
    Recommendation,
    RiskLevel,
    ForecastMethod,
    SpreadTrend,
    TradeLabel,
    ForecastPoint,
    LinearFit,
    ProfitPrediction,
    Trade,
    BacktestMetrics,
    SimpleTrade,
    SimpleBacktestResult,
    PositionPnL,
    ProfitMetrics,
    ArbitrageResult,
)
from .backtest import BacktestConfig
from .trend import SpreadTrendTracker

__all__ = [
    # Modules
    "forecast",
    "projection",
    "backtest",
    "position",
    "arbitrage",
    "trend",
    # Enums
    "PositionType",
    "Recommendation",
    "RiskLevel",
    "ForecastMethod",
    "SpreadTrend",
    "TradeLabel",
    # Types
    "ForecastPoint",
    "LinearFit",
    "ProfitPrediction",
    "Trade",
    "BacktestMetrics",
    "SimpleTrade",
    "SimpleBacktestResult",
    "PositionPnL",
    "ProfitMetrics",
    "ArbitrageResult",
    "BacktestConfig",
    "SpreadTrendTracker",
]
