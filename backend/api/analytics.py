"""
Analytics API
Endpoints over the analytics core.

The caller supplies the series in every request and series are never
stored. Every incoming series is cleaned (non-finite samples and
out-of-order timestamps dropped) before it reaches the core. The only
retained state is the bounded per-symbol spread window behind the
/arbitrage trend label.

Endpoints:
    POST /api/analytics/aggregate        → Bucket a series (OHLC)
    POST /api/analytics/forecast         → SMA / EMA / LINEAR forecast
    POST /api/analytics/project          → Forecast → profit + recommendation
    POST /api/analytics/forecast/profit  → Both of the above in one call
    POST /api/analytics/backtest         → Threshold strategy backtest
    POST /api/analytics/backtest/simple  → Interactive long-only backtest
    POST /api/analytics/position         → Pair-trade P&L
    POST /api/analytics/arbitrage        → Opportunity check for a quote
"""

import logging
from dataclasses import replace
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union

from core import TimePoint, aggregate, clean_series, settings
from analytics import (
    forecast,
    projection,
    backtest,
    position,
    arbitrage,
    ForecastMethod,
    ForecastPoint,
    BacktestConfig,
    SpreadTrendTracker,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])

# Per-symbol spread history for /arbitrage trend labels
_trend_tracker = SpreadTrendTracker(max_symbols=settings.TREND_MAX_SYMBOLS)


# =============================================================================
# Request Models
# =============================================================================

class _Request(BaseModel):
    """Scalars must be finite; series points are cleaned in the handlers"""
    model_config = ConfigDict(allow_inf_nan=False)


class AggregateRequest(_Request):
    """Request body for aggregation"""
    points: List[TimePoint]
    interval: Union[str, int] = "5m"  # label (1m/5m/15m/1h) or width in ms


class ForecastRequest(_Request):
    """Request body for a spread forecast"""
    points: List[TimePoint]
    method: ForecastMethod = ForecastMethod.EMA
    horizon_steps: int = Field(default=settings.FORECAST_HORIZON, ge=0)
    step_ms: int = Field(default=settings.FORECAST_STEP_MS, gt=0)
    periods: int = Field(default=settings.SMA_PERIODS, ge=1)
    alpha: float = Field(default=settings.EMA_ALPHA, gt=0, le=1)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "points": [
                {"timestamp": 1700000000000, "spot": 2850.0, "futures": 2865.0, "spread": 0.53},
                {"timestamp": 1700000060000, "spot": 2851.0, "futures": 2867.0, "spread": 0.56},
            ],
            "method": "EMA",
            "horizon_steps": 5
        }
    })


class ForecastPointIn(_Request):
    timestamp: int
    predicted_spread: float
    confidence: float
    upper_bound: float
    lower_bound: float


class ProjectRequest(_Request):
    """Request body for profit projection of an existing forecast"""
    current_price: float
    forecast: List[ForecastPointIn]
    quantity: float = 1.0
    threshold: float = settings.SIGNAL_THRESHOLD


class ForecastProfitRequest(ForecastRequest):
    current_price: Optional[float] = None  # defaults to the last spot
    quantity: float = 1.0
    threshold: float = settings.SIGNAL_THRESHOLD


class BacktestRequest(_Request):
    """Request body for the threshold strategy backtest"""
    points: List[TimePoint]
    initial_capital: float = settings.INITIAL_CAPITAL
    threshold: float = settings.SIGNAL_THRESHOLD
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    commission: float = settings.COMMISSION_PCT
    slippage: float = settings.SLIPPAGE_PCT


class SimpleBacktestRequest(_Request):
    points: List[TimePoint]
    symbol: str = ""
    buy_threshold: float = settings.SIMPLE_BUY_THRESHOLD
    sell_threshold: float = settings.SIMPLE_SELL_THRESHOLD
    initial_capital: float = settings.INITIAL_CAPITAL
    start_ms: Optional[int] = None
    end_ms: Optional[int] = None


class PositionRequest(_Request):
    """Request body for the pair-trade P&L calculator"""
    quantity: float
    spot_entry: float
    spot_exit: float
    futures_entry: float
    futures_exit: float
    fee_rate: float = settings.FEE_RATE_PCT
    margin_rate: float = settings.MARGIN_RATE


class ArbitrageRequest(_Request):
    symbol: str = Field(..., min_length=1, max_length=20)
    spot_price: float
    futures_price: float
    threshold_percentage: float = settings.ARBITRAGE_THRESHOLD_PCT


# =============================================================================
# Series
# =============================================================================

@router.post("/aggregate")
async def aggregate_series(request: AggregateRequest):
    """
    Bucket a series into fixed-width OHLC points.

    Aggregating to the feed's native resolution returns the series unchanged.
    """
    try:
        points = aggregate(request.points, request.interval, native_ms=settings.NATIVE_INTERVAL_MS)
    except ValueError as e:
        raise HTTPException(400, str(e))

    return {
        "interval": request.interval,
        "input_points": len(request.points),
        "output_points": len(points),
        "points": [p.model_dump() for p in points]
    }


# =============================================================================
# Forecast
# =============================================================================

def _run_forecast(request: ForecastRequest, points: List[TimePoint]) -> List[ForecastPoint]:
    try:
        return forecast.predict(
            request.method,
            points,
            horizon_steps=request.horizon_steps,
            step_ms=request.step_ms,
            periods=request.periods,
            alpha=request.alpha
        )
    except ValueError as e:
        raise HTTPException(400, str(e))


@router.post("/forecast")
async def run_forecast(request: ForecastRequest):
    """
    Forecast the spread forward.

    An empty `forecast` list means the history is too short
    for the chosen method; it is not an error.
    """
    points = clean_series(request.points)
    result = _run_forecast(request, points)
    logger.info("%s forecast: %d history points → %d steps", request.method.value, len(points), len(result))

    return {
        "method": request.method.value,
        "history_points": len(points),
        "available": len(result) > 0,
        "forecast": [p.to_dict() for p in result]
    }


@router.post("/project")
async def project_profit(request: ProjectRequest):
    points = [ForecastPoint(**p.model_dump()) for p in request.forecast]
    result = projection.project(request.current_price, points, request.quantity, request.threshold)
    return {"prediction": result.to_dict()}


@router.post("/forecast/profit")
async def forecast_profit(request: ForecastProfitRequest):
    """Forecast and project in one call"""
    points = clean_series(request.points)
    result = _run_forecast(request, points)

    current_price = request.current_price
    if current_price is None:
        if not points:
            raise HTTPException(400, "current_price is required when no points are given")
        current_price = points[-1].spot

    prediction = projection.project(current_price, result, request.quantity, request.threshold)

    return {
        "method": request.method.value,
        "current_price": current_price,
        "forecast": [p.to_dict() for p in result],
        "prediction": prediction.to_dict()
    }


# =============================================================================
# Backtest
# =============================================================================

@router.post("/backtest")
async def run_backtest(request: BacktestRequest):
    config = BacktestConfig(
        initial_capital=request.initial_capital,
        threshold=request.threshold,
        stop_loss=request.stop_loss,
        take_profit=request.take_profit,
        commission=request.commission,
        slippage=request.slippage
    )
    points = clean_series(request.points)
    metrics = backtest.run_backtest(points, config)
    logger.info("Backtest over %d points: %d trades", len(points), metrics.total_trades)

    return {
        "bars_used": len(points),
        "backtest": metrics.to_dict()
    }


@router.post("/backtest/simple")
async def run_simple_backtest(request: SimpleBacktestRequest):
    result = backtest.run_simple_backtest(
        clean_series(request.points),
        buy_threshold=request.buy_threshold,
        sell_threshold=request.sell_threshold,
        initial_capital=request.initial_capital,
        symbol=request.symbol.upper(),
        start_ms=request.start_ms,
        end_ms=request.end_ms
    )
    return {"backtest": result.to_dict()}


# =============================================================================
# Position / Arbitrage
# =============================================================================

@router.post("/position")
async def position_pnl(request: PositionRequest):
    result = position.calculate_position_pnl(
        quantity=request.quantity,
        spot_entry=request.spot_entry,
        spot_exit=request.spot_exit,
        futures_entry=request.futures_entry,
        futures_exit=request.futures_exit,
        fee_rate=request.fee_rate,
        margin_rate=request.margin_rate
    )
    return {"position": result.to_dict()}


@router.post("/arbitrage")
async def check_arbitrage(request: ArbitrageRequest):
    if request.spot_price <= 0:
        raise HTTPException(400, "spot_price must be positive")

    result = arbitrage.detect_cash_futures_arbitrage(
        request.symbol,
        request.spot_price,
        request.futures_price,
        request.threshold_percentage
    )
    trend = _trend_tracker.update(result.symbol, result.spread_percentage)
    return replace(result, spread_trend=trend).to_dict()
