"""
Forecast Estimators
Project the spread series forward with a 95% confidence band.

Three interchangeable estimators, all working on the `.spread` field:
    - SMA:    flat projection, constant band
    - EMA:    flat projection, band widening with √step
    - LINEAR: OLS trend line with a prediction interval

Insufficient history returns [] ("prediction unavailable"), never raises.
Only invalid arguments (negative horizon, bad periods/alpha) raise ValueError.
"""

import logging
from typing import Callable, Dict, List

import numpy as np
import pandas as pd
from scipy import stats

from core.models import TimePoint
from .models import ForecastMethod, ForecastPoint, LinearFit

logger = logging.getLogger(__name__)

Z_95 = 1.96
DEFAULT_STEP_MS = 60_000


def _confidence(step: int, decay: float) -> float:
    return max(0.0, 100.0 - decay * step)


def _check_horizon(horizon_steps: int) -> None:
    if horizon_steps < 0:
        raise ValueError(f"horizon_steps must be >= 0, got {horizon_steps}")


def _spreads(history: List[TimePoint]) -> np.ndarray:
    return np.array([p.spread for p in history], dtype=float)


# =============================================================================
# SMA
# =============================================================================

def predict_sma(
    history: List[TimePoint],
    periods: int = 5,
    horizon_steps: int = 5,
    step_ms: int = DEFAULT_STEP_MS
) -> List[ForecastPoint]:
    """
    Simple moving average forecast.

    Mean and standard deviation of the last `periods` spreads,
    held flat across the horizon. Band is mean ± 1.96σ at every step.

    Args:
        history: Chronological series
        periods: Look-back window (needs at least this many points)
        horizon_steps: Number of future points
        step_ms: Spacing of forecast timestamps

    Returns:
        Forecast points, or [] when history is shorter than `periods`
    """
    _check_horizon(horizon_steps)
    if periods < 1:
        raise ValueError(f"periods must be >= 1, got {periods}")

    if len(history) < periods:
        logger.debug("SMA needs %d points, got %d", periods, len(history))
        return []

    recent = _spreads(history)[-periods:]
    sma = float(np.mean(recent))
    std_dev = float(np.std(recent))
    band = Z_95 * std_dev

    last_ts = history[-1].timestamp
    return [
        ForecastPoint(
            timestamp=last_ts + i * step_ms,
            predicted_spread=sma,
            confidence=_confidence(i, 15),
            upper_bound=sma + band,
            lower_bound=sma - band,
        )
        for i in range(1, horizon_steps + 1)
    ]


# =============================================================================
# EMA
# =============================================================================

def predict_ema(
    history: List[TimePoint],
    alpha: float = 0.3,
    horizon_steps: int = 5,
    step_ms: int = DEFAULT_STEP_MS
) -> List[ForecastPoint]:
    """
    Exponential moving average forecast.

    EMA is folded forward from the first spread (no bias adjustment).
    The final EMA is held flat; σ comes from the in-sample
    residuals (actual − EMA at each index), and the band
    widens as 1.96·σ·√step.

    Returns:
        Forecast points, or [] with fewer than 2 samples
    """
    _check_horizon(horizon_steps)
    if not 0 < alpha <= 1:
        raise ValueError(f"alpha must be in (0, 1], got {alpha}")

    if len(history) < 2:
        logger.debug("EMA needs 2 points, got %d", len(history))
        return []

    spreads = pd.Series(_spreads(history))
    ema_series = spreads.ewm(alpha=alpha, adjust=False).mean()
    ema = float(ema_series.iloc[-1])

    errors = (spreads - ema_series).values
    std_dev = float(np.sqrt(np.mean(errors ** 2)))

    last_ts = history[-1].timestamp
    points = []
    for i in range(1, horizon_steps + 1):
        band = Z_95 * std_dev * np.sqrt(i)
        points.append(ForecastPoint(
            timestamp=last_ts + i * step_ms,
            predicted_spread=ema,
            confidence=_confidence(i, 12),
            upper_bound=float(ema + band),
            lower_bound=float(ema - band),
        ))
    return points


# =============================================================================
# LINEAR REGRESSION
# =============================================================================

def fit_linear_trend(spreads: np.ndarray) -> LinearFit:
    """
    Closed-form OLS of spread on sample index 0..n-1.

    std_error is the root mean squared residual (divided by n).
    """
    y = np.asarray(spreads, dtype=float)
    n = len(y)
    x = np.arange(n, dtype=float)

    result = stats.linregress(x, y)
    slope = float(result.slope)
    intercept = float(result.intercept)

    residuals = y - (slope * x + intercept)
    std_error = float(np.sqrt(np.mean(residuals ** 2)))

    ss_tot = float(np.sum((y - y.mean()) ** 2))
    r_squared = 1 - float(np.sum(residuals ** 2)) / ss_tot if ss_tot > 0 else 0.0

    return LinearFit(
        slope=slope,
        intercept=intercept,
        std_error=std_error,
        r_squared=float(r_squared),
        n=n
    )


def predict_linear_regression(
    history: List[TimePoint],
    horizon_steps: int = 5,
    step_ms: int = DEFAULT_STEP_MS
) -> List[ForecastPoint]:
    """
    Linear trend forecast with a prediction interval.

    Step i evaluates the fitted line at index x0 = n + i - 1.
    Margin: 1.96 · stdError · √(1 + 1/n + (x0 − x̄)² / Sxx)

    Returns:
        Forecast points, or [] with fewer than 3 samples
    """
    _check_horizon(horizon_steps)

    if len(history) < 3:
        logger.debug("Linear regression needs 3 points, got %d", len(history))
        return []

    fit = fit_linear_trend(_spreads(history))
    n = fit.n
    x_mean = (n - 1) / 2.0
    sxx = float(np.sum((np.arange(n) - x_mean) ** 2))

    last_ts = history[-1].timestamp
    points = []
    for i in range(1, horizon_steps + 1):
        x0 = n + i - 1
        predicted = fit.slope * x0 + fit.intercept
        margin = Z_95 * fit.std_error * np.sqrt(1 + 1 / n + (x0 - x_mean) ** 2 / sxx)
        points.append(ForecastPoint(
            timestamp=last_ts + i * step_ms,
            predicted_spread=float(predicted),
            confidence=_confidence(i, 10),
            upper_bound=float(predicted + margin),
            lower_bound=float(predicted - margin),
        ))
    return points


# =============================================================================
# DISPATCH
# =============================================================================

def predict(
    method: ForecastMethod,
    history: List[TimePoint],
    horizon_steps: int = 5,
    step_ms: int = DEFAULT_STEP_MS,
    periods: int = 5,
    alpha: float = 0.3
) -> List[ForecastPoint]:
    """
    Run the named estimator.

    `periods` only applies to SMA, `alpha` only to EMA.
    """
    method = ForecastMethod(method)

    estimators: Dict[ForecastMethod, Callable[[], List[ForecastPoint]]] = {
        ForecastMethod.SMA: lambda: predict_sma(history, periods, horizon_steps, step_ms),
        ForecastMethod.EMA: lambda: predict_ema(history, alpha, horizon_steps, step_ms),
        ForecastMethod.LINEAR: lambda: predict_linear_regression(history, horizon_steps, step_ms),
    }
    return estimators[method]()
