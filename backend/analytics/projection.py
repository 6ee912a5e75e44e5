"""
Profit Projector
Turns a spread forecast into an expected P&L and a trade call.
"""

import logging
from typing import List

import numpy as np

from .models import ForecastPoint, ProfitPrediction, Recommendation, RiskLevel

logger = logging.getLogger(__name__)

# Band width (in spread percent) above which risk is flagged
HIGH_RISK_SPREAD = 2.0
MEDIUM_RISK_SPREAD = 1.0

NEUTRAL_PREDICTION = ProfitPrediction(
    expected_profit=0.0,
    confidence=0.0,
    best_case_profit=0.0,
    worst_case_profit=0.0,
    recommendation=Recommendation.HOLD,
    risk_level=RiskLevel.HIGH,
)


def classify_risk(spread_volatility: float) -> RiskLevel:
    if spread_volatility > HIGH_RISK_SPREAD:
        return RiskLevel.HIGH
    if spread_volatility > MEDIUM_RISK_SPREAD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def recommend(avg_spread: float, threshold: float) -> Recommendation:
    if avg_spread > threshold:
        return Recommendation.BUY
    if avg_spread < -threshold:
        return Recommendation.SELL
    return Recommendation.HOLD


def project(
    current_price: float,
    forecast: List[ForecastPoint],
    quantity: float = 1.0,
    threshold: float = 0.5
) -> ProfitPrediction:
    """
    Project profit over the whole forecast horizon.

    Best/worst case use the widest band seen at any step,
    not just the last one. Risk thresholds are fixed; callers
    wanting another sensitivity pre-scale `threshold`.

    Args:
        current_price: Spot price the spread percentages apply to
        forecast: Output of one of the estimators
        quantity: Position size
        threshold: Spread percentage for BUY/SELL

    Returns:
        ProfitPrediction (neutral HOLD/HIGH default for an empty forecast)
    """
    if not forecast:
        logger.debug("Empty forecast, returning neutral prediction")
        return NEUTRAL_PREDICTION

    predicted = np.array([p.predicted_spread for p in forecast])
    confidence = np.array([p.confidence for p in forecast])

    avg_spread = float(np.mean(predicted))
    avg_confidence = float(np.mean(confidence))
    best_spread = max(p.upper_bound for p in forecast)
    worst_spread = min(p.lower_bound for p in forecast)

    scale = current_price / 100 * quantity

    return ProfitPrediction(
        expected_profit=avg_spread * scale,
        confidence=avg_confidence,
        best_case_profit=best_spread * scale,
        worst_case_profit=worst_spread * scale,
        recommendation=recommend(avg_spread, threshold),
        risk_level=classify_risk(abs(best_spread - worst_spread)),
    )
