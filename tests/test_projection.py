"""
Tests for the profit projector.
"""
import pytest

from analytics.models import ForecastPoint, Recommendation, RiskLevel
from analytics.projection import NEUTRAL_PREDICTION, classify_risk, project


def fp(spread, lower=None, upper=None, confidence=80.0, ts=0):
    return ForecastPoint(
        timestamp=ts,
        predicted_spread=spread,
        confidence=confidence,
        upper_bound=spread if upper is None else upper,
        lower_bound=spread if lower is None else lower,
    )


def test_empty_forecast_returns_neutral_default():
    result = project(100, [], 1, 0.5)

    assert result == NEUTRAL_PREDICTION
    assert result.expected_profit == 0
    assert result.confidence == 0
    assert result.best_case_profit == 0
    assert result.worst_case_profit == 0
    assert result.recommendation == Recommendation.HOLD
    assert result.risk_level == RiskLevel.HIGH


def test_expected_best_and_worst_profit():
    forecast = [
        fp(0.8, lower=0.5, upper=1.0, confidence=90),
        fp(0.6, lower=0.2, upper=1.2, confidence=70),
    ]
    result = project(1000, forecast, quantity=2, threshold=0.5)

    assert result.expected_profit == pytest.approx(1000 * 0.7 / 100 * 2)
    assert result.best_case_profit == pytest.approx(1000 * 1.2 / 100 * 2)
    assert result.worst_case_profit == pytest.approx(1000 * 0.2 / 100 * 2)
    assert result.confidence == pytest.approx(80)
    assert result.recommendation == Recommendation.BUY
    assert result.risk_level == RiskLevel.LOW


@pytest.mark.parametrize("spread, expected", [
    (0.6, Recommendation.BUY),
    (-0.6, Recommendation.SELL),
    (0.5, Recommendation.HOLD),
    (-0.5, Recommendation.HOLD),
    (0.0, Recommendation.HOLD),
])
def test_recommendation_rule(spread, expected):
    assert project(100, [fp(spread)], threshold=0.5).recommendation == expected


@pytest.mark.parametrize("volatility, expected", [
    (0.5, RiskLevel.LOW),
    (1.0, RiskLevel.LOW),
    (1.5, RiskLevel.MEDIUM),
    (2.0, RiskLevel.MEDIUM),
    (2.5, RiskLevel.HIGH),
])
def test_risk_thresholds(volatility, expected):
    assert classify_risk(volatility) == expected


def test_band_extremes_taken_across_whole_horizon():
    forecast = [
        fp(0.0, lower=-2.0, upper=0.1),
        fp(0.0, lower=-0.1, upper=0.1),
    ]
    result = project(100, forecast)
    # widest band came from the first step
    assert result.worst_case_profit == pytest.approx(-2.0)
    assert result.risk_level == RiskLevel.HIGH
