"""
Shared fixtures: small hand-built spread series.
"""
import pytest

from core.models import TimePoint

BASE_TS = 1_700_000_000_000
MINUTE = 60_000


def make_series(spreads, spots=None, step_ms=MINUTE, start=BASE_TS):
    """Build a regular series; futures derived from spot and spread."""
    if spots is None:
        spots = [100.0] * len(spreads)
    return [
        TimePoint(
            timestamp=start + i * step_ms,
            spot=float(spot),
            futures=float(spot) * (1 + spread / 100),
            spread=float(spread),
        )
        for i, (spread, spot) in enumerate(zip(spreads, spots))
    ]


@pytest.fixture
def flat_series():
    return make_series([1.0] * 5)


@pytest.fixture
def linear_series():
    return make_series([1, 2, 3, 4, 5])


@pytest.fixture
def noisy_series():
    spreads = [0.4, 0.55, 0.3, 0.62, 0.48, 0.71, 0.35, 0.58, 0.66, 0.42, 0.5, 0.61]
    return make_series(spreads)
