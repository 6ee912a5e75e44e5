"""
TimeSeries Aggregator
Converts a spot/futures/spread series to fixed-width OHLC buckets.

Flow:
1. Drop malformed samples (non-finite values, out-of-order timestamps)
2. Scan left to right, opening a new bucket when the interval is exceeded
3. Reduce each bucket to one TimePoint (means + OHLC)
4. Emit the trailing partial bucket too, no data is dropped at the tail
"""

import logging
from typing import List, Union

import pandas as pd

from .models import TimePoint

logger = logging.getLogger(__name__)


# =============================================================================
# Timeframe Configuration
# =============================================================================

TIMEFRAME_MS = {
    "1m": 60_000,
    "5m": 300_000,
    "15m": 900_000,
    "1h": 3_600_000,
}

# Resolution of the live feed; aggregating to it is a no-op
NATIVE_INTERVAL_MS = TIMEFRAME_MS["1m"]


def to_interval_ms(interval: Union[str, int]) -> int:
    """
    Resolve a timeframe label ("5m") or raw millisecond width.

    Raises:
        ValueError: unknown label or non-positive width
    """
    if isinstance(interval, str):
        if interval not in TIMEFRAME_MS:
            raise ValueError(f"Unknown timeframe: {interval}")
        return TIMEFRAME_MS[interval]
    if interval <= 0:
        raise ValueError(f"Bucket width must be positive, got {interval}")
    return int(interval)


# =============================================================================
# Cleaning
# =============================================================================

def clean_series(points: List[TimePoint]) -> List[TimePoint]:
    """
    Drop samples downstream analytics cannot handle.

    Skips points with a non-finite numeric field and points whose
    timestamp does not strictly increase over the last kept point.
    """
    cleaned: List[TimePoint] = []
    dropped = 0

    for point in points:
        if not point.is_finite():
            dropped += 1
            continue
        if cleaned and point.timestamp <= cleaned[-1].timestamp:
            dropped += 1
            continue
        cleaned.append(point)

    if dropped:
        logger.warning("Dropped %d malformed samples out of %d", dropped, len(points))

    return cleaned


# =============================================================================
# Bucketing
# =============================================================================

def bucket_points(points: List[TimePoint], bucket_ms: int) -> List[List[TimePoint]]:
    """
    Partition points into contiguous time buckets.

    A new bucket starts when `timestamp - bucket_start >= bucket_ms`;
    bucket_start then resets to that point. Single pass, no look-ahead.
    """
    if not points:
        return []

    buckets: List[List[TimePoint]] = []
    current: List[TimePoint] = []
    bucket_start = points[0].timestamp

    for point in points:
        if point.timestamp - bucket_start < bucket_ms:
            current.append(point)
        else:
            if current:
                buckets.append(current)
            current = [point]
            bucket_start = point.timestamp

    if current:
        buckets.append(current)

    return buckets


def _reduce_bucket(bucket: List[TimePoint]) -> TimePoint:
    """Collapse one bucket to a single point"""
    frame = pd.DataFrame({
        'spot': [p.spot for p in bucket],
        'futures': [p.futures for p in bucket],
        'spread': [p.spread for p in bucket],
        'high': [p.high_price for p in bucket],
        'low': [p.low_price for p in bucket],
    })
    first, last = bucket[0], bucket[-1]

    return TimePoint(
        timestamp=last.timestamp,
        time=last.time,
        spot=float(frame['spot'].mean()),
        futures=float(frame['futures'].mean()),
        spread=float(frame['spread'].mean()),
        open=first.open_price,
        high=float(frame['high'].max()),
        low=float(frame['low'].min()),
        close=last.close_price,
    )


# =============================================================================
# Aggregation
# =============================================================================

def aggregate(
    points: List[TimePoint],
    bucket_ms: Union[str, int],
    native_ms: int = NATIVE_INTERVAL_MS
) -> List[TimePoint]:
    """
    Aggregate a series into one point per time bucket.

    Stateless; nothing is retained between calls.

    Args:
        points: Chronological series
        bucket_ms: Bucket width in ms, or a timeframe label ("5m")
        native_ms: Feed resolution; aggregating to it returns the series as-is

    Returns:
        Aggregated series (the cleaned input when bucket_ms == native_ms)
    """
    interval = to_interval_ms(bucket_ms)
    points = clean_series(points)

    if interval == native_ms or not points:
        return points

    buckets = bucket_points(points, interval)
    logger.debug("Aggregated %d points into %d buckets of %dms", len(points), len(buckets), interval)

    return [_reduce_bucket(bucket) for bucket in buckets]

