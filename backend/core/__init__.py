"""
Core Module
Series models, normalization and aggregation.

Exports:
    Models: TimePoint, MarketSnapshot
    Converters: to_time_point
    Aggregator: aggregate, bucket_points, clean_series, TIMEFRAME_MS
    Config: settings, Settings
"""

from .models import (
    TimePoint,
    MarketSnapshot,
    to_time_point,
)

from .resampler import (
    aggregate,
    bucket_points,
    clean_series,
    to_interval_ms,
    TIMEFRAME_MS,
    NATIVE_INTERVAL_MS,
)

from .config import settings, Settings

__all__ = [
    # Models
    "TimePoint",
    "MarketSnapshot",
    "to_time_point",
    # Aggregator
    "aggregate",
    "bucket_points",
    "clean_series",
    "to_interval_ms",
    "TIMEFRAME_MS",
    "NATIVE_INTERVAL_MS",
    # Config
    "settings",
    "Settings",
]
