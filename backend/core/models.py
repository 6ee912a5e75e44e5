"""
Domain Models
The SINGLE SOURCE OF TRUTH for series formats.

After normalization, the analytics only see these types.
"""

import math
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


# =============================================================================
# TimePoint — The Core Data Contract
# =============================================================================

class TimePoint(BaseModel):
    """
    A single spot/futures/spread sample.

    Every analytics function consumes lists of TimePoints.
    The feed snapshot, CSV rows and API payloads are all
    converted to this shape first.

    Fields:
        timestamp: Epoch milliseconds (strictly increasing in a series)
        spot: Cash price
        futures: Futures price
        spread: Spread in percent of spot
        time: Optional display label (HH:MM:SS)
        open/high/low/close: Optional OHLC, default to spot when absent
    """
    timestamp: int
    spot: float
    futures: float
    spread: float
    time: Optional[str] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None

    @field_validator('timestamp', mode='before')
    @classmethod
    def parse_timestamp(cls, v):
        """Accept datetimes and float epoch values"""
        if isinstance(v, datetime):
            return int(v.timestamp() * 1000)
        if isinstance(v, float) and math.isfinite(v):
            return int(v)
        return v

    @property
    def open_price(self) -> float:
        return self.open if self.open is not None else self.spot

    @property
    def high_price(self) -> float:
        return self.high if self.high is not None else self.spot

    @property
    def low_price(self) -> float:
        return self.low if self.low is not None else self.spot

    @property
    def close_price(self) -> float:
        return self.close if self.close is not None else self.spot

    def is_finite(self) -> bool:
        """True when every numeric field present is a finite number"""
        values = [self.spot, self.futures, self.spread]
        values += [v for v in (self.open, self.high, self.low, self.close) if v is not None]
        return all(math.isfinite(v) for v in values)


# =============================================================================
# MarketSnapshot — Feed Payload
# =============================================================================

class MarketSnapshot(BaseModel):
    """
    One per-symbol push from the market feed.

    Only the fields the analytics need are declared;
    extra keys (action, details, roi_percentage, ...) are ignored.
    """
    model_config = {"extra": "ignore"}

    symbol: str = Field(..., min_length=1, max_length=20)
    spot_price: float
    futures_price: float
    spread_percentage: float
    spread_trend: str = "stable"
    last_update: Optional[str] = None

    @field_validator('symbol', mode='before')
    @classmethod
    def uppercase_symbol(cls, v):
        """Always uppercase symbols"""
        return v.upper() if isinstance(v, str) else v


# =============================================================================
# Converters — External → Internal
# =============================================================================

def to_time_point(
    snapshot: MarketSnapshot,
    timestamp: int,
    previous: Optional[TimePoint] = None
) -> TimePoint:
    """
    Convert a feed snapshot to a TimePoint.

    This is the NORMALIZATION POINT for live data.

    The feed carries no intra-sample range, so high/low/close
    collapse onto spot. Open chains from the previous close.
    """
    spot = float(snapshot.spot_price)
    return TimePoint(
        timestamp=timestamp,
        time=datetime.fromtimestamp(timestamp / 1000).strftime("%H:%M:%S"),
        spot=spot,
        futures=float(snapshot.futures_price),
        spread=float(snapshot.spread_percentage),
        open=previous.close_price if previous is not None else spot,
        high=spot,
        low=spot,
        close=spot,
    )

