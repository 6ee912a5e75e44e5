"""
Spread Trend Tracker
Classifies each symbol's recent spread path as rising/falling/stable.

The only stateful piece of the analytics package: it keeps a short
per-symbol window, fed one snapshot at a time. The number of tracked
symbols is capped; the least recently updated symbol is evicted first.
"""

from collections import OrderedDict, deque
from typing import Deque, Optional

from .models import SpreadTrend


class SpreadTrendTracker:
    """
    Rolling per-symbol spread window.

    Compares the mean of the two most recent spreads against
    the mean of the older ones in the window.

    Usage:
        tracker = SpreadTrendTracker()
        trend = tracker.update("RELIANCE", 0.52)
    """

    MIN_POINTS = 3

    def __init__(self, window: int = 5, sensitivity: float = 0.05, max_symbols: int = 100):
        if max_symbols < 1:
            raise ValueError(f"max_symbols must be >= 1, got {max_symbols}")
        self.window = window
        self.sensitivity = sensitivity
        self.max_symbols = max_symbols
        self._history: "OrderedDict[str, Deque[float]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._history)

    def update(self, symbol: str, spread: float) -> SpreadTrend:
        """Record a spread and return the symbol's current trend"""
        symbol = symbol.upper()
        if symbol in self._history:
            self._history.move_to_end(symbol)
        else:
            self._history[symbol] = deque(maxlen=self.window)
            while len(self._history) > self.max_symbols:
                self._history.popitem(last=False)

        spreads = self._history[symbol]
        spreads.append(spread)

        if len(spreads) < self.MIN_POINTS:
            return SpreadTrend.STABLE

        values = list(spreads)
        recent_avg = sum(values[-2:]) / 2
        older = values[:-2]
        older_avg = sum(older) / len(older)

        if recent_avg > older_avg + self.sensitivity:
            return SpreadTrend.RISING
        if recent_avg < older_avg - self.sensitivity:
            return SpreadTrend.FALLING
        return SpreadTrend.STABLE

    def spread_change(self, symbol: str) -> Optional[float]:
        """Last minus previous spread, None with fewer than 2 values"""
        spreads = self._history.get(symbol.upper())
        if spreads is None or len(spreads) < 2:
            return None
        return spreads[-1] - spreads[-2]

    def clear(self, symbol: str = None) -> None:
        if symbol:
            self._history.pop(symbol.upper(), None)
        else:
            self._history.clear()
