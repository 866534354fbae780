"""
Price Buffer
============
Fixed-capacity rolling window of closing prices with cheap trend statistics.

Used by strategies as the fallback signal source while indicators warm up,
and as the volatility estimate of last resort.
"""

from collections import deque
from typing import List

from ..core.constants import (
    PRICE_BUFFER_CAPACITY,
    PRICE_BUFFER_FALLBACK_CAPACITY,
    SLOPE_LOOKBACK,
    TREND_LOOKBACK,
)


class PriceBuffer:
    """
    Rolling close-price window.

    Usage:
        buffer = PriceBuffer()
        buffer.add(101.5)
        if buffer.trend() > 0 and buffer.slope() > 0:
            ...
    """

    def __init__(self, capacity: int = PRICE_BUFFER_CAPACITY):
        if capacity <= 0:
            capacity = PRICE_BUFFER_FALLBACK_CAPACITY
        self.capacity = capacity
        self._prices = deque(maxlen=capacity)

    def add(self, price: float) -> None:
        self._prices.append(float(price))

    def __len__(self) -> int:
        return len(self._prices)

    def values(self) -> List[float]:
        """Prices oldest first"""
        return list(self._prices)

    def last(self) -> float:
        return self._prices[-1] if self._prices else 0.0

    def prev(self) -> float:
        return self._prices[-2] if len(self._prices) >= 2 else 0.0

    def _window(self, lookback: int) -> List[float]:
        """Last ``min(lookback, n-1) + 1`` prices, i.e. that many transitions"""
        n = len(self._prices)
        span = min(lookback, n - 1) + 1
        return list(self._prices)[n - span:]

    def trend(self) -> int:
        """
        Direction of recent up/down ticks.

        Scores +1 per up-tick and -1 per down-tick over the last
        ``min(6, n-1)`` transitions.

        Returns:
            +1 or -1 when the net score reaches ``max(2, lookback // 3)``,
            otherwise 0
        """
        if len(self._prices) < 2:
            return 0

        window = self._window(TREND_LOOKBACK)
        lookback = len(window) - 1
        score = 0
        for prev, curr in zip(window, window[1:]):
            if curr > prev:
                score += 1
            elif curr < prev:
                score -= 1

        threshold = max(2, lookback // 3)
        if score >= threshold:
            return 1
        if score <= -threshold:
            return -1
        return 0

    def slope(self) -> float:
        """Least-squares slope of price against bar index over the last few bars"""
        if len(self._prices) < 2:
            return 0.0

        ys = self._window(SLOPE_LOOKBACK)
        if max(ys) == min(ys):
            return 0.0
        n = len(ys)
        mean_x = (n - 1) / 2
        mean_y = sum(ys) / n

        denominator = sum((x - mean_x) ** 2 for x in range(n))
        if denominator == 0:
            return 0.0
        numerator = sum((x - mean_x) * (y - mean_y) for x, y in enumerate(ys))
        return numerator / denominator

    def volatility(self) -> float:
        """Mean absolute bar-to-bar change over the slope window"""
        if len(self._prices) < 2:
            return 0.0

        window = self._window(SLOPE_LOOKBACK)
        changes = [abs(curr - prev) for prev, curr in zip(window, window[1:])]
        return sum(changes) / len(changes)
