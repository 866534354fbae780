"""
Unit Tests for PriceBuffer

Test Coverage:
    - Capacity and FIFO eviction
    - Trend direction and thresholds
    - Least-squares slope
    - Mean absolute change volatility
    - Degenerate inputs (empty, single sample, flat series)
"""

import itertools
import random

import pytest

from algobot.strategies.price_buffer import PriceBuffer


def filled(prices, capacity=64):
    buffer = PriceBuffer(capacity)
    for p in prices:
        buffer.add(p)
    return buffer


class TestCapacity:
    """Tests for the rolling window"""

    def test_default_capacity(self):
        assert PriceBuffer().capacity == 64

    def test_non_positive_capacity_falls_back(self):
        assert PriceBuffer(0).capacity == 16
        assert PriceBuffer(-5).capacity == 16

    def test_evicts_oldest_first(self):
        buffer = filled(range(1, 11), capacity=4)
        assert len(buffer) == 4
        assert buffer.values() == [7.0, 8.0, 9.0, 10.0]

    def test_last_and_prev(self):
        buffer = PriceBuffer()
        assert buffer.last() == 0.0
        assert buffer.prev() == 0.0
        buffer.add(10)
        assert buffer.last() == 10.0
        assert buffer.prev() == 0.0
        buffer.add(11)
        assert buffer.prev() == 10.0


class TestTrend:
    """Tests for trend()"""

    def test_rising_series_is_up(self):
        assert filled([101, 102, 103, 104, 105, 106, 107]).trend() == 1

    def test_falling_series_is_down(self):
        assert filled([107, 106, 105, 104, 103, 102, 101]).trend() == -1

    def test_needs_two_samples(self):
        assert filled([]).trend() == 0
        assert filled([100]).trend() == 0

    def test_single_up_tick_below_threshold(self):
        # One transition scores 1, threshold is max(2, 1 // 3) = 2
        assert filled([100, 101]).trend() == 0

    def test_choppy_series_has_no_trend(self):
        assert filled([100, 101, 100, 101, 100, 101, 100]).trend() == 0

    def test_only_last_six_transitions_count(self):
        # Long decline followed by six up-ticks
        prices = [200 - i for i in range(20)] + [181, 182, 183, 184, 185, 186]
        assert filled(prices).trend() == 1

    def test_net_score_meets_threshold(self):
        # 4 up, 2 down over 6 transitions: net 2 >= 2
        assert filled([100, 101, 102, 101, 102, 103, 102]).trend() == 1

    def test_trend_always_in_range(self):
        rng = random.Random(7)
        for _ in range(200):
            prices = [rng.uniform(50, 150) for _ in range(rng.randint(0, 40))]
            assert filled(prices).trend() in (-1, 0, 1)


class TestSlope:
    """Tests for slope()"""

    def test_linear_series(self):
        assert filled([10, 12, 14, 16, 18]).slope() == pytest.approx(2.0)

    def test_uses_last_nine_points(self):
        # Only the trailing 9 samples (8 transitions) are regressed
        prices = [500, 400, 300] + [1, 2, 3, 4, 5, 6, 7, 8, 9]
        assert filled(prices).slope() == pytest.approx(1.0)

    def test_negative_slope(self):
        assert filled([9, 8, 7, 6]).slope() == pytest.approx(-1.0)

    def test_insufficient_data(self):
        assert filled([]).slope() == 0.0
        assert filled([42]).slope() == 0.0


class TestVolatility:
    """Tests for volatility()"""

    def test_mean_absolute_change(self):
        # changes: 2, 1, 3 -> mean 2
        assert filled([100, 102, 101, 104]).volatility() == pytest.approx(2.0)

    def test_insufficient_data(self):
        assert filled([]).volatility() == 0.0
        assert filled([100]).volatility() == 0.0

    def test_window_matches_slope_window(self):
        prices = [100, 200] + [100] * 9
        assert filled(prices).volatility() == 0.0


class TestFlatSeries:
    """Flat input must produce exactly zero statistics"""

    @pytest.mark.parametrize("price, count", itertools.product([100.0, 0.1, 123.456789], [10, 25, 70]))
    def test_flat_series_is_idempotent(self, price, count):
        buffer = filled([price] * count)
        assert buffer.slope() == 0.0
        assert buffer.volatility() == 0.0
        assert buffer.trend() == 0
