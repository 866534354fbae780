"""
Unit Tests for the BreakoutMomentum strategy

Test Coverage:
    - Warm-up: no orders before 15 bars
    - Entry on the buffer-trend fallback while indicators warm up
    - Trailing stop and take-profit exits
    - Reversal: close then re-enter on the opposite signal
    - Failed close blocks the reversal entry
    - End-to-end with the pandas indicator suite
"""

from dataclasses import replace

import pytest

from algobot.core.metrics import ORDERS_SUBMITTED, InMemoryMetrics
from algobot.execution.executor import ExecutionError
from algobot.execution.order import OrderSide
from algobot.strategies.breakout_momentum import BreakoutMomentum

RISING = list(range(101, 116))  # 15 bars, 101..115


class ShortOnlyBroker:
    """Holds a short and fails every submit"""

    def __init__(self):
        self.attempts = 0

    def submit(self, order):
        self.attempts += 1
        raise ExecutionError("rejected")

    def equity(self):
        return 10_000.0

    def position(self, symbol):
        return -5.0, 100.0


def make_strategy(config, executor, suite_factory, metrics=None, **overrides):
    return BreakoutMomentum(
        "TEST",
        replace(config, **overrides) if overrides else config,
        executor,
        suite_factory=suite_factory,
        metrics=metrics,
    )


class TestWarmup:
    """No decisions before enough history"""

    def test_no_orders_before_warmup(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory)
        feed(strategy, RISING[:-1])
        assert executor.orders == []

    def test_rejected_bars_do_not_count(self, config, executor, suite_factory, scripted_suite, feed):
        strategy = make_strategy(config, executor, suite_factory)
        scripted_suite.reject_bars = True
        feed(strategy, RISING)
        assert executor.orders == []
        assert len(strategy.runtime.buffer) == 0


class TestEntry:
    """Tests for entries on the fallback signal"""

    def test_rising_series_opens_long(self, config, executor, suite_factory, feed):
        metrics = InMemoryMetrics()
        strategy = make_strategy(config, executor, suite_factory, metrics=metrics)
        feed(strategy, RISING)

        assert len(executor.orders) == 1
        order = executor.orders[0]
        assert order.side == OrderSide.BUY
        assert order.price == 115
        # 100 / (115 * 0.015) = 57.971 -> 57.97
        assert order.quantity == 57.97
        assert metrics.count(ORDERS_SUBMITTED, "breakout_mom_long") == 1

    def test_falling_series_opens_short(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory)
        feed(strategy, range(130, 115, -1))

        assert len(executor.orders) == 1
        assert executor.orders[0].side == OrderSide.SELL
        assert executor.orders[0].reason == "breakout_mom_short"

    def test_flat_series_does_nothing(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory)
        feed(strategy, [100] * 30)
        assert executor.orders == []

    def test_does_not_pyramid(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory)
        feed(strategy, range(101, 131))
        assert len(executor.orders) == 1

    def test_one_indicator_vetoes_on_flat_buffer(self, config, executor, suite_factory, scripted_suite, feed):
        """With a flat buffer, all three indicators must agree"""
        strategy = make_strategy(config, executor, suite_factory)
        for indicator in (scripted_suite.hma, scripted_suite.vwao, scripted_suite.atso):
            indicator.bullish = True
            indicator.bearish = False
        scripted_suite.atso.bullish = False

        feed(strategy, [100] * 15)
        assert executor.orders == []

        scripted_suite.atso.bullish = True
        feed(strategy, [100])
        assert len(executor.orders) == 1
        assert executor.orders[0].side == OrderSide.BUY


class TestExits:
    """Tests for trailing stop and take-profit management"""

    def test_trailing_stop_closes_long(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory, trailing_pct=0.02)
        feed(strategy, RISING)
        # level = 115 * 1.02 = 117.3
        feed(strategy, [117.4])

        assert len(executor.orders) == 2
        close = executor.orders[1]
        assert close.side == OrderSide.SELL
        assert close.quantity == 57.97
        assert close.reason == "trailing_stop"
        assert executor.position("TEST")[0] == 0

    def test_take_profit_closes_long(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory, take_profit_pct=2.0)
        feed(strategy, RISING)
        # buffer volatility 1.25 -> target 115 + 2.5 = 117.5
        feed(strategy, [118])

        assert len(executor.orders) == 2
        assert executor.orders[1].reason == "take_profit"

    def test_holds_below_target(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory, take_profit_pct=2.0)
        feed(strategy, RISING)
        feed(strategy, [116])
        assert len(executor.orders) == 1


class TestReversal:
    """Opposite signal flattens and reverses"""

    def test_long_flips_short(self, config, executor, suite_factory, feed):
        strategy = make_strategy(config, executor, suite_factory)
        feed(strategy, RISING)
        feed(strategy, range(114, 99, -1))

        assert [o.side for o in executor.orders] == [OrderSide.BUY, OrderSide.SELL, OrderSide.SELL]
        close, entry = executor.orders[1], executor.orders[2]
        assert close.reason == "breakout_mom_close_long"
        assert close.price == 110
        assert close.quantity == 57.97
        # equity after the close = 9710.15 -> 97.1015 / 1.65 = 58.849
        assert entry.reason == "breakout_mom_short"
        assert entry.quantity == 58.84
        assert executor.position("TEST")[0] == pytest.approx(-58.84)

    def test_failed_close_skips_entry(self, config, suite_factory, feed):
        broker = ShortOnlyBroker()
        strategy = make_strategy(config, broker, suite_factory)
        feed(strategy, RISING)
        # Only the close was attempted
        assert broker.attempts == 1


class TestWithPandasSuite:
    """End-to-end with the default indicator suite"""

    def test_rising_series_opens_single_long(self, config, executor, feed):
        strategy = BreakoutMomentum("TEST", config, executor)
        feed(strategy, RISING)

        assert len(executor.orders) == 1
        assert executor.orders[0].side == OrderSide.BUY
        assert executor.orders[0].quantity == 57.97

    def test_repr(self, config, executor):
        strategy = BreakoutMomentum("TEST", config, executor)
        assert repr(strategy).startswith("BreakoutMomentum(TEST")
