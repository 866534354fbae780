"""
Strategy Runtime
================
Shared position-lifecycle machinery owned by every concrete strategy.

The runtime is the only path by which a strategy opens, closes or adjusts a
position. It bundles:
1. The indicator suite handle and the PriceBuffer
2. Risk-bounded sizing through the PositionSizer
3. Order submission with logging and metrics
4. Trailing stop, percentage stop-loss and ATR-multiple take-profit
5. Volatility sanitisation and fallback trend signals for warm-up
"""

import math
from typing import Optional, Tuple

from ..core.config import StrategyConfig
from ..core.constants import (
    FALLBACK_VOLATILITY_FRACTION,
    MAX_VOLATILITY_FRACTION,
    PRICE_BUFFER_CAPACITY,
    VOLATILITY_EPSILON,
)
from ..core.logging_config import EventLogger
from ..core.metrics import ORDERS_SUBMITTED, InMemoryMetrics, MetricsRecorder
from ..execution.executor import ExecutionError, Executor
from ..execution.order import Order, OrderSide, closing_order
from ..indicators.suite import (
    CrossoverIndicator,
    IndicatorError,
    IndicatorSuite,
    PandasIndicatorSuite,
    SuiteFactory,
)
from ..risk.position_sizer import PositionSizer
from .price_buffer import PriceBuffer


def default_suite_factory(config: StrategyConfig) -> SuiteFactory:
    """Factory building the pandas suite with the config's periods"""
    return lambda: PandasIndicatorSuite.from_config(config)


def route_order(
    executor: Executor,
    order: Order,
    tag: str,
    log: EventLogger,
    metrics: MetricsRecorder,
) -> bool:
    """
    Send one order to the executor with the standard log line and counter.

    Failures are logged and reported, never retried. Acceptance does not
    mean a fill: an executor may still drop the order, so callers that
    depend on the outcome re-read the position.

    Returns:
        True if the executor accepted the order
    """
    try:
        executor.submit(order)
    except ExecutionError as exc:
        log.error(
            "order_submit_failed",
            symbol=order.symbol,
            side=order.side.value,
            qty=order.quantity,
            error=str(exc),
        )
        return False

    log.info(
        "order_submitted",
        symbol=order.symbol,
        side=order.side.value,
        qty=order.quantity,
        price=order.price,
        ctx=tag,
    )
    metrics.increment(ORDERS_SUBMITTED, tag)
    return True


class StrategyRuntime:
    """
    Position lifecycle manager for one symbol.

    Not thread-safe: a runtime must receive its bars from one caller.

    Usage:
        runtime = StrategyRuntime("BTCUSDT", config, executor)
        if runtime.add_bar(high, low, close, volume) and runtime.has_history(15):
            if runtime.crossover(runtime.suite.hma, bullish=True):
                runtime.open_position(OrderSide.BUY, close, "entry_long")
    """

    def __init__(
        self,
        symbol: str,
        config: StrategyConfig,
        executor: Executor,
        suite_factory: Optional[SuiteFactory] = None,
        logger: Optional[EventLogger] = None,
        metrics: Optional[MetricsRecorder] = None,
        buffer_capacity: int = PRICE_BUFFER_CAPACITY,
    ):
        """
        Initialize the runtime.

        Args:
            symbol: Instrument traded by this runtime
            config: Validated strategy config
            executor: Order router and position ledger
            suite_factory: Builds the indicator suite (pandas suite by default)
            logger: Structured event logger
            metrics: Counter sink for submitted orders
            buffer_capacity: PriceBuffer window size
        """
        if not symbol:
            raise ValueError("symbol must not be empty")

        self.symbol = symbol
        self.config = config
        self.executor = executor
        self.log = logger or EventLogger(f"strategies.{symbol}")
        self.metrics = metrics if metrics is not None else InMemoryMetrics()
        self.sizer = PositionSizer(config)
        self.buffer = PriceBuffer(buffer_capacity)

        factory = suite_factory or default_suite_factory(config)
        self.suite: IndicatorSuite = factory()

    # ------------------------------------------------------------------
    # Bars
    def add_bar(self, high: float, low: float, close: float, volume: float) -> bool:
        """
        Feed one bar to the suite and the price buffer.

        Returns:
            False (and logs a warning) if the suite rejected the bar
        """
        try:
            self.suite.add(high, low, close, volume)
        except IndicatorError as exc:
            self.log.warn("suite_add_error", symbol=self.symbol, error=str(exc))
            return False
        self.buffer.add(close)
        return True

    def has_history(self, bars: int) -> bool:
        return len(self.buffer) >= bars

    def momentum(self) -> float:
        """Last close minus the previous close (0 before two bars)"""
        if len(self.buffer) < 2:
            return 0.0
        return self.buffer.last() - self.buffer.prev()

    # ------------------------------------------------------------------
    # Positions and orders
    def position(self) -> Tuple[float, float]:
        return self.executor.position(self.symbol)

    def calc_qty(self, price: float, risk_fraction: Optional[float] = None) -> float:
        return self.sizer.size(self.executor.equity(), price, risk_fraction)

    def submit_order(self, order: Order, tag: str) -> bool:
        """True if the executor accepted the order (see route_order)"""
        return route_order(self.executor, order, tag, self.log, self.metrics)

    def open_position(
        self,
        side: OrderSide,
        price: float,
        tag: str,
        risk_fraction: Optional[float] = None,
    ) -> bool:
        """
        Size and submit an entry. Nothing is sent when the size is zero.

        Returns:
            True only if the position actually changed
        """
        qty = self.calc_qty(price, risk_fraction)
        if qty <= 0:
            self.log.info("entry_skipped", symbol=self.symbol, side=side.value, price=price, ctx=tag)
            return False
        before, _ = self.position()
        order = Order(symbol=self.symbol, side=side, quantity=qty, price=price, reason=tag)
        if not self.submit_order(order, tag):
            return False
        if self.position()[0] == before:
            self.log.warn("entry_not_filled", symbol=self.symbol, side=side.value, qty=qty, ctx=tag)
            return False
        return True

    def close_position(self, price: float, tag: str) -> bool:
        """
        Flatten the current position. No-op (False) when already flat.

        Returns:
            True only if the position is flat afterwards
        """
        qty, _ = self.position()
        if qty == 0:
            return False
        if not self.submit_order(closing_order(self.symbol, qty, price, tag), tag):
            return False
        remaining, _ = self.position()
        if remaining != 0:
            self.log.warn("exit_not_filled", symbol=self.symbol, qty=remaining, ctx=tag)
            return False
        return True

    # ------------------------------------------------------------------
    # Exits
    def trailing_stop_level(self, average_price: float, position_qty: float) -> float:
        """Price at which the trailing stop fires for a position"""
        if position_qty > 0:
            return average_price * (1 + self.config.trailing_pct)
        return average_price * (1 - self.config.trailing_pct)

    def apply_trailing_stop(self, price: float) -> bool:
        """
        Close the position once price reaches the trailing level.

        The level is recomputed from the current average price on every
        call; nothing is carried between bars.

        Returns:
            True if a closing order was submitted
        """
        if self.config.trailing_pct <= 0:
            return False
        qty, avg = self.position()
        if qty == 0:
            return False

        level = self.trailing_stop_level(avg, qty)
        if (qty > 0 and price >= level) or (qty < 0 and price <= level):
            return self.close_position(price, "trailing_stop")
        return False

    def apply_stop_loss(self, price: float) -> bool:
        """Close the position if price crossed the percentage stop"""
        qty, avg = self.position()
        if qty == 0:
            return False

        if qty > 0:
            hit = price <= avg * (1 - self.config.stop_loss_pct)
        else:
            hit = price >= avg * (1 + self.config.stop_loss_pct)
        if hit:
            return self.close_position(price, "stop_loss")
        return False

    def latest_volatility(self) -> float:
        """Last ATSO magnitude from the suite, NaN when unavailable"""
        try:
            values = self.suite.atso.values()
        except IndicatorError as exc:
            self.log.warn("volatility_unavailable", symbol=self.symbol, error=str(exc))
            return math.nan
        if not values:
            return math.nan
        return abs(values[-1])

    def manage_take_profit(self, price: float) -> bool:
        """
        Close the position at an ATR-multiple profit target.

        target = avg +/- sanitized_volatility * take_profit_pct

        Returns:
            True if a closing order was submitted
        """
        if self.config.take_profit_pct <= 0:
            return False
        qty, avg = self.position()
        if qty == 0:
            return False

        volatility = self.sanitize_volatility(self.latest_volatility(), avg)
        offset = volatility * self.config.take_profit_pct
        if qty > 0 and price >= avg + offset:
            return self.close_position(price, "take_profit")
        if qty < 0 and price <= avg - offset:
            return self.close_position(price, "take_profit")
        return False

    def sanitize_volatility(self, raw: float, price: float) -> float:
        """
        Replace an unusable volatility estimate.

        NaN, infinite, non-positive or implausible (> 10% of price) values
        fall back to the buffer's volatility, then to 2% of price. The
        result is never below a tiny epsilon.
        """
        ceiling = abs(price) * MAX_VOLATILITY_FRACTION

        def usable(value: float) -> bool:
            return math.isfinite(value) and 0 < value <= ceiling

        if usable(raw):
            volatility = raw
        elif usable(self.buffer.volatility()):
            volatility = self.buffer.volatility()
        else:
            volatility = abs(price) * FALLBACK_VOLATILITY_FRACTION
        return max(volatility, VOLATILITY_EPSILON)

    # ------------------------------------------------------------------
    # Signals
    def bullish_fallback(self) -> bool:
        return self.buffer.trend() > 0 and self.buffer.slope() > 0

    def bearish_fallback(self) -> bool:
        return self.buffer.trend() < 0 and self.buffer.slope() < 0

    def crossover(self, indicator: CrossoverIndicator, bullish: bool) -> bool:
        """
        Crossover signal that degrades to the buffer trend.

        The buffer fallback always counts; the indicator adds to it once it
        has enough history.
        """
        fallback = self.bullish_fallback() if bullish else self.bearish_fallback()
        try:
            if bullish:
                crossed = indicator.is_bullish_crossover()
            else:
                crossed = indicator.is_bearish_crossover()
        except IndicatorError:
            return fallback
        return fallback or crossed
