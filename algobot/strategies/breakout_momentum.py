"""
Breakout Momentum Strategy
==========================
Trade momentum bursts confirmed by three crossovers at once.

Entry:
- LONG when HMA, VWAO and ATSO all give a bullish crossover
- SHORT when all three give a bearish crossover
- Each crossover falls back to the price-buffer trend while indicators warm up

Position management:
- An opposite signal flattens the position and reverses it
- Otherwise the trailing stop, then the take-profit, are checked each bar
"""

from ..core.constants import WARMUP_BARS
from ..execution.order import OrderSide
from .base_strategy import BaseStrategy


class BreakoutMomentum(BaseStrategy):
    """
    Breakout / momentum-burst strategy.

    Usage:
        strategy = BreakoutMomentum("BTCUSDT", config, executor)
        for bar in bars:
            strategy.process_bar(bar.high, bar.low, bar.close, bar.volume)
    """

    name = "BreakoutMomentum"

    def signals(self) -> tuple[bool, bool]:
        """Return (long_signal, short_signal) for the latest bar"""
        rt = self.runtime
        suite = rt.suite

        long_signal = (
            rt.crossover(suite.hma, bullish=True)
            and rt.crossover(suite.vwao, bullish=True)
            and rt.crossover(suite.atso, bullish=True)
        )
        short_signal = (
            rt.crossover(suite.hma, bullish=False)
            and rt.crossover(suite.vwao, bullish=False)
            and rt.crossover(suite.atso, bullish=False)
        )
        return long_signal, short_signal

    def process_bar(self, high: float, low: float, close: float, volume: float) -> None:
        rt = self.runtime
        if not rt.add_bar(high, low, close, volume):
            return
        if not rt.has_history(WARMUP_BARS):
            return

        long_signal, short_signal = self.signals()
        qty, _ = rt.position()

        if long_signal and qty <= 0:
            if qty < 0 and not rt.close_position(close, "breakout_mom_close_short"):
                return
            rt.open_position(OrderSide.BUY, close, "breakout_mom_long")

        elif short_signal and qty >= 0:
            if qty > 0 and not rt.close_position(close, "breakout_mom_close_long"):
                return
            rt.open_position(OrderSide.SELL, close, "breakout_mom_short")

        elif qty != 0:
            if rt.apply_trailing_stop(close):
                return
            rt.manage_take_profit(close)
