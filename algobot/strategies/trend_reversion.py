"""
Hybrid Trend-then-Mean-Reversion Strategy
=========================================
Ride a trend until it stalls, then look for the contrarian entry.

State machine:

    IDLE   - Flat, waiting for an HMA trend signal (or its fallback).
    TREND  - Holding a position in the trend direction. Each bar whose
             momentum does not confirm the trend counts as a flat bar;
             three in a row close the position and move to REVERT.
    REVERT - Flat, waiting for an overbought/oversold reversal against the
             previous trend (RSI and MFI past their thresholds, momentum
             turning). The contrarian position is managed here with
             stop-loss, take-profit and trailing stop, and the machine
             returns to IDLE once it is flat again.

``transition`` is a pure function of (state, signals). The strategy runs
the returned action and only then commits the next state.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..core.constants import HybridParams, WARMUP_BARS
from ..core.config import StrategyConfig
from ..execution.order import OrderSide
from ..indicators.suite import IndicatorError
from .base_strategy import BaseStrategy


class Phase(Enum):
    """Hybrid FSM phases"""
    IDLE = "idle"
    TREND = "trend"
    REVERT = "revert"


class ActionType(Enum):
    """Side effect requested by a transition"""
    NONE = "none"
    OPEN = "open"
    CLOSE = "close"
    MANAGE = "manage"


@dataclass(frozen=True)
class Action:
    type: ActionType = ActionType.NONE
    side: Optional[OrderSide] = None
    tag: str = ""


NO_ACTION = Action()


@dataclass(frozen=True)
class HybridFSMState:
    """Current phase, the side of the last trend and the flat-bar counter"""
    phase: Phase = Phase.IDLE
    trend_side: Optional[OrderSide] = None
    flat_bars: int = 0


@dataclass(frozen=True)
class BarSignals:
    """Everything the transition function looks at for one bar"""
    bullish: bool
    bearish: bool
    momentum: float
    tolerance: float
    position_qty: float
    rsi: Optional[float] = None
    mfi: Optional[float] = None


def momentum_tolerance(prev_close: float) -> float:
    return max(abs(prev_close) * HybridParams.MOMENTUM_TOLERANCE, HybridParams.MIN_TOLERANCE)


def _reversal_side(
    state: HybridFSMState,
    signals: BarSignals,
    config: StrategyConfig,
) -> Optional[OrderSide]:
    """Contrarian side to open in REVERT, if the oscillators allow it"""
    if signals.rsi is None or signals.mfi is None:
        return None

    if state.trend_side == OrderSide.BUY:
        if (
            signals.rsi >= config.rsi_overbought
            and signals.mfi >= config.mfi_overbought
            and signals.momentum < -signals.tolerance
        ):
            return OrderSide.SELL
    elif state.trend_side == OrderSide.SELL:
        if (
            signals.rsi <= config.rsi_oversold
            and signals.mfi <= config.mfi_oversold
            and signals.momentum > signals.tolerance
        ):
            return OrderSide.BUY
    return None


def transition(
    state: HybridFSMState,
    signals: BarSignals,
    config: StrategyConfig,
) -> tuple[HybridFSMState, Action]:
    """
    Compute the next state and the action to run for one bar.

    Args:
        state: Current FSM state
        signals: Signals observed on this bar
        config: Oscillator thresholds

    Returns:
        (next_state, action); next_state applies only if the action succeeds
    """
    if state.phase == Phase.IDLE:
        if signals.bullish:
            return (
                HybridFSMState(Phase.TREND, OrderSide.BUY, 0),
                Action(ActionType.OPEN, OrderSide.BUY, "hybrid_trend_long"),
            )
        if signals.bearish:
            return (
                HybridFSMState(Phase.TREND, OrderSide.SELL, 0),
                Action(ActionType.OPEN, OrderSide.SELL, "hybrid_trend_short"),
            )
        return state, NO_ACTION

    if state.phase == Phase.TREND:
        directed = signals.momentum * state.trend_side.sign
        if directed > signals.tolerance:
            return replace(state, flat_bars=0), NO_ACTION

        flat_bars = state.flat_bars + 1
        if flat_bars >= HybridParams.FLAT_BAR_THRESHOLD:
            return (
                HybridFSMState(Phase.REVERT, state.trend_side, 0),
                Action(ActionType.CLOSE, tag="hybrid_trend_exit"),
            )
        return replace(state, flat_bars=flat_bars), NO_ACTION

    # Phase.REVERT
    if signals.position_qty != 0:
        return state, Action(ActionType.MANAGE, tag="hybrid_revert_manage")

    side = _reversal_side(state, signals, config)
    if side is not None:
        tag = "hybrid_revert_long" if side == OrderSide.BUY else "hybrid_revert_short"
        return state, Action(ActionType.OPEN, side, tag)
    return state, NO_ACTION


def settle(state: HybridFSMState, position_qty: float) -> HybridFSMState:
    """After managing a contrarian position: back to IDLE once flat"""
    if state.phase == Phase.REVERT and position_qty == 0:
        return HybridFSMState()
    return state


class HybridTrendMeanReversion(BaseStrategy):
    """
    Trend-then-mean-reversion strategy driven by ``transition``.

    Usage:
        strategy = HybridTrendMeanReversion("BTCUSDT", config, executor)
        strategy.process_bar(high, low, close, volume)
        print(strategy.state.phase)
    """

    name = "HybridTrendMeanReversion"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.state = HybridFSMState()

    def _oscillator(self, name: str) -> Optional[float]:
        rt = self.runtime
        try:
            return getattr(rt.suite, name).calculate()
        except IndicatorError as exc:
            rt.log.warn("oscillator_unavailable", symbol=rt.symbol, indicator=name, error=str(exc))
            return None

    def _signals(self) -> BarSignals:
        rt = self.runtime
        qty, _ = rt.position()
        phase = self.state.phase

        bullish = bearish = False
        if phase == Phase.IDLE:
            bullish = rt.crossover(rt.suite.hma, bullish=True)
            bearish = rt.crossover(rt.suite.hma, bullish=False)

        rsi = mfi = None
        if phase == Phase.REVERT and qty == 0:
            rsi = self._oscillator("rsi")
            mfi = self._oscillator("mfi")

        return BarSignals(
            bullish=bullish,
            bearish=bearish,
            momentum=rt.momentum(),
            tolerance=momentum_tolerance(rt.buffer.prev()),
            position_qty=qty,
            rsi=rsi,
            mfi=mfi,
        )

    def _execute(self, action: Action, close: float) -> bool:
        rt = self.runtime
        if action.type == ActionType.OPEN:
            return rt.open_position(action.side, close, action.tag)
        if action.type == ActionType.CLOSE:
            qty, _ = rt.position()
            # Already flat (e.g. stopped out elsewhere): nothing to close
            return qty == 0 or rt.close_position(close, action.tag)
        if action.type == ActionType.MANAGE:
            self.manage_open_position(close)
            return True
        return True

    def manage_open_position(self, close: float) -> None:
        """Stop-loss, then take-profit, then trailing stop"""
        rt = self.runtime
        if rt.apply_stop_loss(close):
            return
        if rt.manage_take_profit(close):
            return
        rt.apply_trailing_stop(close)

    def process_bar(self, high: float, low: float, close: float, volume: float) -> None:
        rt = self.runtime
        if not rt.add_bar(high, low, close, volume):
            return
        if not rt.has_history(WARMUP_BARS):
            return

        previous = self.state
        next_state, action = transition(previous, self._signals(), self.config)
        if not self._execute(action, close):
            return

        if action.type == ActionType.MANAGE:
            qty, _ = rt.position()
            next_state = settle(next_state, qty)
        self.state = next_state

        if next_state.phase != previous.phase:
            rt.log.info(
                "hybrid_transition",
                symbol=rt.symbol,
                from_phase=previous.phase.value,
                to_phase=next_state.phase.value,
                trend_side=next_state.trend_side.value if next_state.trend_side else None,
            )
