"""
Risk-Parity Capital Rotation
============================
Rotate capital across a universe of symbols by composite strength.

Core ideas:
- Every incoming bar updates that symbol's indicator suite and score
- Strength = 0.35 * RSI + 0.35 * MFI + 0.30 * |ATSO| (each normalised to [0, 1])
- While indicators warm up, a range / momentum / volume heuristic scores instead
- Every ``interval_bars * len(symbols)`` bars the universe is re-ranked:
  positions outside the top-K are closed, new top-K entrants are opened
  with an equal share of the risk budget

Bars may arrive from several feed threads. All state, including the whole
rebalance, is guarded by one lock.
"""

import math
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..core.config import StrategyConfig
from ..core.constants import RotationParams
from ..core.logging_config import EventLogger
from ..core.metrics import InMemoryMetrics, MetricsRecorder
from ..execution.executor import Executor
from ..execution.order import Order, OrderSide, closing_order
from ..indicators.suite import IndicatorError, IndicatorSuite, SuiteFactory
from ..risk.position_sizer import calc_qty
from .runtime import default_suite_factory, route_order


@dataclass
class SymbolState:
    """Per-symbol indicator handle, last bar and strength score"""
    symbol: str
    suite: IndicatorSuite
    score: float = 0.0
    high: float = 0.0
    low: float = 0.0
    close: float = 0.0
    volume: float = 0.0
    prev_close: Optional[float] = None
    avg_volume: float = 0.0
    bars: int = 0

    def update_bar(self, high: float, low: float, close: float, volume: float) -> None:
        if self.bars > 0:
            self.prev_close = self.close
        self.high, self.low, self.close, self.volume = high, low, close, volume
        self.bars += 1
        # Running mean of all volume seen so far
        self.avg_volume += (volume - self.avg_volume) / self.bars


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def normalize_oscillator(value: float, oversold: float, overbought: float) -> float:
    """Map an oscillator onto [0, 1] across its oversold/overbought band"""
    return _clamp((value - oversold) / (overbought - oversold))


def heuristic_score(state: SymbolState) -> float:
    """
    Score a symbol from its last bar alone.

    Combines intrabar range relative to price, single-bar momentum and
    volume relative to the running average.
    """
    close = state.close
    if close <= 0:
        return 0.0

    range_pct = (state.high - state.low) / close
    range_part = min(range_pct / RotationParams.RANGE_FULL_SCALE, 1.0)

    momentum_part = 0.0
    if state.prev_close:
        move = abs(close - state.prev_close) / state.prev_close
        momentum_part = min(move / RotationParams.MOMENTUM_FULL_SCALE, 1.0)

    volume_part = 0.0
    if state.avg_volume > 0:
        ratio = min(state.volume / state.avg_volume, RotationParams.VOLUME_RATIO_CAP)
        volume_part = ratio / RotationParams.VOLUME_RATIO_CAP

    score = (
        RotationParams.RANGE_WEIGHT * range_part
        + RotationParams.MOMENTUM_WEIGHT * momentum_part
        + RotationParams.VOLUME_WEIGHT * volume_part
    )
    return _clamp(score)


class RiskParityRotation:
    """
    Multi-symbol capital rotation scheduler.

    Usage:
        rotation = RiskParityRotation(["AAA", "BBB", "CCC"], config, executor,
                                      top_k=1, interval_bars=5)
        # from any feed thread
        rotation.process_bar("AAA", high, low, close, volume)
    """

    def __init__(
        self,
        symbols: Sequence[str],
        config: StrategyConfig,
        executor: Executor,
        top_k: int,
        interval_bars: int,
        suite_factory: Optional[SuiteFactory] = None,
        logger: Optional[EventLogger] = None,
        metrics: Optional[MetricsRecorder] = None,
        min_strength: float = RotationParams.MIN_STRENGTH,
    ):
        """
        Initialize the scheduler.

        Args:
            symbols: Universe, in ranking tie-break order
            config: Validated strategy config
            executor: Order router shared by all symbols
            top_k: Maximum number of symbols held at once
            interval_bars: Bars per symbol between rebalances
            suite_factory: Builds one indicator suite per symbol
            logger: Structured event logger
            metrics: Counter sink for submitted orders
            min_strength: Scores at or below this are never selected

        Raises:
            ValueError: on an empty or duplicated universe, or bad top_k / interval
        """
        symbols = list(symbols)
        if not symbols:
            raise ValueError("symbol universe must not be empty")
        if any(not s for s in symbols):
            raise ValueError("symbols must be non-empty strings")
        if len(set(symbols)) != len(symbols):
            raise ValueError(f"duplicate symbols in universe: {symbols}")
        if not 1 <= top_k <= len(symbols):
            raise ValueError(f"top_k must be in [1, {len(symbols)}], got {top_k}")
        if interval_bars <= 0:
            raise ValueError(f"interval_bars must be positive, got {interval_bars}")

        self.symbols = symbols
        self.config = config
        self.executor = executor
        self.top_k = top_k
        self.interval_bars = interval_bars
        self.min_strength = min_strength
        self.log = logger or EventLogger("strategies.rotation")
        self.metrics = metrics if metrics is not None else InMemoryMetrics()

        factory = suite_factory or default_suite_factory(config)
        self._states: Dict[str, SymbolState] = {
            symbol: SymbolState(symbol=symbol, suite=factory()) for symbol in symbols
        }

        self._lock = threading.Lock()
        self._bar_count = 0
        self.rebalance_count = 0

    # ------------------------------------------------------------------
    # Bars
    def process_bar(
        self,
        symbol: str,
        high: float,
        low: float,
        close: float,
        volume: float,
    ) -> None:
        """Update one symbol and rebalance when a full cycle has elapsed"""
        with self._lock:
            state = self._states.get(symbol)
            if state is None:
                self.log.warn("unknown_symbol", symbol=symbol)
                return

            try:
                state.suite.add(high, low, close, volume)
            except IndicatorError as exc:
                self.log.warn("suite_add_error", symbol=symbol, error=str(exc))
                return

            state.update_bar(high, low, close, volume)
            state.score = self.compute_strength(state)
            self._bar_count += 1

            if self._bar_count % (self.interval_bars * len(self.symbols)) == 0:
                self._rebalance()

    def compute_strength(self, state: SymbolState) -> float:
        """Composite RSI / MFI / ATSO score, or the heuristic during warm-up"""
        cfg = self.config
        try:
            rsi = state.suite.rsi.calculate()
            mfi = state.suite.mfi.calculate()
            atso = state.suite.atso.calculate()
        except IndicatorError:
            return heuristic_score(state)
        if not all(math.isfinite(v) for v in (rsi, mfi, atso)):
            return heuristic_score(state)

        rsi_norm = normalize_oscillator(rsi, cfg.rsi_oversold, cfg.rsi_overbought)
        mfi_norm = normalize_oscillator(mfi, cfg.mfi_oversold, cfg.mfi_overbought)
        atso_norm = min(abs(atso), RotationParams.ATSO_CAP) / RotationParams.ATSO_CAP

        return (
            RotationParams.RSI_WEIGHT * rsi_norm
            + RotationParams.MFI_WEIGHT * mfi_norm
            + RotationParams.ATSO_WEIGHT * atso_norm
        )

    # ------------------------------------------------------------------
    # Rebalance
    def rebalance(self) -> None:
        """Force a rebalance outside the bar cycle"""
        with self._lock:
            self._rebalance()

    def _ranked(self) -> List[SymbolState]:
        # sorted() is stable, so equal scores keep universe order
        return sorted(
            (self._states[s] for s in self.symbols),
            key=lambda st: st.score,
            reverse=True,
        )

    def _targets(self) -> List[str]:
        eligible = [st.symbol for st in self._ranked() if st.score > self.min_strength]
        return eligible[: self.top_k]

    def _entry_side(self, state: SymbolState) -> OrderSide:
        try:
            atso = state.suite.atso.calculate()
        except IndicatorError:
            atso = math.nan
        if math.isfinite(atso) and atso != 0:
            return OrderSide.BUY if atso > 0 else OrderSide.SELL
        if state.prev_close is None or state.close >= state.prev_close:
            return OrderSide.BUY
        return OrderSide.SELL

    def _submit(self, order: Order, tag: str) -> bool:
        return route_order(self.executor, order, tag, self.log, self.metrics)

    def _rebalance(self) -> None:
        targets = self._targets()
        target_set = set(targets)
        self.rebalance_count += 1

        # 1. Close holdings that dropped out of the target set
        held = []
        for symbol in self.symbols:
            qty, _ = self.executor.position(symbol)
            if qty == 0:
                continue
            if symbol in target_set:
                held.append(symbol)
                continue
            state = self._states[symbol]
            order = closing_order(symbol, qty, state.close, "rotation_exit")
            self._submit(order, "rotation_exit")
            # A rejected or dropped exit still occupies a slot
            remaining, _ = self.executor.position(symbol)
            if remaining != 0:
                self.log.warn("exit_not_filled", symbol=symbol, qty=remaining)
                held.append(symbol)

        # 2. Open equal-risk positions for new entrants
        risk_fraction = self.config.max_risk_per_trade / self.top_k
        equity = self.executor.equity()
        for symbol in targets:
            if len(held) >= self.top_k:
                break
            if symbol in held:
                continue
            state = self._states[symbol]
            qty = calc_qty(
                equity,
                risk_fraction,
                self.config.stop_loss_pct,
                state.close,
                self.config.constraints,
            )
            if qty <= 0:
                continue
            side = self._entry_side(state)
            order = Order(symbol=symbol, side=side, quantity=qty, price=state.close, reason="rotation_entry")
            self._submit(order, "rotation_entry")
            if self.executor.position(symbol)[0] != 0:
                held.append(symbol)

        self.log.info(
            "rebalance",
            cycle=self.rebalance_count,
            targets=",".join(targets) or "-",
            held=",".join(held) or "-",
        )

    # ------------------------------------------------------------------
    # Read-only views
    @property
    def bar_count(self) -> int:
        with self._lock:
            return self._bar_count

    def scores(self) -> Dict[str, float]:
        with self._lock:
            return {s: self._states[s].score for s in self.symbols}

    def held_symbols(self) -> List[str]:
        with self._lock:
            return [s for s in self.symbols if self.executor.position(s)[0] != 0]
