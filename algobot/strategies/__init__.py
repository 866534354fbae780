# Algobot Strategies Module
# =========================
# Strategy runtime, price buffer and the concrete strategies built on them

from .price_buffer import PriceBuffer
from .runtime import StrategyRuntime, default_suite_factory
from .base_strategy import BaseStrategy
from .breakout_momentum import BreakoutMomentum
from .trend_reversion import (
    HybridTrendMeanReversion,
    HybridFSMState,
    Phase,
    Action,
    ActionType,
    BarSignals,
    transition,
)
from .rotation import RiskParityRotation, SymbolState, heuristic_score

__all__ = [
    "PriceBuffer",
    "StrategyRuntime",
    "default_suite_factory",
    "BaseStrategy",
    "BreakoutMomentum",
    "HybridTrendMeanReversion",
    "HybridFSMState",
    "Phase",
    "Action",
    "ActionType",
    "BarSignals",
    "transition",
    "RiskParityRotation",
    "SymbolState",
    "heuristic_score",
]
