# Algobot Strategy Runtime
# ========================
# Per-bar trading decisions: sizing, position lifecycle and capital rotation

"""
PROJECT STRUCTURE
=================

algobot/
├── __init__.py              # Package initialization
│
├── core/                    # Configuration and shared utilities
│   ├── config.py           # StrategyConfig (validated, .env aware)
│   ├── constants.py        # Defaults and tuning constants
│   ├── logging_config.py   # Logging setup and structured EventLogger
│   └── metrics.py          # Injected in-process counters
│
├── risk/
│   └── position_sizer.py   # Risk-bounded quantity sizing
│
├── execution/
│   ├── order.py            # Order and OrderSide
│   ├── executor.py         # Executor contract and ExecutionError
│   └── paper_executor.py   # In-memory paper ledger
│
├── indicators/
│   ├── calculations.py     # RSI, MFI, HMA, ATR, ATSO, VWAO
│   └── suite.py            # IndicatorSuite contract and pandas suite
│
└── strategies/
    ├── price_buffer.py     # Rolling close window: trend, slope, volatility
    ├── runtime.py          # StrategyRuntime: orders, stops, targets, fallbacks
    ├── base_strategy.py    # Abstract single-symbol strategy
    ├── breakout_momentum.py    # Triple-crossover momentum strategy
    ├── trend_reversion.py      # Idle -> Trend -> Revert state machine
    └── rotation.py             # Top-K capital rotation across symbols


USAGE
=====
    from algobot import StrategyConfig, PaperExecutor, BreakoutMomentum

    executor = PaperExecutor(initial_capital=10_000)
    strategy = BreakoutMomentum("BTCUSDT", StrategyConfig.from_env(), executor)
    for high, low, close, volume in bars:
        strategy.process_bar(high, low, close, volume)
"""

__version__ = "1.0.0"

from .core.config import StrategyConfig, ConfigError
from .core.logging_config import setup_logging, EventLogger
from .core.metrics import InMemoryMetrics
from .execution import Order, OrderSide, PaperExecutor, ExecutionError
from .indicators import IndicatorError, PandasIndicatorSuite
from .risk import calc_qty, QuantityConstraints
from .strategies import (
    PriceBuffer,
    StrategyRuntime,
    BreakoutMomentum,
    HybridTrendMeanReversion,
    RiskParityRotation,
)

__all__ = [
    "StrategyConfig",
    "ConfigError",
    "setup_logging",
    "EventLogger",
    "InMemoryMetrics",
    "Order",
    "OrderSide",
    "PaperExecutor",
    "ExecutionError",
    "IndicatorError",
    "PandasIndicatorSuite",
    "calc_qty",
    "QuantityConstraints",
    "PriceBuffer",
    "StrategyRuntime",
    "BreakoutMomentum",
    "HybridTrendMeanReversion",
    "RiskParityRotation",
]
