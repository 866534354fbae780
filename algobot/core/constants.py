"""
Trading Constants
=================
All magic numbers and default parameters in one place.
"""

from dataclasses import dataclass
from typing import Final

# ============================================================================
# DEFAULT CAPITAL AND RISK SETTINGS
# ============================================================================
DEFAULT_MAX_RISK_PER_TRADE: Final[float] = 0.01  # 1% of equity per trade
DEFAULT_STOP_LOSS_PCT: Final[float] = 0.015  # 1.5% stop distance
DEFAULT_TAKE_PROFIT_PCT: Final[float] = 0.0  # ATR multiple, 0 disables
DEFAULT_TRAILING_PCT: Final[float] = 0.0  # 0 disables the trailing stop


@dataclass(frozen=True)
class ConfigBounds:
    """Accepted ranges for StrategyConfig fields"""

    MAX_RISK_PER_TRADE: float = 0.5  # (0, 0.5]
    MAX_STOP_LOSS_PCT: float = 0.2  # (0, 0.2]
    MAX_TAKE_PROFIT_PCT: float = 5.0  # [0, 5]
    MAX_TRAILING_PCT: float = 1.0  # [0, 1]


@dataclass(frozen=True)
class QuantityDefaults:
    """Exchange-style quantity constraints"""

    STEP_SIZE: float = 0.0001
    QUANTITY_PRECISION: int = 2
    MIN_QTY: float = 0.001


@dataclass(frozen=True)
class IndicatorParams:
    """Default indicator parameters"""

    # RSI
    RSI_PERIOD: int = 14
    RSI_OVERBOUGHT: float = 70.0
    RSI_OVERSOLD: float = 30.0

    # MFI
    MFI_PERIOD: int = 14
    MFI_OVERBOUGHT: float = 80.0
    MFI_OVERSOLD: float = 20.0

    # Hull moving average
    HMA_PERIOD: int = 9

    # Adaptive trend strength oscillator
    ATSO_EMA_PERIOD: int = 5
    ATR_PERIOD: int = 14

    # Volume weighted average oscillator
    VWAO_PERIOD: int = 14
    VWAO_STRONG_TREND: float = 70.0

    # Bars kept by the default indicator adapter
    HISTORY_SIZE: int = 256


# ============================================================================
# RUNTIME CONSTANTS
# ============================================================================

PRICE_BUFFER_CAPACITY: Final[int] = 64
PRICE_BUFFER_FALLBACK_CAPACITY: Final[int] = 16
TREND_LOOKBACK: Final[int] = 6
SLOPE_LOOKBACK: Final[int] = 8

WARMUP_BARS: Final[int] = 15

# Volatility sanitisation
MAX_VOLATILITY_FRACTION: Final[float] = 0.10  # > 10% of price is implausible
FALLBACK_VOLATILITY_FRACTION: Final[float] = 0.02  # 2% of price
VOLATILITY_EPSILON: Final[float] = 1e-8


@dataclass(frozen=True)
class HybridParams:
    """Trend-then-reversion state machine"""

    FLAT_BAR_THRESHOLD: int = 3
    MOMENTUM_TOLERANCE: float = 1e-4  # fraction of the previous close
    MIN_TOLERANCE: float = 1e-9


@dataclass(frozen=True)
class RotationParams:
    """Capital rotation scoring"""

    MIN_STRENGTH: float = 0.2

    # Composite score weights
    RSI_WEIGHT: float = 0.35
    MFI_WEIGHT: float = 0.35
    ATSO_WEIGHT: float = 0.30
    ATSO_CAP: float = 3.0

    # Heuristic score (used while indicators warm up)
    RANGE_WEIGHT: float = 0.5
    MOMENTUM_WEIGHT: float = 0.3
    VOLUME_WEIGHT: float = 0.2
    RANGE_FULL_SCALE: float = 0.2  # 20% intrabar range scores 1
    MOMENTUM_FULL_SCALE: float = 0.05  # 5% bar-over-bar move scores 1
    VOLUME_RATIO_CAP: float = 2.0

