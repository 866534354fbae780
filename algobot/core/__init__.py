# Algobot Core Module
# ===================
# Strategy configuration, constants, logging and metrics

from .config import StrategyConfig, ConfigError
from .constants import (
    DEFAULT_MAX_RISK_PER_TRADE,
    DEFAULT_STOP_LOSS_PCT,
    IndicatorParams,
    HybridParams,
    RotationParams,
)
from .logging_config import setup_logging, get_logger, EventLogger
from .metrics import MetricsRecorder, InMemoryMetrics, ORDERS_SUBMITTED

__all__ = [
    "StrategyConfig",
    "ConfigError",
    "DEFAULT_MAX_RISK_PER_TRADE",
    "DEFAULT_STOP_LOSS_PCT",
    "IndicatorParams",
    "HybridParams",
    "RotationParams",
    "setup_logging",
    "get_logger",
    "EventLogger",
    "MetricsRecorder",
    "InMemoryMetrics",
    "ORDERS_SUBMITTED",
]
