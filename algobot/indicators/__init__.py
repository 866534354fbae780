# Algobot Indicators Module
# =========================
# Indicator suite contract and the pandas-backed default suite

from .suite import (
    IndicatorError,
    IndicatorSuite,
    SuiteFactory,
    SeriesIndicator,
    PandasIndicatorSuite,
)
from .calculations import (
    calculate_atr,
    calculate_rsi,
    calculate_mfi,
    calculate_hma,
    calculate_atso,
    calculate_vwao,
)

__all__ = [
    "IndicatorError",
    "IndicatorSuite",
    "SuiteFactory",
    "SeriesIndicator",
    "PandasIndicatorSuite",
    "calculate_atr",
    "calculate_rsi",
    "calculate_mfi",
    "calculate_hma",
    "calculate_atso",
    "calculate_vwao",
]
