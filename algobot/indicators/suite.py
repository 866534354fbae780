"""
Indicator Suite
===============
The per-symbol indicator collaborator used by strategies.

Strategies depend only on the ``IndicatorSuite`` protocol. Every accessor
raises ``IndicatorError`` while its indicator is still warming up; callers
treat that as "no signal yet", never as a fatal error.

``PandasIndicatorSuite`` is the default implementation, computing HMA, VWAO,
ATSO, RSI and MFI from a bounded bar history with pandas.
"""

import math
from collections import deque
from typing import Callable, List, Optional, Protocol

import numpy as np
import pandas as pd

from ..core.constants import IndicatorParams
from .calculations import (
    calculate_atso,
    calculate_hma,
    calculate_mfi,
    calculate_rsi,
    calculate_vwao,
    crossed_above,
    crossed_below,
)


class IndicatorError(Exception):
    """Indicator cannot produce a value (usually: not enough history)"""


class CrossoverIndicator(Protocol):
    def is_bullish_crossover(self) -> bool: ...

    def is_bearish_crossover(self) -> bool: ...


class Oscillator(Protocol):
    def calculate(self) -> float: ...


class TrendOscillator(CrossoverIndicator, Oscillator, Protocol):
    def values(self) -> List[float]: ...


class IndicatorSuite(Protocol):
    """Per-symbol indicator bundle fed one bar at a time"""

    def add(self, high: float, low: float, close: float, volume: float) -> None: ...

    @property
    def hma(self) -> CrossoverIndicator: ...

    @property
    def vwao(self) -> TrendOscillator: ...

    @property
    def atso(self) -> TrendOscillator: ...

    @property
    def rsi(self) -> Oscillator: ...

    @property
    def mfi(self) -> Oscillator: ...


SuiteFactory = Callable[[], IndicatorSuite]


class SeriesIndicator:
    """
    One indicator line computed over the suite's bar history.

    Crossovers compare ``line`` against ``reference``: close vs. the moving
    average for HMA, the oscillator vs. its centre line otherwise.
    """

    def __init__(
        self,
        name: str,
        suite: "PandasIndicatorSuite",
        compute: Callable[[pd.DataFrame], pd.Series],
        min_bars: int,
        centre: Optional[float] = None,
        strong_level: Optional[float] = None,
    ):
        self.name = name
        self._suite = suite
        self._compute = compute
        self.min_bars = min_bars
        self.centre = centre
        self.strong_level = strong_level

    def series(self) -> pd.Series:
        frame = self._suite.frame()
        if len(frame) < self.min_bars:
            raise IndicatorError(
                f"{self.name}: need {self.min_bars} bars, have {len(frame)}"
            )
        return self._compute(frame)

    def _crossover_pair(self):
        series = self.series()
        if self.centre is None:
            line = self._suite.frame()["close"]
            reference = series
        else:
            line = series
            reference = pd.Series(self.centre, index=series.index)
        if series.iloc[-2:].isna().any():
            raise IndicatorError(f"{self.name}: not enough history for a crossover")
        return line, reference

    def calculate(self) -> float:
        value = self.series().iloc[-1]
        if pd.isna(value) or not math.isfinite(value):
            raise IndicatorError(f"{self.name}: no value yet")
        return float(value)

    def values(self) -> List[float]:
        return [float(v) for v in self.series().dropna()]

    def is_bullish_crossover(self) -> bool:
        line, reference = self._crossover_pair()
        return crossed_above(line, reference)

    def is_bearish_crossover(self) -> bool:
        line, reference = self._crossover_pair()
        return crossed_below(line, reference)

    def is_strong_trend(self) -> bool:
        """Latest value at or beyond +/- strong_level"""
        if self.strong_level is None:
            raise IndicatorError(f"{self.name}: no strong-trend level configured")
        return abs(self.calculate()) >= self.strong_level


class PandasIndicatorSuite:
    """
    Default indicator suite backed by pandas.

    Usage:
        suite = PandasIndicatorSuite()
        suite.add(high, low, close, volume)
        rsi = suite.rsi.calculate()
    """

    def __init__(
        self,
        hma_period: int = IndicatorParams.HMA_PERIOD,
        rsi_period: int = IndicatorParams.RSI_PERIOD,
        mfi_period: int = IndicatorParams.MFI_PERIOD,
        atso_ema_period: int = IndicatorParams.ATSO_EMA_PERIOD,
        atr_period: int = IndicatorParams.ATR_PERIOD,
        vwao_period: int = IndicatorParams.VWAO_PERIOD,
        vwao_strong_trend: float = IndicatorParams.VWAO_STRONG_TREND,
        history_size: int = IndicatorParams.HISTORY_SIZE,
    ):
        self._highs = deque(maxlen=history_size)
        self._lows = deque(maxlen=history_size)
        self._closes = deque(maxlen=history_size)
        self._volumes = deque(maxlen=history_size)

        self._frame: Optional[pd.DataFrame] = None

        self._hma = SeriesIndicator(
            "HMA", self,
            lambda df: calculate_hma(df["close"], hma_period),
            min_bars=hma_period + int(np.sqrt(hma_period)),
        )
        self._vwao = SeriesIndicator(
            "VWAO", self,
            lambda df: calculate_vwao(df["close"], df["volume"], vwao_period),
            min_bars=vwao_period + 1,
            centre=0.0,
            strong_level=vwao_strong_trend,
        )
        self._atso = SeriesIndicator(
            "ATSO", self,
            lambda df: calculate_atso(df["high"], df["low"], df["close"], atso_ema_period, atr_period),
            min_bars=max(atso_ema_period, atr_period) + 1,
            centre=0.0,
        )
        self._rsi = SeriesIndicator(
            "RSI", self,
            lambda df: calculate_rsi(df["close"], rsi_period),
            min_bars=rsi_period + 1,
            centre=50.0,
        )
        self._mfi = SeriesIndicator(
            "MFI", self,
            lambda df: calculate_mfi(df["high"], df["low"], df["close"], df["volume"], mfi_period),
            min_bars=mfi_period + 1,
            centre=50.0,
        )

    @classmethod
    def from_config(cls, config) -> "PandasIndicatorSuite":
        """Build a suite with the periods and VWAO level of a StrategyConfig"""
        return cls(
            hma_period=config.hma_period,
            rsi_period=config.rsi_period,
            mfi_period=config.mfi_period,
            atso_ema_period=config.atso_ema_period,
            vwao_strong_trend=config.vwao_strong_trend,
        )

    def add(self, high: float, low: float, close: float, volume: float) -> None:
        try:
            bar = tuple(float(v) for v in (high, low, close, volume))
        except (TypeError, ValueError):
            raise IndicatorError(f"non-numeric bar {(high, low, close, volume)}")
        if not all(math.isfinite(v) for v in bar):
            raise IndicatorError(f"non-finite bar {bar}")
        high, low, close, volume = bar
        if close <= 0 or volume < 0 or high < low:
            raise IndicatorError(f"malformed bar {bar}")

        self._highs.append(high)
        self._lows.append(low)
        self._closes.append(close)
        self._volumes.append(volume)
        self._frame = None

    def __len__(self) -> int:
        return len(self._closes)

    def frame(self) -> pd.DataFrame:
        """Bar history as a DataFrame (cached until the next bar)"""
        if self._frame is None:
            self._frame = pd.DataFrame(
                {
                    "high": list(self._highs),
                    "low": list(self._lows),
                    "close": list(self._closes),
                    "volume": list(self._volumes),
                }
            )
        return self._frame

    def closes(self) -> List[float]:
        return list(self._closes)

    @property
    def hma(self) -> SeriesIndicator:
        return self._hma

    @property
    def vwao(self) -> SeriesIndicator:
        return self._vwao

    @property
    def atso(self) -> SeriesIndicator:
        return self._atso

    @property
    def rsi(self) -> SeriesIndicator:
        return self._rsi

    @property
    def mfi(self) -> SeriesIndicator:
        return self._mfi
