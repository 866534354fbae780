"""
Unit Tests for indicator calculations and the pandas indicator suite

Test Coverage:
    - RSI / MFI saturation on one-way and flat markets
    - WMA / HMA values
    - VWAO and ATSO sign
    - Crossover helpers
    - Suite bar validation, bounded history and warm-up errors
    - Suite crossovers on a breakout bar
"""

import math

import numpy as np
import pandas as pd
import pytest

from algobot.indicators.calculations import (
    calculate_atr,
    calculate_atso,
    calculate_hma,
    calculate_mfi,
    calculate_rsi,
    calculate_vwao,
    calculate_wma,
    crossed_above,
    crossed_below,
)
from algobot.indicators.suite import IndicatorError, PandasIndicatorSuite


def bars_frame(closes, volume=1000.0):
    closes = pd.Series(closes, dtype=float)
    return closes + 0.5, closes - 0.5, closes, pd.Series(volume, index=closes.index)


def fill(suite, closes, volume=1000.0):
    for price in closes:
        suite.add(price + 0.5, price - 0.5, price, volume)
    return suite


RISING = [float(p) for p in range(100, 130)]
FLAT = [100.0] * 30
BREAKOUT = [100.0] * 20 + [110.0]


class TestCalculations:
    """Tests for the indicator functions"""

    def test_rsi_rising_saturates(self):
        assert calculate_rsi(pd.Series(RISING)).iloc[-1] == 100.0

    def test_rsi_falling_is_zero(self):
        assert calculate_rsi(pd.Series(RISING[::-1])).iloc[-1] == pytest.approx(0.0)

    def test_rsi_flat_is_neutral(self):
        assert calculate_rsi(pd.Series(FLAT)).iloc[-1] == 50.0

    def test_rsi_warmup_is_nan(self):
        rsi = calculate_rsi(pd.Series(RISING), period=14)
        assert rsi.iloc[:13].isna().all()

    def test_mfi_rising_saturates(self):
        high, low, close, volume = bars_frame(RISING)
        mfi = calculate_mfi(high, low, close, volume, period=14)
        assert mfi.iloc[:14].isna().all()
        assert mfi.iloc[-1] == 100.0

    def test_mfi_flat_is_neutral(self):
        high, low, close, volume = bars_frame(FLAT)
        assert calculate_mfi(high, low, close, volume).iloc[-1] == 50.0

    def test_wma_weights_newest_most(self):
        wma = calculate_wma(pd.Series([1.0, 2.0, 3.0]), period=3)
        assert wma.iloc[-1] == pytest.approx(14 / 6)

    def test_hma_tracks_linear_series(self):
        hma = calculate_hma(pd.Series(RISING), period=9)
        assert hma.iloc[-1] == pytest.approx(RISING[-1])

    def test_hma_on_flat_series(self):
        assert calculate_hma(pd.Series(FLAT), period=9).iloc[-1] == pytest.approx(100.0)

    def test_atr_of_unit_bars(self):
        high, low, close, _ = bars_frame(FLAT)
        assert calculate_atr(high, low, close).iloc[-1] == pytest.approx(1.0)

    def test_atso_sign_follows_trend(self):
        high, low, close, _ = bars_frame(RISING)
        assert calculate_atso(high, low, close).iloc[-1] > 0
        high, low, close, _ = bars_frame(RISING[::-1])
        assert calculate_atso(high, low, close).iloc[-1] < 0

    def test_vwao_flat_is_zero(self):
        _, _, close, volume = bars_frame(FLAT)
        assert calculate_vwao(close, volume).iloc[-1] == pytest.approx(0.0)

    def test_vwao_above_average_is_positive(self):
        _, _, close, volume = bars_frame(BREAKOUT)
        assert calculate_vwao(close, volume).iloc[-1] > 0


class TestCrossHelpers:
    def test_crossed_above(self):
        assert crossed_above(pd.Series([1.0, 2.0]), pd.Series([1.5, 1.5]))
        assert crossed_above(pd.Series([1.5, 2.0]), pd.Series([1.5, 1.5]))
        assert not crossed_above(pd.Series([2.0, 3.0]), pd.Series([1.5, 1.5]))

    def test_crossed_below(self):
        assert crossed_below(pd.Series([2.0, 1.0]), pd.Series([1.5, 1.5]))
        assert not crossed_below(pd.Series([1.0, 0.5]), pd.Series([1.5, 1.5]))

    def test_needs_two_points(self):
        assert not crossed_above(pd.Series([2.0]), pd.Series([1.0]))

    def test_missing_last_value(self):
        line = pd.Series([1.0, 2.0, 3.0])
        reference = pd.Series([1.5, 1.5, np.nan])
        assert not crossed_above(line, reference)


class TestSuiteInput:
    """Bar validation and history handling"""

    @pytest.mark.parametrize(
        "bar",
        [
            (math.nan, 99, 100, 10),
            (101, 99, math.inf, 10),
            ("abc", 99, 100, 10),
            (None, 99, 100, 10),
            (101, 99, 0, 10),
            (101, 99, -5, 10),
            (99, 101, 100, 10),
            (101, 99, 100, -1),
        ],
    )
    def test_rejects_bad_bar(self, bar):
        suite = PandasIndicatorSuite()
        with pytest.raises(IndicatorError):
            suite.add(*bar)
        assert len(suite) == 0

    def test_accepts_numeric_strings(self):
        suite = PandasIndicatorSuite()
        suite.add("101", "99", "100", "10")
        assert suite.closes() == [100.0]

    def test_history_is_bounded(self):
        suite = fill(PandasIndicatorSuite(history_size=20), RISING)
        assert len(suite) == 20
        assert suite.closes()[0] == RISING[10]

    def test_frame_cached_until_next_bar(self):
        suite = fill(PandasIndicatorSuite(), RISING[:5])
        frame = suite.frame()
        assert suite.frame() is frame
        suite.add(106, 104, 105, 1000)
        assert suite.frame() is not frame
        assert len(suite.frame()) == 6

    def test_from_config(self, config):
        suite = PandasIndicatorSuite.from_config(config)
        assert suite.hma.min_bars == 9 + 3


class TestSuiteIndicators:
    """Indicator values and warm-up through the suite"""

    @pytest.mark.parametrize("name", ["hma", "vwao", "atso", "rsi", "mfi"])
    def test_warmup_raises(self, name):
        suite = fill(PandasIndicatorSuite(), RISING[:5])
        indicator = getattr(suite, name)
        with pytest.raises(IndicatorError):
            indicator.series()
        with pytest.raises(IndicatorError):
            indicator.is_bullish_crossover()

    def test_oscillators_on_rising_series(self):
        suite = fill(PandasIndicatorSuite(), RISING)
        assert suite.rsi.calculate() == 100.0
        assert suite.mfi.calculate() == 100.0
        assert suite.atso.calculate() > 0
        assert suite.vwao.calculate() > 0

    def test_atso_values_skip_warmup(self):
        suite = fill(PandasIndicatorSuite(), RISING)
        values = suite.atso.values()
        assert values
        assert all(v > 0 for v in values)
        assert len(values) < len(RISING)

    def test_oscillators_on_flat_series(self):
        suite = fill(PandasIndicatorSuite(), FLAT)
        assert suite.rsi.calculate() == 50.0
        assert suite.mfi.calculate() == 50.0
        assert suite.atso.calculate() == pytest.approx(0.0)

    @pytest.mark.parametrize("name", ["hma", "vwao", "atso"])
    def test_breakout_bar_is_bullish_crossover(self, name):
        suite = fill(PandasIndicatorSuite(), BREAKOUT)
        indicator = getattr(suite, name)
        assert indicator.is_bullish_crossover()
        assert not indicator.is_bearish_crossover()

    def test_no_crossover_while_trending(self):
        suite = fill(PandasIndicatorSuite(), RISING)
        assert not suite.vwao.is_bullish_crossover()
        assert not suite.atso.is_bullish_crossover()

    def test_vwao_strong_trend_level(self):
        # Breakout bar sits ~9.2% above the 14-bar VWMA
        assert fill(PandasIndicatorSuite(vwao_strong_trend=5.0), BREAKOUT).vwao.is_strong_trend()
        assert not fill(PandasIndicatorSuite(), BREAKOUT).vwao.is_strong_trend()

    def test_strong_trend_needs_a_level(self):
        suite = fill(PandasIndicatorSuite(), BREAKOUT)
        with pytest.raises(IndicatorError):
            suite.hma.is_strong_trend()
