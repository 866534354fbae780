"""
Shared fixtures for the strategy runtime tests.

The indicator collaborator is replaced by ScriptedSuite: every indicator
raises IndicatorError (not enough history) unless a test scripts a value,
which lets each test decide exactly which signals exist.
"""

import sys
from pathlib import Path

import pytest

# Add project root
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from algobot.core.config import StrategyConfig
from algobot.execution.paper_executor import PaperExecutor
from algobot.indicators.suite import IndicatorError


# ==================== Scripted indicator suite ====================


class ScriptedIndicator:
    """Indicator whose outputs are set by the test (None = not ready)"""

    def __init__(self, name: str):
        self.name = name
        self.bullish = None
        self.bearish = None
        self.value = None
        self.series = None

    def _get(self, attr: str):
        result = getattr(self, attr)
        if result is None:
            raise IndicatorError(f"{self.name}.{attr}: not enough history")
        return result

    def is_bullish_crossover(self) -> bool:
        return self._get("bullish")

    def is_bearish_crossover(self) -> bool:
        return self._get("bearish")

    def calculate(self) -> float:
        return self._get("value")

    def values(self):
        return list(self._get("series"))


class ScriptedSuite:
    """IndicatorSuite stand-in that records bars"""

    def __init__(self):
        self.hma = ScriptedIndicator("hma")
        self.vwao = ScriptedIndicator("vwao")
        self.atso = ScriptedIndicator("atso")
        self.rsi = ScriptedIndicator("rsi")
        self.mfi = ScriptedIndicator("mfi")
        self.bars = []
        self.reject_bars = False

    def add(self, high, low, close, volume):
        if self.reject_bars:
            raise IndicatorError("bar rejected")
        self.bars.append((high, low, close, volume))


def bar(price: float, volume: float = 1000.0):
    """OHLCV tuple one point either side of the close"""
    return (price + 0.5, price - 0.5, price, volume)


# ==================== Fixtures ====================


@pytest.fixture
def config():
    """
    Permissive config: oscillator thresholds never block a trade.

    1% risk, 1.5% stop, no take-profit or trailing stop unless a test
    enables them with dataclasses.replace.
    """
    return StrategyConfig(
        rsi_overbought=1e9,
        rsi_oversold=-1e9,
        mfi_overbought=1e9,
        mfi_oversold=-1e9,
        vwao_strong_trend=1e9,
        hma_period=9,
        atso_ema_period=5,
        max_risk_per_trade=0.01,
        stop_loss_pct=0.015,
        take_profit_pct=0.0,
        trailing_pct=0.0,
        quantity_precision=2,
        min_qty=0.001,
        step_size=0.0001,
    )


@pytest.fixture
def executor():
    """Paper executor with $10k starting equity"""
    return PaperExecutor(initial_capital=10_000)


@pytest.fixture
def scripted_suite():
    return ScriptedSuite()


@pytest.fixture
def suite_factory(scripted_suite):
    """Factory handing out the single scripted suite of the test"""
    return lambda: scripted_suite


@pytest.fixture
def make_suite():
    """The ScriptedSuite class, for tests that need one suite per symbol"""
    return ScriptedSuite


@pytest.fixture
def make_bar():
    return bar


@pytest.fixture
def feed():
    """Feed closes (as one-point-wide bars) into anything with process_bar"""

    def _feed(strategy, closes, volume: float = 1000.0):
        for price in closes:
            strategy.process_bar(*bar(price, volume))

    return _feed
