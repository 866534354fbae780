"""
Base Strategy
=============
Abstract base class for single-symbol strategies.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..core.config import StrategyConfig
from ..core.logging_config import EventLogger
from ..core.metrics import MetricsRecorder
from ..execution.executor import Executor
from ..indicators.suite import SuiteFactory
from .runtime import StrategyRuntime


class BaseStrategy(ABC):
    """
    Abstract base class for trading strategies.

    A strategy owns a StrategyRuntime and delegates every order to it.
    All strategies must implement process_bar(), called once per bar.

    Lifecycle:
    1. Initialize strategy with symbol, config and executor
    2. Call process_bar() for each new candle, in order
    3. Inspect positions through the executor
    """

    name = "BaseStrategy"

    def __init__(
        self,
        symbol: str,
        config: StrategyConfig,
        executor: Executor,
        suite_factory: Optional[SuiteFactory] = None,
        logger: Optional[EventLogger] = None,
        metrics: Optional[MetricsRecorder] = None,
    ):
        self.runtime = StrategyRuntime(
            symbol,
            config,
            executor,
            suite_factory=suite_factory,
            logger=logger,
            metrics=metrics,
        )

    @property
    def symbol(self) -> str:
        return self.runtime.symbol

    @property
    def config(self) -> StrategyConfig:
        return self.runtime.config

    @abstractmethod
    def process_bar(self, high: float, low: float, close: float, volume: float) -> None:
        """
        Consume one OHLCV bar and act on it.

        Never raises on the happy path: collaborator failures surface as
        log records and missing orders.
        """
        pass

    def __repr__(self) -> str:
        qty, avg = self.runtime.position()
        return f"{self.name}({self.symbol}, position={qty:g} @ {avg:.2f})"
