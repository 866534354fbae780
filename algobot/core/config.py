"""
Strategy Configuration
======================
Validated, immutable risk and threshold parameters shared by every strategy.

Values can be built directly, or loaded from environment variables and the
project .env file:

    config = StrategyConfig.from_env()
    print(config.max_risk_per_trade)
"""

import math
import os
from dataclasses import dataclass, fields
from pathlib import Path

from dotenv import load_dotenv

from ..risk.position_sizer import QuantityConstraints
from .constants import (
    DEFAULT_MAX_RISK_PER_TRADE,
    DEFAULT_STOP_LOSS_PCT,
    DEFAULT_TAKE_PROFIT_PCT,
    DEFAULT_TRAILING_PCT,
    ConfigBounds,
    IndicatorParams,
    QuantityDefaults,
)


# Load .env file from project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

ENV_PREFIX = "STRATEGY_"


class ConfigError(ValueError):
    """Raised when a StrategyConfig fails validation"""

    def __init__(self, issues: list[str]):
        self.issues = list(issues)
        super().__init__("invalid strategy config: " + "; ".join(self.issues))


@dataclass(frozen=True)
class StrategyConfig:
    """
    Risk and threshold parameters for a strategy instance.

    Validation runs on construction (and on ``dataclasses.replace``), so an
    invalid config never exists.
    """

    # Oscillator thresholds
    rsi_overbought: float = IndicatorParams.RSI_OVERBOUGHT
    rsi_oversold: float = IndicatorParams.RSI_OVERSOLD
    mfi_overbought: float = IndicatorParams.MFI_OVERBOUGHT
    mfi_oversold: float = IndicatorParams.MFI_OVERSOLD
    vwao_strong_trend: float = IndicatorParams.VWAO_STRONG_TREND

    # Indicator periods
    hma_period: int = IndicatorParams.HMA_PERIOD
    atso_ema_period: int = IndicatorParams.ATSO_EMA_PERIOD
    rsi_period: int = IndicatorParams.RSI_PERIOD
    mfi_period: int = IndicatorParams.MFI_PERIOD

    # Risk
    max_risk_per_trade: float = DEFAULT_MAX_RISK_PER_TRADE
    stop_loss_pct: float = DEFAULT_STOP_LOSS_PCT
    take_profit_pct: float = DEFAULT_TAKE_PROFIT_PCT
    trailing_pct: float = DEFAULT_TRAILING_PCT

    # Quantity constraints
    quantity_precision: int = QuantityDefaults.QUANTITY_PRECISION
    min_qty: float = QuantityDefaults.MIN_QTY
    step_size: float = QuantityDefaults.STEP_SIZE

    def __post_init__(self):
        valid, issues = self.validate()
        if not valid:
            raise ConfigError(issues)

    @classmethod
    def from_env(cls) -> "StrategyConfig":
        """Build a config from STRATEGY_* environment variables"""
        overrides = {}
        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[f.name] = int(raw) if f.type in (int, "int") else float(raw)
            except ValueError:
                raise ConfigError([f"{ENV_PREFIX}{f.name.upper()} is not a number: {raw!r}"])
        return cls(**overrides)

    def validate(self) -> tuple[bool, list[str]]:
        """Check thresholds, periods, risk ratios and quantity constraints"""
        issues = []

        for name in (f.name for f in fields(self)):
            value = getattr(self, name)
            if isinstance(value, float) and not math.isfinite(value):
                issues.append(f"{name} must be finite, got {value}")
        if issues:
            return False, issues

        if self.rsi_overbought == self.rsi_oversold:
            issues.append("rsi_overbought must differ from rsi_oversold")
        if self.mfi_overbought == self.mfi_oversold:
            issues.append("mfi_overbought must differ from mfi_oversold")

        for name in ("hma_period", "atso_ema_period", "rsi_period", "mfi_period"):
            if getattr(self, name) <= 0:
                issues.append(f"{name} must be positive")

        if not 0 < self.max_risk_per_trade <= ConfigBounds.MAX_RISK_PER_TRADE:
            issues.append(
                f"max_risk_per_trade must be in (0, {ConfigBounds.MAX_RISK_PER_TRADE}]"
            )
        if not 0 < self.stop_loss_pct <= ConfigBounds.MAX_STOP_LOSS_PCT:
            issues.append(f"stop_loss_pct must be in (0, {ConfigBounds.MAX_STOP_LOSS_PCT}]")
        if not 0 <= self.take_profit_pct <= ConfigBounds.MAX_TAKE_PROFIT_PCT:
            issues.append(
                f"take_profit_pct must be in [0, {ConfigBounds.MAX_TAKE_PROFIT_PCT}]"
            )
        if not 0 <= self.trailing_pct <= ConfigBounds.MAX_TRAILING_PCT:
            issues.append(f"trailing_pct must be in [0, {ConfigBounds.MAX_TRAILING_PCT}]")

        if self.quantity_precision < 0:
            issues.append("quantity_precision must not be negative")
        if self.min_qty < 0:
            issues.append("min_qty must not be negative")
        if not self.step_size > 0:
            issues.append("step_size must be positive")

        return len(issues) == 0, issues

    @property
    def constraints(self) -> QuantityConstraints:
        return QuantityConstraints(
            step_size=self.step_size,
            quantity_precision=self.quantity_precision,
            min_qty=self.min_qty,
        )
