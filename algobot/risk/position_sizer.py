"""
Position Sizer
==============
Turn a risk budget into an executable order quantity.

Uses fixed fractional sizing:
- Risk a fixed fraction of equity per trade
- Quantity = (Equity * Risk%) / (Price * StopLoss%)
- Floor to the exchange step size and quantity precision
- Reject dust below the minimum quantity
"""

import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, localcontext
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..core.config import StrategyConfig


@dataclass(frozen=True)
class QuantityConstraints:
    """Exchange quantity rules for one instrument"""
    step_size: float
    quantity_precision: int
    min_qty: float


def _to_decimal(value: float) -> Decimal:
    # str() gives the shortest round-tripping repr, so 0.1 stays 0.1
    return Decimal(str(value))


def quantize_qty(qty: float, constraints: QuantityConstraints) -> float:
    """
    Floor a raw quantity to the step size, then to the precision.

    Returns 0.0 when the result is not positive or is below ``min_qty``.
    """
    if not math.isfinite(qty) or qty <= 0:
        return 0.0

    with localcontext() as ctx:
        ctx.prec = 50
        result = _to_decimal(qty)

        if constraints.step_size > 0:
            step = _to_decimal(constraints.step_size)
            result = (result / step).to_integral_value(rounding=ROUND_FLOOR) * step

        if constraints.quantity_precision >= 0:
            exponent = Decimal(1).scaleb(-constraints.quantity_precision)
            result = result.quantize(exponent, rounding=ROUND_FLOOR)

        quantity = float(result)

    if quantity <= 0 or quantity < constraints.min_qty:
        return 0.0
    return quantity


def calc_qty(
    equity: float,
    risk_fraction: float,
    stop_loss_fraction: float,
    price: float,
    constraints: QuantityConstraints,
) -> float:
    """
    Calculate an order quantity from a risk budget.

    Args:
        equity: Current account equity
        risk_fraction: Fraction of equity put at risk (0.01 = 1%)
        stop_loss_fraction: Stop distance as a fraction of price
        price: Expected entry price
        constraints: Step size, precision and minimum quantity

    Returns:
        Quantity >= min_qty on the step/precision grid, or 0.0 when the
        trade cannot be sized
    """
    risk_amount = equity * risk_fraction
    stop_distance = price * stop_loss_fraction
    if not stop_distance > 0:
        return 0.0

    raw_qty = risk_amount / stop_distance
    if not math.isfinite(raw_qty) or raw_qty <= 0:
        return 0.0

    return quantize_qty(raw_qty, constraints)


class PositionSizer:
    """
    Calculate position sizes from a strategy config.

    Usage:
        sizer = PositionSizer(config)
        qty = sizer.size(equity=10_000, price=100.0)
    """

    def __init__(self, config: "StrategyConfig"):
        self.config = config

    @property
    def constraints(self) -> QuantityConstraints:
        return self.config.constraints

    def size(
        self,
        equity: float,
        price: float,
        risk_fraction: Optional[float] = None,
    ) -> float:
        """
        Size an entry at ``price``.

        Args:
            equity: Current account equity
            price: Entry price
            risk_fraction: Overrides ``max_risk_per_trade`` when given

        Returns:
            Executable quantity, or 0.0
        """
        if risk_fraction is None:
            risk_fraction = self.config.max_risk_per_trade
        return calc_qty(
            equity,
            risk_fraction,
            self.config.stop_loss_pct,
            price,
            self.constraints,
        )
