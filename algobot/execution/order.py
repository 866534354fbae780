"""
Orders
======
Immutable order records built by strategies and consumed by executors.
"""

import math
from enum import Enum
from dataclasses import dataclass


class OrderSide(Enum):
    """Order side"""
    BUY = "BUY"
    SELL = "SELL"

    @property
    def opposite(self) -> "OrderSide":
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY

    @property
    def sign(self) -> int:
        return 1 if self is OrderSide.BUY else -1

    @classmethod
    def closing(cls, position_qty: float) -> "OrderSide":
        """Side that flattens a signed position (long -> SELL, short -> BUY)"""
        return cls.SELL if position_qty > 0 else cls.BUY


@dataclass(frozen=True)
class Order:
    """Order data structure"""
    symbol: str
    side: OrderSide
    quantity: float
    price: float
    reason: str = ""

    def __post_init__(self):
        if not self.symbol:
            raise ValueError("order symbol must not be empty")
        if not isinstance(self.side, OrderSide):
            raise ValueError(f"invalid order side: {self.side!r}")
        if not math.isfinite(self.quantity) or self.quantity <= 0:
            raise ValueError(f"order quantity must be positive, got {self.quantity}")
        if not math.isfinite(self.price):
            raise ValueError(f"order price must be finite, got {self.price}")

    @property
    def value(self) -> float:
        return self.quantity * self.price

    def __str__(self) -> str:
        return f"{self.side.value} {self.quantity:g} {self.symbol} @ {self.price:.2f} ({self.reason})"


def closing_order(symbol: str, position_qty: float, price: float, reason: str) -> Order:
    """Build the order that flattens ``position_qty`` at ``price``"""
    return Order(
        symbol=symbol,
        side=OrderSide.closing(position_qty),
        quantity=abs(position_qty),
        price=price,
        reason=reason,
    )
