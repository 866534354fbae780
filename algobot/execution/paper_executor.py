"""
Paper Mode Executor
===================
Simulates order execution against an in-memory ledger.

Features:
1. Perfect fills at the order price (no slippage)
2. Signed positions with volume-weighted average entry price
3. Cash ledger and mark-to-market equity
4. Order history for inspection
5. Insufficient-cash buys are dropped, like a broker rejection
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .executor import ExecutionError
from .order import Order, OrderSide


logger = logging.getLogger("algobot.execution.paper_executor")


@dataclass
class PaperPosition:
    """Paper trading position"""
    symbol: str
    quantity: float = 0.0        # positive = long, negative = short
    average_price: float = 0.0
    mark_price: float = 0.0

    @property
    def value(self) -> float:
        """Signed position value at the mark price"""
        return self.quantity * self.mark_price

    def apply_fill(self, signed_qty: float, fill_price: float) -> None:
        """Fold a fill into quantity and average price"""
        old_qty = self.quantity
        new_qty = old_qty + signed_qty

        if math.isclose(new_qty, 0.0, abs_tol=1e-12):
            new_qty = 0.0
            self.average_price = 0.0
        elif old_qty == 0 or (old_qty > 0) == (signed_qty > 0):
            # Opening or adding: volume-weighted average
            self.average_price = (
                abs(old_qty) * self.average_price + abs(signed_qty) * fill_price
            ) / abs(new_qty)
        elif (old_qty > 0) != (new_qty > 0):
            # Crossed through zero: the remainder is a fresh position
            self.average_price = fill_price
        # Partial reduction keeps the entry average

        self.quantity = new_qty
        self.mark_price = fill_price


class PaperExecutor:
    """
    Paper trading order executor.

    Safe to share between threads: every ledger access holds one lock.

    Usage:
        executor = PaperExecutor(initial_capital=10_000)
        executor.submit(Order("BTCUSDT", OrderSide.BUY, 0.5, 20_000.0))
        qty, avg = executor.position("BTCUSDT")
    """

    def __init__(self, initial_capital: float = 100000.0):
        """
        Initialize paper executor.

        Args:
            initial_capital: Starting cash
        """
        self.initial_capital = initial_capital
        self.cash = initial_capital

        self._lock = threading.Lock()

        # Position tracking
        self.positions: Dict[str, PaperPosition] = {}

        # Accepted orders, in submission order
        self._orders: List[Order] = []
        self.rejected_count = 0

    def submit(self, order: Order) -> None:
        """
        Execute a paper order at its own price.

        Args:
            order: Order to execute

        Raises:
            ExecutionError: if the order price cannot be filled
        """
        if not order.price > 0:
            raise ExecutionError(f"invalid fill price {order.price} for {order.symbol}")

        cost = order.quantity * order.price

        with self._lock:
            if order.side == OrderSide.BUY and cost > self.cash:
                self.rejected_count += 1
                logger.warning(
                    f"[PAPER] Dropped {order}: insufficient cash "
                    f"(need {cost:.2f}, have {self.cash:.2f})"
                )
                return

            position = self.positions.get(order.symbol)
            if position is None:
                position = PaperPosition(symbol=order.symbol)
                self.positions[order.symbol] = position

            signed_qty = order.quantity * order.side.sign
            self.cash -= signed_qty * order.price
            position.apply_fill(signed_qty, order.price)
            self._orders.append(order)

            logger.info(
                f"[PAPER] Filled {order} | position={position.quantity:g} "
                f"avg={position.average_price:.2f} cash={self.cash:.2f}"
            )

    def equity(self) -> float:
        """Cash plus the marked value of every open position"""
        with self._lock:
            return self.cash + sum(p.value for p in self.positions.values())

    def position(self, symbol: str) -> Tuple[float, float]:
        with self._lock:
            position = self.positions.get(symbol)
            if position is None:
                return 0.0, 0.0
            return position.quantity, position.average_price

    def mark_price(self, symbol: str, price: float) -> None:
        """Re-mark an open position (e.g. on every new bar)"""
        with self._lock:
            position = self.positions.get(symbol)
            if position is not None and price > 0:
                position.mark_price = price

    @property
    def orders(self) -> List[Order]:
        """Copy of all accepted orders"""
        with self._lock:
            return list(self._orders)

    def open_positions(self) -> Dict[str, float]:
        with self._lock:
            return {s: p.quantity for s, p in self.positions.items() if p.quantity != 0}

    def get_summary(self) -> dict:
        """Get paper trading summary"""
        with self._lock:
            open_count = sum(1 for p in self.positions.values() if p.quantity != 0)
            equity = self.cash + sum(p.value for p in self.positions.values())
            return {
                "initial_capital": self.initial_capital,
                "cash": self.cash,
                "equity": equity,
                "open_positions": open_count,
                "orders": len(self._orders),
                "rejected": self.rejected_count,
            }

    def reset(self) -> None:
        """Reset to the initial capital with no positions"""
        with self._lock:
            self.cash = self.initial_capital
            self.positions.clear()
            self._orders.clear()
            self.rejected_count = 0
        logger.info("[PAPER] Executor reset")
