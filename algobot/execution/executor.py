"""
Executor Interface
==================
The narrow contract strategies use to route orders and read positions.

Positions live with the executor. Strategies read them on every decision
and never keep their own copy.
"""

from typing import Protocol, Tuple

from .order import Order


class ExecutionError(Exception):
    """An executor refused or failed to process an order"""


class Executor(Protocol):
    """Order router / position ledger"""

    def submit(self, order: Order) -> None:
        """Route an order. Raises ExecutionError on failure."""
        ...

    def equity(self) -> float:
        ...

    def position(self, symbol: str) -> Tuple[float, float]:
        """Return (signed quantity, average entry price)"""
        ...
