# Algobot Execution Module
# ========================
# Orders, the executor contract and paper execution

from .order import Order, OrderSide, closing_order
from .executor import Executor, ExecutionError
from .paper_executor import PaperExecutor, PaperPosition

__all__ = [
    "Order",
    "OrderSide",
    "closing_order",
    "Executor",
    "ExecutionError",
    "PaperExecutor",
    "PaperPosition",
]
