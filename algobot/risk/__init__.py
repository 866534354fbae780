# Algobot Risk Module
# ===================
# Risk-bounded position sizing

from .position_sizer import PositionSizer, QuantityConstraints, calc_qty, quantize_qty

__all__ = [
    "PositionSizer",
    "QuantityConstraints",
    "calc_qty",
    "quantize_qty",
]
