"""
Pure domain layer.

Stock events, reasons, decimal helpers and the clock abstraction, with NO
dependencies on the ORM, the database or I/O.
"""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.decimals import (
    COST_SCALE,
    DISPLAY_SCALE,
    round_cost,
    to_decimal,
)
from inventory_kernel.domain.stock_event import (
    StockChangeReason,
    StockEvent,
    normalize_supplier_id,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "COST_SCALE",
    "DISPLAY_SCALE",
    "round_cost",
    "to_decimal",
    "StockChangeReason",
    "StockEvent",
    "normalize_supplier_id",
]
