"""Selectors for the inventory kernel (read side)."""

from inventory_kernel.selectors.stock_event_selector import StockEventSelector

__all__ = [
    "StockEventSelector",
]
