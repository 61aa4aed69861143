"""ORM models for the inventory kernel."""

from inventory_kernel.models.inventory_item import InventoryItemModel
from inventory_kernel.models.stock_history import StockHistoryModel

__all__ = [
    "InventoryItemModel",
    "StockHistoryModel",
]
