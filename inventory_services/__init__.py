"""
Inventory services: orchestration over the kernel and the engines.

- event_sources: StockEventSource protocol, in-memory and CSV sources
- financial_analytics_service: weighted average cost financial summaries
- stock_history_service: append-only writer for the stock history log
"""

from inventory_services.event_sources import (
    CsvStockEventSource,
    InMemoryStockEventSource,
    StockEventSource,
    select_events,
)
from inventory_services.financial_analytics_service import FinancialAnalyticsService
from inventory_services.stock_history_service import StockHistoryService

__all__ = [
    "CsvStockEventSource",
    "FinancialAnalyticsService",
    "InMemoryStockEventSource",
    "StockEventSource",
    "StockHistoryService",
    "select_events",
]
