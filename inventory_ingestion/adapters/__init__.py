"""Source adapters for stock history exports (file I/O only, no DB)."""

from inventory_ingestion.adapters.base import (
    STOCK_HISTORY_COLUMNS,
    SourceAdapter,
    SourceProbe,
)
from inventory_ingestion.adapters.csv_adapter import CsvSourceAdapter

__all__ = [
    "STOCK_HISTORY_COLUMNS",
    "SourceAdapter",
    "SourceProbe",
    "CsvSourceAdapter",
]
