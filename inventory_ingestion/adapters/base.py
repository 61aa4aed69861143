"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read() yields one dict per source record (streaming).
    SourceAdapter.probe() returns a quick snapshot: row count, columns, sample rows.

Architecture: inventory_ingestion/adapters. File I/O only, no DB or kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

# Columns every stock history export must carry
STOCK_HISTORY_COLUMNS: tuple[str, ...] = (
    "item_id",
    "quantity_change",
    "reason",
    "occurred_at",
)


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading stock history files into record dicts."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield one dict per source record. Streams; does not load entire file."""
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]  # First 5 rows; do not mutate
    encoding: str | None = None
    detected_delimiter: str | None = None

    def missing_columns(
        self, required: tuple[str, ...] = STOCK_HISTORY_COLUMNS,
    ) -> tuple[str, ...]:
        """Required columns absent from the probed header, in declared order."""
        present = set(self.columns)
        return tuple(c for c in required if c not in present)
