"""
inventory_services.event_sources -- Stock event source contract and file/memory implementations.

Responsibility:
    Define the ``StockEventSource`` protocol the analytics service depends
    on, and provide two implementations that need no database:
    ``InMemoryStockEventSource`` (fixtures, embedding) and
    ``CsvStockEventSource`` (stock history exports).  The SQL
    implementation is ``inventory_kernel.selectors.StockEventSelector``.

Architecture position:
    Services -- adapters between storage and the pure replay engine.

Invariants enforced:
    - Inclusive end: every event with occurred_at <= end is returned.
    - Ordering contract: events grouped by item_id, ascending occurred_at,
      ties in their original (insertion) order.
    - Supplier filter: trimmed and case-insensitive; None means all.

Failure modes:
    - MalformedStockEventError / UnknownStockChangeReasonError when a CSV
      row cannot be parsed; the rejection log names the offending line.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from inventory_ingestion.adapters import STOCK_HISTORY_COLUMNS, CsvSourceAdapter, SourceAdapter, SourceProbe
from inventory_kernel.domain.stock_event import StockEvent, normalize_supplier_id
from inventory_kernel.exceptions import MalformedStockEventError, StockEventError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.event_sources")


@runtime_checkable
class StockEventSource(Protocol):
    """Anything that can stream stock events up to a point in time."""

    def fetch_events_up_to(
        self,
        end: datetime,
        supplier_id: str | None = None,
    ) -> Sequence[StockEvent]:
        """Events with occurred_at <= end, ordered by item then time."""
        ...


def select_events(
    events: Iterable[StockEvent],
    end: datetime,
    supplier_id: str | None = None,
) -> list[StockEvent]:
    """Filter and order events the way every event source must.

    sorted() is stable, so events sharing (item_id, occurred_at) keep the
    order they were given in.
    """
    normalized = normalize_supplier_id(supplier_id)
    selected = [
        e for e in events
        if e.occurred_at <= end
        and (normalized is None or normalize_supplier_id(e.supplier_id) == normalized)
    ]
    return sorted(selected, key=lambda e: (e.item_id, e.occurred_at))


class InMemoryStockEventSource:
    """Event source over a list of events held in memory (insertion order kept)."""

    def __init__(self, events: Iterable[StockEvent] = ()):
        self._events: list[StockEvent] = list(events)

    def append(self, event: StockEvent) -> None:
        self._events.append(event)

    def __len__(self) -> int:
        return len(self._events)

    def fetch_events_up_to(
        self,
        end: datetime,
        supplier_id: str | None = None,
    ) -> list[StockEvent]:
        return select_events(self._events, end, supplier_id)


class CsvStockEventSource:
    """
    Event source over a stock history CSV export.

    The file is re-read on every fetch so a long-lived source always sees
    the current export.  Rows keep file order as the insertion order.
    """

    def __init__(
        self,
        path: Path | str,
        options: dict[str, Any] | None = None,
        adapter: SourceAdapter | None = None,
    ):
        self.path = Path(path)
        self.options = dict(options or {})
        self.adapter = adapter or CsvSourceAdapter()

    def check_columns(self) -> SourceProbe:
        """Probe the export and fail if a required column is missing."""
        try:
            probe = self.adapter.probe(self.path, self.options)
        except (UnicodeDecodeError, csv.Error) as e:
            raise self._unreadable(e) from e
        missing = probe.missing_columns(STOCK_HISTORY_COLUMNS)
        if missing:
            logger.error("csv_stock_export_missing_columns", extra={
                "path": str(self.path),
                "missing": list(missing),
            })
            raise MalformedStockEventError(
                None, "header", f"{self.path}: missing columns {', '.join(missing)}"
            )
        return probe

    def load(self) -> list[StockEvent]:
        """Parse every row of the export into a StockEvent."""
        events: list[StockEvent] = []
        try:
            for record in self.adapter.read(self.path, self.options):
                try:
                    events.append(StockEvent.from_record(record))
                except StockEventError as e:
                    logger.error("csv_stock_event_rejected", extra={
                        "path": str(self.path),
                        "line": record.get("_source_line"),
                        "error_code": e.code,
                        "error": str(e),
                    })
                    raise
        except (UnicodeDecodeError, csv.Error) as e:
            raise self._unreadable(e) from e
        return events

    def _unreadable(self, error: Exception) -> MalformedStockEventError:
        # Undecodable bytes or broken quoting: the file itself is unusable
        wrapped = MalformedStockEventError(None, "row", f"{self.path}: {error}")
        logger.error("csv_stock_event_rejected", extra={
            "path": str(self.path),
            "line": None,
            "error_code": wrapped.code,
            "error": str(error),
        })
        return wrapped

    def fetch_events_up_to(
        self,
        end: datetime,
        supplier_id: str | None = None,
    ) -> list[StockEvent]:
        events = select_events(self.load(), end, supplier_id)
        logger.debug("csv_stock_events_fetched", extra={
            "path": str(self.path),
            "end": end.isoformat(),
            "supplier_id": normalize_supplier_id(supplier_id),
            "event_count": len(events),
        })
        return events
