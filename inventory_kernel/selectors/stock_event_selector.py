"""
Module: inventory_kernel.selectors.stock_event_selector
Responsibility: Read-only streaming of the stock history log as StockEvent
    domain objects.  This is the SQL implementation of the event source the
    weighted average cost replay consumes.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Ordering contract: events are grouped by item_id, then ascending by
      occurred_at, then by insertion sequence (ties keep log order).
    - Inclusive end: every event with occurred_at <= end is returned,
      including history before any reporting window.
    - Supplier filter: trimmed, case-insensitive match on the row's
      supplier_id, falling back to the owning item's supplier_id when the
      row was written without one.

Failure modes:
    - UnknownStockChangeReasonError / MalformedStockEventError if a stored
      row cannot be represented as a StockEvent.  Rows are never skipped.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select

from inventory_kernel.domain.stock_event import StockEvent, normalize_supplier_id
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.inventory_item import InventoryItemModel
from inventory_kernel.models.stock_history import StockHistoryModel
from inventory_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.stock_event")


class StockEventSelector(BaseSelector):
    """Streams stock history rows for replay and item timelines."""

    def fetch_events_up_to(
        self,
        end: datetime,
        supplier_id: str | None = None,
    ) -> list[StockEvent]:
        """
        All events with occurred_at <= end, optionally for one supplier.

        Args:
            end: Inclusive upper bound on occurred_at.
            supplier_id: Optional supplier filter; None or blank = all.

        Returns:
            Events ordered by item, then time, then insertion order.
        """
        sh = StockHistoryModel
        item = InventoryItemModel
        effective_supplier = func.coalesce(sh.supplier_id, item.supplier_id)

        stmt = (
            select(
                sh.item_id,
                effective_supplier.label("supplier_id"),
                sh.occurred_at,
                sh.quantity_change,
                sh.unit_price,
                sh.reason,
            )
            .select_from(sh)
            .outerjoin(item, item.id == sh.item_id)
            .where(sh.occurred_at <= end)
            .order_by(sh.item_id.asc(), sh.occurred_at.asc(), sh.sequence.asc())
        )

        normalized = normalize_supplier_id(supplier_id)
        if normalized is not None:
            stmt = stmt.where(func.lower(func.trim(effective_supplier)) == normalized)

        events = [self._to_event(row._mapping) for row in self.session.execute(stmt)]

        logger.debug(
            "stock_events_fetched",
            extra={
                "end": end.isoformat(),
                "supplier_id": normalized,
                "event_count": len(events),
            },
        )
        return events

    def events_for_item(self, item_id: str, newest_first: bool = True) -> Sequence[StockEvent]:
        """The full history of one item."""
        sh = StockHistoryModel
        if newest_first:
            ordering = (sh.occurred_at.desc(), sh.sequence.desc())
        else:
            ordering = (sh.occurred_at.asc(), sh.sequence.asc())

        stmt = (
            select(
                sh.item_id,
                sh.supplier_id,
                sh.occurred_at,
                sh.quantity_change,
                sh.unit_price,
                sh.reason,
            )
            .where(sh.item_id == item_id)
            .order_by(*ordering)
        )
        return [self._to_event(row._mapping) for row in self.session.execute(stmt)]

    @staticmethod
    def _to_event(row) -> StockEvent:
        return StockEvent(
            item_id=row["item_id"],
            quantity_change=int(row["quantity_change"]),
            reason=row["reason"],
            occurred_at=row["occurred_at"],
            unit_price=row["unit_price"],
            supplier_id=row["supplier_id"],
        )
