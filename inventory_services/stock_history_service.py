"""
inventory_services.stock_history_service -- Append-only writer for the stock history log.

Responsibility:
    Validate and append stock movements to ``stock_history`` so that the
    weighted average cost replay has a complete, ordered event log to read.
    Also serves an item's history timeline (newest first).

Architecture position:
    Services -- the only component allowed to INSERT stock history rows.
    Receives Session and Clock via constructor injection; the caller owns
    the transaction (this service flushes, it never commits).

Invariants enforced:
    - Append-only: rows are inserted, never updated or deleted.
    - Closed reason set: reasons are parsed into StockChangeReason.
    - A zero quantity change is only valid for PRICE_CHANGE, and a
      PRICE_CHANGE must carry a unit price and no quantity.
    - Server-authoritative timestamps from the injected Clock unless the
      caller back-dates explicitly; stored as naive UTC.
    - sequence is strictly increasing in insertion order and breaks ties
      between events that share an occurred_at.
    - supplier_id is denormalised from the owning item at write time.

Failure modes:
    - InvalidStockChangeError for rule violations.
    - UnknownStockChangeReasonError for an unrecognised reason.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.decimals import to_decimal
from inventory_kernel.domain.stock_event import StockChangeReason, StockEvent
from inventory_kernel.exceptions import InvalidStockChangeError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.models.inventory_item import InventoryItemModel
from inventory_kernel.models.stock_history import StockHistoryModel
from inventory_kernel.selectors.stock_event_selector import StockEventSelector

logger = get_logger("services.stock_history")


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class StockHistoryService:
    """
    Records stock movements and reads item timelines.

    Contract:
        record_change() validates, appends one row, flushes, and returns
        the persisted movement as a StockEvent.
    Non-goals:
        - Does not update the item's on-hand quantity or price; item CRUD
          owns those columns.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
        self._selector = StockEventSelector(session)

    def record_change(
        self,
        item_id: str,
        quantity_change: int,
        reason: StockChangeReason | str,
        created_by: str | None = None,
        unit_price: Decimal | str | int | None = None,
        occurred_at: datetime | None = None,
    ) -> StockEvent:
        """
        Append one stock movement to the history log.

        Args:
            item_id: Item whose stock changed.
            quantity_change: Signed change (positive in, negative out).
            reason: StockChangeReason or its name.
            created_by: User who initiated the change.
            unit_price: Unit cost snapshot; required for PRICE_CHANGE.
            occurred_at: Back-dated timestamp; defaults to the clock.

        Raises:
            InvalidStockChangeError: On any rule violation.
            UnknownStockChangeReasonError: If reason is not recognised.
        """
        if not isinstance(item_id, str) or not item_id.strip():
            raise InvalidStockChangeError(str(item_id), "item_id must be a non-empty string")
        if isinstance(quantity_change, bool) or not isinstance(quantity_change, int):
            raise InvalidStockChangeError(item_id, "quantity_change must be an integer")

        parsed_reason = StockChangeReason.parse(reason)

        if quantity_change == 0 and parsed_reason is not StockChangeReason.PRICE_CHANGE:
            raise InvalidStockChangeError(
                item_id, f"zero quantity change is only allowed for PRICE_CHANGE, got {parsed_reason.value}"
            )
        if parsed_reason is StockChangeReason.PRICE_CHANGE:
            if quantity_change != 0:
                raise InvalidStockChangeError(item_id, "PRICE_CHANGE cannot move quantity")
            if unit_price is None:
                raise InvalidStockChangeError(item_id, "PRICE_CHANGE requires a unit price")

        price: Decimal | None = None
        if unit_price is not None:
            try:
                price = to_decimal(unit_price)
            except (TypeError, ValueError) as e:
                raise InvalidStockChangeError(item_id, f"invalid unit price: {e}") from e
            if price < 0:
                raise InvalidStockChangeError(item_id, f"unit price cannot be negative, got {price}")

        timestamp = _naive_utc(occurred_at if occurred_at is not None else self.clock.now_utc())
        supplier_id = self._resolve_supplier_id(item_id)

        row = StockHistoryModel(
            sequence=self._next_sequence(),
            item_id=item_id,
            supplier_id=supplier_id,
            quantity_change=quantity_change,
            reason=parsed_reason.value,
            created_by=created_by,
            occurred_at=timestamp,
            unit_price=price,
        )
        self.session.add(row)
        self.session.flush()

        with LogContext.bind(item_id=item_id, actor_id=created_by, supplier_id=supplier_id):
            logger.info("stock_change_recorded", extra={
                "stock_history_id": row.id,
                "sequence": row.sequence,
                "quantity_change": quantity_change,
                "reason": parsed_reason.value,
                "unit_price": str(price) if price is not None else None,
                "occurred_at": timestamp.isoformat(),
            })

        return StockEvent(
            item_id=item_id,
            quantity_change=quantity_change,
            reason=parsed_reason,
            occurred_at=timestamp,
            unit_price=price,
            supplier_id=supplier_id,
        )

    def history_for_item(self, item_id: str) -> Sequence[StockEvent]:
        """An item's movements, newest first."""
        return self._selector.events_for_item(item_id, newest_first=True)

    def _resolve_supplier_id(self, item_id: str) -> str | None:
        return self.session.scalar(
            select(InventoryItemModel.supplier_id).where(InventoryItemModel.id == item_id)
        )

    def _next_sequence(self) -> int:
        current = self.session.scalar(select(func.max(StockHistoryModel.sequence)))
        return (current or 0) + 1
