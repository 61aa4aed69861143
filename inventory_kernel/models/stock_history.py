"""
Module: inventory_kernel.models.stock_history
Responsibility: ORM persistence for the append-only stock history log.  Each
    row is one stock movement (receipt, sale, write-off, return, price change)
    and is the raw material of the weighted average cost replay.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - Append-only: rows are inserted by StockHistoryService and never updated.
    - Total order per item: (item_id, occurred_at, sequence) orders an item's
      history; sequence is the insertion order and breaks timestamp ties.
    - supplier_id is denormalised from the item at write time for
      supplier-scoped analytics.

Indexing:
    - (item_id, occurred_at) for item timelines and the replay stream.
    - (occurred_at) for range scans.
    - (supplier_id, occurred_at) for supplier-scoped analytics.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base


class StockHistoryModel(Base):
    """One persisted stock movement."""

    __tablename__ = "stock_history"

    __table_args__ = (
        Index("idx_stock_history_item_ts", "item_id", "occurred_at"),
        Index("idx_stock_history_ts", "occurred_at"),
        Index("idx_stock_history_supplier_ts", "supplier_id", "occurred_at"),
        Index("uq_stock_history_sequence", "sequence", unique=True),
    )

    # Insertion order, assigned by the writer
    sequence: Mapped[int] = mapped_column(BigInteger, nullable=False)

    item_id: Mapped[str] = mapped_column(String(36), nullable=False)

    supplier_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Positive = inbound, negative = outbound, zero = price-only
    quantity_change: Mapped[int] = mapped_column(Integer, nullable=False)

    # StockChangeReason value, stored as text for forward compatibility
    reason: Mapped[str] = mapped_column(String(40), nullable=False)

    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<StockHistoryModel #{self.sequence} {self.item_id} "
            f"{self.quantity_change:+d} {self.reason}>"
        )
