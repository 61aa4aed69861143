"""
Module: inventory_kernel.models.inventory_item
Responsibility: ORM persistence for inventory items.  The analytics layer
    only reads the owning supplier from here (to fill stock history rows
    that were written without one); item CRUD lives outside this package.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base


class InventoryItemModel(Base):
    """An item kept in stock, owned by at most one supplier."""

    __tablename__ = "inventory_items"

    __table_args__ = (
        Index("idx_inventory_item_supplier", "supplier_id"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    supplier_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    price: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)

    def __repr__(self) -> str:
        return f"<InventoryItemModel {self.id} {self.name!r}>"
