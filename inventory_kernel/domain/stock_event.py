"""
Stock events -- Immutable, self-validating entries of the stock history log.

Responsibility:
    Defines the closed set of stock change reasons and the StockEvent value
    object streamed from the event source into the valuation replay.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by the SQL selector, the file-backed event sources, the
    stock history writer and the valuation engines.

Invariants enforced:
    - Closed reason set: anything outside StockChangeReason is rejected
      (UnknownStockChangeReasonError), never defaulted, because a
      mis-categorised event corrupts every financial bucket downstream.
    - quantity_change is a real int (bool rejected).
    - unit_price is Decimal or None, never float, never negative.
    - occurred_at is a naive datetime; aware values are normalised to UTC.

Failure modes:
    - MalformedStockEventError on any field type or value violation.
    - UnknownStockChangeReasonError on an unrecognised reason tag.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from inventory_kernel.domain.decimals import to_decimal
from inventory_kernel.exceptions import (
    MalformedStockEventError,
    UnknownStockChangeReasonError,
)


class StockChangeReason(str, Enum):
    """Business reason recorded with every stock movement."""

    INITIAL_STOCK = "INITIAL_STOCK"
    MANUAL_UPDATE = "MANUAL_UPDATE"
    PRICE_CHANGE = "PRICE_CHANGE"
    SOLD = "SOLD"
    SCRAPPED = "SCRAPPED"
    DESTROYED = "DESTROYED"
    DAMAGED = "DAMAGED"
    EXPIRED = "EXPIRED"
    LOST = "LOST"
    RETURNED_TO_SUPPLIER = "RETURNED_TO_SUPPLIER"
    RETURNED_BY_CUSTOMER = "RETURNED_BY_CUSTOMER"

    @classmethod
    def parse(cls, raw: Any) -> StockChangeReason:
        """Parse a member or a case-insensitive name; reject anything else."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().upper())
            except ValueError:
                pass
        raise UnknownStockChangeReasonError(raw)


def _normalize_timestamp(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True, slots=True)
class StockEvent:
    """
    One immutable stock change read from the append-only history.

    Contract:
        Positive quantity_change is inbound, negative is outbound, zero is a
        price-only adjustment.  unit_price is the unit cost captured with the
        change, present for priced inbound events.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - Every field validated at construction (fail fast)
    """

    item_id: str
    quantity_change: int
    reason: StockChangeReason
    occurred_at: datetime
    unit_price: Decimal | None = None
    supplier_id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.item_id, str) or not self.item_id.strip():
            raise MalformedStockEventError(
                None, "item_id", f"must be a non-empty string, got {self.item_id!r}"
            )
        if isinstance(self.quantity_change, bool) or not isinstance(self.quantity_change, int):
            raise MalformedStockEventError(
                self.item_id,
                "quantity_change",
                f"must be int, got {type(self.quantity_change).__name__}",
            )

        object.__setattr__(self, "reason", StockChangeReason.parse(self.reason))

        if not isinstance(self.occurred_at, datetime):
            raise MalformedStockEventError(
                self.item_id,
                "occurred_at",
                f"must be datetime, got {type(self.occurred_at).__name__}",
            )
        object.__setattr__(self, "occurred_at", _normalize_timestamp(self.occurred_at))

        if self.unit_price is not None:
            try:
                price = to_decimal(self.unit_price)
            except (TypeError, ValueError) as e:
                raise MalformedStockEventError(self.item_id, "unit_price", str(e)) from e
            if price < 0:
                raise MalformedStockEventError(
                    self.item_id, "unit_price", f"cannot be negative, got {price}"
                )
            object.__setattr__(self, "unit_price", price)

        if self.supplier_id is not None and not isinstance(self.supplier_id, str):
            raise MalformedStockEventError(
                self.item_id,
                "supplier_id",
                f"must be str or None, got {type(self.supplier_id).__name__}",
            )

    @property
    def is_inbound(self) -> bool:
        return self.quantity_change > 0

    @property
    def is_outbound(self) -> bool:
        return self.quantity_change < 0

    @property
    def is_priced(self) -> bool:
        return self.unit_price is not None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> StockEvent:
        """
        Build an event from a loosely typed record (CSV row, query row).

        Accepted keys: item_id, quantity_change, reason, occurred_at,
        unit_price, supplier_id.  Strings are parsed strictly: integers for
        quantity_change, ISO-8601 for occurred_at, decimals for unit_price.
        Empty strings mean "absent" for the optional fields.

        Raises:
            MalformedStockEventError: On a missing key or unparseable value.
            UnknownStockChangeReasonError: On an unrecognised reason tag.
        """
        item_id = record.get("item_id")
        for key in ("item_id", "quantity_change", "reason", "occurred_at"):
            if record.get(key) in (None, ""):
                raise MalformedStockEventError(item_id, key, "is required")

        quantity = record["quantity_change"]
        if isinstance(quantity, str):
            try:
                quantity = int(quantity.strip())
            except ValueError as e:
                raise MalformedStockEventError(
                    item_id, "quantity_change", f"is not an integer: {quantity!r}"
                ) from e

        occurred_at = record["occurred_at"]
        if isinstance(occurred_at, str):
            try:
                occurred_at = datetime.fromisoformat(occurred_at.strip())
            except ValueError as e:
                raise MalformedStockEventError(
                    item_id, "occurred_at", f"is not ISO-8601: {occurred_at!r}"
                ) from e

        unit_price = record.get("unit_price")
        if isinstance(unit_price, str) and not unit_price.strip():
            unit_price = None

        supplier_id = record.get("supplier_id")
        if isinstance(supplier_id, str) and not supplier_id.strip():
            supplier_id = None

        return cls(
            item_id=item_id,
            quantity_change=quantity,
            reason=record["reason"],
            occurred_at=occurred_at,
            unit_price=unit_price,
            supplier_id=supplier_id,
        )


def normalize_supplier_id(supplier_id: str | None) -> str | None:
    """Blank means "all suppliers"; otherwise compare trimmed and lower-cased."""
    if supplier_id is None or not supplier_id.strip():
        return None
    return supplier_id.strip().lower()
