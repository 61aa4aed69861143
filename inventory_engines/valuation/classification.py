"""
inventory_engines.valuation.classification -- Stock change reason to bucket mapping.

Responsibility:
    Decide which financial bucket a period movement lands in.  Inbound and
    outbound movements are classified separately, each by one ``match``
    statement that names every StockChangeReason member, so adding a reason
    without deciding its bucket fails loudly instead of drifting into the
    COGS catch-all.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Bucket rules:
    Inbound
        RETURNED_BY_CUSTOMER                 -> RETURNS_IN
        priced, or INITIAL_STOCK             -> PURCHASES
        anything else (unpriced correction)  -> UNTRACKED (state only)
    Outbound
        RETURNED_TO_SUPPLIER                 -> SUPPLIER_RETURN (nets purchases)
        DAMAGED/DESTROYED/SCRAPPED/EXPIRED/LOST -> WRITE_OFF
        SOLD, MANUAL_UPDATE and the rest     -> COGS
"""

from __future__ import annotations

from enum import Enum

from inventory_kernel.domain.stock_event import StockChangeReason
from inventory_kernel.exceptions import UnknownStockChangeReasonError
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.valuation.classification")


class InboundBucket(str, Enum):
    """Where an inbound period movement is reported."""

    PURCHASES = "purchases"
    RETURNS_IN = "returns_in"
    UNTRACKED = "untracked"


class OutboundBucket(str, Enum):
    """Where an outbound period movement is reported."""

    COGS = "cogs"
    WRITE_OFF = "write_off"
    SUPPLIER_RETURN = "supplier_return"


WRITE_OFF_REASONS: frozenset[StockChangeReason] = frozenset({
    StockChangeReason.DAMAGED,
    StockChangeReason.DESTROYED,
    StockChangeReason.SCRAPPED,
    StockChangeReason.EXPIRED,
    StockChangeReason.LOST,
})


def classify_inbound(reason: StockChangeReason, priced: bool) -> InboundBucket:
    """Bucket for a positive quantity change."""
    match reason:
        case StockChangeReason.RETURNED_BY_CUSTOMER:
            return InboundBucket.RETURNS_IN
        case StockChangeReason.INITIAL_STOCK:
            return InboundBucket.PURCHASES
        case (
            StockChangeReason.MANUAL_UPDATE
            | StockChangeReason.PRICE_CHANGE
            | StockChangeReason.SOLD
            | StockChangeReason.SCRAPPED
            | StockChangeReason.DESTROYED
            | StockChangeReason.DAMAGED
            | StockChangeReason.EXPIRED
            | StockChangeReason.LOST
            | StockChangeReason.RETURNED_TO_SUPPLIER
        ):
            # Unpriced corrections cannot be traced to a purchase
            return InboundBucket.PURCHASES if priced else InboundBucket.UNTRACKED
        case _:
            logger.error("classification_unknown_reason", extra={
                "reason": str(reason),
                "direction": "inbound",
            })
            raise UnknownStockChangeReasonError(reason)


def classify_outbound(reason: StockChangeReason) -> OutboundBucket:
    """Bucket for a negative quantity change."""
    match reason:
        case StockChangeReason.RETURNED_TO_SUPPLIER:
            return OutboundBucket.SUPPLIER_RETURN
        case (
            StockChangeReason.DAMAGED
            | StockChangeReason.DESTROYED
            | StockChangeReason.SCRAPPED
            | StockChangeReason.EXPIRED
            | StockChangeReason.LOST
        ):
            return OutboundBucket.WRITE_OFF
        case (
            StockChangeReason.SOLD
            | StockChangeReason.MANUAL_UPDATE
            | StockChangeReason.INITIAL_STOCK
            | StockChangeReason.PRICE_CHANGE
            | StockChangeReason.RETURNED_BY_CUSTOMER
        ):
            return OutboundBucket.COGS
        case _:
            logger.error("classification_unknown_reason", extra={
                "reason": str(reason),
                "direction": "outbound",
            })
            raise UnknownStockChangeReasonError(reason)
