"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Inventory valuation feeds financial reports. A mis-categorised or silently
defaulted stock event corrupts purchases, COGS and ending inventory alike,
so every failure is raised as a TYPED exception carrying:
  1. A CODE class attribute (machine-readable, API-safe)
  2. Structured DATA attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        service.get_financial_summary_wac(start, end)
    except Exception as e:
        if "must be provided" in str(e):  # FRAGILE - message might change
            return bad_request()

Example - RIGHT way (what this module enables):
    try:
        service.get_financial_summary_wac(start, end)
    except InvalidRequestError as e:
        return api_response(status=400, code=e.code, field=e.field)
    except EventStreamError as e:
        alert_data_integrity(e.code, e.item_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- InvalidRequestError
    |
    +-- StockEventError
    |   +-- MalformedStockEventError
    |   +-- UnknownStockChangeReasonError
    |
    +-- EventStreamError
    |   +-- EventOrderingError
    |   +-- EventBeyondWindowError
    |
    +-- ValuationError
    |   +-- InsufficientStockError
    |
    +-- StockHistoryError
        +-- InvalidStockChangeError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                         | When Raised
----------------|------------------------------|------------------------------------
Request         | INVALID_REQUEST              | Missing dates, from > to
----------------|------------------------------|------------------------------------
Stock event     | MALFORMED_STOCK_EVENT        | Wrong field type / negative price
                | UNKNOWN_STOCK_CHANGE_REASON  | Reason tag outside the closed set
----------------|------------------------------|------------------------------------
Event stream    | EVENT_ORDERING_VIOLATION     | Item history goes back in time
                | EVENT_BEYOND_WINDOW          | Source returned event after end
----------------|------------------------------|------------------------------------
Valuation       | INSUFFICIENT_STOCK           | Overdraw under the reject policy
----------------|------------------------------|------------------------------------
Stock history   | INVALID_STOCK_CHANGE         | Write-side validation failure

None of these are transient. There are no retries: a failure is either a
caller input error or a data-integrity fault to surface.
"""

from __future__ import annotations

from datetime import datetime


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Request validation


class InvalidRequestError(InventoryKernelError):
    """Caller supplied an invalid analytics request (400-equivalent)."""

    code: str = "INVALID_REQUEST"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


# Stock event exceptions


class StockEventError(InventoryKernelError):
    """Base exception for stock event errors."""

    code: str = "STOCK_EVENT_ERROR"


class MalformedStockEventError(StockEventError):
    """A stock event field has the wrong type or an impossible value."""

    code: str = "MALFORMED_STOCK_EVENT"

    def __init__(self, item_id: str | None, field: str, detail: str):
        self.item_id = item_id
        self.field = field
        self.detail = detail
        super().__init__(
            f"Malformed stock event for item {item_id!r}: {field} {detail}"
        )


class UnknownStockChangeReasonError(StockEventError):
    """Reason tag is not a member of StockChangeReason."""

    code: str = "UNKNOWN_STOCK_CHANGE_REASON"

    def __init__(self, reason: object):
        self.reason = repr(reason)
        super().__init__(f"Unknown stock change reason: {reason!r}")


# Event stream exceptions


class EventStreamError(InventoryKernelError):
    """Base exception for event streams that break the source contract."""

    code: str = "EVENT_STREAM_ERROR"


class EventOrderingError(EventStreamError):
    """An item's events are not in non-decreasing occurred_at order."""

    code: str = "EVENT_ORDERING_VIOLATION"

    def __init__(self, item_id: str, previous: datetime, current: datetime):
        self.item_id = item_id
        self.previous = previous.isoformat()
        self.current = current.isoformat()
        super().__init__(
            f"Event for item {item_id} at {self.current} precedes "
            f"an earlier streamed event at {self.previous}"
        )


class EventBeyondWindowError(EventStreamError):
    """The source returned an event after the requested end timestamp."""

    code: str = "EVENT_BEYOND_WINDOW"

    def __init__(self, item_id: str, occurred_at: datetime, window_end: datetime):
        self.item_id = item_id
        self.occurred_at = occurred_at.isoformat()
        self.window_end = window_end.isoformat()
        super().__init__(
            f"Event for item {item_id} at {self.occurred_at} is after "
            f"the window end {self.window_end}"
        )


# Valuation exceptions


class ValuationError(InventoryKernelError):
    """Base exception for valuation errors."""

    code: str = "VALUATION_ERROR"


class InsufficientStockError(ValuationError):
    """An issue requested more than is on hand (reject overdraw policy)."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: str, requested: int, available: int):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot issue {requested} of item {item_id}: only {available} on hand"
        )


# Stock history (write side) exceptions


class StockHistoryError(InventoryKernelError):
    """Base exception for stock history persistence errors."""

    code: str = "STOCK_HISTORY_ERROR"


class InvalidStockChangeError(StockHistoryError):
    """A stock change was rejected before it reached the log."""

    code: str = "INVALID_STOCK_CHANGE"

    def __init__(self, item_id: str, reason: str):
        self.item_id = item_id
        self.reason = reason
        super().__init__(f"Invalid stock change for item {item_id}: {reason}")
