"""
inventory_engines.valuation.replay -- Single-pass weighted average cost replay.

Responsibility:
    Rebuild, for one reporting window, the opening inventory position, the
    categorised period movement (purchases, customer returns, COGS,
    write-offs, returns to supplier) and the ending inventory position from
    an ordered stream of stock events.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes StockEvents from any event source; the per-item state map is
    local to one replay() call and discarded afterwards.

Algorithm:
    One pass over the stream.  The boundary predicate
    ``occurred_at < window.start`` splits it into two phases:
      opening phase -- state is updated, issue costs are discarded, and the
                       item's latest pre-window state is remembered;
      period phase  -- state is updated and each movement is classified
                       into a bucket (see classification.py).
    Opening and ending positions are the sums of quantity and
    quantity * average cost over the remembered and final states.

Invariants enforced:
    - No re-sorting: the stream is consumed in the order given.
    - Per-item time order: an event earlier than the item's previous event
      raises EventOrderingError.
    - Inclusive window: an event at exactly window.start is a period event;
      an event after window.end raises EventBeyondWindowError.
    - Zero-quantity floor: overdraws are clamped (or rejected, per policy)
      and every clamp is logged and reported as an OverdrawAnomaly.
    - Determinism: identical input streams produce identical results.

Failure modes:
    - EventOrderingError, EventBeyondWindowError on a broken stream contract.
    - InsufficientStockError under OverdrawPolicy.REJECT.
    - UnknownStockChangeReasonError if a reason escapes classification.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum

from inventory_engines.tracer import traced_engine
from inventory_engines.valuation.classification import (
    InboundBucket,
    OutboundBucket,
    classify_inbound,
    classify_outbound,
)
from inventory_engines.valuation.summary import MovementTotal, OverdrawAnomaly
from inventory_engines.valuation.wac import IssueResult, ItemState, apply_inbound, issue
from inventory_kernel.domain.decimals import COST_SCALE, ZERO
from inventory_kernel.domain.stock_event import StockEvent
from inventory_kernel.exceptions import (
    EventBeyondWindowError,
    EventOrderingError,
    InsufficientStockError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("engines.valuation.replay")


class OverdrawPolicy(str, Enum):
    """What to do when an issue asks for more than is on hand."""

    CLAMP = "clamp"    # Issue what is available, report the anomaly
    REJECT = "reject"  # Raise InsufficientStockError


@dataclass(frozen=True, slots=True)
class ReportingWindow:
    """Inclusive [start, end] timestamp range of a report."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Window start {self.start} is after end {self.end}")

    @classmethod
    def for_dates(cls, from_date: date, to_date: date) -> ReportingWindow:
        """Whole calendar days: from 00:00:00 through to 23:59:59.999999."""
        return cls(
            start=datetime.combine(from_date, time.min),
            end=datetime.combine(to_date, time.max),
        )

    def is_before_start(self, moment: datetime) -> bool:
        return moment < self.start

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True, slots=True)
class ReplayResult:
    """Everything one replay computed, before it is packaged as a summary."""

    opening: MovementTotal
    purchases: MovementTotal
    returns_in: MovementTotal
    cogs: MovementTotal
    write_off: MovementTotal
    ending: MovementTotal
    item_states: tuple[tuple[str, ItemState], ...]
    anomalies: tuple[OverdrawAnomaly, ...]
    events_replayed: int
    period_events: int


def _total(states: Iterable[ItemState]) -> MovementTotal:
    quantity = 0
    value = ZERO
    for state in states:
        quantity += state.quantity
        value += state.value
    return MovementTotal(quantity, value)


class WacReplayEngine:
    """
    Weighted average cost replay over an ordered stock event stream.

    Contract:
        replay() is a pure function of (events, window) and the engine's
        configuration; engines hold no state between calls and may be
        shared across concurrent requests.
    """

    def __init__(
        self,
        cost_scale: int = COST_SCALE,
        overdraw_policy: OverdrawPolicy = OverdrawPolicy.CLAMP,
    ):
        self.cost_scale = cost_scale
        self.overdraw_policy = OverdrawPolicy(overdraw_policy)

    @traced_engine("wac_replay", "1.0", fingerprint_fields=("window",))
    def replay(
        self,
        *,
        events: Iterable[StockEvent],
        window: ReportingWindow,
    ) -> ReplayResult:
        """Replay ``events`` and compute opening, period buckets and ending.

        Preconditions:
            events are grouped by item and non-decreasing in occurred_at
            within each item; none is after window.end.
        """
        states: dict[str, ItemState] = {}
        opening_states: dict[str, ItemState] = {}
        last_seen: dict[str, datetime] = {}
        anomalies: list[OverdrawAnomaly] = []

        purchases = MovementTotal.zero()
        returns_in = MovementTotal.zero()
        cogs = MovementTotal.zero()
        write_off = MovementTotal.zero()

        replayed = 0
        period_events = 0

        for event in events:
            self._check_stream_contract(event, window, last_seen)
            replayed += 1

            # Price-only adjustments carry no quantity or value
            if event.quantity_change == 0:
                continue

            item_id = event.item_id
            in_period = not window.is_before_start(event.occurred_at)
            state = states.get(item_id)

            if event.is_inbound:
                quantity = event.quantity_change
                if event.unit_price is not None:
                    unit_cost = event.unit_price
                else:
                    # Cost continuity for unpriced receipts and corrections
                    unit_cost = state.average_cost if state is not None else ZERO
                new_state = apply_inbound(state, quantity, unit_cost, self.cost_scale)

                if in_period:
                    movement = MovementTotal(quantity, unit_cost * quantity)
                    bucket = classify_inbound(event.reason, event.is_priced)
                    if bucket is InboundBucket.RETURNS_IN:
                        returns_in += movement
                    elif bucket is InboundBucket.PURCHASES:
                        purchases += movement
            else:
                outcome = issue(state, -event.quantity_change)
                if outcome.overdrawn:
                    anomalies.append(self._handle_overdraw(event, outcome))
                new_state = outcome.state

                if in_period:
                    movement = MovementTotal(outcome.issued_quantity, outcome.cost)
                    bucket = classify_outbound(event.reason)
                    if bucket is OutboundBucket.SUPPLIER_RETURN:
                        # A return to supplier nets against what was bought
                        purchases -= movement
                    elif bucket is OutboundBucket.WRITE_OFF:
                        write_off += movement
                    else:
                        cogs += movement

            states[item_id] = new_state
            if in_period:
                period_events += 1
            else:
                opening_states[item_id] = new_state

        result = ReplayResult(
            opening=_total(opening_states.values()),
            purchases=purchases,
            returns_in=returns_in,
            cogs=cogs,
            write_off=write_off,
            ending=_total(states.values()),
            item_states=tuple(sorted(states.items())),
            anomalies=tuple(anomalies),
            events_replayed=replayed,
            period_events=period_events,
        )

        logger.info("wac_replay_completed", extra={
            "window_start": window.start.isoformat(),
            "window_end": window.end.isoformat(),
            "events_replayed": replayed,
            "period_events": period_events,
            "item_count": len(states),
            "overdraw_count": len(anomalies),
            "ending_qty": result.ending.quantity,
            "ending_value": str(result.ending.value),
        })
        return result

    @staticmethod
    def _check_stream_contract(
        event: StockEvent,
        window: ReportingWindow,
        last_seen: dict[str, datetime],
    ) -> None:
        if event.occurred_at > window.end:
            logger.error("wac_event_beyond_window", extra={
                "item_id": event.item_id,
                "occurred_at": event.occurred_at.isoformat(),
                "window_end": window.end.isoformat(),
            })
            raise EventBeyondWindowError(event.item_id, event.occurred_at, window.end)

        previous = last_seen.get(event.item_id)
        if previous is not None and event.occurred_at < previous:
            logger.error("wac_event_out_of_order", extra={
                "item_id": event.item_id,
                "previous": previous.isoformat(),
                "occurred_at": event.occurred_at.isoformat(),
            })
            raise EventOrderingError(event.item_id, previous, event.occurred_at)
        last_seen[event.item_id] = event.occurred_at

    def _handle_overdraw(self, event: StockEvent, result: IssueResult) -> OverdrawAnomaly:
        requested = -event.quantity_change
        available = result.issued_quantity

        if self.overdraw_policy is OverdrawPolicy.REJECT:
            logger.error("wac_issue_overdraw_rejected", extra={
                "item_id": event.item_id,
                "occurred_at": event.occurred_at.isoformat(),
                "reason": event.reason.value,
                "requested": requested,
                "available": available,
            })
            raise InsufficientStockError(event.item_id, requested, available)

        logger.warning("wac_issue_overdraw", extra={
            "item_id": event.item_id,
            "occurred_at": event.occurred_at.isoformat(),
            "reason": event.reason.value,
            "requested": requested,
            "available": available,
            "shortfall": result.shortfall,
        })
        return OverdrawAnomaly(
            item_id=event.item_id,
            occurred_at=event.occurred_at,
            reason=event.reason,
            requested=requested,
            available=available,
        )
