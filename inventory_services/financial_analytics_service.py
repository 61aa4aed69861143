"""
inventory_services.financial_analytics_service -- Weighted average cost financial summaries.

Responsibility:
    Answer "what was inventory worth at the start and end of this period,
    and where did the movement in between go?" for a date range and an
    optional supplier.  Validates the request, fetches the event stream,
    runs the replay engine and assembles the FinancialSummary.

Architecture position:
    Services -- stateless orchestration over an event source and the pure
    WacReplayEngine.  Holds no per-request state; one instance may serve
    concurrent requests.

Invariants enforced:
    - Request validation happens before any event is fetched.
    - Blank supplier ids mean "all suppliers".
    - The stream is fetched once, up to the inclusive end of to_date, and
      replayed in the order the source returned it.

Failure modes:
    - InvalidRequestError for missing, unparseable or inverted dates.
    - EventStreamError / StockEventError subclasses propagate unchanged
      from the source and the engine: data-integrity faults are surfaced,
      never retried.
    - InsufficientStockError when the active config rejects overdraws.

Audit relevance:
    Each request logs ``financial_summary_requested`` and
    ``financial_summary_completed`` (with overdraw_count) under a bound
    supplier_id, and the engine logs its INVENTORY_ENGINE_TRACE.
"""

from __future__ import annotations

import time
from datetime import date, datetime

from inventory_config import AnalyticsConfig, get_active_config
from inventory_engines.valuation import (
    FinancialSummary,
    OverdrawPolicy,
    ReportingWindow,
    WacReplayEngine,
)
from inventory_kernel.domain.stock_event import normalize_supplier_id
from inventory_kernel.exceptions import InvalidRequestError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_services.event_sources import StockEventSource

logger = get_logger("services.financial_analytics")


def _coerce_date(value: date | str | None, field: str) -> date:
    if value is None:
        raise InvalidRequestError(f"{field} is required", field=field)
    if isinstance(value, datetime):
        raise InvalidRequestError(f"{field} must be a calendar date, not a timestamp", field=field)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidRequestError(
                f"{field} is not an ISO date: {value!r}", field=field
            ) from None
    raise InvalidRequestError(
        f"{field} must be a date, got {type(value).__name__}", field=field
    )


class FinancialAnalyticsService:
    """
    Weighted average cost reporting over a stock event source.

    Contract:
        Receives the event source (and optionally the analytics config)
        via constructor injection.  Without a config, the active one is
        loaded through ``inventory_config.get_active_config()``.
    Non-goals:
        - Does not cache summaries; every call replays from the source.
        - Does not write to the stock history.
    """

    def __init__(
        self,
        event_source: StockEventSource,
        config: AnalyticsConfig | None = None,
    ):
        self.event_source = event_source
        self.config = config if config is not None else get_active_config()
        self.engine = WacReplayEngine(
            cost_scale=self.config.cost_scale,
            overdraw_policy=OverdrawPolicy(self.config.overdraw_policy),
        )

    @property
    def display_scale(self) -> int:
        return self.config.display_scale

    def get_financial_summary_wac(
        self,
        from_date: date | str | None,
        to_date: date | str | None,
        supplier_id: str | None = None,
    ) -> FinancialSummary:
        """
        Opening, period movement and ending inventory for a date range.

        Args:
            from_date: First day of the window (inclusive).
            to_date: Last day of the window (inclusive).
            supplier_id: Optional supplier filter; None or blank = all.

        Raises:
            InvalidRequestError: If a date is missing or from_date > to_date.
        """
        start_date = _coerce_date(from_date, "from_date")
        end_date = _coerce_date(to_date, "to_date")
        if start_date > end_date:
            raise InvalidRequestError(
                f"from_date {start_date.isoformat()} is after to_date {end_date.isoformat()}",
                field="from_date",
            )

        supplier = normalize_supplier_id(supplier_id)
        window = ReportingWindow.for_dates(start_date, end_date)

        with LogContext.bind(supplier_id=supplier):
            logger.info("financial_summary_requested", extra={
                "from_date": start_date.isoformat(),
                "to_date": end_date.isoformat(),
                "method": self.config.method,
            })
            t0 = time.monotonic()

            events = self.event_source.fetch_events_up_to(window.end, supplier)
            result = self.engine.replay(events=events, window=window)
            summary = FinancialSummary.assemble(start_date, end_date, result)

            logger.info("financial_summary_completed", extra={
                "from_date": summary.from_date,
                "to_date": summary.to_date,
                "events_replayed": result.events_replayed,
                "overdraw_count": len(summary.anomalies),
                "conservation_gap": str(summary.conservation_gap),
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            })
        return summary
