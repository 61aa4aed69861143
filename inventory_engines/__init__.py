"""
Module: inventory_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    inventory_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel/domain (and sibling engine modules).
    MUST NOT import inventory_services.

Invariants enforced:
    - Purity: engines never read the clock; windows and timestamps are
      passed in by callers.
    - Decimal-only arithmetic: costs and values are Decimal, never float.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every replay is traced via ``@traced_engine`` (see
    ``inventory_engines.tracer``), emitting INVENTORY_ENGINE_TRACE records
    with engine name, version, input fingerprint and duration.

Usage:
    from inventory_engines import ReportingWindow, WacReplayEngine

    window = ReportingWindow.for_dates(date(2024, 1, 1), date(2024, 1, 31))
    result = WacReplayEngine().replay(events=events, window=window)
"""

from inventory_engines.tracer import compute_input_fingerprint, traced_engine
from inventory_engines.valuation import (
    WAC_METHOD,
    FinancialSummary,
    InboundBucket,
    IssueResult,
    ItemState,
    MovementTotal,
    OutboundBucket,
    OverdrawAnomaly,
    OverdrawPolicy,
    ReplayResult,
    ReportingWindow,
    WacReplayEngine,
    apply_inbound,
    classify_inbound,
    classify_outbound,
    issue,
)

__all__ = [
    "WAC_METHOD",
    "FinancialSummary",
    "InboundBucket",
    "IssueResult",
    "ItemState",
    "MovementTotal",
    "OutboundBucket",
    "OverdrawAnomaly",
    "OverdrawPolicy",
    "ReplayResult",
    "ReportingWindow",
    "WacReplayEngine",
    "apply_inbound",
    "classify_inbound",
    "classify_outbound",
    "compute_input_fingerprint",
    "issue",
    "traced_engine",
]
