"""
Weighted average cost valuation.

State transitions (wac), reason classification, the single-pass replay
engine and the financial summary it feeds.
"""

from inventory_engines.valuation.classification import (
    WRITE_OFF_REASONS,
    InboundBucket,
    OutboundBucket,
    classify_inbound,
    classify_outbound,
)
from inventory_engines.valuation.replay import (
    OverdrawPolicy,
    ReplayResult,
    ReportingWindow,
    WacReplayEngine,
)
from inventory_engines.valuation.summary import (
    WAC_METHOD,
    FinancialSummary,
    MovementTotal,
    OverdrawAnomaly,
)
from inventory_engines.valuation.wac import IssueResult, ItemState, apply_inbound, issue

__all__ = [
    "WAC_METHOD",
    "WRITE_OFF_REASONS",
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
    "issue",
]
