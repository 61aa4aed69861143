"""
inventory_engines.valuation.summary -- Financial summary value objects.

Responsibility:
    Package the opening position, the categorised period movement and the
    ending position of a replay into one immutable report, and render it
    in the flat shape the analytics API returns.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Quantities are ints, values are Decimals (never float).
    - Values are kept at full precision; rounding to a display scale only
      happens in to_dict().
    - Conservation: opening + purchases + returns_in - cogs - write_off
      equals ending up to the rounding of each re-blended average;
      conservation_gap exposes the difference for reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from inventory_kernel.domain.decimals import DISPLAY_SCALE, ZERO, round_cost
from inventory_kernel.domain.stock_event import StockChangeReason

if TYPE_CHECKING:
    from inventory_engines.valuation.replay import ReplayResult

WAC_METHOD = "WAC"


@dataclass(frozen=True, slots=True)
class MovementTotal:
    """A (quantity, value) pair: one line of the financial summary."""

    quantity: int = 0
    value: Decimal = ZERO

    def __add__(self, other: MovementTotal) -> MovementTotal:
        if not isinstance(other, MovementTotal):
            return NotImplemented
        return MovementTotal(self.quantity + other.quantity, self.value + other.value)

    def __sub__(self, other: MovementTotal) -> MovementTotal:
        if not isinstance(other, MovementTotal):
            return NotImplemented
        return MovementTotal(self.quantity - other.quantity, self.value - other.value)

    def rounded(self, places: int = DISPLAY_SCALE) -> MovementTotal:
        return MovementTotal(self.quantity, round_cost(self.value, places))

    @classmethod
    def zero(cls) -> MovementTotal:
        return cls(0, ZERO)


@dataclass(frozen=True, slots=True)
class OverdrawAnomaly:
    """An issue that asked for more than was on hand and was clamped."""

    item_id: str
    occurred_at: datetime
    reason: StockChangeReason
    requested: int
    available: int

    @property
    def shortfall(self) -> int:
        return self.requested - self.available


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    """
    Weighted average cost report for one reporting window.

    purchases is net of returns to supplier (a return to supplier is a
    negative purchase, not a separate outflow).
    """

    method: str
    from_date: str
    to_date: str
    opening: MovementTotal
    purchases: MovementTotal
    returns_in: MovementTotal
    cogs: MovementTotal
    write_off: MovementTotal
    ending: MovementTotal
    anomalies: tuple[OverdrawAnomaly, ...] = ()

    @property
    def conservation_gap(self) -> Decimal:
        """Roll-forward value minus ending value (zero up to average rounding)."""
        rolled = (
            self.opening.value
            + self.purchases.value
            + self.returns_in.value
            - self.cogs.value
            - self.write_off.value
        )
        return rolled - self.ending.value

    @property
    def has_anomalies(self) -> bool:
        return bool(self.anomalies)

    @classmethod
    def assemble(
        cls,
        from_date: date,
        to_date: date,
        result: ReplayResult,
    ) -> FinancialSummary:
        """Build the report from a completed replay."""
        return cls(
            method=WAC_METHOD,
            from_date=from_date.isoformat(),
            to_date=to_date.isoformat(),
            opening=result.opening,
            purchases=result.purchases,
            returns_in=result.returns_in,
            cogs=result.cogs,
            write_off=result.write_off,
            ending=result.ending,
            anomalies=result.anomalies,
        )

    def to_dict(self, display_scale: int = DISPLAY_SCALE) -> dict[str, Any]:
        """Flat API shape with values as strings at ``display_scale`` places."""
        def money(total: MovementTotal) -> str:
            return str(total.rounded(display_scale).value)

        return {
            "method": self.method,
            "from_date": self.from_date,
            "to_date": self.to_date,
            "opening_qty": self.opening.quantity,
            "opening_value": money(self.opening),
            "purchases_qty": self.purchases.quantity,
            "purchases_cost": money(self.purchases),
            "returns_in_qty": self.returns_in.quantity,
            "returns_in_cost": money(self.returns_in),
            "cogs_qty": self.cogs.quantity,
            "cogs_cost": money(self.cogs),
            "write_off_qty": self.write_off.quantity,
            "write_off_cost": money(self.write_off),
            "ending_qty": self.ending.quantity,
            "ending_value": money(self.ending),
            "overdraw_count": len(self.anomalies),
        }
