"""
inventory_engines.valuation.wac -- Weighted average cost state transitions.

Responsibility:
    Define the per-item running state (on-hand quantity + weighted average
    unit cost) and the two pure transitions that move it: an inbound
    receipt, which re-blends the average, and an outbound issue, which
    consumes quantity at the current average.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel/domain.

Invariants enforced:
    - Non-negative quantity: issue() clamps the result at zero.
    - Average recomputed from the two current scalars on every receipt:
      new = (c0 * q0 + u * q_in) / (q0 + q_in), rounded half-up to the
      cost scale.  No partial sums are carried between events.
    - Issues never move the average; only receipts do.
    - Immutability: ItemState and IssueResult are frozen dataclasses.

Failure modes:
    - ValueError from apply_inbound if quantity <= 0 or unit_cost < 0.
    - ValueError from issue if quantity <= 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from inventory_kernel.domain.decimals import COST_SCALE, ZERO, round_cost


@dataclass(frozen=True, slots=True)
class ItemState:
    """
    Valued on-hand position of one item during replay.

    Created lazily on an item's first event and replaced (never mutated) by
    every inbound or outbound event.
    """

    quantity: int = 0
    average_cost: Decimal = ZERO

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(f"On-hand quantity cannot be negative, got {self.quantity}")
        if self.average_cost < 0:
            raise ValueError(f"Average cost cannot be negative, got {self.average_cost}")

    @property
    def value(self) -> Decimal:
        """On-hand quantity valued at the current average cost."""
        return self.average_cost * self.quantity

    @classmethod
    def empty(cls) -> ItemState:
        return cls(quantity=0, average_cost=ZERO)


@dataclass(frozen=True, slots=True)
class IssueResult:
    """
    Outcome of one outbound issue.

    cost is valued at the pre-issue average on the quantity actually issued.
    shortfall is how much of the request could not be met from stock
    (zero unless the issue overdrew the item).
    """

    state: ItemState
    cost: Decimal
    issued_quantity: int
    shortfall: int

    @property
    def overdrawn(self) -> bool:
        return self.shortfall > 0


def apply_inbound(
    state: ItemState | None,
    quantity: int,
    unit_cost: Decimal,
    scale: int = COST_SCALE,
) -> ItemState:
    """Receive ``quantity`` units at ``unit_cost`` and re-blend the average.

    Preconditions:
        quantity > 0 and unit_cost >= 0.  state None means the item has not
        been seen yet (zero quantity, zero cost).

    Postconditions:
        Returns a new ItemState with quantity q0 + quantity and the moving
        average rounded half-up to ``scale`` places.
    """
    if quantity <= 0:
        raise ValueError(f"Inbound quantity must be positive, got {quantity}")
    if unit_cost < 0:
        raise ValueError(f"Unit cost cannot be negative, got {unit_cost}")

    prior = state or ItemState.empty()
    q1 = prior.quantity + quantity
    if q1 == 0:
        return ItemState(quantity=0, average_cost=ZERO)

    blended = (prior.average_cost * prior.quantity + unit_cost * quantity) / q1
    return ItemState(quantity=q1, average_cost=round_cost(blended, scale))


def issue(state: ItemState | None, quantity: int) -> IssueResult:
    """Issue ``quantity`` units at the current average cost.

    Preconditions:
        quantity > 0.

    Postconditions:
        - Resulting quantity is max(q0 - quantity, 0).
        - The average is unchanged.
        - cost = average * issued, where issued = min(quantity, q0); an
          overdraw is reported through shortfall instead of negative stock.
    """
    if quantity <= 0:
        raise ValueError(f"Issue quantity must be positive, got {quantity}")

    prior = state or ItemState.empty()
    issued = min(quantity, prior.quantity)
    return IssueResult(
        state=ItemState(quantity=prior.quantity - issued, average_cost=prior.average_cost),
        cost=prior.average_cost * issued,
        issued_quantity=issued,
        shortfall=quantity - issued,
    )
