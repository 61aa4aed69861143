"""
Tests for FinancialSummary assembly and its API shape.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from inventory_engines.valuation.replay import ReportingWindow, WacReplayEngine
from inventory_engines.valuation.summary import (
    WAC_METHOD,
    FinancialSummary,
    MovementTotal,
    OverdrawAnomaly,
)
from inventory_kernel.domain.stock_event import StockChangeReason as R
from inventory_kernel.domain.stock_event import StockEvent


def _summary(events, from_date=date(2024, 2, 1), to_date=date(2024, 2, 29)):
    window = ReportingWindow.for_dates(from_date, to_date)
    result = WacReplayEngine().replay(events=events, window=window)
    return FinancialSummary.assemble(from_date, to_date, result)


SCENARIO = [
    StockEvent("SKU-1", 100, R.INITIAL_STOCK, datetime(2024, 1, 1, 9), Decimal("10.00")),
    StockEvent("SKU-1", 50, R.MANUAL_UPDATE, datetime(2024, 2, 5, 10), Decimal("12.00")),
    StockEvent("SKU-1", -20, R.SOLD, datetime(2024, 2, 10, 11)),
    StockEvent("SKU-1", -10, R.RETURNED_TO_SUPPLIER, datetime(2024, 2, 15, 12)),
]


class TestMovementTotal:
    """Arithmetic on (quantity, value) pairs."""

    def test_add_and_subtract(self):
        a = MovementTotal(3, Decimal("1.50"))
        b = MovementTotal(1, Decimal("0.25"))

        assert a + b == MovementTotal(4, Decimal("1.75"))
        assert a - b == MovementTotal(2, Decimal("1.25"))

    def test_rounded(self):
        assert MovementTotal(1, Decimal("213.3340")).rounded(2).value == Decimal("213.33")

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            MovementTotal(1, Decimal("1")) + 1


class TestAssemble:
    """Packaging a replay into the report."""

    def test_method_and_dates(self):
        summary = _summary(SCENARIO)

        assert summary.method == WAC_METHOD == "WAC"
        assert summary.from_date == "2024-02-01"
        assert summary.to_date == "2024-02-29"

    def test_buckets_copied_from_replay(self):
        summary = _summary(SCENARIO)

        assert summary.opening == MovementTotal(100, Decimal("1000"))
        assert summary.purchases == MovementTotal(40, Decimal("493.3330"))
        assert summary.returns_in == MovementTotal.zero()
        assert summary.cogs == MovementTotal(20, Decimal("213.3340"))
        assert summary.write_off == MovementTotal.zero()
        assert summary.ending == MovementTotal(120, Decimal("1280.0040"))
        assert not summary.has_anomalies

    def test_conservation_gap_is_average_rounding(self):
        """150 units at 10.6667 carry 0.005 more than the 1600.00 paid."""
        summary = _summary(SCENARIO)

        assert summary.conservation_gap == Decimal("-0.005")


class TestToDict:
    """The flat API shape."""

    def test_values_rounded_to_display_scale(self):
        data = _summary(SCENARIO).to_dict()

        assert data == {
            "method": "WAC",
            "from_date": "2024-02-01",
            "to_date": "2024-02-29",
            "opening_qty": 100,
            "opening_value": "1000.00",
            "purchases_qty": 40,
            "purchases_cost": "493.33",
            "returns_in_qty": 0,
            "returns_in_cost": "0.00",
            "cogs_qty": 20,
            "cogs_cost": "213.33",
            "write_off_qty": 0,
            "write_off_cost": "0.00",
            "ending_qty": 120,
            "ending_value": "1280.00",
            "overdraw_count": 0,
        }

    def test_custom_display_scale(self):
        data = _summary(SCENARIO).to_dict(display_scale=4)

        assert data["cogs_cost"] == "213.3340"
        assert data["ending_value"] == "1280.0040"

    def test_overdraw_count(self):
        summary = FinancialSummary(
            method="WAC",
            from_date="2024-02-01",
            to_date="2024-02-29",
            opening=MovementTotal.zero(),
            purchases=MovementTotal.zero(),
            returns_in=MovementTotal.zero(),
            cogs=MovementTotal.zero(),
            write_off=MovementTotal.zero(),
            ending=MovementTotal.zero(),
            anomalies=(
                OverdrawAnomaly("A", datetime(2024, 2, 2), R.SOLD, requested=3, available=1),
            ),
        )

        assert summary.to_dict()["overdraw_count"] == 1
        assert summary.has_anomalies
