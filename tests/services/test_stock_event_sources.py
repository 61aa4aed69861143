"""
Tests for the in-memory and CSV stock event sources.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from inventory_kernel.domain.stock_event import StockChangeReason as R
from inventory_kernel.domain.stock_event import StockEvent
from inventory_kernel.exceptions import MalformedStockEventError, UnknownStockChangeReasonError
from inventory_kernel.selectors import StockEventSelector
from inventory_services.event_sources import (
    CsvStockEventSource,
    InMemoryStockEventSource,
    StockEventSource,
    select_events,
)

END = datetime(2024, 2, 29, 23, 59, 59, 999999)


def ev(item, ts, qty=1, supplier=None, reason=R.MANUAL_UPDATE):
    return StockEvent(item, qty, reason, ts, Decimal("1.00"), supplier)


class TestSelectEvents:
    """Filtering and ordering shared by every source."""

    def test_inclusive_end(self):
        events = [ev("A", END), ev("A", datetime(2024, 3, 1))]

        assert select_events(events, END) == [events[0]]

    def test_groups_by_item_then_time(self):
        events = [
            ev("B", datetime(2024, 1, 2)),
            ev("A", datetime(2024, 1, 3)),
            ev("A", datetime(2024, 1, 1)),
        ]

        ordered = select_events(events, END)

        assert [(e.item_id, e.occurred_at.day) for e in ordered] == [("A", 1), ("A", 3), ("B", 2)]

    def test_ties_keep_insertion_order(self):
        ts = datetime(2024, 1, 5)
        first = ev("A", ts, qty=10)
        second = ev("A", ts, qty=-3, reason=R.SOLD)

        assert select_events([first, second], END) == [first, second]

    def test_supplier_filter_is_trimmed_and_case_insensitive(self):
        events = [ev("A", datetime(2024, 1, 1), supplier="ACME"), ev("B", datetime(2024, 1, 1), supplier="other")]

        assert [e.item_id for e in select_events(events, END, "  acme ")] == ["A"]

    @pytest.mark.parametrize("supplier", [None, "", "   "])
    def test_blank_supplier_means_all(self, supplier):
        events = [ev("A", datetime(2024, 1, 1), supplier="acme"), ev("B", datetime(2024, 1, 1))]

        assert len(select_events(events, END, supplier)) == 2


class TestInMemoryStockEventSource:
    def test_append_and_fetch(self):
        source = InMemoryStockEventSource()
        source.append(ev("A", datetime(2024, 1, 1)))

        assert len(source) == 1
        assert len(source.fetch_events_up_to(END)) == 1

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryStockEventSource(), StockEventSource)

    def test_selector_satisfies_protocol(self, session):
        assert isinstance(StockEventSelector(session), StockEventSource)


class TestCsvStockEventSource:
    """Stock history exports as an event source."""

    def _write(self, tmp_path, body):
        path = tmp_path / "history.csv"
        path.write_text(
            "item_id,quantity_change,reason,occurred_at,unit_price,supplier_id\n" + body,
            newline="",
        )
        return path

    def test_fetch(self, tmp_path):
        path = self._write(tmp_path, (
            "B,5,INITIAL_STOCK,2024-01-03T00:00:00,2.00,acme\n"
            "A,10,INITIAL_STOCK,2024-01-01T00:00:00,1.00,acme\n"
            "A,-2,SOLD,2024-02-01T00:00:00,,acme\n"
            "A,-1,SOLD,2024-03-01T00:00:00,,acme\n"
        ))

        events = CsvStockEventSource(path).fetch_events_up_to(END)

        assert [(e.item_id, e.quantity_change) for e in events] == [("A", 10), ("A", -2), ("B", 5)]
        assert events[0].unit_price == Decimal("1.00")
        assert events[1].unit_price is None

    def test_supplier_filter(self, tmp_path):
        path = self._write(tmp_path, (
            "A,10,INITIAL_STOCK,2024-01-01T00:00:00,1.00,acme\n"
            "B,5,INITIAL_STOCK,2024-01-01T00:00:00,2.00,\n"
        ))

        events = CsvStockEventSource(path).fetch_events_up_to(END, "ACME")

        assert [e.item_id for e in events] == ["A"]

    def test_malformed_row_fails_with_line(self, tmp_path, captured_logs):
        path = self._write(tmp_path, (
            "A,10,INITIAL_STOCK,2024-01-01T00:00:00,1.00,\n"
            "A,ten,SOLD,2024-01-02T00:00:00,,\n"
        ))

        with pytest.raises(MalformedStockEventError):
            CsvStockEventSource(path).fetch_events_up_to(END)

        rejected = [r for r in captured_logs() if r["message"] == "csv_stock_event_rejected"]
        assert rejected[0]["line"] == 3
        assert rejected[0]["error_code"] == "MALFORMED_STOCK_EVENT"

    def test_unknown_reason_fails(self, tmp_path):
        path = self._write(tmp_path, "A,1,GIFTED,2024-01-01T00:00:00,,\n")

        with pytest.raises(UnknownStockChangeReasonError):
            CsvStockEventSource(path).load()

    def test_column_map_option(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(
            "itemId,change,reason,timestamp\nA,3,INITIAL_STOCK,2024-01-01T00:00:00\n",
            newline="",
        )
        source = CsvStockEventSource(path, options={"column_map": {
            "itemId": "item_id", "change": "quantity_change", "timestamp": "occurred_at",
        }})

        assert source.load()[0].quantity_change == 3

    def test_undecodable_export_raises_typed_error(self, tmp_path, captured_logs):
        path = tmp_path / "latin.csv"
        path.write_bytes(
            b"item_id,quantity_change,reason,occurred_at,unit_price,supplier_id\n"
            b"A,1,INITIAL_STOCK,2024-01-01T00:00:00,1.00,\xff\xfe\n"
        )

        with pytest.raises(MalformedStockEventError) as exc_info:
            CsvStockEventSource(path).fetch_events_up_to(END)

        assert exc_info.value.field == "row"
        assert str(path) in exc_info.value.detail
        rejected = [r for r in captured_logs() if r["message"] == "csv_stock_event_rejected"]
        assert rejected[0]["path"] == str(path)
        assert rejected[0]["error_code"] == "MALFORMED_STOCK_EVENT"

    def test_check_columns_passes_complete_header(self, tmp_path):
        path = self._write(tmp_path, "A,10,INITIAL_STOCK,2024-01-01T00:00:00,1.00,acme\n")

        probe = CsvStockEventSource(path).check_columns()

        assert probe.row_count == 1
        assert probe.missing_columns() == ()

    def test_check_columns_reports_missing(self, tmp_path, captured_logs):
        path = tmp_path / "partial.csv"
        path.write_text("item_id,reason\nA,SOLD\n", newline="")

        with pytest.raises(MalformedStockEventError) as exc_info:
            CsvStockEventSource(path).check_columns()

        assert exc_info.value.field == "header"
        assert "quantity_change, occurred_at" in exc_info.value.detail
        logged = [r for r in captured_logs() if r["message"] == "csv_stock_export_missing_columns"]
        assert logged[0]["missing"] == ["quantity_change", "occurred_at"]
