"""Tests for the stock history CSV adapter."""

from pathlib import Path

import pytest

from inventory_ingestion.adapters import (
    STOCK_HISTORY_COLUMNS,
    CsvSourceAdapter,
    SourceAdapter,
    SourceProbe,
)

EXPORT = (
    "item_id,quantity_change,reason,occurred_at,unit_price,supplier_id\n"
    "A,100,INITIAL_STOCK,2024-01-01T09:00:00,10.00,acme\n"
    "A,-20,SOLD,2024-02-10T11:00:00,,acme\n"
)


def _write(tmp_path: Path, text: str, name: str = "history.csv", encoding: str = "utf-8") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding=encoding, newline="")
    return path


class TestCsvSourceAdapterRead:
    """read(): one record per data row."""

    def test_yields_records_with_source_lines(self, tmp_path):
        rows = list(CsvSourceAdapter().read(_write(tmp_path, EXPORT), {}))

        assert len(rows) == 2
        assert rows[0]["item_id"] == "A"
        assert rows[0]["unit_price"] == "10.00"
        assert rows[1]["unit_price"] == ""
        assert [r["_source_line"] for r in rows] == [2, 3]

    def test_strips_whitespace_in_headers_and_cells(self, tmp_path):
        path = _write(tmp_path, " item_id , reason \n  A ,  SOLD \n")

        rows = list(CsvSourceAdapter().read(path, {}))

        assert rows[0]["item_id"] == "A"
        assert rows[0]["reason"] == "SOLD"

    def test_skips_blank_lines(self, tmp_path):
        path = _write(tmp_path, "item_id,reason\nA,SOLD\n\n,\nB,LOST\n")

        rows = list(CsvSourceAdapter().read(path, {}))

        assert [r["item_id"] for r in rows] == ["A", "B"]
        assert rows[1]["_source_line"] == 5

    def test_column_map_renames_headers(self, tmp_path):
        path = _write(tmp_path, "itemId,change,timestamp\nA,5,2024-01-01T00:00:00\n")

        rows = list(CsvSourceAdapter().read(path, {
            "column_map": {"itemId": "item_id", "change": "quantity_change", "timestamp": "occurred_at"},
        }))

        assert rows[0]["item_id"] == "A"
        assert rows[0]["quantity_change"] == "5"
        assert rows[0]["occurred_at"] == "2024-01-01T00:00:00"

    def test_skip_rows_and_delimiter(self, tmp_path):
        path = _write(tmp_path, "exported by ERP\n# v2\nitem_id;reason\nA;SOLD\n")

        rows = list(CsvSourceAdapter().read(path, {"skip_rows": 2, "delimiter": ";"}))

        assert rows == [{"item_id": "A", "reason": "SOLD", "_source_line": 4}]

    def test_utf8_bom_is_stripped(self, tmp_path):
        path = _write(tmp_path, "item_id,reason\nA,SOLD\n", encoding="utf-8-sig")

        rows = list(CsvSourceAdapter().read(path, {}))

        assert "item_id" in rows[0]

    def test_empty_file(self, tmp_path):
        assert list(CsvSourceAdapter().read(_write(tmp_path, ""), {})) == []


class TestCsvSourceAdapterProbe:
    """probe(): row count, columns, sample."""

    def test_probe(self, tmp_path):
        probe = CsvSourceAdapter().probe(_write(tmp_path, EXPORT), {})

        assert isinstance(probe, SourceProbe)
        assert probe.row_count == 2
        assert probe.columns[:4] == STOCK_HISTORY_COLUMNS
        assert len(probe.sample_rows) == 2
        assert probe.missing_columns() == ()

    def test_probe_header_only(self, tmp_path):
        probe = CsvSourceAdapter().probe(_write(tmp_path, "item_id,reason\n"), {})

        assert probe.row_count == 0
        assert probe.columns == ("item_id", "reason")
        assert probe.missing_columns() == ("quantity_change", "occurred_at")

    def test_sample_is_capped(self, tmp_path):
        body = "item_id,reason\n" + "".join(f"I{i},SOLD\n" for i in range(8))

        probe = CsvSourceAdapter().probe(_write(tmp_path, body), {})

        assert probe.row_count == 8
        assert len(probe.sample_rows) == 5


def test_adapter_satisfies_protocol():
    assert isinstance(CsvSourceAdapter(), SourceAdapter)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(CsvSourceAdapter().read(tmp_path / "nope.csv", {}))
