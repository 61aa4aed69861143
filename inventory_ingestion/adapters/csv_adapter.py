"""
CSV source adapter for stock history exports.

Uses csv.reader. Configurable: delimiter, encoding, skip_rows and a
column_map that renames export headers (e.g. ``{"timestamp": "occurred_at"}``)
before rows are yielded. Handles BOM via utf-8-sig when encoding is utf-8.
Surrounding whitespace is stripped from headers and cells. Streams rows.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator

from inventory_ingestion.adapters.base import SourceProbe

_SAMPLE_SIZE = 5


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _header_names(fieldnames: list[str] | None, column_map: dict[str, str]) -> list[str]:
    names = []
    for raw in fieldnames or ():
        name = raw.strip()
        names.append(column_map.get(name, name))
    return names


def _clean(value: str | None) -> str | None:
    return value.strip() if isinstance(value, str) else value


class CsvSourceAdapter:
    """Read CSV stock history exports as one dict per row."""

    def _rows(
        self, source_path: Path, options: dict[str, Any],
    ) -> Iterator[tuple[list[str], dict[str, Any]]]:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        skip_rows = int(options.get("skip_rows", 0))
        column_map = dict(options.get("column_map") or {})

        with Path(source_path).open("r", encoding=encoding, newline="") as f:
            for _ in range(skip_rows):
                next(f, None)
            reader = csv.reader(f, delimiter=delimiter)
            header = _header_names(next(reader, None), column_map)
            if not header:
                return
            for row in reader:
                if not any(cell.strip() for cell in row):
                    continue
                record: dict[str, Any] = {
                    name: _clean(cell) for name, cell in zip(header, row)
                }
                record["_source_line"] = reader.line_num + skip_rows
                yield header, record

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield one record per non-blank data row.

        Each record carries ``_source_line`` (1-based line in the file) so
        parse errors can point back at the export.
        """
        for _, record in self._rows(source_path, options):
            yield record

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        columns: tuple[str, ...] = ()
        sample: list[dict[str, Any]] = []
        count = 0

        for header, record in self._rows(source_path, options):
            columns = tuple(header)
            if len(sample) < _SAMPLE_SIZE:
                sample.append(record)
            count += 1

        if not columns:
            columns = self._header_only(source_path, options)

        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=encoding,
            detected_delimiter=delimiter,
        )

    def _header_only(self, source_path: Path, options: dict[str, Any]) -> tuple[str, ...]:
        column_map = dict(options.get("column_map") or {})
        with Path(source_path).open("r", encoding=_get_encoding(options), newline="") as f:
            for _ in range(int(options.get("skip_rows", 0))):
                next(f, None)
            reader = csv.reader(f, delimiter=options.get("delimiter", ","))
            return tuple(_header_names(next(reader, None), column_map))
