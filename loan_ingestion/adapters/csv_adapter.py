"""
CSV source adapter.

Uses csv.DictReader over the open file, so rows are decoded lazily as the
caller pulls them. Configurable: delimiter, encoding, quoting, skip_rows,
required_columns. Handles BOM via utf-8-sig when encoding is utf-8.

Row shape:
    - Header names (stripped) become the keys of every row.
    - Short rows carry ``None`` for the columns they lack.
    - Cells beyond the header are collected under ``EXTRA_CELLS_KEY``.
    - Empty lines are skipped. A line of delimiters or whitespace is a data
      row with empty cells.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator, TextIO

from loan_kernel.exceptions import SourceSchemaError
from loan_kernel.logging_config import get_logger

from loan_ingestion.adapters.base import SourceProbe
from loan_ingestion.domain.types import EXTRA_CELLS_KEY

logger = get_logger("ingestion.csv_adapter")

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "nonnumeric": csv.QUOTE_NONNUMERIC,
    "none": csv.QUOTE_NONE,
}

_SAMPLE_SIZE = 5


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() in ("utf-8", "utf8"):
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _get_quoting(options: dict[str, Any]) -> int:
    q = options.get("quoting", "minimal")
    if isinstance(q, int):
        return q
    return _QUOTING.get(str(q).lower(), csv.QUOTE_MINIMAL)


def _open_reader(f: TextIO, options: dict[str, Any]) -> csv.DictReader:
    for _ in range(int(options.get("skip_rows", 0))):
        next(f, None)
    reader = csv.DictReader(
        f,
        delimiter=options.get("delimiter", ","),
        quoting=_get_quoting(options),
        restkey=EXTRA_CELLS_KEY,
        restval=None,
    )
    if reader.fieldnames is not None:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
    return reader


def _missing_columns(fieldnames: list[str] | None, options: dict[str, Any]) -> tuple[str, ...]:
    required = options.get("required_columns") or ()
    present = set(fieldnames or ())
    return tuple(col for col in required if col not in present)


class CsvSourceAdapter:
    """Read CSV files as one dict per row. Streams; does not load entire file."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """
        Yield one dict per non-empty data line.

        An empty file yields nothing. When ``required_columns`` is given and
        the header lacks any of them, raises SourceSchemaError before the
        first row is produced.
        """
        with Path(source_path).open("r", encoding=_get_encoding(options), newline="") as f:
            reader = _open_reader(f, options)
            if reader.fieldnames is None:
                return
            missing = _missing_columns(reader.fieldnames, options)
            if missing:
                raise SourceSchemaError(missing)
            required = options.get("required_columns")
            if required:
                unexpected = [name for name in reader.fieldnames if name not in set(required)]
                if unexpected:
                    logger.warning("unexpected_columns_ignored", extra={"columns": unexpected})
            yield from reader

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = _get_encoding(options)
        with Path(source_path).open("r", encoding=encoding, newline="") as f:
            reader = _open_reader(f, options)
            columns = tuple(reader.fieldnames or ())
            sample: list[dict[str, Any]] = []
            count = 0
            for row in reader:
                count += 1
                if len(sample) < _SAMPLE_SIZE:
                    sample.append(dict(row))

        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            missing_columns=_missing_columns(list(columns), options) if columns else (),
            encoding=encoding,
            detected_delimiter=options.get("delimiter", ","),
        )
