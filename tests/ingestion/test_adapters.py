"""Tests for the CSV source adapter."""

import tempfile
from pathlib import Path

import pytest

from loan_ingestion.adapters import CsvSourceAdapter, SourceAdapter
from loan_ingestion.domain.types import EXTRA_CELLS_KEY
from loan_kernel.exceptions import SourceSchemaError


def _write(content: str, encoding: str = "utf-8") -> Path:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, newline="", encoding=encoding) as f:
        f.write(content)
        return Path(f.name)


class TestCsvSourceAdapterRead:
    """CSV adapter: header-keyed dicts, blank lines, short/long rows."""

    def test_satisfies_source_adapter_protocol(self):
        assert isinstance(CsvSourceAdapter(), SourceAdapter)

    def test_read_with_header_yields_dicts(self):
        path = _write("a,b,c\n1,2,3\n4,5,6\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"a": "1", "b": "2", "c": "3"}, {"a": "4", "b": "5", "c": "6"}]
        finally:
            path.unlink()

    def test_read_is_lazy(self):
        path = _write("a\n1\n2\n3\n")
        try:
            rows = CsvSourceAdapter().read(path, {})
            assert next(rows) == {"a": "1"}
            assert next(rows) == {"a": "2"}
            rows.close()
        finally:
            path.unlink()

    def test_empty_lines_are_skipped(self):
        path = _write("a,b\n\n1,2\n\n\n3,4\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]
        finally:
            path.unlink()

    def test_delimiter_only_line_is_a_row(self):
        path = _write("a,b,c\n1,2,3\n,,\n4,5,6\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [
                {"a": "1", "b": "2", "c": "3"},
                {"a": "", "b": "", "c": ""},
                {"a": "4", "b": "5", "c": "6"},
            ]
        finally:
            path.unlink()

    def test_whitespace_only_line_is_a_row(self):
        path = _write("a,b\n   \n")
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"a": "   ", "b": None}]
        finally:
            path.unlink()

    def test_empty_file_yields_nothing(self):
        path = _write("")
        try:
            assert list(CsvSourceAdapter().read(path, {"required_columns": ("a",)})) == []
        finally:
            path.unlink()

    def test_header_only_yields_nothing(self):
        path = _write("a,b\n")
        try:
            assert list(CsvSourceAdapter().read(path, {})) == []
        finally:
            path.unlink()

    def test_short_row_carries_none_for_missing_cells(self):
        path = _write("a,b,c\n1,2\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"a": "1", "b": "2", "c": None}]
        finally:
            path.unlink()

    def test_long_row_collects_extra_cells(self):
        path = _write("a,b\n1,2,3,4\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"a": "1", "b": "2", EXTRA_CELLS_KEY: ["3", "4"]}]
        finally:
            path.unlink()

    def test_header_names_are_stripped_and_bom_removed(self):
        path = _write("\ufeff a , b \n1,2\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"a": "1", "b": "2"}]
        finally:
            path.unlink()

    def test_custom_delimiter(self):
        path = _write("a;b;c\n1;2;3\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {"delimiter": ";"}))
            assert rows == [{"a": "1", "b": "2", "c": "3"}]
        finally:
            path.unlink()

    def test_skip_rows_skips_lines_before_header(self):
        path = _write("exported 2024-03-01\nh1,h2\n1,2\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {"skip_rows": 1}))
            assert rows == [{"h1": "1", "h2": "2"}]
        finally:
            path.unlink()

    def test_latin1_encoding(self):
        path = _write("nome\nJOÃO\n", encoding="latin-1")
        try:
            rows = list(CsvSourceAdapter().read(path, {"encoding": "latin-1"}))
            assert rows == [{"nome": "JOÃO"}]
        finally:
            path.unlink()


class TestCsvSourceAdapterSchema:
    """Header check against required_columns."""

    def test_missing_required_column_raises(self):
        path = _write("a,b\n1,2\n")
        try:
            with pytest.raises(SourceSchemaError) as exc_info:
                list(CsvSourceAdapter().read(path, {"required_columns": ("a", "b", "c")}))
            assert exc_info.value.missing_columns == ("c",)
            assert exc_info.value.code == "SOURCE_SCHEMA_MISMATCH"
        finally:
            path.unlink()

    def test_extra_header_columns_are_kept(self):
        path = _write("a,b,extra\n1,2,x\n")
        try:
            rows = list(CsvSourceAdapter().read(path, {"required_columns": ("a", "b")}))
            assert rows == [{"a": "1", "b": "2", "extra": "x"}]
        finally:
            path.unlink()

    def test_missing_file_raises_on_first_pull(self, tmp_path):
        rows = CsvSourceAdapter().read(tmp_path / "absent.csv", {})
        with pytest.raises(FileNotFoundError):
            next(rows)


class TestCsvSourceAdapterProbe:
    def test_probe_returns_row_count_and_columns(self):
        path = _write("x,y\n1,2\n\n3,4\n5,6\n")
        try:
            probe = CsvSourceAdapter().probe(path, {})
            assert probe.row_count == 3
            assert probe.columns == ("x", "y")
            assert len(probe.sample_rows) == 3
            assert probe.detected_delimiter == ","
        finally:
            path.unlink()

    def test_row_count_includes_delimiter_only_rows(self):
        path = _write("x,y\n1,2\n,\n\n3,4\n")
        try:
            assert CsvSourceAdapter().probe(path, {}).row_count == 3
        finally:
            path.unlink()

    def test_probe_caps_sample_at_five_rows(self):
        path = _write("x\n" + "".join(f"{i}\n" for i in range(8)))
        try:
            probe = CsvSourceAdapter().probe(path, {})
            assert probe.row_count == 8
            assert len(probe.sample_rows) == 5
        finally:
            path.unlink()

    def test_probe_reports_missing_columns(self):
        path = _write("x,y\n1,2\n")
        try:
            probe = CsvSourceAdapter().probe(path, {"required_columns": ("x", "z")})
            assert probe.missing_columns == ("z",)
        finally:
            path.unlink()

    def test_probe_empty_file(self):
        path = _write("")
        try:
            probe = CsvSourceAdapter().probe(path, {"required_columns": ("x",)})
            assert probe.row_count == 0
            assert probe.columns == ()
            assert probe.missing_columns == ()
        finally:
            path.unlink()
