"""
Pytest fixtures for the installment ingestion test suite.

Provides:
- Structured logging setup and log capture
- A valid installment row builder and CSV file writer
- Fresh status registries and deterministic clocks
"""

import csv
import json
import logging
from datetime import datetime, timedelta, timezone
from io import StringIO
from pathlib import Path
from typing import Any, Callable

import pytest

from loan_ingestion.domain.types import REQUIRED_COLUMNS
from loan_ingestion.services.status_registry import JobStatusRegistry
from loan_kernel.domain.clock import SequentialClock
from loan_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

JOB_START = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

# A row that passes all three default checks:
# valid CPF, installment 1 of 12, 1200.00 / 12 == 100.00.
VALID_ROW: dict[str, str] = {
    "nrInst": "533",
    "nrAgencia": "32",
    "cdClient": "56133",
    "nmClient": "CLIENTE 1",
    "nrCpfCnpj": "52998224725",
    "nrContrato": "733067",
    "dtContrato": "20220101",
    "cdProduto": "777",
    "dsProduto": "CDC PESSOA FISICA",
    "cdCarteira": "17",
    "dsCarteira": "CRED PESSOAL",
    "nrProposta": "798586",
    "tpPresta": "Original",
    "nrSeqPre": "0",
    "dtVctPre": "20220201",
    "idSituac": "Aberta",
    "idSitVen": "Vencida",
    "qtPrestacoes": "12",
    "nrPresta": "1",
    "vlTotal": "1200.00",
    "vlPresta": "100.00",
    "vlMora": "0",
    "vlMulta": "0",
    "vlOutAcr": "0",
    "vlIof": "0",
    "vlDescon": "0",
    "vlAtual": "100.00",
}


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture loan_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.process_file(path, "job-1")
            logs = captured_logs()
            assert any(r["message"] == "job_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("loan_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Data fixtures
# =============================================================================


@pytest.fixture
def make_row() -> Callable[..., dict[str, str]]:
    """Build a raw CSV row: the valid row with overrides applied."""

    def _make(**overrides: str) -> dict[str, str]:
        row = dict(VALID_ROW)
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def write_installments(tmp_path: Path) -> Callable[..., Path]:
    """
    Write an installment CSV under tmp_path and return its path.

    ``rows`` are dicts keyed by column; ``columns`` defaults to the full
    required header.
    """
    counter = {"n": 0}

    def _write(
        rows: list[dict[str, Any]],
        columns: tuple[str, ...] = REQUIRED_COLUMNS,
        delimiter: str = ",",
        name: str | None = None,
    ) -> Path:
        counter["n"] += 1
        path = tmp_path / (name or f"installments_{counter['n']}.csv")
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(columns), delimiter=delimiter, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)
        return path

    return _write


@pytest.fixture
def registry() -> JobStatusRegistry:
    return JobStatusRegistry()


@pytest.fixture
def job_clock() -> SequentialClock:
    """Start at JOB_START, end 2.5 seconds later."""
    return SequentialClock([JOB_START, JOB_START + timedelta(seconds=2.5)])
