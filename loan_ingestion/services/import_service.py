"""
Import service: stream -> validate -> summarise, one job per source file.

Orchestrates the CSV adapter, the record validator, the status registry and
the source store. Uses structured logging (LogContext, get_logger("ingestion.*")).

Job lifecycle (registry writes):
    1. PROCESSING with a zero summary as soon as the job starts.
    2. COMPLETED with all records, all errors and the summary, or
    3. FAILED with the fault message when reading or parsing breaks.
The source file is removed afterwards on both paths; a removal fault is
logged and never changes the job status.

Rows are validated strictly one after another, in file order, so error line
numbers follow the file. Separate jobs may run concurrently (see ``submit``);
each writes only its own registry key.
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from loan_config.schema import IngestionConfig
from loan_kernel.domain.clock import Clock, SystemClock
from loan_kernel.logging_config import LogContext, get_logger

from loan_ingestion.adapters.base import SourceAdapter, SourceProbe
from loan_ingestion.adapters.csv_adapter import CsvSourceAdapter
from loan_ingestion.domain.checks import default_checks
from loan_ingestion.domain.types import (
    REQUIRED_COLUMNS,
    JobResult,
    JobStatus,
    RecordError,
    ResultSummary,
    ValidatedRecord,
)
from loan_ingestion.domain.validators import RecordValidator
from loan_ingestion.services.source_store import LocalSourceStore, SourceStore
from loan_ingestion.services.status_registry import JobStatusRegistry

logger = get_logger("ingestion.import_service")


class InstallmentImportService:
    """Runs installment import jobs and answers status queries for them."""

    def __init__(
        self,
        registry: JobStatusRegistry,
        validator: RecordValidator | None = None,
        adapter: SourceAdapter | None = None,
        store: SourceStore | None = None,
        clock: Clock | None = None,
        config: IngestionConfig | None = None,
    ):
        self._config = config or IngestionConfig()
        self._registry = registry
        self._validator = validator or RecordValidator(default_checks(self._config.installment_tolerance))
        self._adapter = adapter or CsvSourceAdapter()
        self._store = store or LocalSourceStore()
        self._clock = clock or SystemClock()

    def _source_options(self) -> dict[str, Any]:
        options = self._config.source_options()
        options["required_columns"] = REQUIRED_COLUMNS
        return options

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def get_status(self, job_id: str) -> JobStatus | None:
        """Latest status of ``job_id``, or None if no such job was started."""
        return self._registry.get(job_id)

    def probe_source(self, source_path: Path) -> SourceProbe:
        """Preview source file: row count, columns, sample data, missing columns."""
        return self._adapter.probe(Path(source_path), self._source_options())

    def submit(self, source_path: Path, job_id: str) -> threading.Thread:
        """Start ``process_file`` on a background thread and return immediately."""
        thread = threading.Thread(
            target=self.process_file,
            args=(Path(source_path), job_id),
            name=f"installment-import-{job_id}",
            daemon=True,
        )
        thread.start()
        logger.info("job_submitted", extra={"job_id": job_id, "source_path": str(source_path)})
        return thread

    def process_file(self, source_path: Path, job_id: str) -> None:
        """
        Run one import job to completion. Results go to the registry only.

        Never raises for problems with the file itself: they end the job as
        FAILED.
        """
        source_path = Path(source_path)
        start_time = self._clock.now()

        with LogContext.bind(correlation_id=job_id, producer="ingestion", source_file=source_path.name):
            self._registry.set(job_id, JobStatus.processing(job_id, start_time))
            logger.info("job_started", extra={"start_time": start_time})

            try:
                result = self._run(source_path, start_time)
            except Exception as exc:
                self._registry.set(job_id, JobStatus.failed(job_id, str(exc) or "Unknown error processing file"))
                logger.exception("job_failed")
            else:
                self._registry.set(job_id, JobStatus.completed(job_id, result))
                summary = result.summary
                logger.info(
                    "job_completed",
                    extra={
                        "total_records": summary.total_records,
                        "valid_records": summary.valid_records,
                        "invalid_records": summary.invalid_records,
                        "error_count": len(result.errors),
                        "total_value": summary.total_value,
                        "processing_time": summary.processing_time,
                    },
                )

            self._remove_source(source_path)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run(self, source_path: Path, start_time: datetime) -> JobResult:
        """Pull rows one at a time through the validator and summarise."""
        records: list[ValidatedRecord] = []
        errors: list[RecordError] = []

        rows = self._adapter.read(source_path, self._source_options())
        for line_number, raw_row in enumerate(rows, start=1):
            record, row_errors = self._validator.validate(raw_row, line_number)
            if record is None:
                logger.warning("record_rejected", extra={"line": line_number})
            else:
                records.append(record)
                logger.debug(
                    "record_processed",
                    extra={"line": line_number, "fully_valid": record.is_fully_valid, "error_count": len(row_errors)},
                )
            errors.extend(row_errors)

        end_time = self._clock.now()
        return JobResult(
            summary=ResultSummary.from_records(records, start_time, end_time),
            records=tuple(records),
            errors=tuple(errors),
        )

    def _remove_source(self, source_path: Path) -> None:
        try:
            self._store.remove(source_path)
        except Exception:
            logger.warning("source_remove_failed", extra={"source_path": str(source_path)}, exc_info=True)
        else:
            logger.debug("source_removed", extra={"source_path": str(source_path)})
