#!/usr/bin/env python3
"""
Run an installment import job over a local file and print its result.

The job removes its source file when it finishes, as it would for an
upload. Pass --keep-source to leave the file in place.

Usage:
    python3 scripts/run_import.py --file <path> [options]

Examples:
    # Import and print the summary, keeping the source file
    python3 scripts/run_import.py --file installments.csv --keep-source

    # Probe source file (row count, columns, sample) without importing
    python3 scripts/run_import.py --file installments.csv --probe-only

    # Semicolon-delimited file described by a YAML config
    python3 scripts/run_import.py --file parcelas.csv --config ingestion.yaml
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from uuid import uuid4

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run installment import: stream -> validate -> summarise.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--file",
        required=True,
        type=Path,
        help="Path to the installment CSV file.",
    )
    parser.add_argument(
        "--job-id",
        default=None,
        help="Job identifier (default: new UUID).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: LOAN_INGESTION_CONFIG env or built-in defaults).",
    )
    parser.add_argument(
        "--keep-source",
        action="store_true",
        help="Do not remove the source file after the job.",
    )
    parser.add_argument(
        "--probe-only",
        action="store_true",
        help="Probe source file (row count, columns, sample rows) and exit.",
    )
    parser.add_argument(
        "--show-errors",
        type=int,
        default=10,
        metavar="N",
        help="Print at most N record errors (default: 10).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1

    # Lazy imports so we fail fast on args first
    from loan_config import get_active_config
    from loan_ingestion.domain.types import JobState
    from loan_ingestion.services import (
        InstallmentImportService,
        JobStatusRegistry,
        LocalSourceStore,
        RetainingSourceStore,
    )
    from loan_kernel.logging_config import configure_logging, level_from_name

    try:
        config = get_active_config(args.config)
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1
    configure_logging(level=level_from_name(config.log_level))

    store = RetainingSourceStore() if args.keep_source else LocalSourceStore()
    service = InstallmentImportService(JobStatusRegistry(), store=store, config=config)

    if args.probe_only:
        probe = service.probe_source(source_path)
        print(f"Rows: {probe.row_count}")
        print(f"Columns: {list(probe.columns)}")
        if probe.missing_columns:
            print(f"Missing columns: {list(probe.missing_columns)}")
        print("Sample (first 3):")
        for i, row in enumerate(probe.sample_rows[:3], 1):
            print(f"  {i}: {row}")
        return 0

    job_id = args.job_id or str(uuid4())
    print(f"Importing {source_path} as job {job_id}...")
    service.process_file(source_path, job_id)

    status = service.get_status(job_id)
    if status is None or status.state != JobState.COMPLETED:
        message = status.error if status is not None else "job was not registered"
        print(f"FAILED: {message}", file=sys.stderr)
        return 1

    summary = status.result.summary
    print(f"  Records: {summary.total_records}")
    print(f"  Valid: {summary.valid_records}, Invalid: {summary.invalid_records}")
    print(f"  Total value (valid records): {summary.total_value}")
    print(f"  Processing time: {summary.processing_time}")

    errors = status.result.errors
    for err in errors[: args.show_errors]:
        print(f"  Line {err.line} [{err.field}] {err.value!r}: {err.error}")
    if len(errors) > args.show_errors:
        print(f"  ... and {len(errors) - args.show_errors} more errors.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
