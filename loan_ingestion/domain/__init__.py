"""
loan_ingestion.domain -- Pure types, checks and record validation.

ZERO I/O. Imports only from loan_kernel. The record validator depends on
loan_ingestion.mapping and is imported from loan_ingestion.domain.validators.
"""

from loan_ingestion.domain.checks import RecordChecks, default_checks
from loan_ingestion.domain.types import (
    INSTALLMENT_FIELDS,
    REQUIRED_COLUMNS,
    FieldMapping,
    FieldType,
    InstallmentRecord,
    JobResult,
    JobState,
    JobStatus,
    RecordError,
    ResultSummary,
    ValidatedRecord,
)

__all__ = [
    "INSTALLMENT_FIELDS",
    "REQUIRED_COLUMNS",
    "FieldMapping",
    "FieldType",
    "InstallmentRecord",
    "JobResult",
    "JobState",
    "JobStatus",
    "RecordChecks",
    "RecordError",
    "ResultSummary",
    "ValidatedRecord",
    "default_checks",
]
