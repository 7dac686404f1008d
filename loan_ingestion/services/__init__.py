"""Installment ingestion services (import, status registry, source store)."""

from loan_ingestion.services.import_service import InstallmentImportService
from loan_ingestion.services.source_store import (
    LocalSourceStore,
    RetainingSourceStore,
    SourceStore,
)
from loan_ingestion.services.status_registry import JobStatusRegistry

__all__ = [
    "InstallmentImportService",
    "JobStatusRegistry",
    "LocalSourceStore",
    "RetainingSourceStore",
    "SourceStore",
]
