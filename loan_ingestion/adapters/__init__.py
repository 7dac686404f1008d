"""Source adapters for installment ingestion (file I/O only)."""

from loan_ingestion.adapters.base import SourceAdapter, SourceProbe
from loan_ingestion.adapters.csv_adapter import CsvSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "CsvSourceAdapter",
]
