"""
Ingestion configuration schema.

The human-authored YAML file is parsed by the loader into ``IngestionConfig``,
a frozen dataclass carrying source-format options, the installment
tolerance and the log level.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

QUOTING_MODES = ("minimal", "all", "nonnumeric", "none")


@dataclass(frozen=True)
class IngestionConfig:
    """Runtime settings for installment import jobs."""

    delimiter: str = ","
    encoding: str = "utf-8"
    quoting: str = "minimal"  # One of QUOTING_MODES
    skip_rows: int = 0  # Lines before the header to skip
    installment_tolerance: Decimal = Decimal("0.01")
    log_level: str = "INFO"

    def source_options(self) -> dict[str, Any]:
        """Options dict understood by the CSV source adapter."""
        return {
            "delimiter": self.delimiter,
            "encoding": self.encoding,
            "quoting": self.quoting,
            "skip_rows": self.skip_rows,
        }
