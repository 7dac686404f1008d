"""
Configuration Loader (``loan_config.loader``).

Loads a YAML configuration file and parses it into an ``IngestionConfig``.
Runtime callers go through ``loan_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ValueError`` with a descriptive message.
"""

from __future__ import annotations

import codecs
from dataclasses import fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from loan_config.schema import QUOTING_MODES, IngestionConfig
from loan_kernel.logging_config import level_from_name

_KNOWN_KEYS = frozenset(f.name for f in fields(IngestionConfig))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {path} must be a mapping, got {type(data).__name__}")
    return data


def parse_decimal(value: Any, key: str) -> Decimal:
    """Parse a YAML scalar into a Decimal; floats go through ``str`` first."""
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"{key} must be a decimal number, got {value!r}") from None


def parse_ingestion_config(data: dict[str, Any]) -> IngestionConfig:
    """
    Parse an ``IngestionConfig`` from a dict.

    Accepts either a flat mapping or one nested under an ``ingestion`` key.

    Raises:
        ValueError: for unknown keys or values out of range.
    """
    if "ingestion" in data and isinstance(data["ingestion"], dict):
        data = data["ingestion"]

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    defaults = IngestionConfig()

    delimiter = str(data.get("delimiter", defaults.delimiter))
    if len(delimiter) != 1:
        raise ValueError(f"delimiter must be a single character, got {delimiter!r}")

    encoding = str(data.get("encoding", defaults.encoding))
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise ValueError(f"Unknown encoding: {encoding!r}") from None

    quoting = str(data.get("quoting", defaults.quoting)).lower()
    if quoting not in QUOTING_MODES:
        raise ValueError(f"quoting must be one of {list(QUOTING_MODES)}, got {quoting!r}")

    skip_rows = data.get("skip_rows", defaults.skip_rows)
    if isinstance(skip_rows, bool) or not isinstance(skip_rows, int) or skip_rows < 0:
        raise ValueError(f"skip_rows must be a non-negative integer, got {skip_rows!r}")

    tolerance = parse_decimal(
        data.get("installment_tolerance", defaults.installment_tolerance), "installment_tolerance"
    )
    if not tolerance.is_finite() or tolerance < 0:
        raise ValueError(f"installment_tolerance must be non-negative, got {tolerance}")

    log_level = str(data.get("log_level", defaults.log_level)).upper()
    level_from_name(log_level)

    return IngestionConfig(
        delimiter=delimiter,
        encoding=encoding,
        quoting=quoting,
        skip_rows=skip_rows,
        installment_tolerance=tolerance,
        log_level=log_level,
    )


def load_ingestion_config(path: Path) -> IngestionConfig:
    """Load and parse a YAML configuration file."""
    return parse_ingestion_config(load_yaml_file(path))
