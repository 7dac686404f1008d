"""
loan_config -- single public entrypoint for ingestion configuration.

``get_active_config()`` resolves the configuration file in this order:
explicit ``path`` argument, then the ``LOAN_INGESTION_CONFIG`` environment
variable, then built-in defaults. Every resolution is logged with the
source it came from.

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.
"""

from __future__ import annotations

import os
from pathlib import Path

from loan_config.loader import load_ingestion_config
from loan_config.schema import IngestionConfig
from loan_kernel.logging_config import get_logger

CONFIG_ENV_VAR = "LOAN_INGESTION_CONFIG"

_logger = get_logger("config")


def get_active_config(path: Path | str | None = None) -> IngestionConfig:
    """Return the ingestion configuration in effect."""
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else None

    if path is None:
        config = IngestionConfig()
        source = "defaults"
    else:
        config = load_ingestion_config(Path(path))
        source = str(path)

    _logger.info(
        "config_loaded",
        extra={
            "config_source": source,
            "delimiter": config.delimiter,
            "encoding": config.encoding,
            "installment_tolerance": config.installment_tolerance,
        },
    )
    return config


__all__ = [
    "CONFIG_ENV_VAR",
    "IngestionConfig",
    "get_active_config",
]
