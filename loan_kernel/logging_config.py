"""Structured JSON logging for the loan kernel and ingestion pipeline."""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
    "level_from_name",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Job context
# ---------------------------------------------------------------------------

_JOB_FIELDS = ("correlation_id", "producer", "source_file", "trace_id")

_job_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"job_{name}", default=None) for name in _JOB_FIELDS
}


def _job_var(name: str) -> ContextVar[str | None]:
    try:
        return _job_vars[name]
    except KeyError:
        raise TypeError(f"Unknown log context field: {name!r}") from None


class LogContext:
    """Job-scoped fields stamped onto every log line.

    Backed by contextvars, so the import worker thread and any asyncio
    task see only the fields bound in their own context.
    """

    @staticmethod
    def set(
        *,
        correlation_id: str | None = None,
        producer: str | None = None,
        source_file: str | None = None,
        trace_id: str | None = None,
    ) -> None:
        """Set the given fields; None leaves a field as it is."""
        fields = {
            "correlation_id": correlation_id,
            "producer": producer,
            "source_file": source_file,
            "trace_id": trace_id,
        }
        for name, value in fields.items():
            if value is not None:
                _job_vars[name].set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        """Return the fields that currently hold a value."""
        return {
            name: value
            for name, var in _job_vars.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _job_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block.

        Raises TypeError for a field name LogContext does not carry.
        """
        bound = {name: _job_var(name) for name in fields}
        tokens = [
            (bound[name], bound[name].set(value))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON lines
# ---------------------------------------------------------------------------

_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    # UUID, Decimal, paths and anything else without a JSON form
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Flatten an exception, including LoanKernelError attributes, into exc_* keys."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    fields.update(
        (f"exc_{name}", value)
        for name, value in vars(exc).items()
        if not name.startswith("_") and name != "code"
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per log line: ts, level, logger, message, job context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, val in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, val)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Loggers
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "loan_kernel"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the loan_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def level_from_name(name: str) -> int:
    """Translate a level name such as ``"debug"`` into a logging level."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the loan_kernel logger. Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
