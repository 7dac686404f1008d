"""
Source store: disposal of uploaded source files once a job is done.

The import service removes the source file on both the success and the
failure path; a removal fault is the caller's to log, never the job's.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class SourceStore(Protocol):
    """Protocol for disposing of a processed source file."""

    def remove(self, source_path: Path) -> None:
        """Remove the file. May raise OSError."""
        ...


class LocalSourceStore:
    """Source files on the local filesystem; removal unlinks the file."""

    def remove(self, source_path: Path) -> None:
        Path(source_path).unlink()


class RetainingSourceStore:
    """Keeps source files in place (command-line runs over user files)."""

    def remove(self, source_path: Path) -> None:
        return None
