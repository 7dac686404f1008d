"""
Job status registry: job id -> latest JobStatus snapshot.

Contract:
    - ``set()`` is an unconditional upsert; the import service is the sole
      writer and honours the PROCESSING -> COMPLETED | FAILED lifecycle.
    - ``get()`` returns the stored frozen snapshot, or None for unknown ids.
    - Every access holds one lock, so a poll never races an update.

Non-goals:
    - No expiry, capacity bound or persistence. Entries live as long as the
      registry object.
"""

from __future__ import annotations

import threading

from loan_ingestion.domain.types import JobStatus


class JobStatusRegistry:
    """Thread-safe in-memory store of job statuses. Inject one per process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._statuses: dict[str, JobStatus] = {}

    def set(self, job_id: str, status: JobStatus) -> None:
        with self._lock:
            self._statuses[job_id] = status

    def get(self, job_id: str) -> JobStatus | None:
        with self._lock:
            return self._statuses.get(job_id)

    def job_ids(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._statuses)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._statuses

    def __len__(self) -> int:
        with self._lock:
            return len(self._statuses)
