"""
Pure domain layer of the loan kernel.

Holds the time abstraction only. NO dependencies on I/O.
"""

from loan_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SequentialClock,
    SystemClock,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SequentialClock",
    "SystemClock",
]
