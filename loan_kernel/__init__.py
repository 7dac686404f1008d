"""
Loan Kernel - shared infrastructure for installment ingestion

Provides:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clocks for deterministic timing
"""

__version__ = "0.1.0"
