"""
loan_ingestion -- Streaming ingestion of loan installment files.

Reads a delimited installment file row by row, validates each record against
the document, contract and installment checks, and reports progress and
results through a job status registry keyed by job id.

Architecture:
    adapters/  -- file I/O (CSV streaming)
    domain/    -- pure types, checks and the record validator
    mapping/   -- raw text -> typed record coercion
    services/  -- import service, status registry, source store
"""
