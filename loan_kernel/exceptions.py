"""
Typed exception hierarchy for loan installment ingestion.

Every error has a typed class, a machine-readable ``code`` class attribute,
and carries its context as attributes rather than only in the message, so
that callers catch by type and log or report structured data.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LoanKernelError (base)
    |
    +-- IngestionError
    |   +-- SourceSchemaError
    |   +-- MalformedRowError
    |
    +-- CheckError
        +-- InvalidDocumentError
        +-- ContractConsistencyError
        +-- InstallmentArithmeticError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                      | When Raised
------------|---------------------------|---------------------------------------
Ingestion   | SOURCE_SCHEMA_MISMATCH    | Header lacks required columns (job fails)
            | MALFORMED_ROW             | Row cells do not line up with the header
------------|---------------------------|---------------------------------------
Check       | INVALID_DOCUMENT          | Tax id is not a CPF/CNPJ-shaped value
            | CONTRACT_INCONSISTENT     | Contract data cannot be checked
            | INSTALLMENT_ARITHMETIC    | Installment math is undefined (count <= 0)

===============================================================================
HANDLING PATTERNS
===============================================================================

CheckError subclasses are raised by the default record checks. The record
validator records them as per-record errors and keeps going:

    try:
        valid = checks.document(record.nr_cpf_cnpj)
    except Exception as exc:
        errors.append(RecordError(line, "nrCpfCnpj", tax_id, str(exc)))

IngestionError subclasses mark structural problems. MalformedRowError drops
one record; SourceSchemaError fails the whole job.
"""


class LoanKernelError(Exception):
    """
    Base exception for all loan ingestion errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LOAN_KERNEL_ERROR"


# Ingestion (structural) exceptions


class IngestionError(LoanKernelError):
    """Base exception for source file structure errors."""

    code: str = "INGESTION_ERROR"


class SourceSchemaError(IngestionError):
    """Source header does not name every required column."""

    code: str = "SOURCE_SCHEMA_MISMATCH"

    def __init__(self, missing_columns: tuple[str, ...]):
        self.missing_columns = missing_columns
        super().__init__(
            f"Source header is missing required columns: {', '.join(missing_columns)}"
        )


class MalformedRowError(IngestionError):
    """A data row's cells do not line up with the header."""

    code: str = "MALFORMED_ROW"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed row: {reason}")


# Check exceptions


class CheckError(LoanKernelError):
    """Base exception for validation checks that cannot reach a verdict."""

    code: str = "CHECK_ERROR"


class InvalidDocumentError(CheckError):
    """Tax id has neither the CPF (11) nor the CNPJ (14) digit count."""

    code: str = "INVALID_DOCUMENT"

    def __init__(self, tax_id: str, digit_count: int):
        self.tax_id = tax_id
        self.digit_count = digit_count
        super().__init__(
            f"Document must have 11 (CPF) or 14 (CNPJ) digits, got {digit_count}"
        )


class ContractConsistencyError(CheckError):
    """Contract data is missing the fields needed to check it."""

    code: str = "CONTRACT_INCONSISTENT"

    def __init__(self, contract_number: str, reason: str):
        self.contract_number = contract_number
        self.reason = reason
        super().__init__(reason)


class InstallmentArithmeticError(CheckError):
    """Installment arithmetic is undefined for the given values."""

    code: str = "INSTALLMENT_ARITHMETIC"

    def __init__(self, installment_count: int):
        self.installment_count = installment_count
        super().__init__(
            f"Installment count must be positive, got {installment_count}"
        )
