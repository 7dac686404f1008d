"""
Default record checks: document, contract and installment rules.

Each check answers True/False for a verdict and raises a ``CheckError``
subclass when it cannot reach one. The record validator treats the three as
opaque collaborators bundled in ``RecordChecks``; callers may inject their
own bundle.

Architecture: loan_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from functools import partial
from typing import Callable

from loan_kernel.exceptions import (
    ContractConsistencyError,
    InstallmentArithmeticError,
    InvalidDocumentError,
)

from loan_ingestion.domain.types import InstallmentRecord

DEFAULT_INSTALLMENT_TOLERANCE = Decimal("0.01")

_CENT = Decimal("0.01")
_NON_DIGIT = re.compile(r"\D", re.ASCII)
_DATE_FORMATS = ("%Y%m%d", "%Y-%m-%d", "%d/%m/%Y")

_CPF_WEIGHTS = (tuple(range(10, 1, -1)), tuple(range(11, 1, -1)))
_CNPJ_WEIGHTS = (
    (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2),
    (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2),
)


# -----------------------------------------------------------------------------
# Document (CPF / CNPJ)
# -----------------------------------------------------------------------------


def _check_digit(digits: list[int], weights: tuple[int, ...]) -> int:
    remainder = sum(d * w for d, w in zip(digits, weights)) % 11
    return 0 if remainder < 2 else 11 - remainder


def _has_valid_check_digits(digits: list[int], weights: tuple[tuple[int, ...], ...]) -> bool:
    body_length = len(digits) - 2
    first = _check_digit(digits[:body_length], weights[0])
    second = _check_digit(digits[:body_length] + [first], weights[1])
    return digits[body_length:] == [first, second]


def validate_document(tax_id: str) -> bool:
    """
    Validate a CPF (11 digits) or CNPJ (14 digits) by its check digits.

    Punctuation ("529.982.247-25") is ignored. Sequences of one repeated digit
    pass the arithmetic but are never issued, so they are invalid.

    Raises:
        InvalidDocumentError: digit count is neither 11 nor 14.
    """
    digits = [int(c) for c in _NON_DIGIT.sub("", tax_id or "")]
    if len(digits) == 11:
        weights = _CPF_WEIGHTS
    elif len(digits) == 14:
        weights = _CNPJ_WEIGHTS
    else:
        raise InvalidDocumentError(tax_id, len(digits))
    if len(set(digits)) == 1:
        return False
    return _has_valid_check_digits(digits, weights)


# -----------------------------------------------------------------------------
# Contract
# -----------------------------------------------------------------------------


def parse_contract_date(text: str) -> date | None:
    """Parse ``YYYYMMDD``, ``YYYY-MM-DD`` or ``DD/MM/YYYY``; None if none match."""
    s = (text or "").strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def validate_contract(record: InstallmentRecord) -> bool:
    """
    Check that a record's contract data is internally consistent.

    True iff the contract has a positive installment count, the installment
    number lies within it, the contract date parses, and the due date (when
    it parses) is not before the contract date.

    Raises:
        ContractConsistencyError: the contract number is blank.
    """
    if not record.nr_contrato.strip():
        raise ContractConsistencyError(record.nr_contrato, "Contract number is missing")
    if record.qt_prestacoes <= 0:
        return False
    if not 1 <= record.nr_presta <= record.qt_prestacoes:
        return False
    signed_on = parse_contract_date(record.dt_contrato)
    if signed_on is None:
        return False
    due_on = parse_contract_date(record.dt_vct_pre)
    return due_on is None or due_on >= signed_on


# -----------------------------------------------------------------------------
# Installment arithmetic
# -----------------------------------------------------------------------------


def validate_installment(
    total: Decimal,
    installment: Decimal,
    count: int,
    tolerance: Decimal = DEFAULT_INSTALLMENT_TOLERANCE,
) -> bool:
    """
    True iff ``installment`` equals ``total / count`` rounded to cents, within
    ``tolerance``.

    Raises:
        InstallmentArithmeticError: ``count`` is zero or negative.
    """
    if count <= 0:
        raise InstallmentArithmeticError(count)
    expected = (total / Decimal(count)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return abs(expected - installment) <= tolerance


# -----------------------------------------------------------------------------
# Bundle
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class RecordChecks:
    """The three checks a record validator runs, in order."""

    document: Callable[[str], bool] = validate_document
    contract: Callable[[InstallmentRecord], bool] = validate_contract
    installment: Callable[[Decimal, Decimal, int], bool] = validate_installment


def default_checks(tolerance: Decimal = DEFAULT_INSTALLMENT_TOLERANCE) -> RecordChecks:
    """Default bundle with the installment tolerance bound in."""
    return RecordChecks(
        document=validate_document,
        contract=validate_contract,
        installment=partial(validate_installment, tolerance=tolerance),
    )
