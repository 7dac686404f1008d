"""
Record validator: assemble one raw row and run the three checks on it.

Two tiers of fault isolation:
    - A check that raises is recorded as a RecordError tagged with the
      check's field; its flag stays False and the other checks still run.
    - A fault while assembling the record (malformed row) discards the row
      and yields exactly one RecordError tagged ``"record"``.

Stateless and re-entrant; one validator serves any number of rows and jobs.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping

from loan_kernel.exceptions import MalformedRowError

from loan_ingestion.domain.checks import RecordChecks, default_checks
from loan_ingestion.domain.types import (
    EXTRA_CELLS_KEY,
    REQUIRED_COLUMNS,
    InstallmentRecord,
    RecordError,
    ValidatedRecord,
)
from loan_ingestion.mapping.engine import coerce_record

DOCUMENT_FIELD = "nrCpfCnpj"
CONTRACT_FIELD = "contract"
INSTALLMENT_FIELD = "installment"
RECORD_FIELD = "record"


def assemble_record(raw_row: Mapping[str, Any]) -> InstallmentRecord:
    """
    Reject rows whose cells do not line up with the header, then coerce.

    Raises:
        MalformedRowError: the row has cells beyond the header, or is short
            of cells for required columns.
    """
    extra = raw_row.get(EXTRA_CELLS_KEY)
    if extra:
        raise MalformedRowError(f"{len(extra)} cell(s) beyond the header")
    missing = [col for col in REQUIRED_COLUMNS if col in raw_row and raw_row[col] is None]
    if missing:
        raise MalformedRowError(f"no cells for columns {', '.join(missing)}")
    return coerce_record(raw_row)


def _serialize_row(raw_row: Any) -> str:
    try:
        return json.dumps(dict(raw_row), ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(raw_row)


def _message(exc: BaseException, fallback: str) -> str:
    return str(exc) or fallback


class RecordValidator:
    """Validate one row at a time against a bundle of record checks."""

    def __init__(self, checks: RecordChecks | None = None):
        self._checks = checks or default_checks()

    def validate(
        self,
        raw_row: Mapping[str, Any],
        line_number: int,
    ) -> tuple[ValidatedRecord | None, list[RecordError]]:
        try:
            record = assemble_record(raw_row)
            errors: list[RecordError] = []

            document_valid = self._run_check(
                errors, line_number, DOCUMENT_FIELD, record.nr_cpf_cnpj, "Invalid document",
                self._checks.document, record.nr_cpf_cnpj,
            )
            contract_valid = self._run_check(
                errors, line_number, CONTRACT_FIELD, record.nr_contrato, "Invalid contract",
                self._checks.contract, record,
            )
            installment_valid = self._run_check(
                errors, line_number, INSTALLMENT_FIELD, str(record.vl_presta), "Invalid installment",
                self._checks.installment, record.vl_total, record.vl_presta, record.qt_prestacoes,
            )

            validated = ValidatedRecord(
                record=record,
                document_valid=document_valid,
                contract_valid=contract_valid,
                installment_valid=installment_valid,
            )
            return validated, errors
        except Exception as exc:
            return None, [
                RecordError(
                    line=line_number,
                    field=RECORD_FIELD,
                    value=_serialize_row(raw_row),
                    error=_message(exc, "Error processing record"),
                )
            ]

    @staticmethod
    def _run_check(
        errors: list[RecordError],
        line_number: int,
        field: str,
        value: str,
        fallback_message: str,
        check: Callable[..., bool],
        *args: Any,
    ) -> bool:
        """Run one check; a raised fault becomes a RecordError and a False flag."""
        try:
            return bool(check(*args))
        except Exception as exc:
            errors.append(
                RecordError(line=line_number, field=field, value=value, error=_message(exc, fallback_message))
            )
            return False
