"""
loan_ingestion.domain.types -- Pure frozen dataclasses for installment ingestion.

ZERO I/O. Records, per-record errors, job summaries and job statuses are
immutable snapshots so that a status read never observes a half-written job.

Payload methods (``to_payload``) render the camelCase shapes consumed by
callers polling a job: column names as they appear in the source header,
``{line, field, value, error}`` errors and the summary block.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable


# =============================================================================
# Column table
# =============================================================================


class FieldType(str, Enum):
    """Target type of a source column."""

    STRING = "string"
    INTEGER = "integer"
    DECIMAL = "decimal"


@dataclass(frozen=True)
class FieldMapping:
    """Single column mapping: source header name -> record attribute with type."""

    source: str  # Header name in the source file
    target: str  # InstallmentRecord attribute
    field_type: FieldType = FieldType.STRING


INSTALLMENT_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping("nrInst", "nr_inst"),
    FieldMapping("nrAgencia", "nr_agencia"),
    FieldMapping("cdClient", "cd_client"),
    FieldMapping("nmClient", "nm_client"),
    FieldMapping("nrCpfCnpj", "nr_cpf_cnpj"),
    FieldMapping("nrContrato", "nr_contrato"),
    FieldMapping("dtContrato", "dt_contrato"),
    FieldMapping("cdProduto", "cd_produto"),
    FieldMapping("dsProduto", "ds_produto"),
    FieldMapping("cdCarteira", "cd_carteira"),
    FieldMapping("dsCarteira", "ds_carteira"),
    FieldMapping("nrProposta", "nr_proposta"),
    FieldMapping("tpPresta", "tp_presta"),
    FieldMapping("nrSeqPre", "nr_seq_pre"),
    FieldMapping("dtVctPre", "dt_vct_pre"),
    FieldMapping("idSituac", "id_situac"),
    FieldMapping("idSitVen", "id_sit_ven"),
    FieldMapping("qtPrestacoes", "qt_prestacoes", FieldType.INTEGER),
    FieldMapping("nrPresta", "nr_presta", FieldType.INTEGER),
    FieldMapping("vlTotal", "vl_total", FieldType.DECIMAL),
    FieldMapping("vlPresta", "vl_presta", FieldType.DECIMAL),
    FieldMapping("vlMora", "vl_mora", FieldType.DECIMAL),
    FieldMapping("vlMulta", "vl_multa", FieldType.DECIMAL),
    FieldMapping("vlOutAcr", "vl_out_acr", FieldType.DECIMAL),
    FieldMapping("vlIof", "vl_iof", FieldType.DECIMAL),
    FieldMapping("vlDescon", "vl_descon", FieldType.DECIMAL),
    FieldMapping("vlAtual", "vl_atual", FieldType.DECIMAL),
)

REQUIRED_COLUMNS: tuple[str, ...] = tuple(fm.source for fm in INSTALLMENT_FIELDS)

# Raw-row key holding cells found beyond the header
EXTRA_CELLS_KEY = "__extra_cells__"


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class InstallmentRecord:
    """One data row after coercion. Dates stay as source text."""

    nr_inst: str
    nr_agencia: str
    cd_client: str
    nm_client: str
    nr_cpf_cnpj: str
    nr_contrato: str
    dt_contrato: str
    cd_produto: str
    ds_produto: str
    cd_carteira: str
    ds_carteira: str
    nr_proposta: str
    tp_presta: str
    nr_seq_pre: str
    dt_vct_pre: str
    id_situac: str
    id_sit_ven: str
    qt_prestacoes: int
    nr_presta: int
    vl_total: Decimal
    vl_presta: Decimal
    vl_mora: Decimal
    vl_multa: Decimal
    vl_out_acr: Decimal
    vl_iof: Decimal
    vl_descon: Decimal
    vl_atual: Decimal

    def to_payload(self) -> dict[str, Any]:
        return {fm.source: getattr(self, fm.target) for fm in INSTALLMENT_FIELDS}


@dataclass(frozen=True)
class ValidatedRecord:
    """An installment record plus the outcome of each check."""

    record: InstallmentRecord
    document_valid: bool = False
    contract_valid: bool = False
    installment_valid: bool = False

    @property
    def is_fully_valid(self) -> bool:
        return self.document_valid and self.contract_valid and self.installment_valid

    def to_payload(self) -> dict[str, Any]:
        payload = self.record.to_payload()
        payload["documentValid"] = self.document_valid
        payload["contractValid"] = self.contract_valid
        payload["installmentValid"] = self.installment_valid
        return payload


@dataclass(frozen=True)
class RecordError:
    """A single per-record error. ``line`` is 1-based over data rows."""

    line: int
    field: str  # "nrCpfCnpj", "contract", "installment" or "record"
    value: str
    error: str

    def to_payload(self) -> dict[str, Any]:
        return {"line": self.line, "field": self.field, "value": self.value, "error": self.error}


# =============================================================================
# Job summary and status
# =============================================================================


def format_seconds(seconds: float) -> str:
    """Render a duration as ``"<seconds>s"`` with at most millisecond precision."""
    text = f"{seconds:.3f}".rstrip("0").rstrip(".")
    return f"{text or '0'}s"


@dataclass(frozen=True)
class ResultSummary:
    """Aggregate counts and value of a job."""

    total_records: int
    valid_records: int
    invalid_records: int
    processing_seconds: float
    total_value: Decimal
    start_time: datetime
    end_time: datetime

    @property
    def processing_time(self) -> str:
        return format_seconds(self.processing_seconds)

    @classmethod
    def empty(cls, start_time: datetime) -> ResultSummary:
        """Zero-valued summary for a job that has just started."""
        return cls(
            total_records=0,
            valid_records=0,
            invalid_records=0,
            processing_seconds=0.0,
            total_value=Decimal("0"),
            start_time=start_time,
            end_time=start_time,
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[ValidatedRecord],
        start_time: datetime,
        end_time: datetime,
    ) -> ResultSummary:
        """Partition records into fully valid vs. not and total the valid ones."""
        records = tuple(records)
        valid = [r for r in records if r.is_fully_valid]
        return cls(
            total_records=len(records),
            valid_records=len(valid),
            invalid_records=len(records) - len(valid),
            processing_seconds=(end_time - start_time).total_seconds(),
            total_value=sum((r.record.vl_total for r in valid), Decimal("0")),
            start_time=start_time,
            end_time=end_time,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "validRecords": self.valid_records,
            "invalidRecords": self.invalid_records,
            "processingTime": self.processing_time,
            "totalValue": self.total_value,
            "startTime": self.start_time,
            "endTime": self.end_time,
        }


@dataclass(frozen=True)
class JobResult:
    """Everything a completed (or in-progress) job reports."""

    summary: ResultSummary
    records: tuple[ValidatedRecord, ...] = ()
    errors: tuple[RecordError, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        return {
            "data": [r.to_payload() for r in self.records],
            "errors": [e.to_payload() for e in self.errors],
            "summary": self.summary.to_payload(),
        }


class JobState(str, Enum):
    """Job lifecycle: PROCESSING -> COMPLETED | FAILED, never reversed."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class JobStatus:
    """Immutable snapshot of a job as stored in the status registry."""

    job_id: str
    state: JobState
    result: JobResult | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state != JobState.PROCESSING

    @classmethod
    def processing(cls, job_id: str, start_time: datetime) -> JobStatus:
        return cls(job_id=job_id, state=JobState.PROCESSING, result=JobResult(ResultSummary.empty(start_time)))

    @classmethod
    def completed(cls, job_id: str, result: JobResult) -> JobStatus:
        return cls(job_id=job_id, state=JobState.COMPLETED, result=result)

    @classmethod
    def failed(cls, job_id: str, error: str) -> JobStatus:
        return cls(job_id=job_id, state=JobState.FAILED, error=error)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.state.value}
        if self.state == JobState.FAILED:
            payload["error"] = self.error
        elif self.result is not None:
            payload["result"] = self.result.to_payload()
        return payload
