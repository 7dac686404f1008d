"""
Mapping engine: pure transformation from a raw CSV row to a typed record.

Coercion is TOTAL. Text columns never fail; whole-number and decimal columns
fall back to ``0`` / ``Decimal("0")`` on unparseable text, so the record
validator can treat coercion as infallible. ZERO I/O.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from loan_ingestion.domain.types import (
    INSTALLMENT_FIELDS,
    FieldMapping,
    FieldType,
    InstallmentRecord,
)

WHOLE_NUMBER_FALLBACK = 0
DECIMAL_FALLBACK = Decimal("0")

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)", re.ASCII)
_CURRENCY_PREFIX = re.compile(r"^[^\d.,+-]*", re.ASCII)
_NUMERIC_TEXT = re.compile(r"^[+-]?[\d.,]+$", re.ASCII)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value).strip()


# -----------------------------------------------------------------------------
# Scalar parsers (pure)
# -----------------------------------------------------------------------------


def parse_whole_number(value: Any) -> int:
    """Parse the leading integer of ``value`` ("12", "+3", "7 parcelas"); else 0."""
    if isinstance(value, bool):
        return WHOLE_NUMBER_FALLBACK
    if isinstance(value, int):
        return value
    match = _LEADING_INTEGER.match(_as_text(value))
    if not match:
        return WHOLE_NUMBER_FALLBACK
    try:
        return int(match.group(1))
    except ValueError:
        # More digits than int() accepts from text
        return WHOLE_NUMBER_FALLBACK


def _normalize_separators(s: str) -> str:
    """
    Turn pt-BR or en-US money text into a plain ``Decimal`` literal.

    When both "." and "," occur, the last one is the decimal separator.
    A single "," is a decimal separator; repeated separators group thousands.
    """
    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if "," in s:
        return s.replace(",", ".") if s.count(",") == 1 else s.replace(",", "")
    if s.count(".") > 1:
        return s.replace(".", "")
    return s


def parse_decimal_number(value: Any) -> Decimal:
    """Parse money text such as ``"R$ 1.234,56"`` or ``"1,234.56"``; else ``Decimal("0")``."""
    if isinstance(value, Decimal):
        return value if value.is_finite() else DECIMAL_FALLBACK
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    s = _CURRENCY_PREFIX.sub("", _as_text(value)).replace(" ", "")
    if not _NUMERIC_TEXT.match(s):
        return DECIMAL_FALLBACK
    try:
        parsed = Decimal(_normalize_separators(s))
    except (InvalidOperation, ValueError):
        return DECIMAL_FALLBACK
    return parsed if parsed.is_finite() else DECIMAL_FALLBACK


def coerce_value(value: Any, field_type: FieldType) -> Any:
    """Coerce one raw cell to its column type. Never raises."""
    if field_type == FieldType.INTEGER:
        return parse_whole_number(value)
    if field_type == FieldType.DECIMAL:
        return parse_decimal_number(value)
    return _as_text(value)


# -----------------------------------------------------------------------------
# Apply column table (pure)
# -----------------------------------------------------------------------------


def coerce_record(
    raw_row: Mapping[str, Any],
    field_mappings: tuple[FieldMapping, ...] = INSTALLMENT_FIELDS,
) -> InstallmentRecord:
    """
    Build an InstallmentRecord from a raw row. Pure function.

    Missing columns coerce like empty text. Columns not in the table are
    ignored.
    """
    values = {fm.target: coerce_value(raw_row.get(fm.source), fm.field_type) for fm in field_mappings}
    return InstallmentRecord(**values)
