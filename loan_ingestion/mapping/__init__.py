"""Field coercion: raw CSV text -> typed installment records (pure)."""

from loan_ingestion.mapping.engine import (
    DECIMAL_FALLBACK,
    WHOLE_NUMBER_FALLBACK,
    coerce_record,
    coerce_value,
    parse_decimal_number,
    parse_whole_number,
)

__all__ = [
    "DECIMAL_FALLBACK",
    "WHOLE_NUMBER_FALLBACK",
    "coerce_record",
    "coerce_value",
    "parse_decimal_number",
    "parse_whole_number",
]
