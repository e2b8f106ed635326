"""Output stage: manifest ordering/emission, refusals and contract documents."""

from vacuum.output.manifest import emit_records, encode_record, sort_records
from vacuum.output.refusal import (
    FALLBACK_ENVELOPE,
    Refusal,
    RefusalCode,
    encode_refusal,
    refusal_from_root_failure,
)

__all__ = [
    "FALLBACK_ENVELOPE",
    "Refusal",
    "RefusalCode",
    "emit_records",
    "encode_record",
    "encode_refusal",
    "refusal_from_root_failure",
    "sort_records",
]
