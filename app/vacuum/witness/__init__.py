"""Witness ledger: append-only audit trail of invocations and its queries."""

from vacuum.witness.ledger import WitnessLedger
from vacuum.witness.models import (
    WITNESS_VERSION,
    Outcome,
    WitnessRecord,
    compute_input_hash,
    create_witness_record,
)
from vacuum.witness.query import WitnessFilter, count, select

__all__ = [
    "WITNESS_VERSION",
    "Outcome",
    "WitnessFilter",
    "WitnessLedger",
    "WitnessRecord",
    "compute_input_hash",
    "count",
    "create_witness_record",
    "select",
]
