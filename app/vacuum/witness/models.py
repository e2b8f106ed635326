"""Witness record model.

A witness record is the audit trail of one vacuum invocation: which tool ran,
how it ended, and a fingerprint of what it was asked to do.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from vacuum import TOOL_NAME

WITNESS_VERSION = "witness.v0"


class Outcome(str, Enum):
    """How an invocation ended.

    Attributes:
        SCAN_COMPLETE: Manifest emitted, exit code 0.
        REFUSAL: Refusal envelope emitted, exit code 2.
    """

    SCAN_COMPLETE = "SCAN_COMPLETE"
    REFUSAL = "REFUSAL"

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome."""
        return 0 if self is Outcome.SCAN_COMPLETE else 2


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as RFC 3339 UTC with milliseconds and ``Z``."""
    utc = dt.astimezone(UTC)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def compute_input_hash(
    roots: Sequence[str],
    include: Sequence[str],
    exclude: Sequence[str],
    follow_symlinks: bool,
) -> str:
    """Fingerprint the inputs of a scan invocation.

    Hashes a canonical JSON rendering of the arguments, not file contents.

    Returns:
        SHA-256 hex digest.
    """
    canonical = json.dumps(
        {
            "roots": list(roots),
            "include": list(include),
            "exclude": list(exclude),
            "follow_symlinks": follow_symlinks,
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class WitnessRecord:
    """One line of the witness ledger.

    Attributes:
        tool: Tool that produced the record.
        outcome: Outcome string (e.g. SCAN_COMPLETE, REFUSAL).
        exit_code: Process exit code.
        ts: RFC 3339 UTC timestamp.
        input_hash: Fingerprint of the invocation inputs, if known.
        version: Ledger schema tag.
    """

    tool: str
    outcome: str
    exit_code: int
    ts: str
    input_hash: str | None = None
    version: str = WITNESS_VERSION

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.tool:
            msg = "Witness tool cannot be empty"
            raise ValueError(msg)
        if not self.ts:
            msg = "Witness timestamp cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        result: dict[str, Any] = {
            "version": self.version,
            "tool": self.tool,
            "outcome": self.outcome,
            "exit_code": self.exit_code,
            "ts": self.ts,
        }
        if self.input_hash is not None:
            result["input_hash"] = self.input_hash
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WitnessRecord:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        exit_code = data["exit_code"]
        if not isinstance(exit_code, int) or isinstance(exit_code, bool):
            msg = f"exit_code must be an integer, got {exit_code!r}"
            raise ValueError(msg)
        return cls(
            tool=str(data["tool"]),
            outcome=str(data["outcome"]),
            exit_code=exit_code,
            ts=str(data["ts"]),
            input_hash=data.get("input_hash"),
            version=data.get("version", WITNESS_VERSION),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> WitnessRecord:
        """Deserialize from a JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        data = json.loads(line.strip())
        if not isinstance(data, dict):
            msg = "Witness line must be a JSON object"
            raise ValueError(msg)
        return cls.from_dict(data)


def create_witness_record(
    outcome: Outcome,
    input_hash: str | None = None,
    now: datetime | None = None,
) -> WitnessRecord:
    """Factory for a witness record stamped with the current time."""
    return WitnessRecord(
        tool=TOOL_NAME,
        outcome=outcome.value,
        exit_code=outcome.exit_code,
        ts=format_timestamp(now or datetime.now(UTC)),
        input_hash=input_hash,
    )
