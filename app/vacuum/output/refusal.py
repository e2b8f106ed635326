"""Refusal envelopes.

A refusal replaces the whole manifest when a scan cannot start. Encoding
the envelope never raises: a hardcoded fallback is used instead.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vacuum import SCHEMA_VERSION
from vacuum.scanner.roots import RootFailure, RootFailureReason

logger = logging.getLogger(__name__)

REFUSAL_OUTCOME = "REFUSAL"

FALLBACK_ENVELOPE = (
    '{"version":"vacuum.v0","outcome":"REFUSAL","refusal":{"code":"E_IO",'
    '"message":"Failed to encode refusal","detail":{},"next_command":null}}'
)


class RefusalCode(str, Enum):
    """Refusal codes and their fixed messages."""

    ROOT_NOT_FOUND = "E_ROOT_NOT_FOUND"
    ROOT_PERMISSION = "E_ROOT_PERMISSION"
    IO = "E_IO"

    @property
    def message(self) -> str:
        """Human-readable message for this code."""
        return _MESSAGES[self]


_MESSAGES: dict[RefusalCode, str] = {
    RefusalCode.ROOT_NOT_FOUND: "Root path does not exist",
    RefusalCode.ROOT_PERMISSION: "Cannot read root directory",
    RefusalCode.IO: "Filesystem error during scan",
}

MISSING_ROOTS_MESSAGE = "At least one root path is required"


@dataclass(frozen=True, slots=True)
class Refusal:
    """Structured refusal payload.

    Attributes:
        code: Refusal code.
        message: Human-readable message.
        detail: Structured context (always includes ``root`` for root errors).
        next_command: Suggested follow-up command; always None today.
    """

    code: RefusalCode
    message: str
    detail: dict[str, Any] = field(default_factory=lambda: {})
    next_command: str | None = None

    def to_envelope(self) -> dict[str, Any]:
        """Build the full refusal envelope."""
        return {
            "version": SCHEMA_VERSION,
            "outcome": REFUSAL_OUTCOME,
            "refusal": {
                "code": self.code.value,
                "message": self.message,
                "detail": self.detail,
                "next_command": self.next_command,
            },
        }


def refusal_from_root_failure(failure: RootFailure) -> Refusal:
    """Map a root validation failure to its refusal."""
    if failure.reason == RootFailureReason.MISSING:
        return Refusal(RefusalCode.ROOT_NOT_FOUND, MISSING_ROOTS_MESSAGE, failure.detail)

    code = {
        RootFailureReason.NOT_FOUND: RefusalCode.ROOT_NOT_FOUND,
        RootFailureReason.PERMISSION: RefusalCode.ROOT_PERMISSION,
    }.get(failure.reason, RefusalCode.IO)
    return Refusal(code, code.message, failure.detail)


def encode_refusal(refusal: Refusal) -> str:
    """Encode a refusal envelope as one JSON line, falling back on failure."""
    try:
        return json.dumps(refusal.to_envelope(), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        logger.debug("Falling back to hardcoded refusal: %s", e)
        return FALLBACK_ENVELOPE
