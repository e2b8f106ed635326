"""Deterministic ordering and JSONL emission of manifest records."""

import json
import logging
from collections.abc import Iterable
from typing import TextIO

from vacuum.scanner.models import ManifestRecord

logger = logging.getLogger(__name__)


def sort_records(records: Iterable[ManifestRecord]) -> list[ManifestRecord]:
    """Order records by ``(relative_path, root)`` using byte-wise comparison.

    The result does not depend on the order roots were walked in.
    """
    return sorted(records, key=lambda r: r.sort_key)


def encode_record(record: ManifestRecord) -> str:
    """Encode one record as a single compact JSON line (no newline)."""
    return json.dumps(record.to_dict(), ensure_ascii=False, separators=(",", ":"))


def emit_records(records: Iterable[ManifestRecord], stream: TextIO) -> int:
    """Write records to ``stream``, one JSON object per line.

    A record that cannot be encoded or written is skipped; the rest of the
    batch is still emitted.

    Args:
        records: Records in emission order.
        stream: Manifest output stream.

    Returns:
        Number of records written.
    """
    written = 0
    for record in records:
        try:
            stream.write(encode_record(record) + "\n")
        except (TypeError, ValueError, OSError) as e:
            logger.debug("Skipping record %s: %s", record.relative_path, e)
            continue
        written += 1

    try:
        stream.flush()
    except OSError as e:
        logger.debug("Cannot flush manifest stream: %s", e)
    return written
