"""Append-only witness ledger in JSON Lines format."""

import json
import logging
from pathlib import Path

from vacuum.core.errors import LedgerError
from vacuum.witness.models import WitnessRecord

logger = logging.getLogger(__name__)


class WitnessLedger:
    """Reads and appends witness records.

    Each line of the ledger file is one complete JSON object. Records are
    only ever appended; nothing is rewritten.

    Args:
        path: Ledger file location (resolved once at startup).
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Ledger file location."""
        return self._path

    def append(self, record: WitnessRecord) -> None:
        """Append one record, creating the file and parents if needed.

        Raises:
            LedgerError: If the ledger cannot be written.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open(mode="a", encoding="utf-8") as f:
                f.write(record.to_json_line() + "\n")
                f.flush()
        except OSError as e:
            raise LedgerError(f"Cannot write witness ledger {self._path}: {e}") from e

    def read_all(self) -> list[WitnessRecord]:
        """Read every record, oldest first.

        Blank lines are ignored and corrupt lines are skipped with a
        warning. A missing ledger reads as empty.
        """
        if not self._path.exists():
            return []

        records: list[WitnessRecord] = []
        with self._path.open(encoding="utf-8", errors="replace") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    records.append(WitnessRecord.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt witness line %d: %s", line_num, str(e))
                    continue

        return records

    def last(self) -> WitnessRecord | None:
        """Most recently appended record, or None if the ledger is empty."""
        records = self.read_all()
        return records[-1] if records else None
