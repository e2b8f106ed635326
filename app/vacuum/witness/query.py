"""Filtering of witness records for the ``witness`` sub-commands."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from vacuum.core.errors import QueryError
from vacuum.witness.models import WitnessRecord

logger = logging.getLogger(__name__)


def parse_bound(value: str) -> datetime:
    """Parse a ``--since``/``--until`` value.

    Accepts ISO 8601 dates (``2026-01-02``) and datetimes, with or without
    offset; values without an offset are taken as UTC.

    Raises:
        QueryError: If the value is not a valid ISO 8601 date or datetime.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise QueryError(f"Invalid timestamp {value!r}: use ISO 8601 (YYYY-MM-DD)") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_upper_bound(value: str) -> datetime:
    """Parse an inclusive upper bound; a bare date covers that whole day."""
    parsed = parse_bound(value)
    if len(value.strip()) == 10:
        return parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _parse_record_ts(record: WitnessRecord) -> datetime | None:
    try:
        return parse_bound(record.ts)
    except QueryError:
        logger.debug("Unparseable witness timestamp %r", record.ts)
        return None


@dataclass(frozen=True, slots=True)
class WitnessFilter:
    """Criteria for selecting witness records.

    All criteria are optional and combined with AND.

    Attributes:
        tool: Exact tool name.
        outcome: Exact outcome string.
        since: Inclusive lower bound on ``ts``.
        until: Inclusive upper bound on ``ts``.
        input_hash: Substring of ``input_hash``.
    """

    tool: str | None = None
    outcome: str | None = None
    since: datetime | None = None
    until: datetime | None = None
    input_hash: str | None = None

    @classmethod
    def from_options(
        cls,
        tool: str | None = None,
        outcome: str | None = None,
        since: str | None = None,
        until: str | None = None,
        input_hash: str | None = None,
    ) -> WitnessFilter:
        """Build a filter from raw CLI option values.

        Raises:
            QueryError: If a time bound cannot be parsed.
        """
        return cls(
            tool=tool,
            outcome=outcome,
            since=parse_bound(since) if since else None,
            until=parse_upper_bound(until) if until else None,
            input_hash=input_hash,
        )

    def matches(self, record: WitnessRecord) -> bool:
        """Check whether a record satisfies every criterion."""
        if self.tool is not None and record.tool != self.tool:
            return False
        if self.outcome is not None and record.outcome != self.outcome:
            return False
        if self.input_hash is not None and self.input_hash not in (record.input_hash or ""):
            return False

        if self.since is not None or self.until is not None:
            ts = _parse_record_ts(record)
            if ts is None:
                return False
            if self.since is not None and ts < self.since:
                return False
            if self.until is not None and ts > self.until:
                return False

        return True


def select(
    records: Iterable[WitnessRecord],
    criteria: WitnessFilter,
    limit: int | None = None,
) -> list[WitnessRecord]:
    """Return matching records in ledger order, keeping at most ``limit``."""
    matched = [r for r in records if criteria.matches(r)]
    if limit is not None:
        return matched[:limit]
    return matched


def count(records: Iterable[WitnessRecord], criteria: WitnessFilter) -> int:
    """Count matching records."""
    return sum(1 for r in records if criteria.matches(r))
