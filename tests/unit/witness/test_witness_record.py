"""Unit tests for witness record models."""

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest
from vacuum.witness.models import (
    WITNESS_VERSION,
    Outcome,
    WitnessRecord,
    compute_input_hash,
    create_witness_record,
    format_timestamp,
)


class TestOutcome:
    """Tests for Outcome enum."""

    def test_exit_codes(self) -> None:
        """Completion exits 0, refusal exits 2."""
        assert Outcome.SCAN_COMPLETE.exit_code == 0
        assert Outcome.REFUSAL.exit_code == 2


class TestFormatTimestamp:
    """Tests for format_timestamp function."""

    def test_utc_millis(self) -> None:
        """Timestamps use milliseconds and a Z suffix."""
        dt = datetime(2026, 1, 2, 3, 4, 5, 678901, tzinfo=UTC)
        assert format_timestamp(dt) == "2026-01-02T03:04:05.678Z"

    def test_converts_to_utc(self) -> None:
        """Offsets are normalized to UTC."""
        dt = datetime(2026, 1, 2, 5, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(dt) == "2026-01-02T03:00:00.000Z"


class TestComputeInputHash:
    """Tests for compute_input_hash function."""

    def test_stable(self) -> None:
        """Same inputs produce the same 64-char hex digest."""
        first = compute_input_hash(["/a"], ["*.csv"], [], True)
        second = compute_input_hash(["/a"], ["*.csv"], [], True)

        assert first == second
        assert len(first) == 64

    @pytest.mark.parametrize(
        "changed",
        [
            (["/b"], ["*.csv"], [], True),
            (["/a"], ["*.txt"], [], True),
            (["/a"], ["*.csv"], ["x"], True),
            (["/a"], ["*.csv"], [], False),
        ],
    )
    def test_sensitive_to_every_input(self, changed: tuple) -> None:
        """Changing any input changes the hash."""
        assert compute_input_hash(*changed) != compute_input_hash(["/a"], ["*.csv"], [], True)


class TestWitnessRecord:
    """Tests for WitnessRecord serialization."""

    @pytest.fixture
    def record(self) -> WitnessRecord:
        """Sample record."""
        return WitnessRecord(
            tool="vacuum",
            outcome="SCAN_COMPLETE",
            exit_code=0,
            ts="2026-01-01T00:00:00.000Z",
            input_hash="abc123",
        )

    def test_json_line_shape(self, record: WitnessRecord) -> None:
        """The JSON line has the ledger fields in order."""
        line = record.to_json_line()

        assert "\n" not in line
        assert list(json.loads(line)) == [
            "version",
            "tool",
            "outcome",
            "exit_code",
            "ts",
            "input_hash",
        ]

    def test_round_trip(self, record: WitnessRecord) -> None:
        """from_json_line reverses to_json_line."""
        assert WitnessRecord.from_json_line(record.to_json_line()) == record

    def test_missing_version_defaults(self) -> None:
        """Older lines without a version still load."""
        line = '{"tool":"vacuum","outcome":"REFUSAL","exit_code":2,"ts":"2026-01-01T00:00:00Z"}'

        record = WitnessRecord.from_json_line(line)

        assert record.version == WITNESS_VERSION
        assert record.input_hash is None

    @pytest.mark.parametrize(
        "line",
        [
            "[1, 2]",
            '{"tool":"vacuum","outcome":"X","ts":"t"}',
            '{"tool":"vacuum","outcome":"X","exit_code":"0","ts":"t"}',
            '{"tool":"","outcome":"X","exit_code":0,"ts":"t"}',
        ],
    )
    def test_invalid_lines(self, line: str) -> None:
        """Malformed records raise KeyError or ValueError."""
        with pytest.raises((KeyError, ValueError)):
            WitnessRecord.from_json_line(line)


class TestCreateWitnessRecord:
    """Tests for create_witness_record factory."""

    def test_stamps_tool_and_outcome(self) -> None:
        """The factory fills tool, outcome, exit code and time."""
        now = datetime(2026, 3, 4, 5, 6, 7, tzinfo=UTC)

        record = create_witness_record(Outcome.REFUSAL, "hash", now=now)

        assert record.tool == "vacuum"
        assert record.outcome == "REFUSAL"
        assert record.exit_code == 2
        assert record.ts == "2026-03-04T05:06:07.000Z"
        assert record.input_hash == "hash"
