"""Rate-limited progress and skip notifications.

The reporter writes to a side-channel stream (stderr in the CLI) and never
to the manifest stream. Progress events are only produced when progress mode
is enabled; skip warnings are always produced, as JSON events in progress
mode and as one plain line otherwise.
"""

import json
import time
from collections.abc import Callable
from typing import Any, TextIO

from vacuum import TOOL_NAME
from vacuum.scanner.models import ManifestRecord

DEFAULT_INTERVAL_MS = 500
DEFAULT_BATCH = 1000


class ProgressReporter:
    """Explicit progress state: processed count and last emission time.

    Args:
        stream: Side-channel text stream.
        enabled: Emit structured progress and warning events when True.
        clock: Monotonic clock in seconds; injectable for tests.
        interval_ms: Minimum time between time-triggered progress events.
        batch: Emit a progress event whenever ``processed`` is a multiple
            of this number.
    """

    def __init__(
        self,
        stream: TextIO,
        *,
        enabled: bool = False,
        clock: Callable[[], float] = time.monotonic,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        batch: int = DEFAULT_BATCH,
    ) -> None:
        self._stream = stream
        self._enabled = enabled
        self._clock = clock
        self._interval = interval_ms / 1000.0
        self._batch = batch
        self._started = clock()
        self._last_emit = self._started
        self.processed = 0

    def entry_processed(self) -> None:
        """Count one processed entry and emit progress when due."""
        self.processed += 1
        if not self._enabled:
            return

        now = self._clock()
        if self.processed % self._batch == 0 or now - self._last_emit >= self._interval:
            self._emit_progress(now)

    def entry_skipped(self, record: ManifestRecord) -> None:
        """Report a skipped record on the side channel."""
        message = _skip_message(record)
        if self._enabled:
            self._write_event(
                {"type": "warning", "tool": TOOL_NAME, "path": record.path, "message": message}
            )
        else:
            self._stream.write(f"{TOOL_NAME}: skipped {record.path}: {message}\n")
            self._stream.flush()

    def finish(self) -> None:
        """Emit the final progress event (progress mode only)."""
        if self._enabled:
            self._emit_progress(self._clock())

    def _emit_progress(self, now: float) -> None:
        elapsed_ms = max(0, int((now - self._started) * 1000))
        self._write_event(
            {
                "type": "progress",
                "tool": TOOL_NAME,
                "processed": self.processed,
                "total": None,
                "elapsed_ms": elapsed_ms,
            }
        )
        self._last_emit = now

    def _write_event(self, event: dict[str, Any]) -> None:
        self._stream.write(json.dumps(event, separators=(",", ":")) + "\n")
        self._stream.flush()


def _skip_message(record: ManifestRecord) -> str:
    """Flatten a record's warnings into one human-readable message."""
    parts: list[str] = []
    for warning in record.warnings:
        error = warning.detail.get("error")
        parts.append(f"{warning.message}: {error}" if error else warning.message)
    return "; ".join(parts)
