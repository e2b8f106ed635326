"""The scan pipeline.

Runs validate -> walk -> filter -> sort -> emit for one invocation and
tracks its state:

    IDLE -> VALIDATING -> REFUSED
                       -> WALKING -> FILTERING -> SORTING -> EMITTING -> DONE

Exactly one terminal state (REFUSED or DONE) is reached per run.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TextIO

from vacuum.output.manifest import emit_records, sort_records
from vacuum.output.refusal import Refusal, encode_refusal, refusal_from_root_failure
from vacuum.scanner.filters import RecordFilter
from vacuum.scanner.models import ManifestRecord, ScanRoot
from vacuum.scanner.progress import DEFAULT_BATCH, DEFAULT_INTERVAL_MS, ProgressReporter
from vacuum.scanner.roots import absolute_root, validate_roots
from vacuum.scanner.walker import Walker
from vacuum.witness.models import Outcome, compute_input_hash

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Lifecycle states of a scan invocation."""

    IDLE = "idle"
    VALIDATING = "validating"
    REFUSED = "refused"
    WALKING = "walking"
    FILTERING = "filtering"
    SORTING = "sorting"
    EMITTING = "emitting"
    DONE = "done"


TERMINAL_STATES = frozenset({PipelineState.REFUSED, PipelineState.DONE})


@dataclass(frozen=True, slots=True)
class ScanRequest:
    """Everything a scan needs to know, resolved before it starts.

    Attributes:
        roots: Requested roots, possibly relative.
        include: Include glob patterns.
        exclude: Exclude glob patterns.
        follow_symlinks: Symlink policy.
        progress: Emit structured progress events.
        progress_interval_ms: Minimum time between progress events.
        progress_batch: Progress event every N entries.
    """

    roots: tuple[str, ...]
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    follow_symlinks: bool = True
    progress: bool = False
    progress_interval_ms: int = DEFAULT_INTERVAL_MS
    progress_batch: int = DEFAULT_BATCH


@dataclass(slots=True)
class ScanResult:
    """What a pipeline run produced.

    Attributes:
        outcome: SCAN_COMPLETE or REFUSAL.
        input_hash: Fingerprint of the request.
        records: Emitted records in output order (empty on refusal).
        refusal: The refusal, if the scan could not start.
        emitted: Number of manifest lines actually written.
    """

    outcome: Outcome
    input_hash: str
    records: list[ManifestRecord] = field(default_factory=list)
    refusal: Refusal | None = None
    emitted: int = 0

    @property
    def exit_code(self) -> int:
        """Process exit code for this result."""
        return self.outcome.exit_code


class ScanPipeline:
    """One-shot scan pipeline.

    Args:
        request: Scan parameters.
        stdout: Manifest (or refusal) stream.
        stderr: Side channel for progress and skip warnings.
        clock: Monotonic clock for the progress reporter.
        cwd: Directory relative roots are resolved against.
    """

    def __init__(
        self,
        request: ScanRequest,
        *,
        stdout: TextIO,
        stderr: TextIO,
        clock: Callable[[], float] = time.monotonic,
        cwd: Path | None = None,
    ) -> None:
        self._request = request
        self._stdout = stdout
        self._stderr = stderr
        self._clock = clock
        self._cwd = cwd
        self.state = PipelineState.IDLE

    def run(self) -> ScanResult:
        """Run the pipeline to its terminal state.

        Raises:
            RuntimeError: If the pipeline has already been run.
        """
        if self.state is not PipelineState.IDLE:
            msg = f"Pipeline already ran (state: {self.state.value})"
            raise RuntimeError(msg)

        request = self._request
        input_hash = self._input_hash()

        self.state = PipelineState.VALIDATING
        validation = validate_roots(request.roots, self._cwd)
        if validation.failure is not None:
            refusal = refusal_from_root_failure(validation.failure)
            self._stdout.write(encode_refusal(refusal) + "\n")
            self._stdout.flush()
            self.state = PipelineState.REFUSED
            logger.debug("Refused: %s %s", refusal.code.value, refusal.detail)
            return ScanResult(outcome=Outcome.REFUSAL, input_hash=input_hash, refusal=refusal)

        self.state = PipelineState.WALKING
        reporter = ProgressReporter(
            self._stderr,
            enabled=request.progress,
            clock=self._clock,
            interval_ms=request.progress_interval_ms,
            batch=request.progress_batch,
        )
        walker = Walker(follow_symlinks=request.follow_symlinks, reporter=reporter)
        records = walker.walk(validation.roots)

        self.state = PipelineState.FILTERING
        records = RecordFilter(request.include, request.exclude).apply(records)

        self.state = PipelineState.SORTING
        records = sort_records(records)

        self.state = PipelineState.EMITTING
        emitted = emit_records(records, self._stdout)

        self.state = PipelineState.DONE
        logger.debug("Scan complete: %d records, %d emitted", len(records), emitted)
        return ScanResult(
            outcome=Outcome.SCAN_COMPLETE,
            input_hash=input_hash,
            records=records,
            emitted=emitted,
        )

    def _input_hash(self) -> str:
        request = self._request
        roots = [ScanRoot.from_path(absolute_root(r, self._cwd)).display for r in request.roots]
        return compute_input_hash(
            roots, request.include, request.exclude, request.follow_symlinks
        )
