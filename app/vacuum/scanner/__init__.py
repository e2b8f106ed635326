"""Filesystem scanning: root validation, traversal, record building and filtering."""

from vacuum.scanner.builder import build_record, format_mtime
from vacuum.scanner.filters import GlobPatternError, RecordFilter, apply_filters, compile_glob
from vacuum.scanner.mime import guess_mime
from vacuum.scanner.models import (
    Failed,
    ManifestRecord,
    Resolved,
    ScanRoot,
    ScanWarning,
)
from vacuum.scanner.progress import ProgressReporter
from vacuum.scanner.roots import RootFailure, RootFailureReason, validate_roots
from vacuum.scanner.walker import Walker, scan_roots

__all__ = [
    "Failed",
    "GlobPatternError",
    "ManifestRecord",
    "ProgressReporter",
    "RecordFilter",
    "Resolved",
    "RootFailure",
    "RootFailureReason",
    "ScanRoot",
    "ScanWarning",
    "Walker",
    "apply_filters",
    "build_record",
    "compile_glob",
    "format_mtime",
    "guess_mime",
    "scan_roots",
    "validate_roots",
]
