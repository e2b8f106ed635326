"""Scanner domain models.

This module defines the data structures produced while walking scan roots:
the validated roots themselves, the per-entry metadata resolution result,
and the manifest record that is finally emitted for every discovered file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vacuum import SCHEMA_VERSION, TOOL_NAME, __version__

WARNING_CODE_IO = "E_IO"


def default_tool_versions() -> dict[str, str]:
    """Tool version mapping stamped on every record."""
    return {TOOL_NAME: __version__}


@dataclass(frozen=True, slots=True)
class ScanRoot:
    """A validated scan root.

    Attributes:
        path: Absolute directory path.
        display: Native-form string of ``path`` used as the record ``root``.
    """

    path: Path
    display: str

    @classmethod
    def from_path(cls, path: Path) -> ScanRoot:
        """Create a ScanRoot from an already absolute path."""
        return cls(path=path, display=os.fsencode(path).decode("utf-8", errors="replace"))


@dataclass(frozen=True, slots=True)
class ScanWarning:
    """Diagnostic attached to a skipped record.

    Attributes:
        code: Machine-readable warning code (always ``E_IO`` today).
        message: Human-readable summary.
        detail: Structured context, e.g. ``{"error": "<os error text>"}``.
        tool: Tool that produced the warning.
    """

    code: str
    message: str
    detail: dict[str, Any] = field(default_factory=lambda: {})
    tool: str = TOOL_NAME

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "tool": self.tool,
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }


@dataclass(frozen=True, slots=True)
class Resolved:
    """Metadata that was read successfully."""

    size: int
    mtime: str


@dataclass(frozen=True, slots=True)
class Failed:
    """Metadata that could not be read."""

    warning: ScanWarning


EntryResolution = Resolved | Failed


@dataclass(frozen=True, slots=True)
class ManifestRecord:
    """One discovered filesystem entry.

    A record is either resolved (``size`` and ``mtime`` set, no warnings)
    or skipped (``size`` and ``mtime`` None, at least one warning).
    ``extension`` and ``mime_guess`` are derived from the filename alone and
    may be present on both.

    Attributes:
        path: Canonical path when following symlinks, traversed path otherwise.
        relative_path: Path below ``root`` using forward slashes.
        root: Native-form absolute root this entry was found under.
        size: Size in bytes, None when skipped.
        mtime: RFC 3339 UTC modification time, None when skipped.
        extension: Filename suffix including the dot, None if absent.
        mime_guess: MIME type derived from ``extension``, None if unknown.
        warnings: Diagnostics explaining why the record was skipped.
        tool_versions: Tool name to version mapping.
        version: Schema tag.
    """

    path: str
    relative_path: str
    root: str
    size: int | None
    mtime: str | None
    extension: str | None
    mime_guess: str | None
    warnings: tuple[ScanWarning, ...] = ()
    tool_versions: dict[str, str] = field(default_factory=default_tool_versions)
    version: str = SCHEMA_VERSION

    def __post_init__(self) -> None:
        """Validate the resolved/skipped invariant."""
        if self.warnings and (self.size is not None or self.mtime is not None):
            msg = "Skipped records cannot carry size or mtime"
            raise ValueError(msg)
        if not self.warnings and (self.size is None or self.mtime is None):
            msg = "Resolved records require size and mtime"
            raise ValueError(msg)

    @property
    def skipped(self) -> bool:
        """Whether metadata resolution failed for this entry."""
        return bool(self.warnings)

    @property
    def sort_key(self) -> tuple[bytes, bytes]:
        """Byte-wise ordering key: relative path first, root as tie-break."""
        return (
            self.relative_path.encode("utf-8", errors="surrogatepass"),
            self.root.encode("utf-8", errors="surrogatepass"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSONL output.

        ``_skipped`` and ``_warnings`` are only present on skipped records.
        """
        result: dict[str, Any] = {
            "version": self.version,
            "path": self.path,
            "relative_path": self.relative_path,
            "root": self.root,
            "size": self.size,
            "mtime": self.mtime,
            "extension": self.extension,
            "mime_guess": self.mime_guess,
            "tool_versions": dict(sorted(self.tool_versions.items())),
        }
        if self.skipped:
            result["_skipped"] = True
            result["_warnings"] = [w.to_dict() for w in self.warnings]
        return result
