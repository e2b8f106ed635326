"""Manifest record construction.

Turns one traversed filesystem entry into exactly one ManifestRecord.
Metadata is resolved into a tagged result so that a failing ``stat`` still
produces a (skipped) record instead of an exception.
"""

import logging
import os
from datetime import UTC, datetime
from pathlib import Path, PurePath

from vacuum.scanner.mime import guess_mime
from vacuum.scanner.models import (
    WARNING_CODE_IO,
    EntryResolution,
    Failed,
    ManifestRecord,
    Resolved,
    ScanRoot,
    ScanWarning,
)

logger = logging.getLogger(__name__)

METADATA_ERROR_MESSAGE = "Failed to read file metadata"
LISTING_ERROR_MESSAGE = "Failed to read directory entries"


def display_path(path: str | os.PathLike[str]) -> str:
    """Render a path as valid UTF-8 text.

    Bytes that are not valid UTF-8 are replaced with U+FFFD so that every
    emitted string can be encoded.
    """
    return os.fsencode(path).decode("utf-8", errors="replace")


def normalize_separators(path: str) -> str:
    """Replace backslashes with forward slashes."""
    return path.replace("\\", "/")


def relative_to_root(entry: Path, root: Path) -> str:
    """Compute the forward-slash path of ``entry`` below ``root``.

    Falls back to the full normalized entry path if ``entry`` does not
    live under ``root``.
    """
    try:
        relative = entry.relative_to(root)
    except ValueError:
        logger.debug("Entry %s is not below root %s", entry, root)
        return normalize_separators(display_path(entry))
    return normalize_separators(display_path(relative))


def extension_of(name: str) -> str | None:
    """Return the filename suffix including its dot, or None.

    Leading-dot names without another dot (``.bashrc``) have no extension.
    """
    suffix = PurePath(name).suffix
    return suffix or None


def format_mtime(mtime_ns: int) -> str:
    """Format a nanosecond timestamp as RFC 3339 UTC with milliseconds."""
    millis = mtime_ns // 1_000_000
    seconds, remainder = divmod(millis, 1000)
    dt = datetime.fromtimestamp(seconds, tz=UTC).replace(microsecond=remainder * 1000)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{remainder:03d}Z"


def io_warning(message: str, error: Exception) -> ScanWarning:
    """Build an ``E_IO`` warning carrying the error text."""
    return ScanWarning(code=WARNING_CODE_IO, message=message, detail={"error": str(error)})


def resolve_metadata(path: Path, follow_symlinks: bool) -> EntryResolution:
    """Stat an entry according to the symlink policy.

    Args:
        path: Entry to stat.
        follow_symlinks: Use ``stat`` (target metadata) when True,
            ``lstat`` (link metadata) when False.

    Returns:
        Resolved with size and mtime, or Failed with an ``E_IO`` warning.
    """
    try:
        st = os.stat(path, follow_symlinks=follow_symlinks)
    except OSError as e:
        logger.debug("Cannot stat %s: %s", path, e)
        return Failed(io_warning(METADATA_ERROR_MESSAGE, e))

    try:
        mtime = format_mtime(st.st_mtime_ns)
    except (ValueError, OverflowError, OSError) as e:
        # Timestamps outside years 1-9999 cannot be represented
        logger.debug("Cannot format mtime of %s: %s", path, e)
        return Failed(io_warning(METADATA_ERROR_MESSAGE, e))
    return Resolved(size=st.st_size, mtime=mtime)


def build_record(root: ScanRoot, entry: Path, follow_symlinks: bool) -> ManifestRecord:
    """Build the manifest record for one traversed entry.

    Args:
        root: Root the entry was discovered under.
        entry: Traversed (absolute) path of the entry.
        follow_symlinks: Symlink policy of the scan.

    Returns:
        A resolved record, or a skipped record if metadata could not be read.
    """
    resolution = resolve_metadata(entry, follow_symlinks)
    if isinstance(resolution, Failed):
        return _record(root, entry, display_path(entry), None, resolution.warning)

    path = display_path(os.path.realpath(entry)) if follow_symlinks else display_path(entry)
    return _record(root, entry, path, resolution, None)


def build_failed_record(root: ScanRoot, entry: Path, warning: ScanWarning) -> ManifestRecord:
    """Build a skipped record for an entry that failed before ``stat``.

    Used for directories whose contents could not be listed.
    """
    return _record(root, entry, display_path(entry), None, warning)


def _record(
    root: ScanRoot,
    entry: Path,
    path: str,
    resolved: Resolved | None,
    warning: ScanWarning | None,
) -> ManifestRecord:
    extension = extension_of(display_path(entry.name))
    return ManifestRecord(
        path=path,
        relative_path=relative_to_root(entry, root.path),
        root=root.display,
        size=resolved.size if resolved else None,
        mtime=resolved.mtime if resolved else None,
        extension=extension,
        mime_guess=guess_mime(extension),
        warnings=(warning,) if warning else (),
    )
