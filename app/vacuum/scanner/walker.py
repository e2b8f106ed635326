"""Recursive traversal of scan roots.

Walks each root depth-first and builds one manifest record per
non-directory entry. Errors at individual entries never abort the walk;
they become skipped records instead.
"""

import logging
import os
from collections.abc import Iterator, Sequence
from pathlib import Path

from vacuum.scanner.builder import (
    LISTING_ERROR_MESSAGE,
    build_failed_record,
    build_record,
    io_warning,
)
from vacuum.scanner.models import ManifestRecord, ScanRoot
from vacuum.scanner.progress import ProgressReporter

logger = logging.getLogger(__name__)

# (st_dev, st_ino) of a directory
DirIdentity = tuple[int, int]


class Walker:
    """Depth-first walker over validated scan roots.

    Args:
        follow_symlinks: Descend into symlinked directories and report
            symlinked files with their target's metadata when True. When
            False, symlinks are reported as entries with their own metadata.
        reporter: Optional progress reporter fed after every entry.
    """

    def __init__(
        self,
        *,
        follow_symlinks: bool = True,
        reporter: ProgressReporter | None = None,
    ) -> None:
        self._follow = follow_symlinks
        self._reporter = reporter

    def walk(self, roots: Sequence[ScanRoot]) -> list[ManifestRecord]:
        """Walk all roots and collect their records (unordered).

        Args:
            roots: Validated roots, traversed independently.

        Returns:
            Records for every non-directory entry, including skipped ones.
        """
        records: list[ManifestRecord] = []
        for root in roots:
            for record in self.walk_root(root):
                records.append(record)
                self._report(record)

        if self._reporter is not None:
            self._reporter.finish()
        return records

    def walk_root(self, root: ScanRoot) -> Iterator[ManifestRecord]:
        """Yield records for every non-directory entry below one root.

        Uses an explicit stack instead of recursion. Each stack frame carries
        the identities of its ancestor directories so that a symlink leading
        back into an ancestor is not re-entered.
        """
        root_identity = self._identity_of_path(root.path)
        ancestors: frozenset[DirIdentity] = (
            frozenset({root_identity}) if root_identity is not None else frozenset()
        )
        stack: list[tuple[Path, frozenset[DirIdentity]]] = [(root.path, ancestors)]

        while stack:
            directory, ancestors = stack.pop()
            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                logger.debug("Cannot list %s: %s", directory, e)
                yield build_failed_record(root, directory, io_warning(LISTING_ERROR_MESSAGE, e))
                continue

            subdirs: list[tuple[Path, frozenset[DirIdentity]]] = []
            for entry in entries:
                path = Path(entry.path)
                if not self._is_directory(entry):
                    yield build_record(root, path, self._follow)
                    continue

                identity = self._identity_of_entry(entry)
                if identity is None:
                    # Directory that cannot be stat'ed: let the builder report it
                    yield build_record(root, path, self._follow)
                    continue
                if identity in ancestors:
                    logger.debug("Not re-entering %s: symlink cycle", path)
                    continue
                subdirs.append((path, ancestors | {identity}))

            # Reversed so that the first subdirectory is visited first
            stack.extend(reversed(subdirs))

    def _report(self, record: ManifestRecord) -> None:
        if self._reporter is None:
            return
        if record.skipped:
            self._reporter.entry_skipped(record)
        self._reporter.entry_processed()

    def _is_directory(self, entry: os.DirEntry[str]) -> bool:
        try:
            return entry.is_dir(follow_symlinks=self._follow)
        except OSError as e:
            logger.debug("Cannot determine type of %s: %s", entry.path, e)
            return False

    def _identity_of_entry(self, entry: os.DirEntry[str]) -> DirIdentity | None:
        try:
            st = entry.stat(follow_symlinks=self._follow)
        except OSError as e:
            logger.debug("Cannot stat directory %s: %s", entry.path, e)
            return None
        return (st.st_dev, st.st_ino)

    @staticmethod
    def _identity_of_path(path: Path) -> DirIdentity | None:
        try:
            st = os.stat(path)
        except OSError as e:
            logger.debug("Cannot stat root %s: %s", path, e)
            return None
        return (st.st_dev, st.st_ino)


def scan_roots(
    roots: Sequence[ScanRoot],
    follow_symlinks: bool = True,
    reporter: ProgressReporter | None = None,
) -> list[ManifestRecord]:
    """Convenience wrapper: walk ``roots`` with a fresh Walker."""
    return Walker(follow_symlinks=follow_symlinks, reporter=reporter).walk(roots)
