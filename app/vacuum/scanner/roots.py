"""Scan root validation.

Roots are checked in the order given and validation stops at the first
bad root, so a refusal always names exactly one root.
"""

import os
import stat
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from vacuum.scanner.models import ScanRoot


class RootFailureReason(str, Enum):
    """Why a root was rejected.

    Attributes:
        MISSING: No roots were supplied at all.
        NOT_FOUND: The root path does not exist.
        PERMISSION: The root exists but cannot be read.
        NOT_A_DIRECTORY: The root exists but is not a directory.
        IO: Any other OS error while checking the root.
    """

    MISSING = "missing"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    NOT_A_DIRECTORY = "not_a_directory"
    IO = "io"


@dataclass(frozen=True, slots=True)
class RootFailure:
    """First root that failed validation.

    Attributes:
        root: Native string of the offending root ("" when none were given).
        reason: Classification of the failure.
        error: OS error text, if one occurred.
    """

    root: str
    reason: RootFailureReason
    error: str | None = None

    @property
    def detail(self) -> dict[str, Any]:
        """Structured detail for the refusal envelope."""
        result: dict[str, Any] = {"root": self.root}
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True, slots=True)
class RootValidation:
    """Outcome of validating all requested roots."""

    roots: tuple[ScanRoot, ...] = field(default_factory=tuple)
    failure: RootFailure | None = None

    @property
    def ok(self) -> bool:
        """True when every root passed."""
        return self.failure is None


def absolute_root(path: str | os.PathLike[str], cwd: Path | None = None) -> Path:
    """Join a possibly relative root against the working directory.

    Symlinks and ``..`` components are left untouched.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return (cwd if cwd is not None else Path.cwd()) / candidate


def validate_roots(
    requested: Sequence[str | os.PathLike[str]], cwd: Path | None = None
) -> RootValidation:
    """Validate requested roots in order, stopping at the first failure.

    Args:
        requested: Root paths as given by the caller.
        cwd: Directory used to absolutize relative roots (default: cwd).

    Returns:
        RootValidation with every root on success, or the first failure.
    """
    if not requested:
        return RootValidation(failure=RootFailure(root="", reason=RootFailureReason.MISSING))

    roots: list[ScanRoot] = []
    for raw in requested:
        root = ScanRoot.from_path(absolute_root(raw, cwd))
        failure = check_root(root)
        if failure is not None:
            return RootValidation(failure=failure)
        roots.append(root)

    return RootValidation(roots=tuple(roots))


def check_root(root: ScanRoot) -> RootFailure | None:
    """Check that a root exists, is a directory and can be listed."""
    try:
        st_root = os.stat(root.path)
    except FileNotFoundError:
        return RootFailure(root=root.display, reason=RootFailureReason.NOT_FOUND)
    except PermissionError as e:
        return RootFailure(root=root.display, reason=RootFailureReason.PERMISSION, error=str(e))
    except OSError as e:
        return RootFailure(root=root.display, reason=RootFailureReason.IO, error=str(e))

    if not stat.S_ISDIR(st_root.st_mode):
        return RootFailure(
            root=root.display,
            reason=RootFailureReason.NOT_A_DIRECTORY,
            error="not a directory",
        )

    try:
        with os.scandir(root.path) as it:
            next(it, None)
    except PermissionError as e:
        return RootFailure(root=root.display, reason=RootFailureReason.PERMISSION, error=str(e))
    except OSError as e:
        return RootFailure(root=root.display, reason=RootFailureReason.IO, error=str(e))

    return None