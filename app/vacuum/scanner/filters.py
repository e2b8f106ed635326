"""Include/exclude glob filtering of manifest records.

Patterns use a literal-separator glob dialect matched against the record's
forward-slash relative path:

- ``*`` matches within a single path segment (never crosses ``/``)
- ``**`` as a whole segment matches zero or more segments; a trailing
  ``/**`` matches everything below a directory but not the directory itself
- ``?`` matches exactly one character
- ``[...]`` matches a character class; ``[!...]`` and ``[^...]`` negate it
- ``{a,b}`` matches any of the comma-separated alternatives
- ``\\`` escapes the next character, so ``\\*`` matches a literal ``*``

Matching is case-sensitive. Individual segments are matched with fnmatch.
"""

import fnmatch
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from vacuum.scanner.builder import normalize_separators
from vacuum.scanner.models import ManifestRecord

logger = logging.getLogger(__name__)

RECURSIVE = "**"
ESCAPE = "\\"

# Characters fnmatch treats as syntax; an escaped one is wrapped in a class
_FNMATCH_SPECIAL = frozenset("*?[")

Segments = tuple[re.Pattern[str] | None, ...]


class GlobPatternError(ValueError):
    """Raised when a glob pattern cannot be compiled."""


def _segments_match(segs: Segments, parts: list[str]) -> bool:
    n, m = len(segs), len(parts)

    # table[i][j]: segs[i:] matches parts[j:]
    table = [[False] * (m + 1) for _ in range(n + 1)]
    table[n][m] = True
    for i in range(n - 1, -1, -1):
        seg = segs[i]
        for j in range(m, -1, -1):
            if seg is None:
                if i == n - 1 and n > 1:
                    table[i][j] = j < m
                else:
                    table[i][j] = table[i + 1][j] or (j < m and table[i][j + 1])
            else:
                table[i][j] = j < m and seg.match(parts[j]) is not None and table[i + 1][j + 1]
    return table[0][0]


@dataclass(frozen=True, slots=True)
class GlobPattern:
    """A compiled glob pattern.

    Attributes:
        pattern: Source pattern text.
        alternatives: One segment list per brace expansion. Each segment is
            a compiled regex; None stands for ``**``.
    """

    pattern: str
    alternatives: tuple[Segments, ...]

    def matches(self, path: str) -> bool:
        """Check whether a relative path matches this pattern."""
        parts = normalize_separators(path).split("/")
        return any(_segments_match(segs, parts) for segs in self.alternatives)


def compile_glob(pattern: str) -> GlobPattern:
    """Compile a glob pattern.

    Args:
        pattern: Glob using ``/`` as separator.

    Returns:
        Compiled GlobPattern.

    Raises:
        GlobPatternError: If the pattern is empty, has an unclosed or
            reversed character class, an unbalanced or nested ``{}``
            group, a dangling ``\\``, or uses ``**`` inside a segment.
    """
    if not pattern:
        msg = "Empty glob pattern"
        raise GlobPatternError(msg)

    alternatives = tuple(
        _compile_alternative(expanded, pattern) for expanded in _expand_braces(pattern)
    )
    return GlobPattern(pattern=pattern, alternatives=alternatives)


def _compile_alternative(text: str, pattern: str) -> Segments:
    segments: list[re.Pattern[str] | None] = []
    for seg in text.split("/"):
        if seg == RECURSIVE:
            # Consecutive ** collapse into one
            if not segments or segments[-1] is not None:
                segments.append(None)
            continue
        translated = _to_fnmatch(seg, pattern)
        if RECURSIVE in translated:
            msg = f"Invalid use of '**' in {pattern!r}: must be a whole path segment"
            raise GlobPatternError(msg)
        _check_classes(translated, pattern)
        segments.append(re.compile(fnmatch.translate(translated)))
    return tuple(segments)


def _class_end(text: str, start: int) -> int:
    """Index of the ``]`` closing the class opened at ``start``, or -1."""
    j = start + 1
    if j < len(text) and text[j] in "!^":
        j += 1
    # A ']' right after the opening bracket is a literal member
    if j < len(text) and text[j] == "]":
        j += 1
    return text.find("]", j)


def _expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` groups into separate patterns.

    Escapes and character classes are left in place for the segment
    translation step.
    """
    expanded = [""]
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == ESCAPE:
            chunk = pattern[i : i + 2]
            i += 2
        elif c == "[":
            close = _class_end(pattern, i)
            # Unclosed classes are reported once the segment is checked
            end = len(pattern) if close == -1 else close + 1
            chunk = pattern[i:end]
            i = end
        elif c == "{":
            close, options = _split_group(pattern, i)
            expanded = [prefix + option for prefix in expanded for option in options]
            i = close + 1
            continue
        elif c == "}":
            msg = f"Unmatched '}}' in {pattern!r}"
            raise GlobPatternError(msg)
        else:
            chunk = c
            i += 1
        expanded = [prefix + chunk for prefix in expanded]
    return expanded


def _split_group(pattern: str, start: int) -> tuple[int, list[str]]:
    """Split the group opened at ``start`` on its commas."""
    options: list[str] = []
    current = ""
    i = start + 1
    while i < len(pattern):
        c = pattern[i]
        if c == ESCAPE:
            current += pattern[i : i + 2]
            i += 2
            continue
        if c == "[":
            close = _class_end(pattern, i)
            end = len(pattern) if close == -1 else close + 1
            current += pattern[i:end]
            i = end
            continue
        if c == "{":
            msg = f"Nested '{{' groups are not supported in {pattern!r}"
            raise GlobPatternError(msg)
        if c == "}":
            options.append(current)
            return i, options
        if c == ",":
            options.append(current)
            current = ""
        else:
            current += c
        i += 1
    msg = f"Unclosed '{{' group in {pattern!r}"
    raise GlobPatternError(msg)


def _to_fnmatch(segment: str, pattern: str) -> str:
    """Rewrite one segment into plain fnmatch syntax.

    Backslash escapes become literals and ``[^...]`` becomes ``[!...]``.
    """
    out: list[str] = []
    i = 0
    while i < len(segment):
        c = segment[i]
        if c == ESCAPE:
            if i + 1 == len(segment):
                msg = f"Dangling escape in {pattern!r}"
                raise GlobPatternError(msg)
            literal = segment[i + 1]
            out.append(f"[{literal}]" if literal in _FNMATCH_SPECIAL else literal)
            i += 2
        elif c == "[":
            close = _class_end(segment, i)
            if close == -1:
                # Left as-is so the class check reports it
                out.append(segment[i:])
                break
            body = segment[i + 1 : close]
            if body.startswith("^"):
                body = "!" + body[1:]
            out.append(f"[{body}]")
            i = close + 1
        else:
            out.append(c)
            i += 1
    return "".join(out)


def _check_classes(segment: str, pattern: str) -> None:
    """Reject unclosed ``[`` classes and reversed ranges like ``[z-a]``."""
    i = 0
    while i < len(segment):
        if segment[i] != "[":
            i += 1
            continue

        close = _class_end(segment, i)
        if close == -1:
            msg = f"Unclosed character class in {pattern!r}"
            raise GlobPatternError(msg)

        body = segment[i + 1 : close].lstrip("!")
        for k in range(1, len(body) - 1):
            if body[k] == "-" and body[k - 1] > body[k + 1]:
                msg = f"Invalid character range {body[k - 1]}-{body[k + 1]} in {pattern!r}"
                raise GlobPatternError(msg)
        i = close + 1


def compile_patterns(patterns: Iterable[str]) -> tuple[GlobPattern, ...]:
    """Compile patterns, dropping (and logging) the ones that are invalid."""
    compiled: list[GlobPattern] = []
    for pattern in patterns:
        try:
            compiled.append(compile_glob(pattern))
        except GlobPatternError as e:
            logger.debug("Ignoring glob pattern: %s", e)
    return tuple(compiled)


class RecordFilter:
    """Selects records by their relative path.

    A record passes when it matches at least one include pattern (or the
    include list is empty) and matches no exclude pattern. If include
    patterns were given but none of them compiled, nothing passes.

    Args:
        include: Include patterns (OR semantics).
        exclude: Exclude patterns; always override an include match.
    """

    def __init__(self, include: Sequence[str] = (), exclude: Sequence[str] = ()) -> None:
        self._include_requested = bool(include)
        self._include = compile_patterns(include)
        self._exclude = compile_patterns(exclude)

    def matches(self, relative_path: str) -> bool:
        """Check a single relative path against both pattern lists."""
        candidate = normalize_separators(relative_path)

        if self._include_requested and not any(p.matches(candidate) for p in self._include):
            return False

        return not any(p.matches(candidate) for p in self._exclude)

    def apply(self, records: Iterable[ManifestRecord]) -> list[ManifestRecord]:
        """Return the records that pass the filter, in input order."""
        return [r for r in records if self.matches(r.relative_path)]


def apply_filters(
    records: Iterable[ManifestRecord],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> list[ManifestRecord]:
    """Filter records with include/exclude glob lists."""
    return RecordFilter(include, exclude).apply(records)
