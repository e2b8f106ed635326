"""Static extension to MIME lookup.

The table is immutable and the lookup never touches the filesystem, so a
MIME guess can be derived for records whose metadata could not be read.
"""

from collections.abc import Mapping
from types import MappingProxyType

MIME_BY_EXTENSION: Mapping[str, str] = MappingProxyType(
    {
        ".csv": "text/csv",
        ".tsv": "text/tab-separated-values",
        ".txt": "text/plain",
        ".json": "application/json",
        ".jsonl": "application/x-jsonlines",
        ".xml": "application/xml",
        ".pdf": "application/pdf",
        ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ".xls": "application/vnd.ms-excel",
        ".parquet": "application/vnd.apache.parquet",
        ".zip": "application/zip",
        ".gz": "application/gzip",
        ".yaml": "application/x-yaml",
        ".yml": "application/x-yaml",
    }
)


def guess_mime(extension: str | None) -> str | None:
    """Guess a MIME type from a filename extension.

    Args:
        extension: Extension including the leading dot (any case), or None.

    Returns:
        The MIME string, or None for a missing or unknown extension.
    """
    if not extension:
        return None
    return MIME_BY_EXTENSION.get(extension.lower())
