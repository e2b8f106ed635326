"""Bundled contract documents printed by ``--describe`` and ``--schema``."""

import json
from importlib import resources
from typing import Any

from vacuum import __version__


def _load(name: str) -> dict[str, Any]:
    text = resources.files("vacuum.data").joinpath(name).read_text(encoding="utf-8")
    data: dict[str, Any] = json.loads(text)
    return data


def operator_manifest() -> dict[str, Any]:
    """Operator manifest describing the tool, its exit codes and pipeline."""
    manifest = _load("operator.json")
    manifest["version"] = __version__
    return manifest


def record_schema() -> dict[str, Any]:
    """JSON Schema of a single manifest record."""
    return _load("schema.json")


def render(document: dict[str, Any]) -> str:
    """Render a contract document as one JSON line."""
    return json.dumps(document, separators=(",", ":"))
