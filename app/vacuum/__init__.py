"""vacuum - deterministic JSONL manifests of files under one or more roots."""

__version__ = "0.1.0"

TOOL_NAME = "vacuum"

# Schema tag carried on every manifest record and refusal envelope
SCHEMA_VERSION = "vacuum.v0"
