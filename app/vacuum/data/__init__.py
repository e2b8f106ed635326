"""Bundled contract documents (operator manifest and record schema)."""
