"""CLI commands for vacuum.

This package contains the scan command and the sub-command groups.
"""

from vacuum.cli.commands import config, scan, witness

__all__ = ["config", "scan", "witness"]
