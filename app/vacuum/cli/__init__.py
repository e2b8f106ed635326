"""CLI package for vacuum.

This package contains the Typer applications and the argument router.
"""

from vacuum.cli.main import app, main

__all__ = ["app", "main"]
