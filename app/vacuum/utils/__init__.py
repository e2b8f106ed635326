"""Utility modules for vacuum.

This module exports commonly used utility functions.
"""

from vacuum.utils.formatting import (
    configure_logging,
    console,
    create_witness_table,
    err_console,
    format_outcome,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "configure_logging",
    "console",
    "create_witness_table",
    "err_console",
    "format_outcome",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
