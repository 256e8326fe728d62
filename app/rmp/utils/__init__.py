"""Utility modules for rmp.

This module exports commonly used utility functions.
"""

from rmp.utils.formatting import (
    err_console,
    format_size,
    print_error,
    print_info,
    print_warning,
)

__all__ = [
    "err_console",
    "format_size",
    "print_error",
    "print_info",
    "print_warning",
]
