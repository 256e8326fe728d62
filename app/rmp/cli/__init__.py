"""CLI package for rmp.

This package contains the Typer application and its live display.
"""

from rmp.cli.main import app

__all__ = ["app"]
