"""rmp - recursive deletion with live progress and interactive confirmation."""

__version__ = "0.1.0"
