"""Exceptions raised by the deletion core."""

from pathlib import Path


class RmpError(Exception):
    """Base exception for rmp errors."""


class PathRejectedError(RmpError):
    """Raised when a root argument fails pre-flight validation.

    Attributes:
        path: The argument exactly as given.
        reason: Why it was rejected.
    """

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"'{self.path}': {reason}")


class WalkError(RmpError):
    """A failure tied to a single path during the walk.

    Attributes:
        path: Path the failure relates to.
        cause: Human-readable cause.
    """

    def __init__(self, path: Path, cause: str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"'{path}': {cause}")


class PipelineClosedError(WalkError):
    """Raised when the consumer has stopped and an event cannot be delivered."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, "pipeline closed")


class PromptInputError(WalkError):
    """Raised when no operator answer can be read (e.g. end of input)."""

