"""Recursive deletion core.

This module provides root-argument validation, the post-order directory
walker, interactive confirmation, and the producer/consumer pipeline that
removes what the walker discovers.
"""

from rmp.deletion.confirm import ConfirmationEngine, Prompter
from rmp.deletion.errors import (
    PathRejectedError,
    PipelineClosedError,
    PromptInputError,
    RmpError,
    WalkError,
)
from rmp.deletion.models import (
    DeleteEvent,
    Directive,
    DirectoryEvent,
    ErrorEvent,
    FileEvent,
    ProgressCounters,
    ProgressUpdate,
    RunSummary,
    Stats,
    WalkOutcome,
)
from rmp.deletion.pipeline import DeletionPipeline, progress_message
from rmp.deletion.validator import PathValidator
from rmp.deletion.walker import DirectoryWalker

__all__ = [
    "ConfirmationEngine",
    "DeleteEvent",
    "DeletionPipeline",
    "Directive",
    "DirectoryEvent",
    "DirectoryWalker",
    "ErrorEvent",
    "FileEvent",
    "PathRejectedError",
    "PathValidator",
    "PipelineClosedError",
    "ProgressCounters",
    "ProgressUpdate",
    "PromptInputError",
    "Prompter",
    "RmpError",
    "RunSummary",
    "Stats",
    "WalkError",
    "WalkOutcome",
    "progress_message",
]
