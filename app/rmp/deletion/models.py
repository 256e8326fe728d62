"""Deletion domain models.

This module defines the data passed between the directory walker and the
deletion consumer: the queued delete events, the byte/file/directory
aggregates, the shared discovery counters, and the confirmation state
variants remembered by the interactive engine.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# =============================================================================
# Queue events
# =============================================================================


@dataclass(frozen=True, slots=True)
class FileEvent:
    """A non-directory (regular file, symlink, fifo, ...) ready for removal.

    Attributes:
        path: Path to unlink.
        size_bytes: Size from the item's own metadata (never a symlink target).
    """

    path: Path
    size_bytes: int


@dataclass(frozen=True, slots=True)
class DirectoryEvent:
    """A directory whose entire contents have already been queued.

    Attributes:
        path: Directory to remove once it is empty.
    """

    path: Path


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    """A per-item failure discovered during the walk.

    Attributes:
        path: Path the failure relates to.
        cause: Human-readable cause (e.g. ``"cannot stat: Permission denied"``).
    """

    path: Path
    cause: str

    def __str__(self) -> str:
        return f"'{self.path}': {self.cause}"


DeleteEvent = FileEvent | DirectoryEvent | ErrorEvent


# =============================================================================
# Aggregates
# =============================================================================


@dataclass(slots=True)
class Stats:
    """Aggregate of freed bytes and removed files/directories.

    Attributes:
        bytes: Total size of files.
        files: Number of non-directory items.
        dirs: Number of directories.
    """

    bytes: int = 0
    files: int = 0
    dirs: int = 0

    def copy(self) -> "Stats":
        """Return an independent copy of this aggregate."""
        return Stats(bytes=self.bytes, files=self.files, dirs=self.dirs)

    @property
    def is_empty(self) -> bool:
        """Check if nothing has been counted yet."""
        return self.bytes == 0 and self.files == 0 and self.dirs == 0


class ProgressCounters:
    """Discovered-so-far totals shared between the walker and the reporter.

    The walker increments the counters as it queues items and marks the walk
    complete once every root argument has been enumerated. After that the
    totals are frozen. All access goes through a single lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats = Stats()
        self._complete = False

    def add_file(self, size_bytes: int) -> None:
        """Count one discovered non-directory item of ``size_bytes``."""
        with self._lock:
            self._check_open()
            self._stats.files += 1
            self._stats.bytes += size_bytes

    def add_dir(self) -> None:
        """Count one discovered directory."""
        with self._lock:
            self._check_open()
            self._stats.dirs += 1

    def mark_complete(self) -> None:
        """Freeze the totals; called once when enumeration has finished."""
        with self._lock:
            self._complete = True

    def snapshot(self) -> tuple[Stats, bool]:
        """Return a consistent copy of the totals and the completion flag."""
        with self._lock:
            return self._stats.copy(), self._complete

    def _check_open(self) -> None:
        if self._complete:
            msg = "Discovery counters are frozen once the walk is complete"
            raise RuntimeError(msg)


# =============================================================================
# Confirmation
# =============================================================================


class Directive(Enum):
    """Outcome of asking about one item."""

    DELETE = "delete"
    SKIP = "skip"


class Response(Enum):
    """Operator answer to a single prompt.

    Attributes:
        DELETE: Delete this item.
        SKIP: Keep this item.
        DELETE_ALL: Delete this and everything else without asking.
        QUIT: Keep this and everything else without asking.
        DELETE_DIR: Delete this and the rest of its directory without asking.
        SKIP_DIR: Keep this and the rest of its directory without asking.
    """

    DELETE = "yes"
    SKIP = "no"
    DELETE_ALL = "all"
    QUIT = "quit"
    DELETE_DIR = "dir-delete"
    SKIP_DIR = "dir-skip"


@dataclass(frozen=True, slots=True)
class DeleteAllRemaining:
    """Global override: every further question is answered with delete."""


@dataclass(frozen=True, slots=True)
class QuitRequested:
    """Global override: every further question is answered with skip."""


@dataclass(frozen=True, slots=True)
class DeleteWithinDir:
    """Directory-scoped override answering delete.

    Attributes:
        anchor: The item the operator answered about. The override covers
            everything under the anchor's parent directory.
    """

    anchor: Path

    @property
    def scope(self) -> Path:
        return self.anchor.parent


@dataclass(frozen=True, slots=True)
class SkipWithinDir:
    """Directory-scoped override answering skip.

    Attributes:
        anchor: The item the operator answered about. The override covers
            everything under the anchor's parent directory.
    """

    anchor: Path

    @property
    def scope(self) -> Path:
        return self.anchor.parent


ConfirmationState = DeleteAllRemaining | QuitRequested | DeleteWithinDir | SkipWithinDir | None


# =============================================================================
# Walk and run results
# =============================================================================


class WalkOutcome(Enum):
    """Result of visiting one path.

    Attributes:
        EMITTED: The item (and everything below it) was queued for removal.
        SKIPPED: The item or something below it was kept.
        ERRORED: The item could not be examined; an error was reported.
    """

    EMITTED = "emitted"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    """Snapshot published by the consumer after every processed event.

    Attributes:
        done: What has actually been removed (or simulated) so far.
        discovered: What the walker has queued so far.
        walk_complete: True once ``discovered`` is final.
        action: ``"rm"``, ``"rmdir"`` or ``"error"`` for the last event.
        path: Path of the last event.
        message: Combined human-readable totals line.
    """

    done: Stats
    discovered: Stats
    walk_complete: bool
    action: str
    path: Path
    message: str


@dataclass(slots=True)
class RunSummary:
    """Final result of a deletion run.

    Attributes:
        done: Items removed (or simulated in dry-run).
        discovered: Items the walker queued.
        errors: Per-item error messages reported during the run.
        dry_run: Whether the filesystem was left untouched.
    """

    done: Stats
    discovered: Stats
    errors: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """Check if the run finished without any per-item error."""
        return not self.errors
