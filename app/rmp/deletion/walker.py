"""Depth-first, post-order discovery of deletable items.

The walker turns a root path into a stream of delete events. Children are
always yielded before their directory, so a consumer that processes the
stream in order only ever removes directories whose contents it has
already removed.
"""

import logging
import os
import stat
from collections.abc import Generator, Iterator
from pathlib import Path

from rmp.deletion.confirm import ConfirmationEngine
from rmp.deletion.errors import PipelineClosedError, PromptInputError, WalkError
from rmp.deletion.models import (
    DeleteEvent,
    Directive,
    DirectoryEvent,
    ErrorEvent,
    FileEvent,
    ProgressCounters,
    WalkOutcome,
)

logger = logging.getLogger(__name__)

# Directories whose link count is below this are read fully and sorted.
DEFAULT_SORT_THRESHOLD = 5000

WalkStream = Generator[DeleteEvent, None, WalkOutcome]


class DirectoryWalker:
    """Enumerates everything beneath a root path for deletion.

    Symlinks are never followed: they are yielded as files of their own
    size. A directory is only yielded when nothing beneath it was skipped,
    because a non-empty directory cannot be removed.

    Args:
        confirmation: Engine deciding per item whether to delete it.
        counters: Shared discovery totals, incremented as items are queued.
        sort_threshold: Link-count cutoff below which directory entries are
            sorted. Larger directories are streamed in filesystem order.
    """

    def __init__(
        self,
        confirmation: ConfirmationEngine,
        counters: ProgressCounters,
        *,
        sort_threshold: int = DEFAULT_SORT_THRESHOLD,
    ) -> None:
        self._confirmation = confirmation
        self._counters = counters
        self._sort_threshold = sort_threshold

    def walk(self, root: Path) -> WalkStream:
        """Yield delete events for ``root`` and everything beneath it.

        Failures below the root are yielded as ErrorEvent and the walk goes
        on with the next sibling. A failure on the root itself is raised.

        Args:
            root: Root argument to enumerate.

        Yields:
            FileEvent, DirectoryEvent and ErrorEvent in post-order.

        Returns:
            The outcome for the root (via ``StopIteration.value``).

        Raises:
            WalkError: If the root cannot be examined.
            PromptInputError: If an operator answer cannot be read.
        """
        logger.info("Walking %s", root)
        outcome = yield from self._visit(root)
        logger.debug("Finished %s: %s", root, outcome.value)
        return outcome

    def _visit(self, path: Path) -> WalkStream:
        try:
            meta = os.lstat(path)
        except OSError as e:
            raise WalkError(path, f"cannot stat: {e.strerror or e}") from e

        if self._confirmation.ask(path, meta, traversal=True) is Directive.SKIP:
            return WalkOutcome.SKIPPED

        if not stat.S_ISDIR(meta.st_mode):
            self._counters.add_file(meta.st_size)
            yield FileEvent(path=path, size_bytes=meta.st_size)
            return WalkOutcome.EMITTED

        skipped_any = False
        for child in self._entries(path, meta):
            outcome = yield from self._visit_child(child)
            # An errored child is not a kept one: the directory is still
            # queued and its removal reports the leftover.
            if outcome is WalkOutcome.SKIPPED:
                skipped_any = True

        # Something below was kept, so the directory is not empty.
        if skipped_any:
            return WalkOutcome.SKIPPED

        if self._confirmation.ask(path, meta, traversal=False) is Directive.SKIP:
            return WalkOutcome.SKIPPED

        self._counters.add_dir()
        yield DirectoryEvent(path=path)
        return WalkOutcome.EMITTED

    def _visit_child(self, path: Path) -> WalkStream:
        try:
            return (yield from self._visit(path))
        except (PromptInputError, PipelineClosedError):
            raise
        except WalkError as e:
            logger.info("Cannot process %s: %s", e.path, e.cause)
            yield ErrorEvent(path=e.path, cause=e.cause)
            return WalkOutcome.ERRORED

    def _entries(self, path: Path, meta: os.stat_result) -> Iterator[Path]:
        """Yield the immediate entries of a directory.

        The link count is a cheap upper bound on the number of
        subdirectories on POSIX systems. Below the threshold, entries are
        read up front and sorted so traversal order is predictable; above
        it, they are streamed to avoid reading a huge directory in full
        before doing anything. Elsewhere entries are never sorted.

        Raises:
            WalkError: If the directory cannot be read.
        """
        if os.name == "posix" and meta.st_nlink < self._sort_threshold:
            try:
                names = os.listdir(path)
            except OSError as e:
                raise WalkError(path, f"cannot read directory: {e.strerror or e}") from e
            names.sort()
            for name in names:
                yield path / name
            return

        logger.debug("Streaming unsorted entries of %s (nlink=%d)", path, meta.st_nlink)
        try:
            with os.scandir(path) as it:
                for entry in it:
                    yield path / entry.name
        except OSError as e:
            raise WalkError(path, f"cannot read directory: {e.strerror or e}") from e
