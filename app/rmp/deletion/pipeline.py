"""Two-stage deletion pipeline.

A single producer thread walks every root argument (prompting the operator
when interactive) and queues delete events. The calling thread consumes
them strictly in arrival order, removes each item, and publishes progress.
Removal is deliberately single-threaded: the walker emits every directory
after its contents, and FIFO consumption is what makes bottom-up removal
correct while discovery and deletion run concurrently.
"""

import logging
import os
import queue
import threading
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from rmp.core.config import DeletionOptions
from rmp.deletion.confirm import ConfirmationEngine, Prompter
from rmp.deletion.errors import PipelineClosedError
from rmp.deletion.models import (
    DeleteEvent,
    DirectoryEvent,
    ErrorEvent,
    FileEvent,
    ProgressCounters,
    ProgressUpdate,
    RunSummary,
    Stats,
)
from rmp.deletion.validator import PathValidator
from rmp.deletion.walker import DirectoryWalker
from rmp.utils.formatting import format_size

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressUpdate], None]
ErrorCallback = Callable[[str], None]

# How often a producer blocked on a full queue checks for a dead consumer.
_PUT_POLL_INTERVAL = 0.1

# Queued by the producer after its last event.
_CLOSED = object()


class DeletionPipeline:
    """Validates root arguments, then walks and deletes them.

    Args:
        options: Settings for this run.
        prompter: Operator prompt capability, required when interactive.
        on_progress: Called after every processed event.
        on_error: Called with a human-readable message for every per-item
            failure, as it happens.
        counters: Shared discovery totals. A fresh instance is created when
            omitted; pass one in to observe it from another thread.

    Attributes:
        counters: Discovered-so-far totals (written by the walker thread).
        done: What has been removed so far (written by the consumer only).
    """

    def __init__(
        self,
        options: DeletionOptions,
        *,
        prompter: Prompter | None = None,
        on_progress: ProgressCallback | None = None,
        on_error: ErrorCallback | None = None,
        counters: ProgressCounters | None = None,
    ) -> None:
        self._options = options
        self._on_progress = on_progress
        self._on_error = on_error
        self._validator = PathValidator(
            preserve_root=options.preserve_root,
            preserve_mount_roots=options.preserve_mount_roots,
        )
        self._confirmation = ConfirmationEngine(
            prompter,
            enabled=options.interactive,
            prompt_on_descend=options.prompt_on_descend,
        )
        self.counters = counters or ProgressCounters()
        self.done = Stats()
        self._errors: list[str] = []
        self._queue: queue.Queue[DeleteEvent | object] = queue.Queue(maxsize=options.queue_capacity)
        self._consumer_stopped = threading.Event()

    def run(self, paths: Sequence[str | Path]) -> RunSummary:
        """Delete every root argument and everything beneath it.

        All arguments are validated before anything is deleted.

        Args:
            paths: Root arguments in the order given.

        Returns:
            RunSummary with final counts and per-item error messages.

        Raises:
            PathRejectedError: If any argument fails validation. Nothing is
                deleted in that case.
            WalkError: If the walker could not go on (a root argument
                cannot be read, operator input ended, the pipeline closed).
                Raised after everything already queued has been processed.
        """
        self._validator.validate_all(list(paths))
        logger.info("Validated %d root argument(s)", len(paths))

        roots = [Path(p) for p in paths]
        failures: list[BaseException] = []
        producer = threading.Thread(
            target=self._produce,
            args=(roots, failures),
            name="rmp-walker",
            daemon=True,
        )
        producer.start()

        try:
            self._consume()
        except KeyboardInterrupt:
            # The walker may be blocked waiting for operator input, so it is
            # not joined here.
            self._consumer_stopped.set()
            raise
        except BaseException:
            self._consumer_stopped.set()
            producer.join()
            raise
        producer.join()

        if failures:
            raise failures[0]

        discovered, _ = self.counters.snapshot()
        return RunSummary(
            done=self.done.copy(),
            discovered=discovered,
            errors=list(self._errors),
            dry_run=self._options.dry_run,
        )

    # =========================================================================
    # Producer
    # =========================================================================

    def _produce(self, roots: list[Path], failures: list[BaseException]) -> None:
        walker = DirectoryWalker(
            self._confirmation,
            self.counters,
            sort_threshold=self._options.sort_threshold,
        )
        try:
            for root in roots:
                for event in walker.walk(root):
                    self._put(event)
                self._confirmation.reset_state()
            self.counters.mark_complete()
            discovered, _ = self.counters.snapshot()
            logger.info(
                "Walk complete: %d file(s), %d dir(s), %d byte(s)",
                discovered.files,
                discovered.dirs,
                discovered.bytes,
            )
        except BaseException as e:  # re-raised on the calling thread by run()
            logger.debug("Walker stopped: %s", e)
            failures.append(e)
        finally:
            self._close()

    def _put(self, event: DeleteEvent) -> None:
        while True:
            if self._consumer_stopped.is_set():
                raise PipelineClosedError(event.path)
            try:
                self._queue.put(event, timeout=_PUT_POLL_INTERVAL)
                return
            except queue.Full:
                continue

    def _close(self) -> None:
        while not self._consumer_stopped.is_set():
            try:
                self._queue.put(_CLOSED, timeout=_PUT_POLL_INTERVAL)
                return
            except queue.Full:
                continue

    # =========================================================================
    # Consumer
    # =========================================================================

    def _consume(self) -> None:
        while True:
            event = self._queue.get()
            if event is _CLOSED:
                return
            action = self._process(event)
            self._publish(event, action)

    def _process(self, event: DeleteEvent) -> str:
        match event:
            case FileEvent(path=path, size_bytes=size):
                if self._remove(path, os.unlink, self._options.dry_run_file_delay):
                    self.done.files += 1
                    self.done.bytes += size
                return "rm"
            case DirectoryEvent(path=path):
                if self._remove(path, os.rmdir, self._options.dry_run_dir_delay):
                    self.done.dirs += 1
                return "rmdir"
            case ErrorEvent():
                self._report(str(event))
                return "error"

    def _remove(self, path: Path, remove: Callable[[Path], None], dry_run_delay: float) -> bool:
        if self._options.dry_run:
            # Keep the pace of a real run so progress behaves the same.
            if dry_run_delay:
                time.sleep(dry_run_delay)
            logger.debug("Dry-run: would remove %s", path)
            return True
        try:
            remove(path)
        except OSError as e:
            self._report(f"'{path}': cannot remove: {e.strerror or e}")
            return False
        logger.debug("Removed %s", path)
        return True

    def _report(self, message: str) -> None:
        logger.info("%s", message)
        self._errors.append(message)
        if self._on_error is not None:
            self._on_error(message)

    def _publish(self, event: DeleteEvent, action: str) -> None:
        if self._on_progress is None:
            return
        discovered, complete = self.counters.snapshot()
        done = self.done.copy()
        self._on_progress(
            ProgressUpdate(
                done=done,
                discovered=discovered,
                walk_complete=complete,
                action=action,
                path=event.path,
                message=progress_message(done, discovered, complete),
            )
        )


def progress_message(done: Stats, discovered: Stats, walk_complete: bool) -> str:
    """Render the combined totals line.

    While the walk is still running only what has been done is shown; once
    the totals are final each figure is shown as "done/total".

    Args:
        done: Removed so far.
        discovered: Queued by the walker.
        walk_complete: Whether ``discovered`` is final.

    Returns:
        Message such as ``Total: freed: 1.0 KB/2.0 KB, directories removed:
        1/2, files removed: 3/6``.
    """
    if walk_complete:
        return (
            f"Total: freed: {format_size(done.bytes)}/{format_size(discovered.bytes)}, "
            f"directories removed: {done.dirs}/{discovered.dirs}, "
            f"files removed: {done.files}/{discovered.files}"
        )
    return (
        f"Total: freed: {format_size(done.bytes)}, "
        f"directories removed: {done.dirs}, "
        f"files removed: {done.files}"
    )
