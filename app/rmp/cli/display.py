"""Live progress display and operator prompt for the rmp command.

While the walk is running the bar shows a pulsing "Counting files" line
with the number discovered so far. Once the walk is complete it turns into
a real bar of files removed out of files discovered. Below it, one line
shows the last action and path, and one line the combined totals.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.text import Text

from rmp.deletion.confirm import Prompter
from rmp.deletion.models import ProgressUpdate


class _StatusLines:
    """Last action and totals, re-rendered on every live refresh."""

    def __init__(self) -> None:
        self.action = ""
        self.path = ""
        self.message = ""

    def __rich__(self) -> Text:
        text = Text(no_wrap=True, overflow="ellipsis")
        text.append(f"{self.action:<5} ", style="action")
        text.append(self.path, style="path")
        text.append("\n")
        text.append(self.message)
        return text


class DeletionProgress:
    """Rich live display fed by the deletion pipeline's callbacks.

    Use as a context manager around ``DeletionPipeline.run``. The display
    stays off when ``console`` is not a terminal, in which case only error
    lines are printed.

    Args:
        console: Console to render on (normally stderr).
        enabled: Force the live display on or off. Defaults to whether
            ``console`` is a terminal.
    """

    def __init__(self, console: Console, *, enabled: bool | None = None) -> None:
        self._console = console
        self._enabled = console.is_terminal if enabled is None else enabled
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(bar_width=None),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=console,
        )
        self._task = self._progress.add_task("Counting files", total=None)
        self._status = _StatusLines()
        self._live = Live(
            Group(self._progress, self._status),
            console=console,
            transient=True,
            refresh_per_second=10,
        )
        self._running = False

    def __enter__(self) -> "DeletionProgress":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def start(self) -> None:
        if self._enabled and not self._running:
            self._live.start(refresh=True)
            self._running = True

    def stop(self) -> None:
        if self._running:
            self._live.stop()
            self._running = False

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Take the live display off the terminal while the block runs."""
        was_running = self._running
        self.stop()
        try:
            yield
        finally:
            if was_running:
                self.start()

    def update(self, update: ProgressUpdate) -> None:
        """Pipeline ``on_progress`` callback."""
        if update.walk_complete:
            self._progress.update(
                self._task,
                description="Removing",
                total=update.discovered.files,
                completed=update.done.files,
            )
        else:
            self._progress.update(
                self._task,
                description=f"Counting files... {update.discovered.files}",
                completed=update.done.files,
            )
        if update.action != "error":
            self._status.action = update.action
            self._status.path = str(update.path)
        self._status.message = update.message

    def print_error(self, message: str) -> None:
        """Pipeline ``on_error`` callback; printed above the live display."""
        self._console.print(f"[error]{escape(message)}[/]", highlight=False, soft_wrap=True)


def make_prompter(display: DeletionProgress) -> Prompter:
    """Build the operator prompt used in interactive mode.

    The live display is suspended while waiting for an answer so the
    question is not overdrawn. Deletions already queued keep going.

    Args:
        display: Live display to suspend.

    Returns:
        Prompter reading one answer from standard input per question.
        End of input is raised as EOFError.
    """

    def prompt(question: str) -> str:
        with display.suspended():
            try:
                return typer.prompt(
                    question.rstrip(), default="", show_default=False, prompt_suffix=" "
                )
            except typer.Abort as e:
                if isinstance(e.__context__, KeyboardInterrupt):
                    raise KeyboardInterrupt from e
                raise EOFError from e

    return prompt
