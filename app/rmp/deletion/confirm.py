"""Interactive per-item confirmation.

The ConfirmationEngine turns a bare "ask the operator" capability into a
delete/skip decision per item, remembering the operator's scope-wide
answers (delete everything, quit, delete or skip the rest of a directory)
so that they are not asked again.
"""

import logging
import os
import stat
from collections.abc import Callable
from pathlib import Path

from rmp.deletion.errors import PromptInputError
from rmp.deletion.models import (
    ConfirmationState,
    DeleteAllRemaining,
    DeleteWithinDir,
    Directive,
    QuitRequested,
    Response,
    SkipWithinDir,
)
from rmp.utils.formatting import format_size

logger = logging.getLogger(__name__)

# Given a fully rendered question, return the operator's raw answer.
Prompter = Callable[[str], str]

PROMPT_CHOICES = "(y/N/a/q/d/s/?)"

HELP_TEXT = (
    "y - Yes, delete it\n"
    "n - No, don't delete it\n"
    "a - Delete this and everything else (without any further prompts)\n"
    "q - Quit without deleting this nor anything else\n"
    "d - Delete this and the rest of its directory without further prompts\n"
    "s - Don't delete this or anything else in its directory, "
    "but continue asking about other items\n"
    "? - Show help"
)

BAD_INPUT_TEXT = 'Bad input. Enter "?" for help'

_ANSWERS: dict[str, Response] = {
    "y": Response.DELETE,
    "yes": Response.DELETE,
    "": Response.SKIP,
    "n": Response.SKIP,
    "no": Response.SKIP,
    "a": Response.DELETE_ALL,
    "all": Response.DELETE_ALL,
    "q": Response.QUIT,
    "quit": Response.QUIT,
    "d": Response.DELETE_DIR,
    "dir-delete": Response.DELETE_DIR,
    "s": Response.SKIP_DIR,
    "dir-skip": Response.SKIP_DIR,
}

_HELP_ANSWERS = frozenset({"?", "h", "help"})


class ConfirmationEngine:
    """Decides whether each item is deleted, prompting when necessary.

    When disabled (non-interactive runs) every question is answered with
    DELETE and the prompter is never called.

    Args:
        prompter: Callable receiving a rendered question and returning the
            operator's raw answer. Required when ``enabled`` is True.
        enabled: Whether to ask at all.
        prompt_on_descend: Ask before entering each directory. When False,
            a directory is only asked about once, right before removal, and
            entering it is decided from remembered answers alone.
    """

    def __init__(
        self,
        prompter: Prompter | None = None,
        *,
        enabled: bool = False,
        prompt_on_descend: bool = False,
    ) -> None:
        if enabled and prompter is None:
            msg = "An interactive ConfirmationEngine needs a prompter"
            raise ValueError(msg)
        self._prompter = prompter
        self._enabled = enabled
        self._prompt_on_descend = prompt_on_descend
        self._state: ConfirmationState = None

    @property
    def state(self) -> ConfirmationState:
        """The remembered scope-wide answer, if any."""
        return self._state

    def reset_state(self) -> None:
        """Forget directory-scoped answers between root arguments.

        "Delete everything" and "quit" survive: they apply to the whole run.
        A "rest of this directory" answer must not leak into an unrelated
        argument.
        """
        if isinstance(self._state, DeleteWithinDir | SkipWithinDir):
            logger.debug("Clearing directory-scoped answer for %s", self._state.scope)
            self._state = None

    def ask(self, path: Path, meta: os.stat_result, *, traversal: bool) -> Directive:
        """Decide what to do with one item.

        Args:
            path: Item being asked about.
            meta: Its ``lstat`` result.
            traversal: True for the question asked before entering a
                directory; False for the question asked before removing it.

        Returns:
            Directive.DELETE or Directive.SKIP.

        Raises:
            PromptInputError: If the operator's answer cannot be read.
        """
        if not self._enabled:
            return Directive.DELETE

        cached = self._remembered(path)
        if cached is not None:
            return cached

        if traversal and stat.S_ISDIR(meta.st_mode) and not self._prompt_on_descend:
            return Directive.DELETE

        response = self._prompt(path, meta, traversal)
        match response:
            case Response.DELETE:
                return Directive.DELETE
            case Response.SKIP:
                return Directive.SKIP
            case Response.DELETE_ALL:
                self._state = DeleteAllRemaining()
                return Directive.DELETE
            case Response.DELETE_DIR:
                self._state = DeleteWithinDir(path)
                return Directive.DELETE
            case Response.QUIT:
                self._state = QuitRequested()
                return Directive.SKIP
            case Response.SKIP_DIR:
                self._state = SkipWithinDir(path)
                return Directive.SKIP

    def _remembered(self, path: Path) -> Directive | None:
        state = self._state
        if isinstance(state, DeleteAllRemaining):
            return Directive.DELETE
        if isinstance(state, DeleteWithinDir) and is_within(state.anchor, path):
            return Directive.DELETE
        if isinstance(state, SkipWithinDir) and is_within(state.anchor, path):
            return Directive.SKIP
        if isinstance(state, QuitRequested):
            return Directive.SKIP
        return None

    def _prompt(self, path: Path, meta: os.stat_result, traversal: bool) -> Response:
        if self._prompter is None:
            msg = "No prompter available to ask the operator"
            raise RuntimeError(msg)
        question = f"{describe(path, meta, traversal=traversal)}? {PROMPT_CHOICES} "
        preamble = ""
        after_help = False

        while True:
            try:
                raw = self._prompter(preamble + question)
            except EOFError as e:
                raise PromptInputError(path, "end of input while waiting for an answer") from e
            except OSError as e:
                raise PromptInputError(path, f"cannot read answer: {e}") from e

            answer = raw.strip().lower()
            if answer in _HELP_ANSWERS:
                preamble = HELP_TEXT + "\n"
                after_help = True
                continue
            # An empty line right after the help text is taken as "show me the
            # question again", not as the default answer.
            if answer == "" and after_help:
                preamble = ""
                after_help = False
                continue

            response = _ANSWERS.get(answer)
            if response is None:
                preamble = BAD_INPUT_TEXT + "\n"
                after_help = False
                continue

            logger.debug("Operator answered %s for %s", response.value, path)
            return response


def is_within(anchor: Path, path: Path) -> bool:
    """Check if ``path`` falls under a directory-scoped answer about ``anchor``.

    The scope is the anchor's parent directory: the anchor itself, its
    siblings, and everything nested below them.

    Args:
        anchor: Item the operator answered "d" or "s" about.
        path: Item now being asked about.

    Returns:
        True if ``path`` is the anchor's parent or lies beneath it.
    """
    scope = anchor.parent
    if scope == anchor:
        return False
    return scope == path or scope in path.parents


def describe(path: Path, meta: os.stat_result, *, traversal: bool) -> str:
    """Render the question for one item, without the answer choices.

    Args:
        path: Item being asked about.
        meta: Its ``lstat`` result.
        traversal: Whether this is the "descend into" question for a directory.

    Returns:
        Question text such as ``remove file 'x' [1.2 KB]``.
    """
    mode = meta.st_mode
    if stat.S_ISDIR(mode):
        if traversal:
            return f"descend into directory '{path}'"
        return f"remove directory '{path}'"
    if stat.S_ISREG(mode):
        if meta.st_size == 0:
            return f"remove empty file '{path}'"
        return f"remove file '{path}' [{format_size(meta.st_size)}]"
    if stat.S_ISLNK(mode):
        return f"remove symbolic link '{path}'"
    if stat.S_ISFIFO(mode):
        return f"remove fifo '{path}'"
    if stat.S_ISSOCK(mode):
        return f"remove socket '{path}'"
    if stat.S_ISCHR(mode):
        return f"remove character device '{path}'"
    if stat.S_ISBLK(mode):
        return f"remove block device '{path}'"
    return f"remove unknown file '{path}'"
