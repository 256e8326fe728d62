"""Pre-flight checks for root arguments.

Every root argument is validated before the first deletion so that a bad
argument aborts the whole invocation instead of leaving it half done. The
checks mirror what ``rm -rf`` does in coreutils:

- the filesystem root (or anything resolving to the same device/inode) is
  refused unless root preservation is turned off,
- the mount point of a separately mounted filesystem is refused unless
  mount-root preservation is turned off,
- a final path component of ``.`` or ``..`` is always refused.
"""

import logging
import os
import re
import stat
from pathlib import Path

from rmp.deletion.errors import PathRejectedError

logger = logging.getLogger(__name__)

NO_PRESERVE_ROOT_FLAG = "--no-preserve-root"
NO_PRESERVE_MOUNT_ROOTS_FLAG = "--no-preserve-mount-roots"

_SEPARATORS = os.sep + (os.altsep or "")
_SEPARATOR_RE = re.compile("[" + re.escape(_SEPARATORS) + "]")


class PathValidator:
    """Rejects root arguments that must never be deleted.

    Validation has no side effects, so validating the same path twice with
    the same policies always gives the same verdict.

    Args:
        preserve_root: Refuse paths resolving to the filesystem root.
        preserve_mount_roots: Refuse mount points of other filesystems.
    """

    def __init__(self, *, preserve_root: bool = True, preserve_mount_roots: bool = True) -> None:
        self._preserve_root = preserve_root
        self._preserve_mount_roots = preserve_mount_roots
        self._root_identity: tuple[int, int] | None = None

        if preserve_root and os.name == "posix":
            root = os.lstat("/")
            self._root_identity = (root.st_dev, root.st_ino)

    @property
    def preserve_root(self) -> bool:
        return self._preserve_root

    @property
    def preserve_mount_roots(self) -> bool:
        return self._preserve_mount_roots

    def validate(self, path: str | Path) -> None:
        """Validate a single root argument.

        Args:
            path: The argument as given on the command line. Raw text is
                inspected, so pass it unnormalized.

        Raises:
            PathRejectedError: If the path must not be deleted or cannot be
                examined at all.
        """
        raw = str(path)
        try:
            meta = os.lstat(raw)
        except OSError as e:
            raise PathRejectedError(raw, f"cannot stat: {e.strerror or e}") from e

        if self._root_identity is not None and (meta.st_dev, meta.st_ino) == self._root_identity:
            if _is_literal_root(raw):
                reason = f'refusing to delete "/". You can override with {NO_PRESERVE_ROOT_FLAG}'
            else:
                reason = (
                    f'refusing to delete (same as "/"). '
                    f"You can override with {NO_PRESERVE_ROOT_FLAG}"
                )
            raise PathRejectedError(raw, reason)

        if self._preserve_mount_roots and os.name == "posix":
            self._check_mount_root(raw, meta)

        if ends_with_dot(raw):
            raise PathRejectedError(
                raw,
                'refusing to delete "." or ".." '
                f"(this cannot be overridden, not even with {NO_PRESERVE_ROOT_FLAG})",
            )

        logger.debug("Validated root argument %s", raw)

    def validate_all(self, paths: list[str] | list[Path]) -> None:
        """Validate every root argument, stopping at the first rejection.

        Raises:
            PathRejectedError: For the first argument that fails validation.
        """
        for path in paths:
            self.validate(path)

    def _check_mount_root(self, raw: str, meta: os.stat_result) -> None:
        # A directory is compared to its own "..", anything else to the ".."
        # of its parent directory.
        if stat.S_ISDIR(meta.st_mode):
            parent = os.path.join(raw, "..")
        else:
            parent = os.path.join(os.path.dirname(raw), "..")

        try:
            parent_meta = os.lstat(parent)
        except OSError as e:
            raise PathRejectedError(
                raw, f"cannot stat parent '{parent}': {e.strerror or e}"
            ) from e

        if parent_meta.st_dev != meta.st_dev:
            raise PathRejectedError(
                raw,
                "refusing to delete the root of a mounted filesystem. "
                f"You can override with {NO_PRESERVE_MOUNT_ROOTS_FLAG}",
            )


def ends_with_dot(raw: str) -> bool:
    """Check if the last real component of ``raw`` is ``.`` or ``..``.

    Works on the raw text because path libraries silently drop ``.``
    components (``Path("a/.")`` is ``a``) and would hide a bare ``.``.

    Args:
        raw: Path text exactly as given.

    Returns:
        True if the final component, ignoring trailing separators, is a dot
        entry. False for an empty path or one made only of separators.
    """
    trimmed = raw.rstrip(_SEPARATORS)
    if not trimmed:
        return False
    last = _SEPARATOR_RE.split(trimmed)[-1]
    return last in (".", "..")


def _is_literal_root(raw: str) -> bool:
    return bool(raw) and not raw.strip(_SEPARATORS)
