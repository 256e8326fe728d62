"""Unit tests for root-argument validation.

Tests for PathValidator root, mount-point and dot-entry checks.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from rmp.deletion.errors import PathRejectedError
from rmp.deletion.validator import PathValidator, ends_with_dot

_real_lstat = os.lstat


def _with_dev(meta: os.stat_result, dev: int) -> os.stat_result:
    values = list(meta[:10])
    values[2] = dev
    return os.stat_result(values)


class TestRootPreservation:
    """Tests for refusing the filesystem root."""

    def test_rejects_literal_root(self) -> None:
        """'/' is refused with a hint about the override flag."""
        with pytest.raises(PathRejectedError) as exc_info:
            PathValidator().validate("/")

        message = str(exc_info.value)
        assert 'refusing to delete "/"' in message
        assert "--no-preserve-root" in message

    def test_rejects_repeated_separators(self) -> None:
        """'//' is still the literal root."""
        with pytest.raises(PathRejectedError, match='refusing to delete "/"'):
            PathValidator().validate("//")

    def test_rejects_path_resolving_to_root(self) -> None:
        """A different spelling of the root is refused as 'same as /'."""
        with pytest.raises(PathRejectedError, match=r'same as "/"') as exc_info:
            PathValidator().validate("/..")

        assert "--no-preserve-root" in str(exc_info.value)

    def test_override_skips_root_check(self) -> None:
        """With root preservation off, '/' passes validation."""
        validator = PathValidator(preserve_root=False, preserve_mount_roots=False)

        validator.validate("/")

    def test_properties_reflect_policy(self) -> None:
        """The configured policies are exposed read-only."""
        validator = PathValidator(preserve_root=False)

        assert validator.preserve_root is False
        assert validator.preserve_mount_roots is True


class TestMountRootPreservation:
    """Tests for refusing mount points."""

    def test_rejects_mount_point(self, tmp_path: Path) -> None:
        """A directory on a different device than its '..' is refused."""
        target = tmp_path / "mnt"
        target.mkdir()

        def fake_lstat(path: str | os.PathLike[str]) -> os.stat_result:
            meta = _real_lstat(path)
            if os.fspath(path) == str(target):
                return _with_dev(meta, meta.st_dev + 1)
            return meta

        with patch("rmp.deletion.validator.os.lstat", side_effect=fake_lstat):
            with pytest.raises(PathRejectedError) as exc_info:
                PathValidator().validate(str(target))

        message = str(exc_info.value)
        assert "mounted filesystem" in message
        assert "--no-preserve-mount-roots" in message

    def test_override_allows_mount_point(self, tmp_path: Path) -> None:
        """With mount-root preservation off, a mount point passes."""
        target = tmp_path / "mnt"
        target.mkdir()

        def fake_lstat(path: str | os.PathLike[str]) -> os.stat_result:
            meta = _real_lstat(path)
            if os.fspath(path) == str(target):
                return _with_dev(meta, meta.st_dev + 1)
            return meta

        with patch("rmp.deletion.validator.os.lstat", side_effect=fake_lstat):
            PathValidator(preserve_mount_roots=False).validate(str(target))

    def test_file_compared_to_parent_directory(self, tmp_path: Path) -> None:
        """A regular file is compared against its parent's '..'."""
        file = tmp_path / "f.txt"
        file.write_text("x")
        seen: list[str] = []

        def recording_lstat(path: str | os.PathLike[str]) -> os.stat_result:
            seen.append(os.fspath(path))
            return _real_lstat(path)

        with patch("rmp.deletion.validator.os.lstat", side_effect=recording_lstat):
            PathValidator().validate(str(file))

        assert os.path.join(str(tmp_path), "..") in seen

    def test_directory_on_same_device_passes(self, tmp_path: Path) -> None:
        """An ordinary directory passes."""
        PathValidator().validate(str(tmp_path))


class TestDotEntries:
    """Tests for refusing '.' and '..'."""

    @pytest.mark.parametrize("arg", [".", "..", "sub/.", "sub/..", "sub/./", "./sub/.."])
    def test_rejects_dot_entries(
        self, arg: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Dot entries are refused even with every override."""
        (tmp_path / "sub").mkdir()
        monkeypatch.chdir(tmp_path)
        validator = PathValidator(preserve_root=False, preserve_mount_roots=False)

        with pytest.raises(PathRejectedError, match="cannot be overridden"):
            validator.validate(arg)

    def test_rejection_keeps_raw_argument(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The error names the argument exactly as given."""
        monkeypatch.chdir(tmp_path)

        with pytest.raises(PathRejectedError) as exc_info:
            PathValidator().validate(".")

        assert exc_info.value.path == "."
        assert str(exc_info.value).startswith("'.': ")


class TestEndsWithDot:
    """Tests for ends_with_dot function."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (".", True),
            ("..", True),
            ("a/.", True),
            ("a/..", True),
            ("a/./", True),
            ("a/..//", True),
            (".hidden", False),
            ("a..", False),
            ("..a", False),
            ("a/b", False),
            ("", False),
            ("/", False),
        ],
    )
    def test_ends_with_dot(self, raw: str, expected: bool) -> None:
        """Only a final '.' or '..' component counts."""
        assert ends_with_dot(raw) is expected


class TestValidate:
    """General validation behaviour."""

    def test_missing_path_is_rejected(self, tmp_path: Path) -> None:
        """A path that cannot be stat'ed is rejected."""
        with pytest.raises(PathRejectedError, match="cannot stat"):
            PathValidator().validate(str(tmp_path / "missing"))

    def test_regular_file_passes(self, tmp_path: Path) -> None:
        """A plain file passes."""
        file = tmp_path / "f"
        file.write_text("x")

        PathValidator().validate(file)

    def test_symlink_to_root_passes(self, tmp_path: Path) -> None:
        """A symlink is judged by itself, not by its target."""
        link = tmp_path / "root-link"
        link.symlink_to("/")

        PathValidator().validate(str(link))

    def test_verdict_is_repeatable(self, tmp_path: Path) -> None:
        """Validating twice gives the same verdict and changes nothing."""
        validator = PathValidator()
        target = tmp_path / "d"
        target.mkdir()

        validator.validate(str(target))
        validator.validate(str(target))
        for _ in range(2):
            with pytest.raises(PathRejectedError):
                validator.validate("/")

        assert target.is_dir()

    def test_validate_all_stops_at_first_rejection(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The first bad argument is reported."""
        monkeypatch.chdir(tmp_path)
        good = tmp_path / "good"
        good.mkdir()

        with pytest.raises(PathRejectedError) as exc_info:
            PathValidator().validate_all([str(good), ".", str(tmp_path / "missing")])

        assert exc_info.value.path == "."
