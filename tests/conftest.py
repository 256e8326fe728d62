"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import random
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from rmp.core.config import DeletionOptions

_LETTERS = "abcdefghijklmnopqrstuvwxyz"


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    """Keep tests away from the real user configuration."""
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg")))
        yield


def _build_test_tree(base: Path, count: int) -> Path:
    path = base
    for level in _LETTERS[:count]:
        path = path / level
        path.mkdir()
        for name in _LETTERS[:count]:
            file = path / f"{name}{name}"
            file.write_text(str(file.relative_to(base)))
    return base


def _list_tree(root: Path) -> list[str]:
    found: list[str] = []

    def visit(path: Path) -> None:
        if not path.exists() and not path.is_symlink():
            return
        if path.is_dir() and not path.is_symlink():
            children = sorted(path.iterdir())
            for child in children:
                visit(child)
            if not children and path != root:
                found.append(path.relative_to(root).as_posix())
        else:
            found.append(path.relative_to(root).as_posix())

    visit(root)
    return found


@pytest.fixture
def make_test_tree(tmp_path: Path) -> Callable[[int], Path]:
    """Factory for the nested letter tree used by the end-to-end scenarios.

    ``make_test_tree(3)`` creates ``a/{aa,bb,cc}``, ``a/b/{aa,bb,cc}`` and
    ``a/b/c/{aa,bb,cc}`` under a fresh directory and returns that directory.
    """
    counter = iter(range(1_000))

    def factory(count: int) -> Path:
        base = tmp_path / f"tree{next(counter)}"
        base.mkdir()
        return _build_test_tree(base, count)

    return factory


@pytest.fixture
def list_tree() -> Callable[[Path], list[str]]:
    """Sorted relative paths of every non-directory and every empty directory."""
    return _list_tree


@pytest.fixture
def make_random_tree(tmp_path: Path) -> Callable[[int], Path]:
    """Factory for a seeded random tree of files, directories and symlinks."""

    def factory(seed: int) -> Path:
        rng = random.Random(seed)
        root = tmp_path / f"random{seed}"
        root.mkdir()
        dirs = [root]
        for i in range(rng.randint(20, 80)):
            parent = rng.choice(dirs)
            kind = rng.random()
            if kind < 0.3:
                child = parent / f"d{i}"
                child.mkdir()
                dirs.append(child)
            elif kind < 0.9:
                (parent / f"f{i}").write_bytes(b"x" * rng.randint(0, 4096))
            else:
                (parent / f"l{i}").symlink_to(rng.choice(dirs))
        return root

    return factory


@pytest.fixture
def fast_options() -> DeletionOptions:
    """Non-interactive options with no simulated dry-run delays."""
    return DeletionOptions(dry_run_file_delay=0.0, dry_run_dir_delay=0.0)


@pytest.fixture
def fast_config(tmp_path: Path) -> Path:
    """Config file that turns off the simulated dry-run delays."""
    path = tmp_path / "config.toml"
    path.write_text("dry_run_file_delay = 0.0\ndry_run_dir_delay = 0.0\n")
    return path
