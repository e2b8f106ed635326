"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: small
directory trees built in ``tmp_path`` and an isolated environment so that
no test ever reads the user's configuration or writes the user's ledger.
"""

from pathlib import Path

import pytest


def _write(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and witness locations into the test's temp directory.

    Returns:
        Path of the witness ledger used by the test.
    """
    witness_path = tmp_path / "epistemic" / "witness.jsonl"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("EPISTEMIC_WITNESS", str(witness_path))
    return witness_path


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """Tree with a file at the top and two levels of nesting."""
    root = tmp_path / "nested"
    _write(root / "root.txt", "root")
    _write(root / "region" / "north.tsv", "a\tb\n")
    _write(root / "region" / "deep" / "leaf.yaml", "leaf: true\n")
    return root


@pytest.fixture
def mixed_tree(tmp_path: Path) -> Path:
    """Tree for include/exclude scenarios."""
    root = tmp_path / "mixed"
    _write(root / "visible.csv", "a,b\n")
    _write(root / "notes.txt", "notes")
    _write(root / "subdir" / "hidden.csv", "c,d\n")
    _write(root / "subdir" / "readme.md", "# readme")
    return root


@pytest.fixture
def simple_tree(tmp_path: Path) -> Path:
    """Flat tree of three files."""
    root = tmp_path / "simple"
    _write(root / "alpha.csv", "1,2\n")
    _write(root / "beta.json", "{}")
    _write(root / "gamma.bin", "\x00")
    return root


@pytest.fixture
def symlinks_tree(tmp_path: Path) -> Path:
    """Tree with a directory symlink, a broken symlink and a cycle.

    Layout::

        symlinks/
            plain.txt
            target/child.csv
            dir_link -> target
            broken_link -> missing.txt
            target/loop -> ..  (points back at the root)
    """
    root = tmp_path / "symlinks"
    _write(root / "plain.txt", "plain")
    _write(root / "target" / "child.csv", "x,y\n")
    (root / "dir_link").symlink_to(root / "target", target_is_directory=True)
    (root / "broken_link").symlink_to(root / "missing.txt")
    (root / "target" / "loop").symlink_to(root, target_is_directory=True)
    return root


@pytest.fixture
def two_roots(tmp_path: Path) -> tuple[Path, Path]:
    """Two roots that both contain ``shared.csv``."""
    first = tmp_path / "first"
    second = tmp_path / "second"
    _write(first / "shared.csv", "1\n")
    _write(first / "only_first.txt", "1")
    _write(second / "shared.csv", "2\n")
    return first, second
