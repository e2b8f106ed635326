"""Integration tests for the vacuum command line.

These tests go through the console script entry point with real directory
trees and check stdout, stderr, exit codes and the witness ledger together.
"""

import json
import os
from pathlib import Path

import pytest
from vacuum.cli.main import main

requires_symlinks = pytest.mark.skipif(os.name != "posix", reason="needs POSIX symlinks")


def run(capsys: pytest.CaptureFixture[str], *args: str) -> tuple[int, str, str]:
    """Invoke the entry point and return (exit code, stdout, stderr)."""
    with pytest.raises(SystemExit) as exc_info:
        main(list(args))
    captured = capsys.readouterr()
    code = exc_info.value.code
    return (code if isinstance(code, int) else 0), captured.out, captured.err


def rows(stdout: str) -> list[dict]:
    """Parse every stdout line as JSON."""
    return [json.loads(line) for line in stdout.splitlines()]


class TestManifest:
    """End-to-end manifest properties."""

    def test_nested_scan(self, capsys: pytest.CaptureFixture[str], nested_tree: Path) -> None:
        """Nested files are listed in byte order with their MIME guesses."""
        code, out, err = run(capsys, str(nested_tree))

        assert code == 0
        records = rows(out)
        assert [r["relative_path"] for r in records] == [
            "region/deep/leaf.yaml",
            "region/north.tsv",
            "root.txt",
        ]
        leaf = records[0]
        assert leaf["extension"] == ".yaml"
        assert leaf["mime_guess"] == "application/x-yaml"
        assert "\\" not in leaf["relative_path"]
        assert err == ""

    def test_idempotent(self, capsys: pytest.CaptureFixture[str], simple_tree: Path) -> None:
        """Scanning the same tree twice prints identical bytes."""
        first = run(capsys, str(simple_tree), "--no-witness")[1]
        second = run(capsys, str(simple_tree), "--no-witness")[1]

        assert first == second

    def test_root_order_independent(
        self, capsys: pytest.CaptureFixture[str], two_roots: tuple[Path, Path]
    ) -> None:
        """Swapping roots does not change the output."""
        first, second = two_roots

        forward = run(capsys, str(first), str(second), "--no-witness")[1]
        backward = run(capsys, str(second), str(first), "--no-witness")[1]

        assert forward == backward
        shared = [r for r in rows(forward) if r["relative_path"] == "shared.csv"]
        assert [r["root"] for r in shared] == sorted([str(first), str(second)])

    def test_sorted_contract(self, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
        """Output keys are strictly ordered by (relative_path, root) bytes."""
        root = tmp_path / "names"
        root.mkdir()
        for name in ["file2", "file10", "a.txt", "0a.txt", "!a.txt", "B.txt"]:
            (root / name).write_text(name, encoding="utf-8")

        out = run(capsys, str(root))[1]

        assert [r["relative_path"] for r in rows(out)] == [
            "!a.txt",
            "0a.txt",
            "B.txt",
            "a.txt",
            "file10",
            "file2",
        ]

    def test_include_exclude(self, capsys: pytest.CaptureFixture[str], mixed_tree: Path) -> None:
        """Include and exclude combine as documented."""
        code, out, _ = run(
            capsys,
            str(mixed_tree),
            "--include",
            "*.csv",
            "--include",
            "*.md",
            "--exclude",
            "subdir/*",
        )

        assert code == 0
        assert [r["relative_path"] for r in rows(out)] == ["visible.csv"]


class TestRefusals:
    """End-to-end refusal behavior."""

    def test_no_roots(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No roots is a refusal with exit code 2."""
        code, out, _ = run(capsys)

        assert code == 2
        envelope = json.loads(out)
        assert envelope["version"] == "vacuum.v0"
        assert envelope["refusal"]["code"] == "E_ROOT_NOT_FOUND"
        assert envelope["refusal"]["detail"]["root"] == ""
        assert envelope["refusal"]["next_command"] is None

    def test_file_as_root(self, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
        """A file root refuses with E_IO."""
        file_root = tmp_path / "file.txt"
        file_root.write_text("x", encoding="utf-8")

        code, out, _ = run(capsys, str(file_root))

        assert code == 2
        assert json.loads(out)["refusal"]["code"] == "E_IO"


@requires_symlinks
class TestSymlinksAndProgress:
    """End-to-end symlink handling and the stderr side channel."""

    def test_follow_mode(self, capsys: pytest.CaptureFixture[str], symlinks_tree: Path) -> None:
        """Followed links are traversed and broken links are skipped records."""
        code, out, err = run(capsys, str(symlinks_tree))

        assert code == 0
        records = rows(out)
        assert any(r["relative_path"] == "dir_link/child.csv" for r in records)
        broken = next(r for r in records if r["relative_path"] == "broken_link")
        assert broken["_skipped"] is True
        assert broken["size"] is None
        assert broken["mtime"] is None
        assert broken["_warnings"][0]["code"] == "E_IO"
        assert "vacuum: skipped" in err

    def test_no_follow_mode(self, capsys: pytest.CaptureFixture[str], symlinks_tree: Path) -> None:
        """Without following, linked directories are not entered."""
        code, out, _ = run(capsys, str(symlinks_tree), "--no-follow")

        assert code == 0
        paths = [r["relative_path"] for r in rows(out)]
        assert "dir_link/child.csv" not in paths
        assert "dir_link" in paths

    def test_progress_mode(self, capsys: pytest.CaptureFixture[str], symlinks_tree: Path) -> None:
        """Progress mode keeps stdout pure and stderr structured."""
        code, out, err = run(capsys, str(symlinks_tree), "--progress")

        assert code == 0
        manifest = rows(out)
        assert manifest
        assert all(r["version"] == "vacuum.v0" and "type" not in r for r in manifest)
        events = rows(err)
        assert any(e["type"] == "progress" for e in events)
        assert any(e["type"] == "warning" for e in events)

    def test_default_mode_stderr_is_plain(
        self, capsys: pytest.CaptureFixture[str], symlinks_tree: Path
    ) -> None:
        """Without --progress stderr carries plain lines only."""
        err = run(capsys, str(symlinks_tree))[2]

        for line in err.splitlines():
            with pytest.raises(json.JSONDecodeError):
                json.loads(line)


class TestWitness:
    """End-to-end witness ledger behavior."""

    def test_scan_then_query(
        self, capsys: pytest.CaptureFixture[str], nested_tree: Path, tmp_path: Path
    ) -> None:
        """Each scan is witnessed and visible to witness query."""
        run(capsys, str(nested_tree))
        run(capsys, str(tmp_path / "missing"))

        code, out, _ = run(capsys, "witness", "query", "--json")

        assert code == 0
        assert [r["outcome"] for r in json.loads(out)] == ["SCAN_COMPLETE", "REFUSAL"]

        code, out, _ = run(capsys, "witness", "count", "--outcome", "REFUSAL", "--json")
        assert json.loads(out) == {"count": 1}

    def test_no_witness(
        self, capsys: pytest.CaptureFixture[str], nested_tree: Path, isolated_env: Path
    ) -> None:
        """--no-witness never creates the ledger."""
        run(capsys, str(nested_tree), "--no-witness")

        assert not isolated_env.exists()
        code, out, _ = run(capsys, "witness", "last", "--json")
        assert code == 1
        assert out.strip() == "null"

    def test_input_hash_stable_across_runs(
        self, capsys: pytest.CaptureFixture[str], simple_tree: Path
    ) -> None:
        """Identical invocations share an input hash."""
        run(capsys, str(simple_tree), "--include", "*.csv")
        run(capsys, str(simple_tree), "--include", "*.csv")

        out = run(capsys, "witness", "query", "--json")[1]

        hashes = {r["input_hash"] for r in json.loads(out)}
        assert len(hashes) == 1
