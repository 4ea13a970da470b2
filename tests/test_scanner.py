"""Tests for project scanning and snapshots."""

from __future__ import annotations

import dataclasses
import errno
from pathlib import Path

import pytest

from rulecheck.errors import BinaryContentError, ContentUnavailableError, NotFoundError
from rulecheck.scanner import scan
from tests.helpers_project import build_compliant_project, write_bytes, write_file


def test_scan_records_sorted_paths_directories_and_metadata(tmp_path: Path) -> None:
    root = build_compliant_project(tmp_path)

    snapshot = scan(root)

    assert snapshot.root == root.resolve()
    assert snapshot.paths == (
        "deploy/deploy.ipynb",
        "pyproject.toml",
        "src/agents/agent.py",
        "src/tools/forecast.py",
        "tests/test_agent.py",
    )
    assert {"src", "src/agents", "src/tools", "tests", "deploy"} <= snapshot.directories
    assert snapshot.has_dir("src/agents/")
    info = snapshot.files["src/tools/forecast.py"]
    assert info.extension == ".py"
    assert info.line_count == 2
    assert info.is_binary is False
    assert info.size == len((root / "src/tools/forecast.py").read_bytes())
    assert snapshot.warnings == ()


def test_scan_skips_conventional_ignored_directories(tmp_path: Path) -> None:
    root = tmp_path / "project"
    write_file(root, "src/agents/agent.py", "x = 1\n")
    write_file(root, ".git/config", "[core]\n")
    write_file(root, ".venv/lib/site.py", "import os\n")
    write_file(root, "src/agents/__pycache__/agent.cpython-312.pyc", "junk")
    write_file(root, "node_modules/pkg/index.js", "module.exports = 1;\n")
    write_file(root, "weather_agent.egg-info/PKG-INFO", "Name: weather-agent\n")
    write_file(root, ".pytest_cache/v/cache/lastfailed", "{}")

    snapshot = scan(root)

    assert snapshot.paths == ("src/agents/agent.py",)
    assert ".git" not in snapshot.directories
    assert ".venv" not in snapshot.directories


def test_scan_applies_exclude_globs_to_files_and_directories(tmp_path: Path) -> None:
    root = tmp_path / "project"
    write_file(root, "src/agents/agent.py", "x = 1\n")
    write_file(root, "build/lib/agent.py", "x = 1\n")
    write_file(root, "notes.tmp", "scratch\n")

    snapshot = scan(root, exclude=["build", "*.tmp"])

    assert snapshot.paths == ("src/agents/agent.py",)
    assert "build" not in snapshot.directories


def test_scan_contents_glob_drops_the_directory_itself(tmp_path: Path) -> None:
    root = tmp_path / "project"
    write_file(root, "src/agents/agent.py", "x = 1\n")
    write_file(root, "build/lib/agent.py", "x = 1\n")
    write_file(root, "builder/keep.py", "x = 1\n")

    snapshot = scan(root, exclude=["build/**"])

    assert snapshot.paths == ("builder/keep.py", "src/agents/agent.py")
    assert not snapshot.has_dir("build")
    assert not snapshot.has_dir("build/lib")
    assert snapshot.has_dir("builder")


def test_scan_missing_root_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        scan(tmp_path / "missing")


def test_scan_root_that_is_a_file_raises_not_found(tmp_path: Path) -> None:
    target = write_file(tmp_path, "file.txt", "hello\n")
    with pytest.raises(NotFoundError):
        scan(target)


def test_binary_files_are_flagged_and_text_access_raises(tmp_path: Path) -> None:
    root = tmp_path / "project"
    write_bytes(root, "assets/logo.png", b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
    write_bytes(root, "data/latin1.txt", "caf\xe9\n".encode("latin-1"))

    snapshot = scan(root)

    assert snapshot.files["assets/logo.png"].is_binary is True
    assert snapshot.files["data/latin1.txt"].is_binary is True
    with pytest.raises(BinaryContentError):
        snapshot.text("assets/logo.png")


def test_large_text_files_are_not_cached(tmp_path: Path) -> None:
    root = tmp_path / "project"
    write_file(root, "big.py", "x = 1\n" * 10)

    snapshot = scan(root, max_text_bytes=8)

    assert snapshot.files["big.py"].line_count == 10
    with pytest.raises(ContentUnavailableError):
        snapshot.text("big.py")


def test_unreadable_file_is_skipped_with_warning(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path / "project"
    write_file(root, "src/agents/agent.py", "x = 1\n")
    write_file(root, "secrets/token.txt", "hidden\n")
    original_read_bytes = Path.read_bytes

    def fake_read_bytes(self: Path) -> bytes:
        if self.name == "token.txt":
            raise PermissionError(errno.EACCES, "Permission denied", str(self))
        return original_read_bytes(self)

    monkeypatch.setattr(Path, "read_bytes", fake_read_bytes)

    snapshot = scan(root)

    assert snapshot.paths == ("src/agents/agent.py",)
    assert snapshot.warnings == ("secrets/token.txt: skipped (Permission denied)",)


def test_unreadable_directory_is_skipped_with_warning(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path / "project"
    write_file(root, "src/agents/agent.py", "x = 1\n")
    write_file(root, "locked/inner.py", "x = 2\n")
    original_iterdir = Path.iterdir

    def fake_iterdir(self: Path):
        if self.name == "locked":
            raise PermissionError(errno.EACCES, "Permission denied", str(self))
        return original_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", fake_iterdir)

    snapshot = scan(root)

    assert snapshot.paths == ("src/agents/agent.py",)
    assert snapshot.warnings == ("locked: skipped (Permission denied)",)


def test_snapshot_is_read_only(tmp_path: Path) -> None:
    root = build_compliant_project(tmp_path)
    snapshot = scan(root)

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.paths = ()  # type: ignore[misc]
    with pytest.raises(TypeError):
        snapshot.files["new.py"] = snapshot.files["pyproject.toml"]  # type: ignore[index]
    with pytest.raises(TypeError):
        snapshot.contents["pyproject.toml"] = ""  # type: ignore[index]


def test_match_supports_root_level_double_star_globs(tmp_path: Path) -> None:
    root = tmp_path / "project"
    write_file(root, "setup.py", "x = 1\n")
    write_file(root, "src/agents/agent.py", "x = 1\n")
    write_file(root, "README.md", "# readme\n")

    snapshot = scan(root)

    assert snapshot.match("**/*.py") == ["setup.py", "src/agents/agent.py"]
    assert snapshot.match_any(["*.md", "src/**"]) == ["README.md", "src/agents/agent.py"]
