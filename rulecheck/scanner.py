"""Project tree scanning and immutable snapshots."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType

from rulecheck.config import DEFAULT_MAX_TEXT_BYTES
from rulecheck.errors import BinaryContentError, ContentUnavailableError, NotFoundError
from rulecheck.rules.base import matches_any, matches_glob

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 8192

IGNORED_DIR_NAMES = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "venv",
        "env",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".tox",
        ".nox",
        ".ipynb_checkpoints",
        "node_modules",
    }
)
IGNORED_DIR_GLOBS = ("*.egg-info",)


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Metadata captured for a single scanned file."""

    size: int
    line_count: int
    extension: str
    is_binary: bool


@dataclass(frozen=True, slots=True)
class ProjectSnapshot:
    """Point-in-time, read-only view of a project tree."""

    root: Path
    paths: tuple[str, ...]
    directories: frozenset[str]
    files: Mapping[str, FileInfo]
    contents: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    warnings: tuple[str, ...] = ()

    def has_file(self, path: str) -> bool:
        return path in self.files

    def has_dir(self, path: str) -> bool:
        return path.strip("/") in self.directories

    def match(self, pattern: str) -> list[str]:
        """Return file paths matching a glob, in snapshot order."""
        return [path for path in self.paths if matches_glob(path, pattern)]

    def match_any(self, patterns: list[str] | tuple[str, ...]) -> list[str]:
        return [path for path in self.paths if matches_any(path, patterns)]

    def text(self, path: str) -> str:
        """Return cached text for a file.

        Raises ``KeyError`` for paths outside the snapshot, ``BinaryContentError``
        for files that are not valid UTF-8 text, and ``ContentUnavailableError``
        when the file was too large to cache.
        """
        info = self.files[path]
        if info.is_binary:
            raise BinaryContentError(f"{path} is not a UTF-8 text file")
        content = self.contents.get(path)
        if content is None:
            raise ContentUnavailableError(f"{path} text was not cached ({info.size} bytes)")
        return content


def scan(
    root: Path | str,
    *,
    exclude: list[str] | tuple[str, ...] = (),
    max_text_bytes: int = DEFAULT_MAX_TEXT_BYTES,
) -> ProjectSnapshot:
    """Walk a project directory and build a snapshot.

    Version-control metadata, virtual environments, and cache directories are
    always skipped. Unreadable entries are recorded as warnings and skipped.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise NotFoundError(f"Project root does not exist or is not a directory: {root_path}")
    root_path = root_path.resolve()

    files: dict[str, FileInfo] = {}
    contents: dict[str, str] = {}
    directories: set[str] = set()
    warnings: list[str] = []

    pending: list[Path] = [root_path]
    while pending:
        current = pending.pop()
        try:
            entries = sorted(current.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            _record_warning(warnings, root_path, current, exc)
            continue

        for entry in entries:
            rel_path = entry.relative_to(root_path).as_posix()
            try:
                is_dir = entry.is_dir() and not entry.is_symlink()
            except OSError as exc:
                _record_warning(warnings, root_path, entry, exc)
                continue

            if is_dir:
                if _is_ignored_dir(entry.name):
                    logger.debug("Skipping ignored directory %s", rel_path)
                    continue
                if exclude and _excludes_dir(rel_path, exclude):
                    logger.debug("Skipping excluded directory %s", rel_path)
                    continue
                directories.add(rel_path)
                pending.append(entry)
                continue

            if exclude and matches_any(rel_path, exclude):
                continue
            if entry.is_symlink() and entry.is_dir():
                continue

            try:
                raw = entry.read_bytes()
            except OSError as exc:
                _record_warning(warnings, root_path, entry, exc)
                continue

            info, text = _describe_file(rel_path, raw)
            files[rel_path] = info
            if text is not None and len(raw) <= max_text_bytes:
                contents[rel_path] = text

    return ProjectSnapshot(
        root=root_path,
        paths=tuple(sorted(files)),
        directories=frozenset(directories),
        files=MappingProxyType(dict(sorted(files.items()))),
        contents=MappingProxyType(contents),
        warnings=tuple(sorted(warnings)),
    )


def _describe_file(rel_path: str, raw: bytes) -> tuple[FileInfo, str | None]:
    text: str | None = None
    if b"\x00" not in raw[:BINARY_SNIFF_BYTES]:
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            text = None

    line_count = raw.count(b"\n")
    if raw and not raw.endswith(b"\n"):
        line_count += 1

    info = FileInfo(
        size=len(raw),
        line_count=line_count,
        extension=PurePosixPath(rel_path).suffix.lower(),
        is_binary=text is None,
    )
    return (info, text)


def _is_ignored_dir(name: str) -> bool:
    if name in IGNORED_DIR_NAMES:
        return True
    return any(matches_glob(name, pattern) for pattern in IGNORED_DIR_GLOBS)


def _excludes_dir(rel_path: str, exclude: list[str] | tuple[str, ...]) -> bool:
    # Trailing slash so "build/**" also matches "build" itself.
    return matches_any(rel_path, exclude) or matches_any(f"{rel_path}/", exclude)


def _record_warning(warnings: list[str], root: Path, path: Path, exc: OSError) -> None:
    try:
        rel_path = path.relative_to(root).as_posix() or "."
    except ValueError:
        rel_path = str(path)
    reason = exc.strerror or exc.__class__.__name__
    message = f"{rel_path}: skipped ({reason})"
    logger.warning("Scan warning: %s", message)
    warnings.append(message)
