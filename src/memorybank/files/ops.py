"""File-system primitives used by the analysis and sync engines.

The engines only read, list, stat, write and remove through this
interface, so a caller can substitute another implementation (an
in-memory tree, a remote mount) without touching engine code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from memorybank.core.errors import PathOutsideRootError

EntryKind = Literal["file", "directory", "symlink", "other"]


@dataclass(frozen=True, slots=True)
class DirEntry:
    """A single directory entry. Symlinks are reported as such, never followed."""

    name: str
    path: Path
    kind: EntryKind


@dataclass(frozen=True, slots=True)
class EntryStat:
    kind: EntryKind
    size: int


class FileSystem(Protocol):
    """Read/list/stat/write primitives consumed by the engines."""

    def read_text(self, path: Path) -> str: ...

    def list_dir(self, path: Path) -> list[DirEntry]: ...

    def stat(self, path: Path) -> EntryStat | None: ...

    def write_text(self, path: Path, content: str) -> None: ...

    def remove(self, path: Path) -> None: ...


def _kind_of(entry: os.DirEntry[str]) -> EntryKind:
    if entry.is_symlink():
        return "symlink"
    if entry.is_dir(follow_symlinks=False):
        return "directory"
    if entry.is_file(follow_symlinks=False):
        return "file"
    return "other"


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8", errors="replace")

    def list_dir(self, path: Path) -> list[DirEntry]:
        """List a directory sorted by name.

        Raises:
            FileNotFoundError: If the directory does not exist.
            PermissionError: If it cannot be read.
        """
        with os.scandir(path) as it:
            entries = [DirEntry(name=e.name, path=Path(e.path), kind=_kind_of(e)) for e in it]
        entries.sort(key=lambda e: e.name)
        return entries

    def stat(self, path: Path) -> EntryStat | None:
        try:
            st = path.lstat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        if path.is_symlink():
            kind: EntryKind = "symlink"
        elif path.is_dir():
            kind = "directory"
        elif path.is_file():
            kind = "file"
        else:
            kind = "other"
        return EntryStat(kind=kind, size=st.st_size)

    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def remove(self, path: Path) -> None:
        path.unlink()


def validate_path_in_root(root: Path, user_path: str) -> Path:
    """Validate that user_path is within root, preventing traversal attacks.

    Args:
        root: Directory the path must stay inside
        user_path: Relative path supplied by a user or a document

    Returns:
        Resolved absolute path if valid

    Raises:
        PathOutsideRootError: If path escapes root
    """
    resolved_root = root.resolve()
    full_path = (root / user_path).resolve()

    if not full_path.is_relative_to(resolved_root):
        raise PathOutsideRootError.for_path(user_path, str(resolved_root))

    return full_path


def to_posix_relative(path: Path, root: Path) -> str:
    """Relative path with forward slashes regardless of platform."""
    return path.relative_to(root).as_posix()
