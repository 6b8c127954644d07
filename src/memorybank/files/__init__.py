"""File-system primitives."""

from memorybank.files.ops import (
    DirEntry,
    EntryStat,
    FileSystem,
    LocalFileSystem,
    validate_path_in_root,
)

__all__ = [
    "DirEntry",
    "EntryStat",
    "FileSystem",
    "LocalFileSystem",
    "validate_path_in_root",
]
