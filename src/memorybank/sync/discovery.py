"""Memory bank discovery.

Enumerates eligible documents under the memory bank root. Paths are
relative to that root with forward slashes. A root that does not exist
is an empty memory bank, not an error.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import structlog

from memorybank.config.constants import CORE_FILES, DOCUMENT_EXTENSIONS
from memorybank.files.ops import FileSystem, LocalFileSystem
from memorybank.sync.models import MemoryBankStructure, SemanticFolderInfo

log = structlog.get_logger(__name__)

FOLDER_PURPOSES: dict[str, str] = {
    "features": "Feature-specific documentation and implementation details",
    "integrations": "Third-party integrations, APIs, and external services",
    "deployment": "Deployment guides, infrastructure, and operational procedures",
    "security": "Security considerations, authentication, and compliance",
    "testing": "Testing strategies, frameworks, and quality assurance",
    "api": "API documentation, endpoints, and interface specifications",
    "performance": "Performance optimization, monitoring, and benchmarks",
}


def folder_purpose(folder_name: str) -> str:
    return FOLDER_PURPOSES.get(folder_name, f"Documentation organized under {folder_name}/")


def is_document(name: str) -> bool:
    return PurePosixPath(name).suffix.lower() in DOCUMENT_EXTENSIONS


class MemoryBankDiscoverer:
    """Lists memory bank documents through the FileSystem primitives."""

    def __init__(self, fs: FileSystem | None = None) -> None:
        self._fs = fs or LocalFileSystem()

    def discover_files(self, root: Path) -> list[str]:
        """Every eligible document under ``root``, sorted, without duplicates.

        Symlinks are skipped. Unreadable subdirectories are logged and
        skipped.
        """
        stat = self._fs.stat(root)
        if stat is None or stat.kind != "directory":
            return []

        found: set[str] = set()
        pending = [root]
        while pending:
            directory = pending.pop()
            try:
                entries = self._fs.list_dir(directory)
            except OSError as e:
                log.warning("memory_bank_dir_unreadable", path=str(directory), error=str(e))
                continue
            for entry in entries:
                if entry.kind == "directory":
                    pending.append(entry.path)
                elif entry.kind == "file" and is_document(entry.name):
                    found.add(entry.path.relative_to(root).as_posix())
        return sorted(found)

    def discover_structure(self, root: Path) -> MemoryBankStructure:
        """Group discovered documents into core files, topic folders and extras."""
        files = self.discover_files(root)
        core: list[str] = []
        additional: list[str] = []
        folders: dict[str, list[str]] = {}
        for rel in files:
            parts = PurePosixPath(rel).parts
            if len(parts) == 1:
                (core if rel in CORE_FILES else additional).append(rel)
            else:
                folders.setdefault(parts[0], []).append(rel)

        return MemoryBankStructure(
            core_files=[name for name in CORE_FILES if name in core],
            semantic_folders=[
                SemanticFolderInfo(
                    folder_name=name,
                    purpose=folder_purpose(name),
                    file_count=len(docs),
                    files=docs,
                )
                for name, docs in sorted(folders.items())
            ],
            additional_files=additional,
            total_files=len(files),
        )
