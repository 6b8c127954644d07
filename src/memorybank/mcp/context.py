"""Application context for MCP handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from memorybank.config import MemoryBankSettings, load_config
from memorybank.files.ops import FileSystem, LocalFileSystem


@dataclass
class AppContext:
    """Passed to every tool handler.

    Tools may name a project root per call; otherwise ``default_root`` is
    used. Configuration is loaded per project root on every call so that
    edits to the project's config file take effect without a restart.
    """

    default_root: Path
    fs: FileSystem = field(default_factory=LocalFileSystem)

    def resolve_root(self, project_root_path: str | None) -> Path:
        if project_root_path is None:
            return self.default_root
        return Path(project_root_path).expanduser().resolve()

    def settings_for(self, root: Path) -> MemoryBankSettings:
        return load_config(project_root=root)
