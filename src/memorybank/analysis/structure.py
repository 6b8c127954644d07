"""Project tree walk: directory classification, source inventory, sizes.

The walk goes through the FileSystem primitives only. Symlinks are
counted as files but never read or followed, so a cyclic link cannot
trap the walk. Directory listing order is sorted, which keeps the result
identical from run to run.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

import structlog

from memorybank.analysis.extractor import SourceFactExtractor
from memorybank.analysis.languages import get_pack_for_path, source_bucket
from memorybank.analysis.manifest import read_manifest
from memorybank.analysis.models import (
    DirectoryCategory,
    DirectoryFact,
    ProjectStructureFact,
    SizeCounters,
    SourceFact,
)
from memorybank.analysis.patterns import project_complexity
from memorybank.config.constants import DEPTH_LIMITS
from memorybank.config.models import AnalysisConfig, AnalysisDepth
from memorybank.core.errors import ErrorCode, Failure
from memorybank.core.excludes import is_prunable
from memorybank.files.ops import DirEntry, FileSystem, LocalFileSystem

log = structlog.get_logger(__name__)

SourceCallback = Callable[[SourceFact, str], None]

_SEGMENT_SPLIT = re.compile(r"[-_./\\]+")

# Checked in order; the first category with a matching segment wins
CATEGORY_KEYWORDS: tuple[tuple[DirectoryCategory, frozenset[str]], ...] = (
    (
        DirectoryCategory.TEST,
        frozenset(
            {"test", "tests", "spec", "specs", "e2e", "testing", "__tests__", "fixtures", "mocks"}
        ),
    ),
    (
        DirectoryCategory.DOCUMENTATION,
        frozenset({"doc", "docs", "documentation", "wiki", "guide", "guides", "manual"}),
    ),
    (
        DirectoryCategory.SOURCE,
        frozenset(
            {
                "src",
                "source",
                "lib",
                "app",
                "apps",
                "packages",
                "components",
                "services",
                "core",
                "server",
                "client",
                "api",
                "internal",
                "cmd",
                "pkg",
            }
        ),
    ),
    (
        DirectoryCategory.CONFIGURATION,
        frozenset(
            {"config", "configs", "configuration", "conf", "settings", "env", "environments"}
        ),
    ),
)


def classify_directory(rel_path: str) -> DirectoryCategory:
    """Classify a directory by the words in its path, case-insensitively."""
    segments = {s for s in _SEGMENT_SPLIT.split(rel_path.lower()) if s}
    for category, keywords in CATEGORY_KEYWORDS:
        if segments & keywords:
            return category
    return DirectoryCategory.OTHER


def _count_lines(text: str) -> int:
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


class ProjectStructureScanner:
    """Walks a project root and aggregates a ProjectStructureFact."""

    def __init__(
        self,
        fs: FileSystem | None = None,
        extractor: SourceFactExtractor | None = None,
        config: AnalysisConfig | None = None,
    ) -> None:
        self._fs = fs or LocalFileSystem()
        self._extractor = extractor or SourceFactExtractor()
        self._config = config or AnalysisConfig()
        self._excluded = frozenset(self._config.excluded_dirs)

    def scan(
        self,
        root: Path,
        depth: AnalysisDepth | None = None,
        on_source: SourceCallback | None = None,
    ) -> ProjectStructureFact:
        """Walk ``root`` up to the depth preset.

        Args:
            root: Project root.
            depth: Depth preset; defaults to the configured one.
            on_source: Called with each extracted SourceFact and its text.

        Returns:
            The aggregate fact. A missing root yields an empty fact; an
            unreadable root yields an empty fact carrying a Failure.
        """
        limit = DEPTH_LIMITS[depth or self._config.depth]
        root_stat = self._fs.stat(root)
        if root_stat is None or root_stat.kind != "directory":
            log.info("project_root_missing", root=str(root))
            return ProjectStructureFact(root=str(root))

        try:
            root_entries = self._fs.list_dir(root)
        except OSError as e:
            log.warning("project_root_unreadable", root=str(root), error=str(e))
            return ProjectStructureFact(
                root=str(root),
                failure=Failure.from_os_error(ErrorCode.ROOT_UNREADABLE, str(root), e),
            )

        max_bytes = self._config.max_file_size_kb * 1024
        root_files: list[str] = []
        regular_root_files: list[str] = []
        directories: list[DirectoryFact] = []
        buckets: dict[str, list[str]] = {}
        facts: list[SourceFact] = []
        lines_of_code = 0
        file_count = 0

        # (directory, level, entries); the root's entries are already listed
        pending: list[tuple[Path, int, list[DirEntry]]] = [(root, 0, root_entries)]
        while pending:
            directory, level, entries = pending.pop()
            for entry in entries:
                rel = entry.path.relative_to(root).as_posix()
                if entry.kind == "directory":
                    if is_prunable(entry.name, self._excluded) or level + 1 > limit:
                        continue
                    directories.append(DirectoryFact(path=rel, category=classify_directory(rel)))
                    try:
                        children = self._fs.list_dir(entry.path)
                    except OSError as e:
                        log.warning("directory_unreadable", path=rel, error=str(e))
                        continue
                    pending.append((entry.path, level + 1, children))
                    continue

                file_count += 1
                if level == 0:
                    root_files.append(entry.name)
                if entry.kind != "file":
                    continue
                if level == 0:
                    regular_root_files.append(entry.name)
                bucket = source_bucket(rel)
                if bucket is None:
                    continue
                buckets.setdefault(bucket, []).append(rel)
                try:
                    text = self._fs.read_text(entry.path)
                except OSError as e:
                    log.warning("file_unreadable", path=rel, error=str(e))
                    continue
                lines_of_code += _count_lines(text)

                if get_pack_for_path(rel) is None:
                    continue
                stat = self._fs.stat(entry.path)
                if stat is not None and stat.size > max_bytes:
                    log.debug("file_too_large", path=rel, size=stat.size)
                    continue
                fact = self._extractor.extract(text, rel)
                facts.append(fact)
                if on_source is not None:
                    on_source(fact, text)

        facts.sort(key=lambda f: f.file_path)
        directories.sort(key=lambda d: d.path)
        log.info(
            "project_scanned",
            root=str(root),
            files=file_count,
            directories=len(directories),
            parsed=len(facts),
        )
        return ProjectStructureFact(
            root=str(root),
            root_files=tuple(sorted(root_files)),
            directories=tuple(directories),
            source_files={k: tuple(sorted(v)) for k, v in sorted(buckets.items())},
            source_facts=tuple(facts),
            manifest=read_manifest(root, self._fs, regular_root_files),
            size=SizeCounters(
                lines_of_code=lines_of_code,
                file_count=file_count,
                directory_count=len(directories),
            ),
            max_complexity=project_complexity(facts),
        )

