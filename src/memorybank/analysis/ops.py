"""Project analysis operation: scan, detect patterns, recommend."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import structlog

from memorybank.analysis.models import (
    DependencyKind,
    PatternMatch,
    ProjectStructureFact,
    SourceFact,
)
from memorybank.analysis.patterns import PatternDetector
from memorybank.analysis.recommendations import (
    ArchitectureSummary,
    ComplexityLevel,
    Recommendations,
    analyze_architecture,
    complexity_level,
    detect_frameworks,
    detect_project_type,
    key_patterns,
    recommend,
)
from memorybank.analysis.structure import ProjectStructureScanner
from memorybank.config.models import AnalysisConfig, AnalysisDepth
from memorybank.files.ops import FileSystem

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StructureSummary:
    root_files: tuple[str, ...]
    directories: tuple[str, ...]
    key_patterns: tuple[str, ...]
    complexity: ComplexityLevel
    estimated_files: int
    source_files: dict[str, tuple[str, ...]]


@dataclass(frozen=True, slots=True)
class DependencySummary:
    runtime: dict[str, str | None] = field(default_factory=dict)
    development: dict[str, str | None] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProjectAnalysis:
    """Everything known about a project after one analysis pass."""

    project_type: str
    project_name: str
    description: str
    version: str
    structure: StructureSummary
    dependencies: DependencySummary
    frameworks: tuple[str, ...]
    architecture: ArchitectureSummary
    recommendations: Recommendations
    patterns: tuple[PatternMatch, ...]
    facts: ProjectStructureFact

    @property
    def failed(self) -> bool:
        return self.facts.failure is not None

    def to_dict(self, include_facts: bool = True) -> dict[str, Any]:
        data = asdict(self)
        data["facts"] = self.facts.to_dict() if include_facts else None
        return data


def analyze_project(
    root: Path,
    depth: AnalysisDepth | None = None,
    *,
    config: AnalysisConfig | None = None,
    fs: FileSystem | None = None,
) -> ProjectAnalysis:
    """Analyze the project at ``root``.

    Never raises for missing or unreadable trees: a missing root produces
    an empty analysis, an unreadable one carries the Failure on
    ``facts.failure``.
    """
    texts: dict[str, str] = {}

    def keep_text(fact: SourceFact, text: str) -> None:
        texts[fact.file_path] = text

    scanner = ProjectStructureScanner(fs=fs, config=config)
    facts = scanner.scan(root, depth, on_source=keep_text)
    patterns = PatternDetector().detect(facts.source_facts, texts)

    directories = [d.path for d in facts.directories]
    top_level_dirs = [d for d in directories if "/" not in d]
    root_entries = [*facts.root_files, *top_level_dirs]
    dependency_names = [d.name for d in facts.dependencies]

    frameworks = detect_frameworks(root_entries, dependency_names)
    project_type = detect_project_type(frameworks, dependency_names, root_entries)
    source_count = sum(len(paths) for paths in facts.source_files.values())
    level = complexity_level(source_count)

    manifest = facts.manifest
    deps = DependencySummary(
        runtime={d.name: d.version for d in facts.dependencies if d.kind == DependencyKind.RUNTIME},
        development={
            d.name: d.version for d in facts.dependencies if d.kind == DependencyKind.DEVELOPMENT
        },
        scripts=dict(manifest.scripts) if manifest else {},
    )

    analysis = ProjectAnalysis(
        project_type=project_type,
        project_name=manifest.name if manifest else root.name,
        description=(manifest.description if manifest else "") or "A software project",
        version=(manifest.version if manifest else "") or "1.0.0",
        structure=StructureSummary(
            root_files=facts.root_files,
            directories=tuple(directories),
            key_patterns=tuple(key_patterns(root_entries)),
            complexity=level,
            estimated_files=source_count,
            source_files=facts.source_files,
        ),
        dependencies=deps,
        frameworks=tuple(frameworks),
        architecture=analyze_architecture(root_entries, directories, manifest),
        recommendations=recommend(project_type, root_entries, level),
        patterns=tuple(patterns),
        facts=facts,
    )
    log.info(
        "project_analyzed",
        root=str(root),
        project_type=project_type,
        source_files=source_count,
        patterns=len(patterns),
    )
    return analysis
