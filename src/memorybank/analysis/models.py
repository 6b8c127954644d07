"""Fact records produced by source analysis.

All records are immutable and recomputed on every analysis call. Each has
a ``to_dict()`` producing a JSON-compatible, acyclic representation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any

from memorybank.core.errors import Failure


class ImportKind(StrEnum):
    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"
    SIDE_EFFECT = "side-effect"


class DirectoryCategory(StrEnum):
    """Directory classes, declared in classification priority order."""

    TEST = "test"
    DOCUMENTATION = "documentation"
    SOURCE = "source"
    CONFIGURATION = "configuration"
    OTHER = "other"


class DependencyKind(StrEnum):
    RUNTIME = "runtime"
    DEVELOPMENT = "development"


@dataclass(frozen=True, slots=True)
class ParameterFact:
    name: str
    type: str | None = None


@dataclass(frozen=True, slots=True)
class FunctionFact:
    """A top-level function or a class method."""

    name: str
    is_exported: bool
    parameters: tuple[ParameterFact, ...] = ()
    return_type: str | None = None
    is_async: bool = False
    has_await: bool = False
    complexity: int = 1
    line: int = 1


@dataclass(frozen=True, slots=True)
class ClassFact:
    name: str
    is_exported: bool
    methods: tuple[FunctionFact, ...] = ()
    line: int = 1


@dataclass(frozen=True, slots=True)
class ImportFact:
    module_path: str
    import_kind: ImportKind
    is_external: bool
    names: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ParseDiagnostic:
    """Why a file could not be turned into facts."""

    message: str
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} at line {self.line}, column {self.column}"


@dataclass(frozen=True, slots=True)
class SourceFact:
    """Everything extracted from one source file."""

    file_path: str
    language: str | None
    functions: tuple[FunctionFact, ...] = ()
    classes: tuple[ClassFact, ...] = ()
    imports: tuple[ImportFact, ...] = ()
    parse_succeeded: bool = True
    parse_error: str | None = None

    @classmethod
    def failed(
        cls, file_path: str, language: str | None, diagnostic: ParseDiagnostic
    ) -> SourceFact:
        return cls(
            file_path=file_path,
            language=language,
            parse_succeeded=False,
            parse_error=str(diagnostic),
        )

    def all_functions(self) -> list[FunctionFact]:
        """Top-level functions followed by every class method."""
        result = list(self.functions)
        for cls_fact in self.classes:
            result.extend(cls_fact.methods)
        return result

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class PatternMatch:
    pattern_name: str
    description: str
    evidence_locations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class DirectoryFact:
    path: str
    category: DirectoryCategory


@dataclass(frozen=True, slots=True)
class DependencyFact:
    name: str
    version: str | None
    kind: DependencyKind
    manifest: str


@dataclass(frozen=True, slots=True)
class ManifestInfo:
    """Project metadata read from a manifest, with defaults when absent."""

    name: str
    description: str = ""
    version: str = ""
    dependencies: tuple[DependencyFact, ...] = ()
    scripts: dict[str, str] = field(default_factory=dict)
    entry_points: tuple[str, ...] = ()
    manifests: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SizeCounters:
    lines_of_code: int = 0
    file_count: int = 0
    directory_count: int = 0


@dataclass(frozen=True, slots=True)
class ProjectStructureFact:
    """Aggregate of the project tree: facts, directories, dependencies, sizes."""

    root: str
    root_files: tuple[str, ...] = ()
    directories: tuple[DirectoryFact, ...] = ()
    source_files: dict[str, tuple[str, ...]] = field(default_factory=dict)
    source_facts: tuple[SourceFact, ...] = ()
    manifest: ManifestInfo | None = None
    size: SizeCounters = field(default_factory=SizeCounters)
    max_complexity: int = 0
    failure: Failure | None = None

    @property
    def dependencies(self) -> tuple[DependencyFact, ...]:
        return self.manifest.dependencies if self.manifest else ()

    def directories_in(self, category: DirectoryCategory) -> list[str]:
        return [d.path for d in self.directories if d.category == category]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["failure"] = self.failure.to_dict() if self.failure else None
        return data
