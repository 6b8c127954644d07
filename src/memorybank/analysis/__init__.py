"""Source analysis: per-file facts, patterns, project structure."""

from memorybank.analysis.extractor import SourceFactExtractor, compute_complexity
from memorybank.analysis.models import (
    ClassFact,
    DependencyFact,
    DependencyKind,
    DirectoryCategory,
    DirectoryFact,
    FunctionFact,
    ImportFact,
    ImportKind,
    ManifestInfo,
    ParameterFact,
    ParseDiagnostic,
    PatternMatch,
    ProjectStructureFact,
    SizeCounters,
    SourceFact,
)
from memorybank.analysis.ops import ProjectAnalysis, analyze_project
from memorybank.analysis.patterns import (
    CATALOGUE,
    PatternDetector,
    PatternRule,
    file_complexity,
    function_complexity,
    project_complexity,
)
from memorybank.analysis.structure import ProjectStructureScanner, classify_directory

__all__ = [
    "CATALOGUE",
    "ClassFact",
    "DependencyFact",
    "DependencyKind",
    "DirectoryCategory",
    "DirectoryFact",
    "FunctionFact",
    "ImportFact",
    "ImportKind",
    "ManifestInfo",
    "ParameterFact",
    "ParseDiagnostic",
    "PatternDetector",
    "PatternMatch",
    "PatternRule",
    "ProjectAnalysis",
    "ProjectStructureFact",
    "ProjectStructureScanner",
    "SizeCounters",
    "SourceFact",
    "SourceFactExtractor",
    "analyze_project",
    "classify_directory",
    "compute_complexity",
    "file_complexity",
    "function_complexity",
    "project_complexity",
]
