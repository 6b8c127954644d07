"""Memory bank reconciliation against the index document.

``validate_sync`` answers one question: does the index document
reference every memory bank document, and nothing else? When it does
not, the answer carries a SyncConflict describing each divergence.
``validate_memory_bank`` wraps that with core-file completeness, a
rough quality assessment and layout classification.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

import structlog

from memorybank.config.constants import (
    CORE_FILES,
    MEMORY_BANK_DIRNAME,
    MEMORY_BANK_SECTION_HEADING,
    SEVERITY_MEDIUM_THRESHOLD,
)
from memorybank.config.models import MemoryBankConfig
from memorybank.files.ops import FileSystem, LocalFileSystem
from memorybank.sync.discovery import MemoryBankDiscoverer
from memorybank.sync.models import (
    NON_DESTRUCTIVE_ACTIONS,
    ConflictKind,
    FileConflictInfo,
    QualityAssessment,
    Severity,
    StructureCompliance,
    SyncConflict,
    SyncValidation,
    ValidationIssue,
    ValidationReport,
    ValidationResult,
)
from memorybank.sync.references import extract_references, match_references

log = structlog.get_logger(__name__)

_HEADING_RE = re.compile(r"^#+\s", re.MULTILINE)


def _is_core(rel_path: str) -> bool:
    return rel_path in CORE_FILES


def _missing_info(rel_path: str, memory_bank_path: str) -> FileConflictInfo:
    if _is_core(rel_path):
        impact, description = "high", "Core memory bank file missing from the index document"
    elif "/" in rel_path:
        impact, description = "low", "File in a semantic folder is not referenced"
    else:
        impact, description = "medium", "Memory bank file is not referenced in the index document"
    return FileConflictInfo(
        file_name=rel_path,
        file_path=f"{memory_bank_path}/{rel_path}",
        description=description,
        impact=impact,
        action_type="add-reference",
        suggested_action="Add a reference to the index document",
    )


def _orphaned_info(reference: str) -> FileConflictInfo:
    if _is_core(PurePosixPath(reference).name):
        return FileConflictInfo(
            file_name=reference,
            file_path=f"Referenced but not found: {reference}",
            description="Core memory bank file is referenced but does not exist",
            impact="high",
            action_type="create-file",
            suggested_action="Create the missing core file",
        )
    return FileConflictInfo(
        file_name=reference,
        file_path=f"Referenced but not found: {reference}",
        description="Index document references a file missing from the memory bank",
        impact="medium",
        action_type="remove-reference",
        suggested_action="Remove the reference from the index document",
    )


def build_conflict(
    missing: list[str], orphaned: list[str], memory_bank_path: str
) -> SyncConflict:
    """Describe a divergence. Callers only build one when not in sync."""
    missing_files = [_missing_info(f, memory_bank_path) for f in missing]
    orphaned_files = [_orphaned_info(r) for r in orphaned]

    kind: ConflictKind
    if missing and orphaned:
        kind = "both"
    elif missing:
        kind = "missing-references"
    else:
        kind = "orphaned-references"

    non_core_affected = {f for f in missing if not _is_core(f)} | {
        r for r in orphaned if not _is_core(PurePosixPath(r).name)
    }
    severity: Severity
    if any(_is_core(f) for f in missing):
        severity = "high"
    elif len(non_core_affected) > SEVERITY_MEDIUM_THRESHOLD:
        severity = "medium"
    else:
        severity = "low"

    infos = missing_files + orphaned_files
    return SyncConflict(
        kind=kind,
        severity=severity,
        missing_files=missing_files,
        orphaned_files=orphaned_files,
        auto_resolvable=all(i.action_type in NON_DESTRUCTIVE_ACTIONS for i in infos),
    )


def structure_mismatch() -> SyncConflict:
    """Conflict for an index document whose managed section is absent."""
    return SyncConflict(
        kind="structure-mismatch",
        severity="low",
        auto_resolvable=False,
    )


def reconcile(
    files: Iterable[str],
    index_text: str | None,
    *,
    index_name: str,
    memory_bank_path: str,
) -> SyncValidation:
    """Cross-reference discovered documents with the index text.

    Args:
        files: Memory bank documents, relative to the memory bank root.
        index_text: Index document text, or None when it does not exist.
        index_name: The index document's file name; never an orphan.
        memory_bank_path: Memory bank directory relative to the project
            root, stripped from references that spell it out.
    """
    files = sorted(set(files))
    if index_text is None:
        references: list[str] = []
        missing, orphaned = files, []
    else:
        prefixes = (memory_bank_path, MEMORY_BANK_DIRNAME)
        matched = match_references(
            files, extract_references(index_text, prefixes), index_name
        )
        references, missing, orphaned = matched.references, matched.missing, matched.orphaned

    in_sync = not missing and not orphaned
    return SyncValidation(
        memory_bank_files=files,
        references=references,
        missing_references=missing,
        orphaned_references=orphaned,
        is_in_sync=in_sync,
        index_present=index_text is not None,
        conflict=None if in_sync else build_conflict(missing, orphaned, memory_bank_path),
    )


def _assess_consistency(texts: dict[str, str]) -> str:
    if not texts:
        return "Unknown"
    checks = cross_references = 0
    for name, content in texts.items():
        for other in texts:
            if other == name:
                continue
            checks += 1
            if PurePosixPath(other).stem in content:
                cross_references += 1
    ratio = cross_references / checks if checks else 0.0
    if ratio > 0.3:
        return "High"
    if ratio > 0.1:
        return "Medium"
    return "Low"


def _assess_clarity(texts: dict[str, str]) -> str:
    if not texts:
        return "Unknown"
    words = sum(len(t.split()) for t in texts.values()) / len(texts)
    headings = sum(len(_HEADING_RE.findall(t)) for t in texts.values()) / len(texts)
    if words > 200 and headings > 3:
        return "Excellent"
    if words > 100 and headings > 2:
        return "Good"
    if words > 50:
        return "Fair"
    return "Poor"


class SyncReconciler:
    """Validates a project's memory bank through the FileSystem primitives."""

    def __init__(self, config: MemoryBankConfig | None = None, fs: FileSystem | None = None):
        self._config = config or MemoryBankConfig()
        self._fs = fs or LocalFileSystem()
        self._discoverer = MemoryBankDiscoverer(self._fs)

    @property
    def config(self) -> MemoryBankConfig:
        return self._config

    def read_index(self, project_root: Path) -> str | None:
        """Index document text, or None when it does not exist or cannot be read."""
        path = self._config.index_path(project_root)
        stat = self._fs.stat(path)
        if stat is None or stat.kind != "file":
            return None
        try:
            return self._fs.read_text(path)
        except OSError as e:
            log.warning("index_unreadable", path=str(path), error=str(e))
            return None

    def validate_sync(self, project_root: Path) -> SyncValidation:
        files = self._discoverer.discover_files(self._config.memory_bank_dir(project_root))
        validation = reconcile(
            files,
            self.read_index(project_root),
            index_name=PurePosixPath(self._config.index_document).name,
            memory_bank_path=self._config.directory,
        )
        log.info(
            "sync_validated",
            root=str(project_root),
            files=len(files),
            missing=len(validation.missing_references),
            orphaned=len(validation.orphaned_references),
            in_sync=validation.is_in_sync,
        )
        return validation

    def conflict_for(self, project_root: Path, validation: SyncValidation) -> SyncConflict | None:
        """The conflict to resolve: the sync conflict, else a missing managed section."""
        if validation.conflict is not None:
            return validation.conflict
        index_text = self.read_index(project_root)
        if (
            index_text is not None
            and validation.memory_bank_files
            and MEMORY_BANK_SECTION_HEADING not in index_text
        ):
            return structure_mismatch()
        return None

    def validate_memory_bank(self, project_root: Path) -> ValidationResult:
        """Core-file completeness, quality, layout and sync in one pass."""
        mb_dir = self._config.memory_bank_dir(project_root)
        sync = self.validate_sync(project_root)
        stat = self._fs.stat(mb_dir)
        if stat is None or stat.kind != "directory":
            return ValidationResult(missing_files=list(CORE_FILES), sync=sync)

        structure = self._discoverer.discover_structure(mb_dir)
        present = structure.core_files
        missing = [name for name in CORE_FILES if name not in present]

        texts: dict[str, str] = {}
        for name in present:
            try:
                texts[name] = self._fs.read_text(mb_dir / name)
            except OSError as e:
                log.warning("memory_bank_file_unreadable", path=name, error=str(e))

        folder_count = len(structure.semantic_folders)
        return ValidationResult(
            is_valid=not missing,
            core_files_present=present,
            missing_files=missing,
            additional_files=structure.additional_files,
            quality=QualityAssessment(
                completeness=f"{round(len(present) / len(CORE_FILES) * 100)}%",
                consistency=_assess_consistency(texts),
                clarity=_assess_clarity(texts),
            ),
            structure_compliance=StructureCompliance(
                has_semantic_folders=folder_count > 0,
                folder_count=folder_count,
                total_files=structure.total_files,
                organization="semantic" if folder_count else "flat",
            ),
            sync=sync,
        )


def build_report(result: ValidationResult, index_name: str) -> ValidationReport:
    """Condense a ValidationResult into status, issues and a summary line."""
    issues = [
        ValidationIssue(
            type="missing_file",
            file=name,
            message=f"Required memory bank file '{name}' is missing",
        )
        for name in result.missing_files
    ]
    integrated = result.sync is not None and result.sync.is_in_sync and result.sync.index_present
    if not integrated:
        issues.append(
            ValidationIssue(
                type="missing_copilot_integration",
                file=index_name,
                message=f"Memory bank is not properly integrated with {index_name}",
            )
        )

    missing_count = len(result.missing_files)
    if missing_count == len(CORE_FILES):
        summary = "No memory bank files found."
    elif missing_count:
        summary = (
            f"Memory bank incomplete: {missing_count} of {len(CORE_FILES)} required files missing."
        )
    elif not integrated:
        summary = f"Memory bank is complete but not synced with {index_name}."
    else:
        summary = "Memory bank is complete and properly integrated."

    return ValidationReport(
        status="valid" if result.is_valid else "invalid",
        issues=issues,
        summary=summary,
        file_count=len(result.core_files_present),
        copilot_integration=integrated,
    )
