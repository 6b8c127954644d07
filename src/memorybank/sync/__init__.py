"""Memory bank synchronization: discovery, reconciliation, planning, resolution."""

from memorybank.sync.actions import ActionApplier, ActionOutcome
from memorybank.sync.discovery import MemoryBankDiscoverer
from memorybank.sync.models import (
    ConflictAction,
    ConversationStep,
    FileConflictInfo,
    InteractiveResolutionResult,
    MemoryBankStructure,
    ResolutionSession,
    ResolutionState,
    SemanticFolderInfo,
    SyncConflict,
    SyncValidation,
    UserChoice,
    ValidationReport,
    ValidationResult,
)
from memorybank.sync.planner import alternative_for, plan
from memorybank.sync.reconciler import SyncReconciler, build_conflict, build_report, reconcile
from memorybank.sync.resolver import InteractiveResolver

__all__ = [
    "ActionApplier",
    "ActionOutcome",
    "ConflictAction",
    "ConversationStep",
    "FileConflictInfo",
    "InteractiveResolutionResult",
    "InteractiveResolver",
    "MemoryBankDiscoverer",
    "MemoryBankStructure",
    "ResolutionSession",
    "ResolutionState",
    "SemanticFolderInfo",
    "SyncConflict",
    "SyncReconciler",
    "SyncValidation",
    "UserChoice",
    "ValidationReport",
    "ValidationResult",
    "alternative_for",
    "build_conflict",
    "build_report",
    "plan",
    "reconcile",
]
