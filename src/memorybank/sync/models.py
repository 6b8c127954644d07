"""Records produced by discovery, reconciliation and resolution.

These are pydantic models so that a resolution session can be dumped to
JSON, handed to a client, and validated back on the next call.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Impact = Literal["low", "medium", "high"]
Severity = Literal["low", "medium", "high"]
ConflictKind = Literal["missing-references", "orphaned-references", "both", "structure-mismatch"]
ActionType = Literal[
    "add-reference", "remove-reference", "create-file", "update-structure", "delete-file"
]
StepType = Literal["question", "information", "confirmation", "warning", "result"]
Organization = Literal["flat", "semantic", "unknown"]

NON_DESTRUCTIVE_ACTIONS: frozenset[str] = frozenset({"add-reference", "remove-reference"})


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat()


def requires_confirmation(action_type: ActionType, impact: Impact) -> bool:
    """Deleting a file or any high-impact change is never applied unasked."""
    return action_type == "delete-file" or impact == "high"


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid")


# =============================================================================
# Discovery
# =============================================================================


class SemanticFolderInfo(_Record):
    folder_name: str
    purpose: str
    file_count: int
    files: list[str] = Field(default_factory=list)


class MemoryBankStructure(_Record):
    """Layout of the memory bank: core files, topic folders, extras."""

    core_files: list[str] = Field(default_factory=list)
    semantic_folders: list[SemanticFolderInfo] = Field(default_factory=list)
    additional_files: list[str] = Field(default_factory=list)
    total_files: int = 0


# =============================================================================
# Reconciliation
# =============================================================================


class FileConflictInfo(_Record):
    file_name: str
    file_path: str
    description: str
    impact: Impact
    action_type: ActionType
    suggested_action: str


class SyncConflict(_Record):
    kind: ConflictKind
    severity: Severity
    missing_files: list[FileConflictInfo] = Field(default_factory=list)
    orphaned_files: list[FileConflictInfo] = Field(default_factory=list)
    auto_resolvable: bool


class SyncValidation(_Record):
    """Cross-reference of the memory bank against the index document."""

    memory_bank_files: list[str] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)
    missing_references: list[str] = Field(default_factory=list)
    orphaned_references: list[str] = Field(default_factory=list)
    is_in_sync: bool
    index_present: bool
    last_validated: str = Field(default_factory=utc_timestamp)
    conflict: SyncConflict | None = None


class QualityAssessment(_Record):
    completeness: str = "0%"
    consistency: str = "Unknown"
    clarity: str = "Unknown"


class StructureCompliance(_Record):
    has_semantic_folders: bool = False
    folder_count: int = 0
    total_files: int = 0
    organization: Organization = "unknown"


class ValidationResult(_Record):
    """Full memory bank validation: core files, quality, layout, sync."""

    is_valid: bool = False
    core_files_present: list[str] = Field(default_factory=list)
    missing_files: list[str] = Field(default_factory=list)
    additional_files: list[str] = Field(default_factory=list)
    quality: QualityAssessment = Field(default_factory=QualityAssessment)
    structure_compliance: StructureCompliance = Field(default_factory=StructureCompliance)
    sync: SyncValidation | None = None


class ValidationIssue(_Record):
    type: Literal["missing_file", "missing_copilot_integration"]
    file: str
    message: str


class ValidationReport(_Record):
    status: Literal["valid", "invalid"]
    issues: list[ValidationIssue] = Field(default_factory=list)
    summary: str
    file_count: int
    copilot_integration: bool


# =============================================================================
# Planning and resolution
# =============================================================================


class ConflictAction(_Record):
    action_type: ActionType
    target_file: str
    description: str = ""
    details: str = ""
    impact: Impact = "medium"
    requires_confirmation: bool

    @model_validator(mode="after")
    def enforce_confirmation(self) -> ConflictAction:
        # Also holds for sessions validated back from client JSON
        if requires_confirmation(self.action_type, self.impact):
            self.requires_confirmation = True
        return self


class ConversationStep(_Record):
    step: int = Field(ge=1)
    type: StepType
    content: str
    options: list[str] | None = None
    user_response: str | None = None
    timestamp: str = Field(default_factory=utc_timestamp)


class UserChoice(_Record):
    question: str
    answer: str
    selected_action: ConflictAction | None = None


class ResolutionState(StrEnum):
    IDLE = "idle"
    PRESENTING = "presenting"
    AWAITING_RESPONSE = "awaiting-response"
    APPLYING = "applying"
    COMPLETED = "completed"
    ABORTED = "aborted"


TERMINAL_STATES: frozenset[ResolutionState] = frozenset(
    {ResolutionState.COMPLETED, ResolutionState.ABORTED}
)


class InteractiveResolutionResult(_Record):
    resolved: bool
    actions_performed: list[ConflictAction] = Field(default_factory=list)
    user_choices: list[UserChoice] = Field(default_factory=list)
    final_state: SyncValidation | None = None
    conversation_log: list[ConversationStep] = Field(default_factory=list)


class ResolutionSession(_Record):
    """Everything the resolver needs between calls.

    The caller keeps the session and passes it back on each call; the
    resolver never holds state of its own.
    """

    project_root: str
    state: ResolutionState = ResolutionState.IDLE
    actions: list[ConflictAction] = Field(default_factory=list)
    cursor: int = 0
    conversation_log: list[ConversationStep] = Field(default_factory=list)
    user_choices: list[UserChoice] = Field(default_factory=list)
    actions_performed: list[ConflictAction] = Field(default_factory=list)
    final_state: SyncValidation | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def current_action(self) -> ConflictAction | None:
        if self.cursor < len(self.actions):
            return self.actions[self.cursor]
        return None

    @property
    def pending_question(self) -> ConversationStep | None:
        """The question awaiting an answer, if any."""
        if self.state != ResolutionState.AWAITING_RESPONSE or not self.conversation_log:
            return None
        return next((s for s in reversed(self.conversation_log) if s.type == "question"), None)
