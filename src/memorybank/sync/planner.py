"""Turns a SyncConflict into an ordered list of corrective actions."""

from __future__ import annotations

from memorybank.config.constants import INDEX_DOCUMENT_NAME
from memorybank.sync.models import (
    ActionType,
    ConflictAction,
    FileConflictInfo,
    Impact,
    SyncConflict,
    requires_confirmation,
)

# Cheapest and least destructive first
ACTION_ORDER: dict[str, int] = {
    "add-reference": 0,
    "remove-reference": 1,
    "create-file": 2,
    "update-structure": 3,
    "delete-file": 4,
}

# What the user may pick instead of the proposed action
ALTERNATIVES: dict[str, ActionType] = {
    "add-reference": "delete-file",
    "delete-file": "add-reference",
    "remove-reference": "create-file",
    "create-file": "remove-reference",
}

_DESCRIPTIONS: dict[str, tuple[str, str]] = {
    "add-reference": (
        "Add reference to {target} in the index document",
        "List {target} in the Memory Bank section of the index document",
    ),
    "remove-reference": (
        "Remove obsolete reference to {target}",
        "Drop every line of the index document that references {target}",
    ),
    "create-file": (
        "Create missing file {target}",
        "Create {target} from a template so the existing reference resolves",
    ),
    "update-structure": (
        "Regenerate the Memory Bank section of {target}",
        "Rewrite the managed section of {target} from the current memory bank layout",
    ),
    "delete-file": (
        "Delete {target} from the memory bank",
        "Remove {target} permanently instead of referencing it",
    ),
}


def make_action(action_type: ActionType, target_file: str, impact: Impact) -> ConflictAction:
    description, details = _DESCRIPTIONS[action_type]
    return ConflictAction(
        action_type=action_type,
        target_file=target_file,
        description=description.format(target=target_file),
        details=details.format(target=target_file),
        impact=impact,
        requires_confirmation=requires_confirmation(action_type, impact),
    )


def _action_for(info: FileConflictInfo) -> ConflictAction:
    return make_action(info.action_type, info.file_name, info.impact)


def sort_actions(actions: list[ConflictAction]) -> list[ConflictAction]:
    return sorted(actions, key=lambda a: (ACTION_ORDER[a.action_type], a.target_file))


def plan(
    conflict: SyncConflict, index_name: str = INDEX_DOCUMENT_NAME
) -> list[ConflictAction]:
    """Ordered actions resolving ``conflict``.

    Order is by action type (add-reference, remove-reference, create-file,
    update-structure, delete-file), then by target file.
    """
    if conflict.kind == "structure-mismatch":
        return [make_action("update-structure", index_name, "low")]
    infos = [*conflict.missing_files, *conflict.orphaned_files]
    return sort_actions([_action_for(info) for info in infos])


def alternative_for(action: ConflictAction) -> ConflictAction | None:
    """The opposite remedy for the same file, if one exists."""
    other = ALTERNATIVES.get(action.action_type)
    if other is None:
        return None
    return make_action(other, action.target_file, action.impact)
