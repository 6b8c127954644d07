"""Tests for action planning."""

from __future__ import annotations

from memorybank.sync.planner import (
    ACTION_ORDER,
    alternative_for,
    make_action,
    plan,
    requires_confirmation,
)
from memorybank.sync.reconciler import build_conflict, structure_mismatch

MB_PATH = ".github/memory-bank"


class TestPlan:
    def test_actions_ordered_by_type_then_target(self) -> None:
        # Given
        conflict = build_conflict(
            ["zeta.md", "alpha.md", "projectbrief.md"], ["old.md", "progress.md"], MB_PATH
        )

        # When
        actions = plan(conflict)

        # Then
        assert [(a.action_type, a.target_file) for a in actions] == [
            ("add-reference", "alpha.md"),
            ("add-reference", "projectbrief.md"),
            ("add-reference", "zeta.md"),
            ("remove-reference", "old.md"),
            ("create-file", "progress.md"),
        ]

    def test_plan_is_deterministic(self) -> None:
        conflict = build_conflict(["b.md", "a.md"], ["x.md"], MB_PATH)

        assert plan(conflict) == plan(conflict)

    def test_confirmation_follows_impact(self) -> None:
        conflict = build_conflict(["projectbrief.md", "notes.md"], [], MB_PATH)

        confirm = {a.target_file: a.requires_confirmation for a in plan(conflict)}

        assert confirm == {"projectbrief.md": True, "notes.md": False}

    def test_structure_mismatch_regenerates_section(self) -> None:
        (action,) = plan(structure_mismatch(), "copilot-instructions.md")

        assert action.action_type == "update-structure"
        assert action.target_file == "copilot-instructions.md"
        assert not action.requires_confirmation

    def test_action_order_covers_every_type(self) -> None:
        assert sorted(ACTION_ORDER, key=ACTION_ORDER.get) == [  # type: ignore[arg-type]
            "add-reference",
            "remove-reference",
            "create-file",
            "update-structure",
            "delete-file",
        ]


class TestActions:
    def test_delete_always_requires_confirmation(self) -> None:
        assert requires_confirmation("delete-file", "low")
        assert not requires_confirmation("add-reference", "medium")
        assert requires_confirmation("add-reference", "high")

    def test_make_action_describes_target(self) -> None:
        action = make_action("create-file", "progress.md", "high")

        assert action.description == "Create missing file progress.md"
        assert "progress.md" in action.details

    def test_alternatives_are_opposite_remedies(self) -> None:
        add = make_action("add-reference", "notes.md", "medium")
        orphan = make_action("remove-reference", "old.md", "medium")

        alt_add = alternative_for(add)
        alt_orphan = alternative_for(orphan)

        assert alt_add is not None and alt_add.action_type == "delete-file"
        assert alt_add.requires_confirmation
        assert alt_orphan is not None and alt_orphan.action_type == "create-file"
        assert alternative_for(make_action("update-structure", "idx.md", "low")) is None
