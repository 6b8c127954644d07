"""Tests for the interactive resolution state machine."""

from __future__ import annotations

from pathlib import Path

import pytest

from memorybank.sync.models import ConflictAction, ResolutionSession, ResolutionState
from memorybank.sync.planner import make_action
from memorybank.sync.resolver import InteractiveResolver, parse_response


@pytest.fixture
def resolver() -> InteractiveResolver:
    return InteractiveResolver()


@pytest.fixture
def core_conflict(tmp_path: Path, bank_dir: Path, index_path: Path) -> Path:
    """Project whose only conflict is an unreferenced core file."""
    (bank_dir / "projectbrief.md").write_text("# Project Brief\n")
    index_path.write_text("# Memory Bank\n")
    return tmp_path


def _step_numbers(session: ResolutionSession) -> list[int]:
    return [s.step for s in session.conversation_log]


class TestParseResponse:
    @pytest.mark.parametrize(
        ("answer", "expected"),
        [("Yes", "apply"), (" y ", "apply"), ("alt", "alternative"), ("no", "skip"),
         ("quit", "cancel"), ("perhaps", None)],
    )
    def test_aliases(self, answer: str, expected: str | None) -> None:
        assert parse_response(answer) == expected


class TestStart:
    def test_in_sync_project_completes_immediately(
        self, resolver: InteractiveResolver, tmp_path: Path, bank_dir: Path, index_path: Path
    ) -> None:
        # Given
        (bank_dir / "notes.md").write_text("x")
        index_path.write_text("# Memory Bank\n\n- `notes.md`\n")

        # When
        session = resolver.start(tmp_path)

        # Then
        assert session.state == ResolutionState.COMPLETED
        assert [s.type for s in session.conversation_log] == ["information", "result"]
        assert resolver.result(session).resolved

    def test_non_confirm_actions_apply_automatically(
        self, resolver: InteractiveResolver, tmp_path: Path, bank_dir: Path, index_path: Path
    ) -> None:
        # Given
        (bank_dir / "a.md").write_text("x")
        (bank_dir / "notes.md").write_text("x")
        index_path.write_text("# Memory Bank\n")

        # When
        session = resolver.start(tmp_path)

        # Then
        assert session.state == ResolutionState.COMPLETED
        assert [a.target_file for a in session.actions_performed] == ["a.md", "notes.md"]
        assert session.final_state is not None and session.final_state.is_in_sync
        assert _step_numbers(session) == list(range(1, len(session.conversation_log) + 1))
        assert "Applied automatically" in session.conversation_log[1].content

    def test_high_impact_action_asks_first(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        session = resolver.start(core_conflict)

        question = session.pending_question
        assert session.state == ResolutionState.AWAITING_RESPONSE
        assert question is not None
        assert question.options == ["apply", "alternative", "skip", "cancel"]
        assert session.actions_performed == []

    def test_explicit_actions_are_used(
        self, resolver: InteractiveResolver, tmp_path: Path, bank_dir: Path
    ) -> None:
        action = make_action("create-file", "progress.md", "medium")

        session = resolver.start(tmp_path, actions=[action])

        assert session.actions_performed == [action]
        assert (bank_dir / "progress.md").exists()

    def test_delete_is_asked_even_when_flag_is_cleared(
        self, resolver: InteractiveResolver, tmp_path: Path, bank_dir: Path
    ) -> None:
        # Given a caller-built delete that claims to need no confirmation
        (bank_dir / "keep.md").write_text("x")
        action = ConflictAction(
            action_type="delete-file", target_file="keep.md", requires_confirmation=False
        )

        # When
        session = resolver.start(tmp_path, actions=[action])

        # Then
        assert session.state == ResolutionState.AWAITING_RESPONSE
        assert session.pending_question is not None
        assert session.actions_performed == []
        assert (bank_dir / "keep.md").exists()


class TestRespond:
    def test_apply_resolves(self, resolver: InteractiveResolver, core_conflict: Path) -> None:
        # Given
        session = resolver.start(core_conflict)

        # When
        session = resolver.respond(session, "apply")

        # Then
        result = resolver.result(session)
        assert session.state == ResolutionState.COMPLETED
        assert result.resolved
        assert result.user_choices[0].selected_action is not None
        assert result.user_choices[0].selected_action.action_type == "add-reference"

    def test_alternative_deletes_the_file(
        self, resolver: InteractiveResolver, core_conflict: Path, bank_dir: Path
    ) -> None:
        session = resolver.start(core_conflict)

        session = resolver.respond(session, "alternative")

        assert [a.action_type for a in session.actions_performed] == ["delete-file"]
        assert not (bank_dir / "projectbrief.md").exists()
        assert resolver.result(session).resolved

    def test_skip_leaves_conflict(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        session = resolver.start(core_conflict)

        session = resolver.respond(session, "skip")

        result = resolver.result(session)
        assert session.state == ResolutionState.COMPLETED
        assert not result.resolved
        assert result.final_state is not None
        assert result.final_state.missing_references == ["projectbrief.md"]

    def test_cancel_aborts_with_final_state(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        session = resolver.start(core_conflict)

        session = resolver.respond(session, "cancel")

        assert session.state == ResolutionState.ABORTED
        assert session.final_state is not None
        assert not session.final_state.is_in_sync
        assert not resolver.result(session).resolved

    def test_unrecognised_answer_warns_and_keeps_waiting(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        session = resolver.start(core_conflict)
        before = len(session.conversation_log)

        session = resolver.respond(session, "perhaps")

        assert session.state == ResolutionState.AWAITING_RESPONSE
        assert len(session.conversation_log) == before + 1
        assert session.conversation_log[-1].type == "warning"
        assert "perhaps" in session.conversation_log[-1].content

    def test_terminal_session_ignores_input(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        done = resolver.respond(resolver.start(core_conflict), "apply")

        again = resolver.respond(done, "apply")

        assert again.state == ResolutionState.COMPLETED
        assert again.conversation_log[-1].type == "warning"
        assert len(again.actions_performed) == len(done.actions_performed)

    def test_input_session_is_not_mutated(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        session = resolver.start(core_conflict)
        snapshot = session.model_dump()

        resolver.respond(session, "apply")

        assert session.model_dump() == snapshot

    def test_log_is_append_only_and_numbered(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        first = resolver.start(core_conflict)

        second = resolver.respond(first, "apply")

        assert second.conversation_log[: len(first.conversation_log)] == first.conversation_log
        assert _step_numbers(second) == list(range(1, len(second.conversation_log) + 1))


class TestAbort:
    def test_abort_before_answering(
        self, resolver: InteractiveResolver, core_conflict: Path, bank_dir: Path
    ) -> None:
        session = resolver.abort(resolver.start(core_conflict), "Stopped")

        assert session.state == ResolutionState.ABORTED
        assert session.final_state is not None
        assert session.conversation_log[-1].content.startswith("Stopped.")
        assert (bank_dir / "projectbrief.md").exists()

    def test_abort_terminal_session_warns(
        self, resolver: InteractiveResolver, core_conflict: Path
    ) -> None:
        done = resolver.respond(resolver.start(core_conflict), "apply")

        again = resolver.abort(done)

        assert again.state == ResolutionState.COMPLETED
        assert again.conversation_log[-1].type == "warning"


def test_session_resumes_from_json(
    resolver: InteractiveResolver, core_conflict: Path
) -> None:
    # Given a session serialised by one process
    payload = resolver.start(core_conflict).model_dump_json()

    # When another process picks it up
    session = resolver.respond(ResolutionSession.model_validate_json(payload), "yes")

    # Then
    assert session.state == ResolutionState.COMPLETED
    assert resolver.result(session).resolved


def test_resumed_session_keeps_confirmation_for_high_impact(
    resolver: InteractiveResolver, core_conflict: Path
) -> None:
    # Given a serialised session whose pending action had its flag cleared
    data = resolver.start(core_conflict).model_dump(mode="json")
    for action in data["actions"]:
        action["requires_confirmation"] = False

    # When
    session = ResolutionSession.model_validate(data)

    # Then
    assert all(a.requires_confirmation for a in session.actions if a.impact == "high")
    assert session.current_action is not None
    assert session.current_action.requires_confirmation
