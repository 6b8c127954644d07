"""Interactive conflict resolution as an explicit state machine.

The resolver keeps no state between calls. Each call takes a
ResolutionSession, returns an updated copy, and appends to its
conversation log; earlier steps are never rewritten. That makes a
session resumable across processes: dump it to JSON, hand it to a
client, validate it back on the next call.

States::

    IDLE -> PRESENTING -> AWAITING_RESPONSE -> APPLYING -> PRESENTING ...
                       \\-> COMPLETED                (actions exhausted)
    any non-terminal   --> ABORTED                  (explicit cancel)

Actions that do not require confirmation are applied as soon as they
are reached; each one still gets an information step.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import structlog

from memorybank.config.models import MemoryBankConfig
from memorybank.files.ops import FileSystem, LocalFileSystem
from memorybank.sync.actions import ActionApplier
from memorybank.sync.models import (
    ConflictAction,
    ConversationStep,
    InteractiveResolutionResult,
    ResolutionSession,
    ResolutionState,
    StepType,
    UserChoice,
)
from memorybank.sync.planner import alternative_for, plan
from memorybank.sync.reconciler import SyncReconciler

log = structlog.get_logger(__name__)

APPLY = "apply"
ALTERNATIVE = "alternative"
SKIP = "skip"
CANCEL = "cancel"

_ALIASES: dict[str, str] = {
    "apply": APPLY,
    "yes": APPLY,
    "y": APPLY,
    "alternative": ALTERNATIVE,
    "alt": ALTERNATIVE,
    "skip": SKIP,
    "no": SKIP,
    "n": SKIP,
    "cancel": CANCEL,
    "abort": CANCEL,
    "quit": CANCEL,
}


def parse_response(response: str) -> str | None:
    """Canonical option for a user's answer, or None if unrecognised."""
    return _ALIASES.get(response.strip().lower())


def _append(
    session: ResolutionSession,
    step_type: StepType,
    content: str,
    options: list[str] | None = None,
    user_response: str | None = None,
) -> ConversationStep:
    step = ConversationStep(
        step=len(session.conversation_log) + 1,
        type=step_type,
        content=content,
        options=options,
        user_response=user_response,
    )
    session.conversation_log.append(step)
    return step


class InteractiveResolver:
    """Walks a user through planned actions one question at a time."""

    def __init__(self, config: MemoryBankConfig | None = None, fs: FileSystem | None = None):
        self._config = config or MemoryBankConfig()
        self._fs = fs or LocalFileSystem()
        self._reconciler = SyncReconciler(self._config, self._fs)

    def start(
        self, project_root: Path, actions: list[ConflictAction] | None = None
    ) -> ResolutionSession:
        """Begin a session, planning from the current sync state when no actions are given."""
        if actions is None:
            validation = self._reconciler.validate_sync(project_root)
            conflict = self._reconciler.conflict_for(project_root, validation)
            index_name = PurePosixPath(self._config.index_document).name
            actions = plan(conflict, index_name) if conflict else []

        session = ResolutionSession(project_root=str(project_root), actions=list(actions))
        confirm = sum(1 for a in session.actions if a.requires_confirmation)
        if session.actions:
            overview = (
                f"Found {len(session.actions)} action(s) to resolve; "
                f"{confirm} need confirmation, "
                f"{len(session.actions) - confirm} apply automatically."
            )
        else:
            overview = "No sync conflicts found; nothing to resolve."
        _append(session, "information", overview)
        session.state = ResolutionState.PRESENTING
        log.info("resolution_started", root=str(project_root), actions=len(session.actions))
        return self._advance(session)

    def respond(self, session: ResolutionSession, response: str) -> ResolutionSession:
        """Answer the pending question and continue."""
        session = session.model_copy(deep=True)
        if session.is_terminal:
            _append(session, "warning", f"Session is {session.state.value}; input ignored.")
            return session
        question = session.pending_question
        action = session.current_action
        if question is None or action is None:
            _append(session, "warning", "No question is awaiting a response.")
            return session

        choice = parse_response(response)
        alternative = alternative_for(action)
        if choice is None or (choice == ALTERNATIVE and alternative is None):
            options = ", ".join(question.options or ())
            _append(
                session, "warning", f"Unrecognised response '{response}'. Choose one of: {options}."
            )
            return session

        _append(session, "confirmation", f"Selected: {choice}", user_response=response)
        if choice == CANCEL:
            session.user_choices.append(UserChoice(question=question.content, answer=response))
            return self._abort(session, "Resolution cancelled by user")

        selected = {APPLY: action, ALTERNATIVE: alternative, SKIP: None}[choice]
        session.user_choices.append(
            UserChoice(question=question.content, answer=response, selected_action=selected)
        )
        session.state = ResolutionState.APPLYING
        if selected is None:
            _append(session, "information", f"Skipped: {action.description}")
        else:
            self._apply(session, selected, automatic=False)
        session.cursor += 1
        session.state = ResolutionState.PRESENTING
        return self._advance(session)

    def abort(
        self, session: ResolutionSession, reason: str = "Resolution cancelled by user"
    ) -> ResolutionSession:
        session = session.model_copy(deep=True)
        if session.is_terminal:
            _append(session, "warning", f"Session is {session.state.value}; cannot abort.")
            return session
        return self._abort(session, reason)

    def result(self, session: ResolutionSession) -> InteractiveResolutionResult:
        return InteractiveResolutionResult(
            resolved=(
                session.state == ResolutionState.COMPLETED
                and session.final_state is not None
                and session.final_state.is_in_sync
            ),
            actions_performed=list(session.actions_performed),
            user_choices=list(session.user_choices),
            final_state=session.final_state,
            conversation_log=list(session.conversation_log),
        )

    def _abort(self, session: ResolutionSession, reason: str) -> ResolutionSession:
        session.final_state = self._reconciler.validate_sync(Path(session.project_root))
        _append(
            session,
            "warning",
            f"{reason}. {len(session.actions_performed)} action(s) were applied before stopping.",
        )
        session.state = ResolutionState.ABORTED
        log.info("resolution_aborted", applied=len(session.actions_performed))
        return session

    def _apply(self, session: ResolutionSession, action: ConflictAction, automatic: bool) -> None:
        applier = ActionApplier(Path(session.project_root), self._config, self._fs)
        outcome = applier.apply(action)
        if outcome.applied:
            session.actions_performed.append(action)
            prefix = "Applied automatically" if automatic else "Applied"
            _append(session, "information", f"{prefix}: {action.description}. {outcome.message}.")
        else:
            _append(
                session, "warning", f"Could not {action.description.lower()}: {outcome.message}"
            )

    def _advance(self, session: ResolutionSession) -> ResolutionSession:
        """Auto-apply until a question is needed or the actions run out."""
        while (action := session.current_action) is not None:
            if action.requires_confirmation:
                options = [APPLY]
                alternative = alternative_for(action)
                if alternative is not None:
                    options.append(ALTERNATIVE)
                options.extend([SKIP, CANCEL])
                content = f"{action.description}? {action.details}."
                if alternative is not None:
                    content += f" Alternative: {alternative.description}."
                _append(session, "question", content, options=options)
                session.state = ResolutionState.AWAITING_RESPONSE
                return session
            session.state = ResolutionState.APPLYING
            self._apply(session, action, automatic=True)
            session.cursor += 1
            session.state = ResolutionState.PRESENTING

        final = self._reconciler.validate_sync(Path(session.project_root))
        session.final_state = final
        if final.is_in_sync:
            summary = "memory bank and index document are in sync"
        else:
            summary = (
                f"still out of sync ({len(final.missing_references)} missing, "
                f"{len(final.orphaned_references)} orphaned)"
            )
        _append(
            session,
            "result",
            f"Resolution complete: {len(session.actions_performed)} action(s) applied; {summary}.",
        )
        session.state = ResolutionState.COMPLETED
        log.info(
            "resolution_completed",
            applied=len(session.actions_performed),
            in_sync=final.is_in_sync,
        )
        return session
