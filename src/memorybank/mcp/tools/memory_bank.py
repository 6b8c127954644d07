"""Memory bank tools: validation, conflict resolution, index setup."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field, ValidationError

from memorybank.core.errors import ErrorCode, MemoryBankError
from memorybank.mcp.registry import registry
from memorybank.mcp.tools.base import BaseParams
from memorybank.sync.actions import ActionApplier
from memorybank.sync.models import ResolutionSession
from memorybank.sync.reconciler import SyncReconciler, build_report
from memorybank.sync.resolver import InteractiveResolver

if TYPE_CHECKING:
    from memorybank.mcp.context import AppContext


class ValidateMemoryBankParams(BaseParams):
    full: bool = Field(False, description="Return the full validation result, not the summary")


class ResolveSyncConflictsParams(BaseParams):
    action: Literal["start", "respond", "abort"] = Field(
        "start", description="start a session, respond to its question, or abort it"
    )
    session: dict[str, Any] | None = Field(
        None, description="Session returned by the previous call (respond/abort)"
    )
    response: str | None = Field(
        None, description="Answer to the pending question: apply, alternative, skip or cancel"
    )


class SetupCopilotInstructionsParams(BaseParams):
    pass


@registry.register(
    "validate_memory_bank",
    "Validate memory bank completeness, structure and sync with the index document.",
    ValidateMemoryBankParams,
)
async def validate_memory_bank(
    ctx: AppContext, params: ValidateMemoryBankParams
) -> dict[str, Any]:
    root = ctx.resolve_root(params.project_root_path)
    config = ctx.settings_for(root).memory_bank
    result = SyncReconciler(config, ctx.fs).validate_memory_bank(root)
    if params.full:
        return result.model_dump(mode="json")
    report = build_report(result, PurePosixPath(config.index_document).name)
    return report.model_dump(mode="json")


def _load_session(raw: dict[str, Any] | None) -> ResolutionSession:
    if raw is None:
        raise MemoryBankError(
            code=ErrorCode.SESSION_INVALID,
            message="A session from a previous call is required",
        )
    try:
        return ResolutionSession.model_validate(raw)
    except ValidationError as e:
        raise MemoryBankError(
            code=ErrorCode.SESSION_INVALID,
            message=f"Invalid session: {e.errors()[0]['msg'] if e.errors() else e}",
        ) from e


@registry.register(
    "resolve_sync_conflicts",
    "Walk through sync conflict resolution one question at a time. "
    "Pass the returned session back with each respond/abort call.",
    ResolveSyncConflictsParams,
)
async def resolve_sync_conflicts(
    ctx: AppContext, params: ResolveSyncConflictsParams
) -> dict[str, Any]:
    if params.action == "start":
        root = ctx.resolve_root(params.project_root_path)
        resolver = InteractiveResolver(ctx.settings_for(root).memory_bank, ctx.fs)
        session = resolver.start(root)
    else:
        session = _load_session(params.session)
        root = ctx.resolve_root(session.project_root)
        resolver = InteractiveResolver(ctx.settings_for(root).memory_bank, ctx.fs)
        if params.action == "respond":
            session = resolver.respond(session, params.response or "")
        else:
            session = resolver.abort(session)

    question = session.pending_question
    return {
        "state": session.state.value,
        "question": question.model_dump(mode="json") if question else None,
        "session": session.model_dump(mode="json"),
        "result": resolver.result(session).model_dump(mode="json")
        if session.is_terminal
        else None,
    }


@registry.register(
    "setup_copilot_instructions",
    "Create or refresh the Memory Bank section of the index document.",
    SetupCopilotInstructionsParams,
)
async def setup_copilot_instructions(
    ctx: AppContext, params: SetupCopilotInstructionsParams
) -> dict[str, Any]:
    root = ctx.resolve_root(params.project_root_path)
    config = ctx.settings_for(root).memory_bank
    outcome = ActionApplier(root, config, ctx.fs).setup_index()
    validation = SyncReconciler(config, ctx.fs).validate_sync(root)
    return {
        "path": outcome.path,
        "summary": outcome.message,
        "in_sync": validation.is_in_sync,
    }
