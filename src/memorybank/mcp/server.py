"""FastMCP server creation and wiring.

Every call is logged twice: tool_start with its key params and
tool_complete with a short summary. Expected errors are logged as
warnings; unexpected ones as errors with the traceback at debug level.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from fastmcp.utilities.json_schema import dereference_refs
from pydantic import BaseModel, Field

from memorybank.core.logging import clear_request_id, set_request_id

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from memorybank.mcp.context import AppContext
    from memorybank.mcp.registry import ToolSpec

log = structlog.get_logger(__name__)

SERVER_INSTRUCTIONS = (
    "Memory bank tooling for AI coding agents: analyze a project's source tree, "
    "validate the memory bank documents against the index document, and resolve "
    "sync conflicts one question at a time."
)


class ToolResponse(BaseModel):
    """Standardized tool response envelope."""

    result: Any = None
    meta: dict[str, Any] = Field(default_factory=dict)

    success: bool
    error: str | None = None


def _extract_log_params(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Key params for the tool_start log; sessions and long values are elided."""
    params: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key == "session":
            params[key] = "<session>" if value else None
        elif isinstance(value, str) and len(value) > 50:
            params[key] = value[:50] + "..."
        elif value is not None:
            params[key] = value
    return params


def _extract_result_summary(tool_name: str, result: dict[str, Any]) -> dict[str, Any]:
    summary: dict[str, Any] = {}
    if "summary" in result and result["summary"]:
        summary["summary"] = result["summary"]
    if tool_name == "validate_memory_bank" and "is_valid" in result:
        summary["is_valid"] = result["is_valid"]
    elif tool_name == "resolve_sync_conflicts" and "state" in result:
        summary["state"] = result["state"]
    elif tool_name == "setup_copilot_instructions" and "in_sync" in result:
        summary["in_sync"] = result["in_sync"]
    return summary


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with all tools wired to context."""
    from fastmcp import FastMCP

    from memorybank.mcp.registry import registry

    # Import tools to trigger registration
    from memorybank.mcp.tools import analysis, memory_bank  # noqa: F401

    log.info("mcp_server_creating", project_root=str(context.default_root))

    mcp = FastMCP("memorybank", instructions=SERVER_INSTRUCTIONS)

    tool_count = 0
    for spec in registry.get_all():
        _wire_tool(mcp, spec, context)
        tool_count += 1

    log.info("mcp_server_created", tool_count=tool_count)
    return mcp


def make_handler(spec: ToolSpec, context: AppContext) -> Any:
    """Build the kwargs-taking coroutine FastMCP calls for ``spec``.

    The handler validates kwargs against the params model and always
    returns a ToolResponse dump, never raising.
    """
    from pydantic import ValidationError

    from memorybank.core.errors import MemoryBankError

    params_model = spec.params_model
    spec_handler = spec.handler

    async def handler(**kwargs: Any) -> dict[str, Any]:
        tool_name = spec.name
        start_time = time.perf_counter()
        request_id = set_request_id()
        log.info("tool_start", tool=tool_name, **_extract_log_params(kwargs))

        try:
            try:
                params = params_model(**kwargs)
            except ValidationError as e:
                first = e.errors()[0]["msg"] if e.errors() else str(e)
                log.warning("tool_validation_error", tool=tool_name, error=first)
                return ToolResponse(
                    success=False,
                    error=f"Validation error: {first}",
                    meta={
                        "error_type": "validation",
                        "validation_errors": [
                            {
                                "field": ".".join(str(x) for x in err["loc"]),
                                "message": err["msg"],
                            }
                            for err in e.errors()[:5]
                        ],
                    },
                ).model_dump()

            try:
                result_data: dict[str, Any] = await spec_handler(context, params)
            except MemoryBankError as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                log.warning(
                    "tool_error",
                    tool=tool_name,
                    error_code=e.code.value,
                    error=e.message,
                    path=e.path,
                    elapsed_ms=elapsed_ms,
                )
                return ToolResponse(
                    success=False,
                    error=e.message,
                    meta={"request_id": request_id, "error": e.to_dict()},
                ).model_dump()
            except Exception as e:
                elapsed_ms = int((time.perf_counter() - start_time) * 1000)
                log.error(
                    "tool_internal_error", tool=tool_name, error=str(e), elapsed_ms=elapsed_ms
                )
                log.debug("tool_internal_error_traceback", tool=tool_name, exc_info=True)
                return ToolResponse(
                    success=False, error=str(e), meta={"request_id": request_id}
                ).model_dump()

            elapsed_ms = int((time.perf_counter() - start_time) * 1000)
            log.info(
                "tool_complete",
                tool=tool_name,
                elapsed_ms=elapsed_ms,
                **_extract_result_summary(tool_name, result_data),
            )
            return ToolResponse(
                success=True,
                result=result_data,
                meta={"request_id": request_id, "timestamp": int(time.time() * 1000)},
            ).model_dump()
        finally:
            clear_request_id()

    return handler


def _wire_tool(mcp: FastMCP, spec: ToolSpec, context: AppContext) -> None:
    """Wire a single tool spec to FastMCP with a flat, $ref-free schema."""
    from fastmcp.tools.tool import FunctionTool

    flat_schema = dereference_refs(spec.params_model.model_json_schema())
    tool = FunctionTool(
        name=spec.name,
        description=spec.description,
        parameters=flat_schema,
        fn=make_handler(spec, context),
    )
    mcp.add_tool(tool)


def run_server(project_root: Path) -> None:
    """Create and run the MCP server over stdio."""
    from memorybank.config import load_config
    from memorybank.core.logging import configure_logging
    from memorybank.mcp.context import AppContext

    settings = load_config(project_root=project_root)
    # stdout carries the protocol; logs go to stderr and any configured files
    outputs = [o for o in settings.logging.outputs if o.destination != "stdout"]
    configure_logging(config=settings.logging.model_copy(update={"outputs": outputs}))

    log.info("mcp_server_starting", project_root=str(project_root))
    context = AppContext(default_root=project_root)
    mcp = create_mcp_server(context)

    log.info("mcp_server_running")
    mcp.run()
