"""Tests for mcp/server.py module."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from memorybank.core.errors import ErrorCode, MemoryBankError
from memorybank.core.logging import get_request_id
from memorybank.mcp.context import AppContext
from memorybank.mcp.registry import ToolSpec
from memorybank.mcp.server import (
    ToolResponse,
    _extract_log_params,
    _extract_result_summary,
    create_mcp_server,
    make_handler,
)
from memorybank.mcp.tools.base import BaseParams

TOOL_NAMES = {
    "analyze_project_structure",
    "validate_memory_bank",
    "resolve_sync_conflicts",
    "setup_copilot_instructions",
}


class TestToolResponse:
    def test_success_defaults(self) -> None:
        response = ToolResponse(success=True, result={"data": "value"})

        assert response.error is None
        assert response.meta == {}

    def test_model_dump(self) -> None:
        data = ToolResponse(success=False, error="failed").model_dump()

        assert data == {"result": None, "meta": {}, "success": False, "error": "failed"}


class TestExtractLogParams:
    def test_drops_none_and_elides_session(self) -> None:
        params = _extract_log_params(
            {"action": "respond", "session": {"project_root": "/x"}, "response": None}
        )

        assert params == {"action": "respond", "session": "<session>"}

    def test_truncates_long_strings(self) -> None:
        params = _extract_log_params({"project_root_path": "p" * 80})

        assert params["project_root_path"] == "p" * 50 + "..."


class TestExtractResultSummary:
    def test_per_tool_fields(self) -> None:
        assert _extract_result_summary("resolve_sync_conflicts", {"state": "completed"}) == {
            "state": "completed"
        }
        assert _extract_result_summary(
            "validate_memory_bank", {"is_valid": False, "summary": "No files"}
        ) == {"summary": "No files", "is_valid": False}

    def test_unknown_tool_has_empty_summary(self) -> None:
        assert _extract_result_summary("other", {"x": 1}) == {}


class TestCreateMcpServer:
    def test_registers_every_tool(self, tmp_path: Path) -> None:
        # Given
        context = AppContext(default_root=tmp_path)

        # When
        with patch("memorybank.mcp.server._wire_tool") as wire:
            mcp = create_mcp_server(context)

        # Then
        assert mcp.name == "memorybank"
        assert {call.args[1].name for call in wire.call_args_list} == TOOL_NAMES

    def test_wires_real_tools(self, tmp_path: Path) -> None:
        mcp = create_mcp_server(AppContext(default_root=tmp_path))

        assert mcp.name == "memorybank"


class _EchoParams(BaseParams):
    value: int = 0


def _spec(handler: Any) -> ToolSpec:
    return ToolSpec(name="echo", handler=handler, description="Echo", params_model=_EchoParams)


class TestMakeHandler:
    """Envelope produced around every tool call."""

    @pytest.mark.asyncio
    async def test_success_envelope(self, tmp_path: Path) -> None:
        async def echo(ctx: AppContext, params: _EchoParams) -> dict[str, Any]:
            return {"value": params.value}

        response = await make_handler(_spec(echo), AppContext(default_root=tmp_path))(value=3)

        assert response["success"] is True
        assert response["result"] == {"value": 3}
        assert set(response["meta"]) == {"request_id", "timestamp"}
        assert get_request_id() is None

    @pytest.mark.asyncio
    async def test_validation_envelope(self, tmp_path: Path) -> None:
        async def echo(ctx: AppContext, params: _EchoParams) -> dict[str, Any]:
            raise AssertionError("not reached")

        handler = make_handler(_spec(echo), AppContext(default_root=tmp_path))
        response = await handler(value="not-a-number", bogus=True)

        assert response["success"] is False
        assert response["error"].startswith("Validation error:")
        assert response["meta"]["error_type"] == "validation"
        fields = {e["field"] for e in response["meta"]["validation_errors"]}
        assert fields == {"value", "bogus"}

    @pytest.mark.asyncio
    async def test_domain_error_envelope(self, tmp_path: Path) -> None:
        async def fail(ctx: AppContext, params: _EchoParams) -> dict[str, Any]:
            raise MemoryBankError(code=ErrorCode.SESSION_INVALID, message="bad session")

        response = await make_handler(_spec(fail), AppContext(default_root=tmp_path))()

        assert response["success"] is False
        assert response["error"] == "bad session"
        assert response["meta"]["error"]["error"] == "SESSION_INVALID"
        assert response["meta"]["error"]["code"] == 4003

    @pytest.mark.asyncio
    async def test_unexpected_error_envelope(self, tmp_path: Path) -> None:
        async def crash(ctx: AppContext, params: _EchoParams) -> dict[str, Any]:
            raise RuntimeError("boom")

        response = await make_handler(_spec(crash), AppContext(default_root=tmp_path))()

        assert response["success"] is False
        assert response["error"] == "boom"
        assert "request_id" in response["meta"]
        assert get_request_id() is None
