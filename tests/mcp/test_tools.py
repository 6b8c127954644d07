"""Tests for the registered MCP tools, called through their envelopes."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest

from memorybank.config.constants import CORE_FILES

CallTool = Callable[..., Awaitable[dict[str, Any]]]
ToolGetter = Callable[[str], CallTool]


class TestAnalyzeProjectStructure:
    @pytest.mark.asyncio
    async def test_analyzes_default_root(self, call_tool: ToolGetter, tmp_path: Path) -> None:
        # Given
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "web", "dependencies": {"react": "^18.0.0"}})
        )
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "App.jsx").write_text("export default function App() {}\n")

        # When
        response = await call_tool("analyze_project_structure")()

        # Then
        assert response["success"] is True
        result = response["result"]
        assert result["project_name"] == "web"
        assert result["facts"] is None
        assert result["summary"].endswith("patterns")

    @pytest.mark.asyncio
    async def test_include_facts_and_explicit_root(
        self, call_tool: ToolGetter, tmp_path: Path
    ) -> None:
        other = tmp_path / "other"
        other.mkdir()
        (other / "main.py").write_text("def main():\n    return 1\n")

        response = await call_tool("analyze_project_structure")(
            project_root_path=str(other), include_facts=True, depth="shallow"
        )

        facts = response["result"]["facts"]
        assert [f["file_path"] for f in facts["source_facts"]] == ["main.py"]

    @pytest.mark.asyncio
    async def test_rejects_unknown_depth(self, call_tool: ToolGetter) -> None:
        response = await call_tool("analyze_project_structure")(depth="bottomless")

        assert response["success"] is False
        assert response["meta"]["error_type"] == "validation"


class TestValidateMemoryBank:
    @pytest.mark.asyncio
    async def test_report_for_empty_project(self, call_tool: ToolGetter) -> None:
        response = await call_tool("validate_memory_bank")()

        report = response["result"]
        assert report["status"] == "invalid"
        assert report["file_count"] == 0
        assert report["copilot_integration"] is False

    @pytest.mark.asyncio
    async def test_full_result(
        self, call_tool: ToolGetter, bank_dir: Path, index_path: Path
    ) -> None:
        for name in CORE_FILES:
            (bank_dir / name).write_text(f"# {name}\n")
        index_path.write_text("".join(f"- {n}\n" for n in CORE_FILES))

        response = await call_tool("validate_memory_bank")(full=True)

        result = response["result"]
        assert result["is_valid"] is True
        assert result["sync"]["is_in_sync"] is True
        assert result["structure_compliance"]["organization"] == "flat"


class TestResolveSyncConflicts:
    @pytest.mark.asyncio
    async def test_start_then_respond(self, call_tool: ToolGetter, core_conflict: Path) -> None:
        tool = call_tool("resolve_sync_conflicts")

        # Given a session waiting on the core file question
        started = (await tool(action="start"))["result"]
        assert started["state"] == "awaiting-response"
        assert started["question"]["options"] == ["apply", "alternative", "skip", "cancel"]
        assert started["result"] is None

        # When the client answers with the returned session
        finished = (
            await tool(action="respond", session=started["session"], response="apply")
        )["result"]

        # Then
        assert finished["state"] == "completed"
        assert finished["question"] is None
        assert finished["result"]["resolved"] is True

    @pytest.mark.asyncio
    async def test_abort(self, call_tool: ToolGetter, core_conflict: Path) -> None:
        tool = call_tool("resolve_sync_conflicts")
        started = (await tool())["result"]

        aborted = (await tool(action="abort", session=started["session"]))["result"]

        assert aborted["state"] == "aborted"
        assert aborted["result"]["resolved"] is False
        assert aborted["result"]["final_state"] is not None

    @pytest.mark.asyncio
    async def test_respond_without_session(self, call_tool: ToolGetter) -> None:
        response = await call_tool("resolve_sync_conflicts")(action="respond", response="apply")

        assert response["success"] is False
        assert response["meta"]["error"]["error"] == "SESSION_INVALID"

    @pytest.mark.asyncio
    async def test_respond_with_malformed_session(self, call_tool: ToolGetter) -> None:
        response = await call_tool("resolve_sync_conflicts")(
            action="respond", session={"state": "nonsense"}, response="apply"
        )

        assert response["success"] is False
        assert response["meta"]["error"]["code"] == 4003


class TestSetupCopilotInstructions:
    @pytest.mark.asyncio
    async def test_creates_index_in_sync(
        self, call_tool: ToolGetter, bank_dir: Path, index_path: Path
    ) -> None:
        (bank_dir / "techContext.md").write_text("# Tech\n")
        (bank_dir / "features").mkdir()
        (bank_dir / "features" / "search.md").write_text("# Search\n")

        response = await call_tool("setup_copilot_instructions")()

        result = response["result"]
        assert result["in_sync"] is True
        assert result["path"] == str(index_path)
        assert "features/search.md" in index_path.read_text()
