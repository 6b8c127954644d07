"""Shared fixtures for MCP tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest

from memorybank.mcp.context import AppContext
from memorybank.mcp.registry import registry
from memorybank.mcp.server import make_handler

CallTool = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def app_context(tmp_path: Path) -> AppContext:
    return AppContext(default_root=tmp_path)


@pytest.fixture
def call_tool(app_context: AppContext) -> Callable[[str], CallTool]:
    """Return the wired, envelope-producing handler for a registered tool."""
    from memorybank.mcp.tools import analysis, memory_bank  # noqa: F401

    def _get(name: str) -> CallTool:
        spec = registry.get(name)
        assert spec is not None, f"tool {name} is not registered"
        return make_handler(spec, app_context)  # type: ignore[no-any-return]

    return _get


@pytest.fixture
def core_conflict(tmp_path: Path, bank_dir: Path, index_path: Path) -> Path:
    """Project whose only conflict is an unreferenced core file."""
    (bank_dir / "projectbrief.md").write_text("# Project Brief\n")
    index_path.write_text("# Memory Bank\n")
    return tmp_path
