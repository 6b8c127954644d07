"""analyze_project_structure tool."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from memorybank.analysis import analyze_project
from memorybank.mcp.registry import registry
from memorybank.mcp.tools.base import BaseParams

if TYPE_CHECKING:
    from memorybank.mcp.context import AppContext


class AnalyzeProjectParams(BaseParams):
    depth: Literal["shallow", "medium", "deep"] | None = Field(
        None, description="Directory depth preset; defaults to the configured one"
    )
    include_facts: bool = Field(False, description="Include per-file functions/classes/imports")


@registry.register(
    "analyze_project_structure",
    "Analyze a project's source tree: structure, dependencies, patterns and complexity.",
    AnalyzeProjectParams,
)
async def analyze_project_structure(
    ctx: AppContext, params: AnalyzeProjectParams
) -> dict[str, Any]:
    root = ctx.resolve_root(params.project_root_path)
    settings = ctx.settings_for(root)
    analysis = analyze_project(root, params.depth, config=settings.analysis, fs=ctx.fs)
    result = analysis.to_dict(include_facts=params.include_facts)
    result["summary"] = (
        f"{analysis.project_type}: {analysis.structure.estimated_files} source files, "
        f"{len(analysis.patterns)} patterns"
    )
    return result
