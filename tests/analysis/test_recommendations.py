"""Tests for framework detection and recommendations."""

from __future__ import annotations

import pytest

from memorybank.analysis.models import ManifestInfo
from memorybank.analysis.recommendations import (
    analyze_architecture,
    complexity_level,
    detail_level,
    detect_frameworks,
    detect_project_type,
    key_patterns,
    recommend,
)


class TestDetectFrameworks:
    def test_dependencies_then_root_files(self) -> None:
        frameworks = detect_frameworks(
            ["package.json", "tsconfig.json", "vite.config.ts"], ["react", "typescript"]
        )

        assert frameworks == ["React", "TypeScript", "Vite"]

    def test_node_added_without_frontend_framework(self) -> None:
        assert detect_frameworks(["package.json"], ["express"]) == ["Express", "Node.js"]

    def test_python_markers(self) -> None:
        assert detect_frameworks(["pyproject.toml"], ["flask"]) == ["Flask", "Python"]

    def test_labels_not_duplicated(self) -> None:
        frameworks = detect_frameworks(["tsconfig.json"], ["typescript"])
        assert frameworks.count("TypeScript") == 1


class TestDetectProjectType:
    @pytest.mark.parametrize(
        ("frameworks", "deps", "entries", "expected"),
        [
            ([], [], [], "Unknown"),
            (["Python"], [], ["pyproject.toml"], "Python Project"),
            (["Node.js"], [], ["package.json"], "Node.js Project"),
            (["React"], ["react"], ["package.json"], "Frontend Application"),
            (["Express", "Node.js"], ["express"], ["package.json"], "Backend API"),
            (["React", "TypeScript"], ["react", "typescript"], [], "TypeScript Project"),
            (
                ["Model Context Protocol", "TypeScript"],
                ["@modelcontextprotocol/sdk", "typescript"],
                ["tsconfig.json"],
                "MCP Server",
            ),
        ],
    )
    def test_most_specific_wins(
        self, frameworks: list[str], deps: list[str], entries: list[str], expected: str
    ) -> None:
        assert detect_project_type(frameworks, deps, entries) == expected


class TestComplexityLevel:
    @pytest.mark.parametrize(
        ("count", "level", "detail"),
        [
            (0, "Low", "standard"),
            (20, "Low", "standard"),
            (21, "Medium", "detailed"),
            (50, "Medium", "detailed"),
            (51, "High", "comprehensive"),
        ],
    )
    def test_thresholds(self, count: int, level: str, detail: str) -> None:
        assert complexity_level(count) == level
        assert detail_level(complexity_level(count)) == detail


class TestArchitecture:
    def test_patterns_entry_points_and_config_files(self) -> None:
        manifest = ManifestInfo(name="demo", entry_points=("dist/index.js",))

        summary = analyze_architecture(
            ["package.json", "Dockerfile", "index.ts", "jest.config.js", "README.md"],
            ["src", "src/components", "tests", "ui-components"],
            manifest,
        )

        assert summary.patterns == (
            "Source Directory Structure",
            "Component-Based Architecture",
            "Test Directory Structure",
            "Containerized Deployment",
        )
        assert summary.entry_points == ("dist/index.js", "index.ts")
        assert summary.config_files == ("jest.config.js", "package.json")

    def test_key_patterns_from_root_entries(self) -> None:
        assert key_patterns([".github", "README.md", "package.json"]) == [
            "npm package",
            "Project documentation",
            "GitHub workflows",
        ]


class TestRecommend:
    def test_backend_with_docker_and_readme(self) -> None:
        result = recommend("Backend API", ["Dockerfile", "README.md"], "Medium")

        assert result.focus_areas == (
            "api-endpoints",
            "data-models",
            "authentication",
            "deployment",
            "containerization",
            "documentation",
        )
        assert result.detail_level == "detailed"
        assert result.additional_sections == (
            "API Design",
            "Database Schema",
            "Authentication Flow",
        )

    def test_unknown_project_has_no_type_sections(self) -> None:
        result = recommend("Unknown", [], "Low")

        assert result.focus_areas == ()
        assert result.additional_sections == ()
        assert result.to_dict()["detail_level"] == "standard"
