"""Recommendation aggregation over a scanned project.

Straightforward table lookups: which frameworks the dependencies and root
files point to, what kind of project that makes it, and which focus
areas and document sections suit it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import PurePosixPath
from typing import Any, Literal

from memorybank.analysis.models import ManifestInfo
from memorybank.config.constants import COMPLEXITY_HIGH_FILES, COMPLEXITY_MEDIUM_FILES

ComplexityLevel = Literal["Low", "Medium", "High"]

# (dependency name, framework label), in reporting order
DEPENDENCY_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("react", "React"),
    ("vue", "Vue.js"),
    ("@angular/core", "Angular"),
    ("express", "Express"),
    ("fastify", "Fastify"),
    ("next", "Next.js"),
    ("nuxt", "Nuxt.js"),
    ("svelte", "Svelte"),
    ("typescript", "TypeScript"),
    ("jest", "Jest"),
    ("vitest", "Vitest"),
    ("webpack", "Webpack"),
    ("vite", "Vite"),
    ("@modelcontextprotocol/sdk", "Model Context Protocol"),
    ("mcp", "Model Context Protocol"),
    ("fastmcp", "Model Context Protocol"),
    ("flask", "Flask"),
    ("django", "Django"),
    ("fastapi", "FastAPI"),
    ("pytest", "pytest"),
)

# (root file names, framework label)
ROOT_FILE_FRAMEWORKS: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"next.config.js", "next.config.ts", "next.config.mjs"}), "Next.js"),
    (frozenset({"nuxt.config.js", "nuxt.config.ts"}), "Nuxt.js"),
    (frozenset({"angular.json"}), "Angular"),
    (frozenset({"svelte.config.js"}), "Svelte"),
    (frozenset({"tsconfig.json"}), "TypeScript"),
    (frozenset({"jest.config.js", "jest.config.ts"}), "Jest"),
    (frozenset({"vite.config.js", "vite.config.ts"}), "Vite"),
    (frozenset({"webpack.config.js"}), "Webpack"),
)

FRONTEND_FRAMEWORKS = frozenset({"React", "Vue.js", "Angular"})

# (root entry names, key pattern)
KEY_ROOT_PATTERNS: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"package.json"}), "npm package"),
    (frozenset({"pyproject.toml"}), "Python package"),
    (frozenset({"yarn.lock"}), "Yarn dependency management"),
    (frozenset({"pnpm-lock.yaml"}), "pnpm dependency management"),
    (frozenset({"Dockerfile"}), "Docker containerization"),
    (frozenset({"docker-compose.yml"}), "Docker Compose orchestration"),
    (frozenset({".env", ".env.example"}), "Environment configuration"),
    (frozenset({".gitignore"}), "Git version control"),
    (frozenset({"README.md"}), "Project documentation"),
    (frozenset({"LICENSE"}), "Open source licensing"),
    (frozenset({".github"}), "GitHub workflows"),
    (frozenset({"tsconfig.json"}), "TypeScript configuration"),
    (frozenset({"eslint.config.js", ".eslintrc.json"}), "ESLint code quality"),
    (frozenset({".prettierrc"}), "Prettier code formatting"),
)

# (directory names, architecture pattern)
DIRECTORY_PATTERNS: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"src", "lib"}), "Source Directory Structure"),
    (frozenset({"components"}), "Component-Based Architecture"),
    (frozenset({"services", "api"}), "Service Layer Pattern"),
    (frozenset({"utils", "helpers"}), "Utility Module Pattern"),
    (frozenset({"types", "interfaces"}), "Type Definition Organization"),
    (frozenset({"test", "tests", "__tests__"}), "Test Directory Structure"),
)

ROOT_ENTRY_POINTS = (
    "index.js",
    "index.ts",
    "app.js",
    "app.ts",
    "server.js",
    "server.ts",
    "main.py",
    "app.py",
    "__main__.py",
)

_CONFIG_EXTENSIONS = (".json", ".js", ".ts", ".yml", ".yaml", ".toml", ".ini", ".cfg")
_KNOWN_CONFIG_FILES = frozenset(
    {"tsconfig.json", "package.json", "webpack.config.js", "jest.config.js", "pyproject.toml"}
)

# Project type substrings mapped to focus areas and document sections
_TYPE_FOCUS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("Frontend",), ("components", "user-interface", "state-management")),
    (("Backend", "API", "Server"), ("api-endpoints", "data-models", "authentication")),
    (("MCP",), ("tools", "protocols", "integrations")),
    (("TypeScript",), ("type-definitions", "interfaces")),
)
_TYPE_SECTIONS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("Frontend",), ("Component Architecture", "User Experience Flow", "State Management")),
    (("Backend", "API"), ("API Design", "Database Schema", "Authentication Flow")),
    (("MCP",), ("Tool Definitions", "Protocol Implementation", "Integration Points")),
    (("TypeScript",), ("Type System Usage", "Interface Design")),
    (("Python",), ("Module Layout", "Packaging")),
)


@dataclass(frozen=True, slots=True)
class ArchitectureSummary:
    patterns: tuple[str, ...]
    entry_points: tuple[str, ...]
    config_files: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Recommendations:
    focus_areas: tuple[str, ...]
    detail_level: str
    additional_sections: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def detect_frameworks(root_entries: Iterable[str], dependency_names: Iterable[str]) -> list[str]:
    """Frameworks named by dependencies first, then by root files."""
    entries = set(root_entries)
    deps = set(dependency_names)
    found: list[str] = []
    for dep, label in DEPENDENCY_FRAMEWORKS:
        if dep in deps and label not in found:
            found.append(label)
    for files, label in ROOT_FILE_FRAMEWORKS:
        if entries & files and label not in found:
            found.append(label)
    if "package.json" in entries and not FRONTEND_FRAMEWORKS.intersection(found):
        found.append("Node.js")
    if entries & {"pyproject.toml", "setup.py", "requirements.txt"}:
        found.append("Python")
    return found


def detect_project_type(
    frameworks: list[str],
    dependency_names: Iterable[str],
    root_entries: Iterable[str],
) -> str:
    """Most specific project type; later checks override earlier ones."""
    deps = set(dependency_names)
    entries = set(root_entries)
    project_type = "Unknown"
    if "Python" in frameworks:
        project_type = "Python Project"
    if "Node.js" in frameworks:
        project_type = "Node.js Project"
    if FRONTEND_FRAMEWORKS.intersection(frameworks):
        project_type = "Frontend Application"
    if {"Express", "Fastify", "Flask", "Django", "FastAPI"}.intersection(frameworks):
        project_type = "Backend API"
    if "typescript" in deps or "tsconfig.json" in entries:
        project_type = "TypeScript Project"
    if "Model Context Protocol" in frameworks:
        project_type = "MCP Server"
    return project_type


def complexity_level(source_file_count: int) -> ComplexityLevel:
    if source_file_count > COMPLEXITY_HIGH_FILES:
        return "High"
    if source_file_count > COMPLEXITY_MEDIUM_FILES:
        return "Medium"
    return "Low"


def detail_level(level: ComplexityLevel) -> str:
    return {"High": "comprehensive", "Medium": "detailed", "Low": "standard"}[level]


def key_patterns(root_entries: Iterable[str]) -> list[str]:
    entries = set(root_entries)
    return [label for names, label in KEY_ROOT_PATTERNS if entries & names]


def analyze_architecture(
    root_entries: Iterable[str],
    directories: Iterable[str],
    manifest: ManifestInfo | None,
) -> ArchitectureSummary:
    entries = sorted(set(root_entries))
    dir_names = {PurePosixPath(d).name for d in directories}

    patterns = [label for names, label in DIRECTORY_PATTERNS if dir_names & names]
    component = "Component-Based Architecture"
    if component not in patterns and any("component" in name for name in dir_names):
        patterns.append(component)
    if {"Dockerfile", "docker-compose.yml"}.intersection(entries):
        patterns.append("Containerized Deployment")

    entry_points = list(manifest.entry_points) if manifest else []
    entry_points.extend(name for name in ROOT_ENTRY_POINTS if name in entries)

    config_files = [
        name
        for name in entries
        if name.endswith(_CONFIG_EXTENSIONS)
        and ("config" in name or "rc" in name or name in _KNOWN_CONFIG_FILES)
    ]
    return ArchitectureSummary(
        patterns=tuple(patterns),
        entry_points=tuple(dict.fromkeys(entry_points)),
        config_files=tuple(config_files),
    )


def _by_type(
    project_type: str, table: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...]
) -> list[str]:
    result: list[str] = []
    for needles, values in table:
        if any(needle in project_type for needle in needles):
            result.extend(values)
    return result


def recommend(
    project_type: str, root_entries: Iterable[str], level: ComplexityLevel
) -> Recommendations:
    entries = set(root_entries)
    focus = _by_type(project_type, _TYPE_FOCUS)
    if entries & {"Dockerfile", "docker-compose.yml"}:
        focus.extend(("deployment", "containerization"))
    if entries & {"jest.config.js", "vitest.config.js", "pytest.ini", "conftest.py"}:
        focus.append("testing")
    if ".github" in entries:
        focus.extend(("ci-cd", "automation"))
    if "README.md" in entries:
        focus.append("documentation")
    return Recommendations(
        focus_areas=tuple(dict.fromkeys(focus)),
        detail_level=detail_level(level),
        additional_sections=tuple(dict.fromkeys(_by_type(project_type, _TYPE_SECTIONS))),
    )
