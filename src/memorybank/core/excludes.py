"""Directories the project walk never enters.

VCS internals are always skipped. Dependency, cache and build output
directories are skipped by default; further names can be added through
``analysis.excluded_dirs`` in the configuration.
"""

from __future__ import annotations

VCS_DIRS: frozenset[str] = frozenset((".git", ".svn", ".hg", ".bzr"))

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # JavaScript/Node.js
        "node_modules",
        "bower_components",
        ".npm",
        ".yarn",
        ".pnpm-store",
        ".next",
        ".nuxt",
        ".turbo",
        "dist",
        "build",
        "out",
        "coverage",
        # Python
        "venv",
        ".venv",
        ".virtualenv",
        "env",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".tox",
        ".nox",
        ".eggs",
        "site-packages",
        # Editors
        ".idea",
        ".vscode",
        # Tool data
        ".memorybank",
    )
)

PRUNABLE_DIRS: frozenset[str] = VCS_DIRS | DEFAULT_PRUNABLE_DIRS


def is_prunable(name: str, extra: frozenset[str] = frozenset()) -> bool:
    """True if a directory with this name should not be walked."""
    return name in PRUNABLE_DIRS or name in extra or name.endswith(".egg-info")
