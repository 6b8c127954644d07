"""Configuration constants.

Values here are layout and protocol facts that are not user-configurable.
For configurable values, see models.py.
"""

# =============================================================================
# Memory Bank Layout
# =============================================================================

GITHUB_DIR = ".github"
"""Directory under the project root holding the memory bank and index."""

MEMORY_BANK_DIRNAME = "memory-bank"
"""Memory bank directory name, relative to GITHUB_DIR."""

INDEX_DOCUMENT_NAME = "copilot-instructions.md"
"""Index document name, relative to GITHUB_DIR."""

CORE_FILES: tuple[str, ...] = (
    "projectbrief.md",
    "productContext.md",
    "activeContext.md",
    "systemPatterns.md",
    "techContext.md",
    "progress.md",
)
"""The required memory bank documents, in dependency order."""

DOCUMENT_EXTENSIONS: frozenset[str] = frozenset({".md"})
"""Extensions that make a file an eligible memory bank document."""

MEMORY_BANK_SECTION_HEADING = "# Memory Bank"
"""Heading that opens the managed section of the index document."""

# =============================================================================
# Analysis
# =============================================================================

DEPTH_LIMITS: dict[str, int] = {"shallow": 2, "medium": 4, "deep": 6}
"""Maximum directory depth walked per analysis depth preset."""

COMPLEXITY_HIGH_FILES = 50
"""More source files than this makes a project 'High' complexity."""

COMPLEXITY_MEDIUM_FILES = 20
"""More source files than this makes a project 'Medium' complexity."""

# =============================================================================
# Sync
# =============================================================================

SEVERITY_MEDIUM_THRESHOLD = 2
"""More affected non-core documents than this raises severity to medium."""
