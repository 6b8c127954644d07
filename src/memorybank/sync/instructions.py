"""Index document rendering.

The index document belongs to the user; only the section opened by the
``# Memory Bank`` heading is managed here. Merging replaces that section
up to the next top-level heading and leaves everything else as it was.
"""

from __future__ import annotations

import re

from memorybank.config.constants import CORE_FILES, MEMORY_BANK_SECTION_HEADING
from memorybank.sync.models import MemoryBankStructure, utc_timestamp

ADDITIONAL_FILES_HEADING = "### Additional Files"

CORE_FILE_DESCRIPTIONS: dict[str, str] = {
    "projectbrief.md": "Foundation document. Defines core requirements, goals and project scope.",
    "productContext.md": "Why this project exists, the problems it solves, user experience goals.",
    "activeContext.md": "Current work focus, recent changes, next steps and active decisions.",
    "systemPatterns.md": "System architecture, key technical decisions and design patterns.",
    "techContext.md": "Technologies used, development setup, constraints and dependencies.",
    "progress.md": "What works, what is left to build, current status and known issues.",
}

_NEXT_TOP_LEVEL_RE = re.compile(r"\n# (?!#)")


def render_section(structure: MemoryBankStructure, memory_bank_path: str) -> str:
    """Managed section listing every document the memory bank holds.

    Only documents that exist are named, so the rendered section never
    introduces an orphaned reference.
    """
    lines = [
        MEMORY_BANK_SECTION_HEADING,
        "",
        f"Read every file under `{memory_bank_path}/` at the start of each task.",
        "Core files build on each other: the project brief shapes the product,",
        "system and tech context, which feed the active context and progress.",
        "",
        "## Core Files",
        "",
    ]
    for number, name in enumerate(structure.core_files, start=1):
        lines.append(f"{number}. `{name}`")
        lines.append(f"   - {CORE_FILE_DESCRIPTIONS[name]}")
    missing = len(CORE_FILES) - len(structure.core_files)
    if missing:
        lines.append("")
        lines.append(f"{missing} core file(s) not yet written.")
    lines.append("")

    if structure.semantic_folders:
        lines.extend(["## Semantic Organization", ""])
        for folder in structure.semantic_folders:
            lines.append(f"### `{folder.folder_name}/` ({folder.file_count} files)")
            lines.append(folder.purpose)
            lines.extend(f"- `{path}`" for path in folder.files)
            lines.append("")

    if structure.additional_files:
        lines.extend([ADDITIONAL_FILES_HEADING, ""])
        lines.extend(f"- `{name}`" for name in structure.additional_files)
        lines.append("")

    lines.extend(
        [
            "## Memory Bank Statistics",
            "",
            f"- Total files: {structure.total_files}",
            f"- Core files present: {len(structure.core_files)}/{len(CORE_FILES)}",
            f"- Semantic folders: {len(structure.semantic_folders)}",
            f"- Additional files: {len(structure.additional_files)}",
            "",
            "---",
            f"*Generated: {utc_timestamp()}*",
            "",
        ]
    )
    return "\n".join(lines)


def section_bounds(text: str) -> tuple[int, int] | None:
    """(start, end) offsets of the managed section, or None if absent."""
    match = re.search(rf"^{re.escape(MEMORY_BANK_SECTION_HEADING)}\s*$", text, re.MULTILINE)
    if match is None:
        return None
    start = match.start()
    following = _NEXT_TOP_LEVEL_RE.search(text, match.end())
    return start, following.start() + 1 if following else len(text)


def merge_section(existing: str | None, section: str) -> str:
    """Replace or append the managed section, preserving other content."""
    if existing is None or not existing.strip():
        return section
    bounds = section_bounds(existing)
    if bounds is None:
        return existing.rstrip() + "\n\n" + section
    start, end = bounds
    before = existing[:start].rstrip()
    after = existing[end:]
    merged = (before + "\n\n" if before else "") + section.rstrip() + "\n"
    if after.strip():
        merged += "\n" + after
    return merged
