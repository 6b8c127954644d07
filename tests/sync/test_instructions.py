"""Tests for index document rendering and merging."""

from __future__ import annotations

from memorybank.config.constants import CORE_FILES
from memorybank.sync.instructions import merge_section, render_section, section_bounds
from memorybank.sync.models import MemoryBankStructure, SemanticFolderInfo
from memorybank.sync.references import extract_references

MB_PATH = ".github/memory-bank"


def _structure() -> MemoryBankStructure:
    return MemoryBankStructure(
        core_files=["projectbrief.md", "progress.md"],
        semantic_folders=[
            SemanticFolderInfo(
                folder_name="features",
                purpose="Feature docs",
                file_count=1,
                files=["features/auth.md"],
            )
        ],
        additional_files=["glossary.md"],
        total_files=4,
    )


class TestRenderSection:
    def test_names_exactly_the_existing_documents(self) -> None:
        section = render_section(_structure(), MB_PATH)

        refs = extract_references(section, (MB_PATH,))

        assert sorted(refs) == ["features/auth.md", "glossary.md", "progress.md", "projectbrief.md"]

    def test_reports_missing_core_files_and_statistics(self) -> None:
        section = render_section(_structure(), MB_PATH)

        assert section.startswith("# Memory Bank\n")
        assert f"{len(CORE_FILES) - 2} core file(s) not yet written." in section
        assert "- Total files: 4" in section
        assert "### `features/` (1 files)" in section

    def test_empty_bank_has_no_references(self) -> None:
        section = render_section(MemoryBankStructure(), MB_PATH)

        assert extract_references(section) == []


class TestMergeSection:
    def test_missing_index_becomes_section(self) -> None:
        assert merge_section(None, "# Memory Bank\n") == "# Memory Bank\n"

    def test_appends_when_no_section(self) -> None:
        merged = merge_section("# Project\n\nRules.\n", "# Memory Bank\n\nnew\n")

        assert merged == "# Project\n\nRules.\n\n# Memory Bank\n\nnew\n"

    def test_replaces_section_and_keeps_surrounding_content(self) -> None:
        existing = "# Intro\n\nhello\n\n# Memory Bank\n\nold stuff\n\n# Later\n\nkeep me\n"

        merged = merge_section(existing, "# Memory Bank\n\nnew stuff\n")

        assert "old stuff" not in merged
        assert merged.startswith("# Intro\n\nhello\n\n# Memory Bank\n\nnew stuff\n")
        assert merged.endswith("# Later\n\nkeep me\n")

    def test_subheadings_belong_to_the_section(self) -> None:
        existing = "# Memory Bank\n\n## Core Files\n\nold\n"

        merged = merge_section(existing, "# Memory Bank\n\nnew\n")

        assert merged == "# Memory Bank\n\nnew\n"

    def test_merge_is_idempotent(self) -> None:
        section = "# Memory Bank\n\ncontent\n"
        once = merge_section("# Intro\n\ntext\n", section)

        assert merge_section(once, section) == once


def test_section_bounds_absent() -> None:
    assert section_bounds("# Something else\n") is None
