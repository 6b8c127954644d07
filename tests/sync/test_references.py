"""Tests for reference extraction and matching."""

from __future__ import annotations

from memorybank.sync.references import (
    extract_references,
    match_references,
    normalize_reference,
    reference_matches,
)


class TestExtractReferences:
    def test_backticks_links_and_bare_tokens(self) -> None:
        text = (
            "Read `projectbrief.md` first.\n"
            "See [auth](features/auth.md) and progress.md.\n"
            "Then progress.md again.\n"
        )

        assert extract_references(text) == ["projectbrief.md", "features/auth.md", "progress.md"]

    def test_prefixes_and_dot_slash_stripped(self) -> None:
        text = "- ./.github/memory-bank/techContext.md\n- memory-bank/api/rest.md\n"

        refs = extract_references(text, (".github/memory-bank", "memory-bank"))

        assert refs == ["techContext.md", "api/rest.md"]

    def test_whole_token_only(self) -> None:
        refs = extract_references("Keep activeContext.md current.")

        assert refs == ["activeContext.md"]
        assert "context.md" not in refs

    def test_non_markdown_ignored(self) -> None:
        assert extract_references("See notes.txt and file.mdx and README.markdown") == []

    def test_no_references(self) -> None:
        assert extract_references("") == []


class TestMatching:
    def test_reference_matches_path_or_basename(self) -> None:
        assert reference_matches("features/auth.md", "features/auth.md")
        assert reference_matches("auth.md", "features/auth.md")
        assert not reference_matches("context.md", "activeContext.md")
        assert not reference_matches("other/auth.md", "features/auth.md")

    def test_normalize_reference(self) -> None:
        assert normalize_reference("././a.md") == "a.md"
        assert normalize_reference("docs/bank/a.md", ["docs/bank/"]) == "a.md"

    def test_missing_and_orphaned(self) -> None:
        result = match_references(
            ["progress.md", "unreferenced.md"],
            ["progress.md", "gone.md"],
            "copilot-instructions.md",
        )

        assert result.missing == ["unreferenced.md"]
        assert result.orphaned == ["gone.md"]
        assert result.references == ["progress.md", "gone.md"]

    def test_index_document_never_orphaned(self) -> None:
        result = match_references([], ["copilot-instructions.md"], "copilot-instructions.md")

        assert result.orphaned == []
        assert result.references == []
