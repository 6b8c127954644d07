"""Language packs: grammar loading and per-language node vocabularies.

Each pack names the tree-sitter grammar that parses it and the node types
the extractor and complexity counter care about. Grammars are loaded
lazily and cached per process.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

import tree_sitter


@dataclass(frozen=True)
class LanguagePack:
    """tree-sitter configuration for one parseable language."""

    name: str  # Canonical language name ("python", "typescript", ...)
    family: str  # Syntax family sharing extraction rules ("ecmascript", "python")
    grammar_module: str  # Python import ("tree_sitter_typescript")
    # Non-standard function name (e.g. "language_typescript", "language_tsx")
    language_func: str = "language"
    extensions: frozenset[str] = field(default_factory=frozenset)


PACKS: dict[str, LanguagePack] = {
    pack.name: pack
    for pack in (
        LanguagePack(
            name="typescript",
            family="ecmascript",
            grammar_module="tree_sitter_typescript",
            language_func="language_typescript",
            extensions=frozenset({"ts", "mts", "cts"}),
        ),
        LanguagePack(
            name="tsx",
            family="ecmascript",
            grammar_module="tree_sitter_typescript",
            language_func="language_tsx",
            extensions=frozenset({"tsx"}),
        ),
        LanguagePack(
            name="javascript",
            family="ecmascript",
            grammar_module="tree_sitter_javascript",
            extensions=frozenset({"js", "jsx", "mjs", "cjs"}),
        ),
        LanguagePack(
            name="python",
            family="python",
            grammar_module="tree_sitter_python",
            extensions=frozenset({"py", "pyi"}),
        ),
    )
}

_PACK_BY_EXT: dict[str, LanguagePack] = {
    ext: pack for pack in PACKS.values() for ext in pack.extensions
}

# Source files we count and bucket but do not parse
OTHER_SOURCE_EXTENSIONS: frozenset[str] = frozenset(
    {"java", "kt", "cs", "go", "rs", "php", "rb", "cpp", "cc", "c", "h", "hpp", "swift", "scala"}
)

# Reported bucket per extension; parseable languages share a bucket with their dialects
SOURCE_BUCKETS: dict[str, str] = {
    **{ext: "typescript" for ext in ("ts", "mts", "cts", "tsx")},
    **{ext: "javascript" for ext in ("js", "jsx", "mjs", "cjs")},
    **{ext: "python" for ext in ("py", "pyi", "pyw")},
    **{ext: "other" for ext in OTHER_SOURCE_EXTENSIONS},
}

# =========================================================================
# Branching constructs (each adds one to a function's complexity)
# =========================================================================

BRANCH_NODES: dict[str, frozenset[str]] = {
    "ecmascript": frozenset(
        {
            "if_statement",
            "for_statement",
            "for_in_statement",  # also covers for...of
            "while_statement",
            "do_statement",
            "switch_case",
            "ternary_expression",
        }
    ),
    "python": frozenset(
        {
            "if_statement",
            "elif_clause",
            "for_statement",
            "while_statement",
            "case_clause",
            "conditional_expression",
            "for_in_clause",
            "if_clause",
        }
    ),
}

# Binary operator nodes that short-circuit, and the operators that count
SHORT_CIRCUIT: dict[str, tuple[str, frozenset[str]]] = {
    "ecmascript": ("binary_expression", frozenset({"&&", "||", "??"})),
    "python": ("boolean_operator", frozenset({"and", "or"})),
}

AWAIT_NODES: dict[str, str] = {
    "ecmascript": "await_expression",
    "python": "await",
}

_languages: dict[str, Any] = {}


def get_pack_for_path(path: str) -> LanguagePack | None:
    ext = PurePosixPath(path).suffix.lower().lstrip(".")
    return _PACK_BY_EXT.get(ext)


def source_bucket(path: str) -> str | None:
    """Language bucket for a source file, or None for non-source files."""
    ext = PurePosixPath(path).suffix.lower().lstrip(".")
    return SOURCE_BUCKETS.get(ext)


def load_language(pack: LanguagePack) -> tree_sitter.Language:
    """Load (and cache) the tree-sitter Language for a pack.

    Raises:
        ValueError: If the grammar package is not installed.
    """
    if pack.name in _languages:
        return _languages[pack.name]
    try:
        mod = importlib.import_module(pack.grammar_module)
        lang_fn = getattr(mod, pack.language_func)
    except (ImportError, AttributeError) as err:
        raise ValueError(f"Language not available: {pack.name}") from err
    lang = tree_sitter.Language(lang_fn())
    _languages[pack.name] = lang
    return lang
