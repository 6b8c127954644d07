"""Document references in the index document.

A reference is a whole token: a maximal run of path characters ending in
``.md``. Matching is against whole tokens only, so ``context.md`` never
matches inside ``activeContext.md``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath

_REFERENCE_RE = re.compile(
    r"(?<![A-Za-z0-9_./-])"  # not inside a longer token
    r"([A-Za-z0-9_./-]*[A-Za-z0-9_-]\.md)"
    r"(?![A-Za-z0-9_/-])"
)


def normalize_reference(token: str, prefixes: Iterable[str] = ()) -> str:
    """Strip leading ``./`` and any memory bank directory prefix."""
    while token.startswith("./"):
        token = token[2:]
    for prefix in prefixes:
        prefix = prefix.strip("/") + "/"
        if token.startswith(prefix):
            return token[len(prefix) :]
    return token


def extract_references(text: str, prefixes: Iterable[str] = ()) -> list[str]:
    """Unique normalised references in order of first appearance."""
    prefixes = tuple(prefixes)
    seen: dict[str, None] = {}
    for match in _REFERENCE_RE.finditer(text):
        seen.setdefault(normalize_reference(match.group(1), prefixes), None)
    return list(seen)


def reference_spans(text: str, prefixes: Iterable[str] = ()) -> list[tuple[str, int, int]]:
    """Every reference occurrence as ``(normalised, start, end)``."""
    prefixes = tuple(prefixes)
    return [
        (normalize_reference(m.group(1), prefixes), m.start(1), m.end(1))
        for m in _REFERENCE_RE.finditer(text)
    ]


def reference_matches(reference: str, rel_path: str) -> bool:
    """True if ``reference`` names the document at ``rel_path``."""
    return reference == rel_path or reference == PurePosixPath(rel_path).name


@dataclass(frozen=True, slots=True)
class ReferenceMatch:
    references: list[str]
    missing: list[str]
    orphaned: list[str]


def match_references(
    files: Iterable[str], references: Iterable[str], index_name: str
) -> ReferenceMatch:
    """Split documents and references into referenced, missing and orphaned.

    ``index_name`` (the index document's own file name) is dropped from
    the references before matching.
    """
    files = sorted(set(files))
    refs = [r for r in references if PurePosixPath(r).name != index_name]
    missing = [f for f in files if not any(reference_matches(r, f) for r in refs)]
    orphaned = [r for r in refs if not any(reference_matches(r, f) for f in files)]
    return ReferenceMatch(references=refs, missing=missing, orphaned=sorted(orphaned))
