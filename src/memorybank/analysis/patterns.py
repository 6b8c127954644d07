"""Pattern detection and complexity scoring over SourceFacts.

The catalogue is a fixed table of named rules. Each rule is a predicate
over one file's facts (and, when available, its raw text); a file that
satisfies the predicate becomes one evidence location for that pattern.
Matches are collapsed per pattern name, so a pattern seen in ten files is
one PatternMatch with ten locations.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath

import structlog

from memorybank.analysis.models import FunctionFact, PatternMatch, SourceFact

log = structlog.get_logger(__name__)

Predicate = Callable[[SourceFact, str | None], bool]


def module_root(module_path: str, language: str | None = None) -> str:
    """Package name an import refers to ("@scope/pkg", "express", "flask")."""
    parts = module_path.split("/")
    if module_path.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    root = parts[0]
    if language == "python":
        root = root.split(".")[0]
    return root


def _imports_any(modules: frozenset[str]) -> Predicate:
    def predicate(fact: SourceFact, text: str | None) -> bool:
        return any(
            imp.is_external and module_root(imp.module_path, fact.language) in modules
            for imp in fact.imports
        )

    return predicate


def _text_contains(*needles: str) -> Predicate:
    def predicate(fact: SourceFact, text: str | None) -> bool:
        return text is not None and any(needle in text for needle in needles)

    return predicate


def _either(*predicates: Predicate) -> Predicate:
    def predicate(fact: SourceFact, text: str | None) -> bool:
        return any(p(fact, text) for p in predicates)

    return predicate


def _awaits(fact: SourceFact, text: str | None) -> bool:
    return any(fn.has_await for fn in fact.all_functions())


def _defines_classes(fact: SourceFact, text: str | None) -> bool:
    return bool(fact.classes)


def _component_file(fact: SourceFact, text: str | None) -> bool:
    """JSX/TSX file exporting a capitalised function."""
    if PurePosixPath(fact.file_path).suffix not in (".jsx", ".tsx"):
        return False
    return any(fn.is_exported and fn.name[:1].isupper() for fn in fact.functions)


def _test_file(fact: SourceFact, text: str | None) -> bool:
    name = PurePosixPath(fact.file_path).name.lower()
    return (
        ".test." in name
        or ".spec." in name
        or (name.startswith("test_") and name.endswith(".py"))
        or name.endswith("_test.py")
    )


@dataclass(frozen=True)
class PatternRule:
    name: str
    description: str
    predicate: Predicate


CATALOGUE: tuple[PatternRule, ...] = (
    PatternRule(
        "web-framework",
        "HTTP server built on a web framework",
        _imports_any(
            frozenset(
                {
                    "express",
                    "koa",
                    "fastify",
                    "hapi",
                    "@hapi/hapi",
                    "@nestjs/core",
                    "@nestjs/common",
                    "next",
                    "flask",
                    "django",
                    "fastapi",
                    "starlette",
                    "aiohttp",
                    "tornado",
                }
            )
        ),
    ),
    PatternRule(
        "react-components",
        "UI built from React components",
        _either(_imports_any(frozenset({"react", "react-dom", "preact"})), _component_file),
    ),
    PatternRule(
        "async-await",
        "Asynchronous flow written with async/await",
        _awaits,
    ),
    PatternRule(
        "promise-chaining",
        "Asynchronous flow written as promise chains",
        _text_contains(".then("),
    ),
    PatternRule(
        "mcp-server",
        "Model Context Protocol server",
        _imports_any(frozenset({"@modelcontextprotocol/sdk", "mcp", "fastmcp"})),
    ),
    PatternRule(
        "cli-application",
        "Command-line entry point",
        _either(
            _imports_any(
                frozenset(
                    {"commander", "yargs", "meow", "inquirer", "click", "typer", "argparse"}
                )
            ),
            _text_contains("#!/usr/bin/env"),
        ),
    ),
    PatternRule(
        "data-access",
        "Database or persistence layer",
        _imports_any(
            frozenset(
                {
                    "mongoose",
                    "mongodb",
                    "@prisma/client",
                    "prisma",
                    "typeorm",
                    "sequelize",
                    "knex",
                    "pg",
                    "mysql2",
                    "sqlite3",
                    "better-sqlite3",
                    "redis",
                    "ioredis",
                    "sqlalchemy",
                    "sqlmodel",
                    "psycopg",
                    "psycopg2",
                    "pymongo",
                }
            )
        ),
    ),
    PatternRule(
        "test-suite",
        "Automated tests",
        _either(
            _imports_any(
                frozenset(
                    {"jest", "@jest/globals", "vitest", "mocha", "chai", "pytest", "unittest"}
                )
            ),
            _test_file,
        ),
    ),
    PatternRule(
        "event-driven",
        "Event emitters or observable streams",
        _either(
            _imports_any(frozenset({"events", "eventemitter3", "rxjs", "blinker"})),
            _text_contains(".emit("),
        ),
    ),
    PatternRule(
        "class-based",
        "Logic organised into classes",
        _defines_classes,
    ),
)


class PatternDetector:
    """Matches SourceFacts against the pattern catalogue."""

    def __init__(self, catalogue: tuple[PatternRule, ...] = CATALOGUE) -> None:
        self._catalogue = catalogue

    def detect(
        self,
        facts: Iterable[SourceFact],
        texts: Mapping[str, str] | None = None,
    ) -> list[PatternMatch]:
        """Return one PatternMatch per matched rule, in catalogue order.

        Args:
            facts: SourceFacts to scan.
            texts: Optional raw text keyed by file path, for text rules.
        """
        texts = texts or {}
        evidence: dict[str, set[str]] = {}
        for fact in facts:
            text = texts.get(fact.file_path)
            for rule in self._catalogue:
                if rule.predicate(fact, text):
                    evidence.setdefault(rule.name, set()).add(fact.file_path)

        matches = [
            PatternMatch(
                pattern_name=rule.name,
                description=rule.description,
                evidence_locations=tuple(sorted(evidence[rule.name])),
            )
            for rule in self._catalogue
            if rule.name in evidence
        ]
        log.debug("patterns_detected", patterns=[m.pattern_name for m in matches])
        return matches


def function_complexity(fn: FunctionFact) -> int:
    return max(fn.complexity, 1)


def file_complexity(fact: SourceFact) -> int:
    """Worst function in the file; 1 when it has none."""
    return max((function_complexity(fn) for fn in fact.all_functions()), default=1)


def project_complexity(facts: Iterable[SourceFact]) -> int:
    """Worst file in the project; 0 when there are no files."""
    return max((file_complexity(fact) for fact in facts), default=0)
