"""Source fact extraction.

Turns one file's text into a SourceFact: top-level functions, classes with
their methods, and imports. Parsing is done with tree-sitter; a file that
does not parse cleanly yields a SourceFact with ``parse_succeeded=False``
and empty fact lists rather than an exception.

Only top-level declarations and class members are extracted. Functions
nested inside other functions are not reported on their own; their
branches count toward the enclosing function's complexity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import structlog
import tree_sitter

from memorybank.analysis.languages import (
    AWAIT_NODES,
    BRANCH_NODES,
    SHORT_CIRCUIT,
    LanguagePack,
    get_pack_for_path,
    load_language,
)
from memorybank.analysis.models import (
    ClassFact,
    FunctionFact,
    ImportFact,
    ImportKind,
    ParameterFact,
    ParseDiagnostic,
    SourceFact,
)

if TYPE_CHECKING:
    from tree_sitter import Node

log = structlog.get_logger(__name__)

_ES_FUNCTION_VALUES = frozenset(
    {"arrow_function", "function_expression", "function", "generator_function"}
)
_ES_CLASS_VALUES = frozenset({"class", "class_expression"})


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _has_token(node: Node, token: str) -> bool:
    return any(child.type == token for child in node.children)


def _contains(node: Node | None, node_type: str) -> bool:
    if node is None:
        return False
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == node_type:
            return True
        stack.extend(current.children)
    return False


def _strip_annotation(node: Node | None) -> str | None:
    """Type text without the leading ':' of a TS type_annotation."""
    if node is None:
        return None
    text = _text(node).strip()
    if text.startswith(":"):
        text = text[1:].strip()
    return text or None


def _first_error(root: Node) -> Node:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
    return root


def compute_complexity(body: Node | None, family: str) -> int:
    """1 plus the number of branching constructs below ``body``."""
    if body is None:
        return 1
    branch_nodes = BRANCH_NODES[family]
    operator_node, operators = SHORT_CIRCUIT[family]
    count = 1
    stack = [body]
    while stack:
        node = stack.pop()
        if node.type in branch_nodes:
            count += 1
        elif node.type == operator_node:
            op = node.child_by_field_name("operator")
            if op is not None and op.type in operators:
                count += 1
        stack.extend(node.children)
    return count


@dataclass
class _PendingFunction:
    name: str
    node: Node
    exported: bool
    private: bool = False


@dataclass
class _PendingClass:
    name: str
    node: Node
    exported: bool
    methods: list[_PendingFunction] = field(default_factory=list)


class _Visitor(ABC):
    """Collects pending declarations, then builds immutable facts."""

    family: str

    def __init__(self) -> None:
        self.functions: list[_PendingFunction] = []
        self.classes: list[_PendingClass] = []
        self.imports: list[ImportFact] = []

    @abstractmethod
    def visit(self, root: Node) -> None: ...

    def is_exported(self, name: str, marked: bool) -> bool:
        return marked

    @abstractmethod
    def parameters(self, node: Node) -> tuple[ParameterFact, ...]: ...

    @abstractmethod
    def return_type(self, node: Node) -> str | None: ...

    def build_function(self, pending: _PendingFunction, exported: bool) -> FunctionFact:
        node = pending.node
        body = node.child_by_field_name("body")
        return FunctionFact(
            name=pending.name,
            is_exported=exported,
            parameters=self.parameters(node),
            return_type=self.return_type(node),
            is_async=_has_token(node, "async"),
            has_await=_contains(body, AWAIT_NODES[self.family]),
            complexity=compute_complexity(body, self.family),
            line=_line(node),
        )

    def facts(self) -> tuple[tuple[FunctionFact, ...], tuple[ClassFact, ...]]:
        functions = tuple(
            self.build_function(f, self.is_exported(f.name, f.exported)) for f in self.functions
        )
        classes: list[ClassFact] = []
        for c in self.classes:
            exported = self.is_exported(c.name, c.exported)
            methods = tuple(self.build_function(m, exported and not m.private) for m in c.methods)
            classes.append(
                ClassFact(name=c.name, is_exported=exported, methods=methods, line=_line(c.node))
            )
        return functions, tuple(classes)


# =========================================================================
# JavaScript / TypeScript
# =========================================================================


def _es_string(node: Node | None) -> str:
    if node is None:
        return ""
    fragments = [_text(c) for c in node.named_children if c.type == "string_fragment"]
    if fragments:
        return "".join(fragments)
    return _text(node).strip("'\"`")


def _es_require_source(node: Node | None) -> str | None:
    """Module string of a ``require('x')`` call, else None."""
    if node is None or node.type != "call_expression":
        return None
    fn = node.child_by_field_name("function")
    if fn is None or _text(fn) != "require":
        return None
    args = node.child_by_field_name("arguments")
    if args is None:
        return None
    strings = [c for c in args.named_children if c.type == "string"]
    return _es_string(strings[0]) if strings else None


def _es_param_name(node: Node | None) -> str:
    if node is None:
        return ""
    if node.type == "rest_pattern":
        return _text(node).lstrip(".")
    return _text(node)


def _es_is_external(module_path: str) -> bool:
    return not module_path.startswith((".", "/"))


class _EcmaScriptVisitor(_Visitor):
    family = "ecmascript"

    def __init__(self) -> None:
        super().__init__()
        self._export_names: set[str] = set()

    def visit(self, root: Node) -> None:
        for node in root.named_children:
            self._top_level(node, exported=False)

    def is_exported(self, name: str, marked: bool) -> bool:
        return marked or name in self._export_names

    def _top_level(self, node: Node, exported: bool) -> None:
        kind = node.type
        if kind in ("function_declaration", "generator_function_declaration"):
            name = _text(node.child_by_field_name("name"))
            self.functions.append(_PendingFunction(name, node, exported))
        elif kind in ("class_declaration", "abstract_class_declaration"):
            self._class(_text(node.child_by_field_name("name")), node, exported)
        elif kind in ("lexical_declaration", "variable_declaration"):
            self._declarators(node, exported)
        elif kind == "export_statement":
            self._export(node)
        elif kind == "import_statement":
            self._import(node)
        elif kind == "expression_statement":
            source = _es_require_source(node.named_children[0] if node.named_children else None)
            if source is not None:
                self._add_import(source, ImportKind.SIDE_EFFECT, ())

    def _declarators(self, node: Node, exported: bool) -> None:
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if value is None or name_node is None:
                continue
            if value.type in _ES_FUNCTION_VALUES and name_node.type == "identifier":
                self.functions.append(_PendingFunction(_text(name_node), value, exported))
            elif value.type in _ES_CLASS_VALUES and name_node.type == "identifier":
                self._class(_text(name_node), value, exported)
            elif (source := _es_require_source(value)) is not None:
                if name_node.type == "object_pattern":
                    names = tuple(_text(c) for c in name_node.named_children)
                    self._add_import(source, ImportKind.NAMED, names)
                else:
                    self._add_import(source, ImportKind.DEFAULT, (_text(name_node),))

    def _export(self, node: Node) -> None:
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._top_level(declaration, exported=True)
            return
        value = node.child_by_field_name("value")
        if value is not None:
            if value.type in _ES_FUNCTION_VALUES:
                name = _text(value.child_by_field_name("name")) or "default"
                self.functions.append(_PendingFunction(name, value, True))
            elif value.type in _ES_CLASS_VALUES:
                self._class(_text(value.child_by_field_name("name")) or "default", value, True)
            elif value.type == "identifier":
                self._export_names.add(_text(value))
            return
        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for spec in clause.named_children:
                if spec.type == "export_specifier":
                    self._export_names.add(_text(spec.child_by_field_name("name")))

    def _import(self, node: Node) -> None:
        source = node.child_by_field_name("source")
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        if clause is None:
            require = next(
                (c for c in node.named_children if c.type == "import_require_clause"), None
            )
            if require is not None:
                names = tuple(_text(c) for c in require.named_children if c.type == "identifier")
                module = _es_string(require.child_by_field_name("source"))
                self._add_import(module, ImportKind.DEFAULT, names)
            else:
                self._add_import(_es_string(source), ImportKind.SIDE_EFFECT, ())
            return

        module = _es_string(source)
        for part in clause.named_children:
            if part.type == "identifier":
                self._add_import(module, ImportKind.DEFAULT, (_text(part),))
            elif part.type == "namespace_import":
                names = tuple(_text(c) for c in part.named_children if c.type == "identifier")
                self._add_import(module, ImportKind.NAMESPACE, names)
            elif part.type == "named_imports":
                names = tuple(
                    _text(spec.child_by_field_name("name"))
                    for spec in part.named_children
                    if spec.type == "import_specifier"
                )
                self._add_import(module, ImportKind.NAMED, names)

    def _add_import(self, module: str, kind: ImportKind, names: tuple[str, ...]) -> None:
        if not module:
            return
        self.imports.append(
            ImportFact(
                module_path=module,
                import_kind=kind,
                is_external=_es_is_external(module),
                names=names,
            )
        )

    def _class(self, name: str, node: Node, exported: bool) -> None:
        pending = _PendingClass(name, node, exported)
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "method_definition":
                method_name = _text(member.child_by_field_name("name"))
                pending.methods.append(
                    _PendingFunction(method_name, member, exported, self._is_private(member))
                )
            elif member.type in ("public_field_definition", "field_definition"):
                value = member.child_by_field_name("value")
                if value is None or value.type not in _ES_FUNCTION_VALUES:
                    continue
                name_node = member.child_by_field_name("name") or member.child_by_field_name(
                    "property"
                )
                pending.methods.append(
                    _PendingFunction(_text(name_node), value, exported, self._is_private(member))
                )
        self.classes.append(pending)

    @staticmethod
    def _is_private(member: Node) -> bool:
        name_node = member.child_by_field_name("name") or member.child_by_field_name("property")
        if name_node is not None and name_node.type == "private_property_identifier":
            return True
        return any(
            c.type == "accessibility_modifier" and _text(c) == "private" for c in member.children
        )

    def parameters(self, node: Node) -> tuple[ParameterFact, ...]:
        params = node.child_by_field_name("parameters")
        if params is None:
            single = node.child_by_field_name("parameter")
            return (ParameterFact(name=_text(single)),) if single is not None else ()
        result: list[ParameterFact] = []
        for p in params.named_children:
            if p.type in ("required_parameter", "optional_parameter"):
                result.append(
                    ParameterFact(
                        name=_es_param_name(p.child_by_field_name("pattern")),
                        type=_strip_annotation(p.child_by_field_name("type")),
                    )
                )
            elif p.type == "assignment_pattern":
                result.append(ParameterFact(name=_es_param_name(p.child_by_field_name("left"))))
            elif p.type != "comment":
                result.append(ParameterFact(name=_es_param_name(p)))
        return tuple(result)

    def return_type(self, node: Node) -> str | None:
        return _strip_annotation(node.child_by_field_name("return_type"))


# =========================================================================
# Python
# =========================================================================


def _py_string(node: Node) -> str:
    content = [_text(c) for c in node.named_children if c.type == "string_content"]
    if content:
        return "".join(content)
    return _text(node).strip("'\"")


def _py_is_private(name: str) -> bool:
    return name.startswith("_") and not (name.startswith("__") and name.endswith("__"))


class _PythonVisitor(_Visitor):
    family = "python"

    def __init__(self) -> None:
        super().__init__()
        self._all: set[str] | None = None

    def visit(self, root: Node) -> None:
        for node in root.named_children:
            if node.type == "decorated_definition":
                definition = node.child_by_field_name("definition")
                if definition is None:
                    continue
                node = definition
            if node.type == "function_definition":
                self.functions.append(
                    _PendingFunction(_text(node.child_by_field_name("name")), node, False)
                )
            elif node.type == "class_definition":
                self._class(node)
            elif node.type == "import_statement":
                self._import(node)
            elif node.type == "import_from_statement":
                self._import_from(node)
            elif node.type == "future_import_statement":
                names = tuple(_text(n) for n in node.children_by_field_name("name"))
                self.imports.append(ImportFact("__future__", ImportKind.NAMED, False, names))
            elif node.type == "expression_statement":
                self._dunder_all(node)

    def is_exported(self, name: str, marked: bool) -> bool:
        if self._all is not None:
            return name in self._all
        return not name.startswith("_")

    def _class(self, node: Node) -> None:
        pending = _PendingClass(_text(node.child_by_field_name("name")), node, False)
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "decorated_definition":
                member = member.child_by_field_name("definition") or member
            if member.type == "function_definition":
                name = _text(member.child_by_field_name("name"))
                pending.methods.append(_PendingFunction(name, member, False, _py_is_private(name)))
        self.classes.append(pending)

    def _import(self, node: Node) -> None:
        for name_node in node.children_by_field_name("name"):
            if name_node.type == "aliased_import":
                module = _text(name_node.child_by_field_name("name"))
                bound = _text(name_node.child_by_field_name("alias"))
            else:
                module = bound = _text(name_node)
            self.imports.append(
                ImportFact(
                    module_path=module,
                    import_kind=ImportKind.NAMESPACE,
                    is_external=not module.startswith("."),
                    names=(bound,),
                )
            )

    def _import_from(self, node: Node) -> None:
        module = _text(node.child_by_field_name("module_name"))
        if _has_token(node, "wildcard_import") or any(
            c.type == "wildcard_import" for c in node.named_children
        ):
            kind, names = ImportKind.NAMESPACE, ("*",)
        else:
            kind = ImportKind.NAMED
            names = tuple(
                _text(n.child_by_field_name("name")) if n.type == "aliased_import" else _text(n)
                for n in node.children_by_field_name("name")
            )
        self.imports.append(
            ImportFact(
                module_path=module,
                import_kind=kind,
                is_external=not module.startswith("."),
                names=names,
            )
        )

    def _dunder_all(self, node: Node) -> None:
        if not node.named_children:
            return
        stmt = node.named_children[0]
        if stmt.type not in ("assignment", "augmented_assignment"):
            return
        if _text(stmt.child_by_field_name("left")) != "__all__":
            return
        right = stmt.child_by_field_name("right")
        if right is None or right.type not in ("list", "tuple"):
            return
        if self._all is None or stmt.type == "assignment":
            self._all = set()
        self._all.update(_py_string(c) for c in right.named_children if c.type == "string")

    def parameters(self, node: Node) -> tuple[ParameterFact, ...]:
        params = node.child_by_field_name("parameters")
        if params is None:
            return ()
        result: list[ParameterFact] = []
        for p in params.named_children:
            if p.type == "identifier":
                result.append(ParameterFact(name=_text(p)))
            elif p.type == "typed_parameter":
                name_node = p.named_children[0] if p.named_children else None
                result.append(
                    ParameterFact(
                        name=_text(name_node).lstrip("*"),
                        type=_text(p.child_by_field_name("type")) or None,
                    )
                )
            elif p.type in ("default_parameter", "typed_default_parameter"):
                result.append(
                    ParameterFact(
                        name=_text(p.child_by_field_name("name")),
                        type=_text(p.child_by_field_name("type")) or None,
                    )
                )
            elif p.type in ("list_splat_pattern", "dictionary_splat_pattern"):
                result.append(ParameterFact(name=_text(p).lstrip("*")))
        return tuple(result)

    def return_type(self, node: Node) -> str | None:
        return _text(node.child_by_field_name("return_type")) or None


_VISITORS: dict[str, type[_Visitor]] = {
    "ecmascript": _EcmaScriptVisitor,
    "python": _PythonVisitor,
}


class SourceFactExtractor:
    """Parses source text into SourceFacts.

    Usage::

        extractor = SourceFactExtractor()
        fact = extractor.extract(text, "src/app.ts")
        if not fact.parse_succeeded:
            print(fact.parse_error)
    """

    def __init__(self) -> None:
        self._parser = tree_sitter.Parser()

    def extract(self, text: str, file_path: str) -> SourceFact:
        pack = get_pack_for_path(file_path)
        if pack is None:
            suffix = PurePosixPath(file_path).suffix or PurePosixPath(file_path).name
            diagnostic = ParseDiagnostic(f"Unsupported file type: {suffix}")
            return SourceFact.failed(file_path, None, diagnostic)

        outcome = self._parse(text, pack)
        if isinstance(outcome, ParseDiagnostic):
            log.debug("parse_failed", path=file_path, reason=str(outcome))
            return SourceFact.failed(file_path, pack.name, outcome)

        visitor = _VISITORS[pack.family]()
        visitor.visit(outcome)
        functions, classes = visitor.facts()
        return SourceFact(
            file_path=file_path,
            language=pack.name,
            functions=functions,
            classes=classes,
            imports=tuple(visitor.imports),
        )

    def _parse(self, text: str, pack: LanguagePack) -> Node | ParseDiagnostic:
        """Parse to a syntax tree, or a diagnostic describing why not."""
        try:
            language = load_language(pack)
        except ValueError as err:
            return ParseDiagnostic(str(err))

        self._parser.language = language
        tree = self._parser.parse(text.encode("utf-8", errors="replace"))
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root)
            return ParseDiagnostic(
                "Syntax error", line=bad.start_point[0] + 1, column=bad.start_point[1]
            )
        return root
