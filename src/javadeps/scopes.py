"""Build raw symbol tables from tree-sitter-java syntax trees.

One pass per file records the declared package, every declared type with
its fully qualified name, the file's imports, and every type reference
keyed by the innermost named scope ("element") that contains it. Nothing
is resolved here; :mod:`javadeps.resolver` consumes these tables.

Scope names mirror Java's nesting: ``com.acme.Outer.Inner`` for a nested
type, ``com.acme.Outer#run`` for a method, ``com.acme.Outer#<init>`` for a
constructor and ``com.acme.Outer#run.Local`` for a local class.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from tree_sitter import Node, Tree

from javadeps.errors import DuplicateClassError
from javadeps.model import CompilationUnit
from javadeps.parsing import node_text
from javadeps.trie import PackageTrieSet

logger = logging.getLogger(__name__)

CONSTRUCTOR_NAME = "<init>"

# tree-sitter node types that declare a named Java type.
_TYPE_DECL_TYPES = {
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
    "annotation_type_declaration",
}

_CONSTRUCTOR_DECL_TYPES = {"constructor_declaration", "compact_constructor_declaration"}

# tree-sitter node types that spell out a (possibly qualified) type name.
_TYPE_NODE_TYPES = {"type_identifier", "scoped_type_identifier", "generic_type"}

_ANNOTATION_TYPES = {"annotation", "marker_annotation"}

_COMMENT_TYPES = {"line_comment", "block_comment", "comment"}

# Expressions whose receiver may name a type, as in ``Util.helper()``.
_RECEIVER_TYPES = {"method_invocation", "field_access"}


class Scope(NamedTuple):
    """An immutable link in the chain of enclosing scopes."""

    name: str
    parent: Scope | None = None

    def qualify(self, name: str, separator: str = ".") -> str:
        return f"{self.name}{separator}{name}"


@dataclass
class SymbolTables:
    """Raw indices gathered from every file of a batch (append-only)."""

    units: dict[Path, CompilationUnit] = field(default_factory=dict)
    package_by_unit: dict[CompilationUnit, str] = field(default_factory=dict)
    unit_by_class: dict[str, CompilationUnit] = field(default_factory=dict)
    imports_by_unit: dict[CompilationUnit, dict[str, None]] = field(
        default_factory=lambda: defaultdict(dict)
    )
    wildcards_by_unit: dict[CompilationUnit, dict[str, None]] = field(
        default_factory=lambda: defaultdict(dict)
    )
    deps_by_scope: dict[str, dict[str, None]] = field(
        default_factory=lambda: defaultdict(dict)
    )
    package_by_scope: dict[str, str] = field(default_factory=dict)
    package_index: PackageTrieSet = field(default_factory=PackageTrieSet)

    def add_unit(self, unit: CompilationUnit) -> None:
        self.units[unit.path] = unit
        self.package_by_unit.setdefault(unit, "")

    def set_package(self, unit: CompilationUnit, package: str) -> None:
        self.package_by_unit[unit] = package
        self.package_index.add(package)

    def declare_class(self, class_name: str, unit: CompilationUnit) -> None:
        previous = self.unit_by_class.get(class_name)
        if previous is not None and previous != unit:
            raise DuplicateClassError(class_name, unit.path, previous.path)
        self.unit_by_class[class_name] = unit
        unit.declare(class_name, self.package_by_unit[unit])

    def enter_scope(self, name: str, package: str) -> None:
        self.package_by_scope[name] = package

    def add_import(self, unit: CompilationUnit, name: str) -> None:
        self.imports_by_unit[unit][name] = None

    def add_wildcard_import(self, unit: CompilationUnit, name: str) -> None:
        self.wildcards_by_unit[unit][name] = None

    def add_reference(self, scope: str, name: str) -> None:
        self.deps_by_scope[scope][name] = None

    def scan(self, unit: CompilationUnit, tree: Tree) -> None:
        """Record everything *tree* (the parsed *unit*) declares and references."""
        self.add_unit(unit)
        ScopeBuilder(self, unit).visit(tree.root_node)


class ScopeBuilder:
    """Walks one syntax tree, threading the enclosing :class:`Scope` down."""

    def __init__(self, tables: SymbolTables, unit: CompilationUnit):
        self._tables = tables
        self._unit = unit
        self._package = ""

    def visit(self, root: Node) -> None:
        self._package = _package_name(root)
        self._tables.set_package(self._unit, self._package)
        outer = Scope(self._package) if self._package else None

        # Explicit stack: expression trees can nest deeper than the
        # interpreter's recursion limit.
        stack: list[tuple[Node, Scope | None]] = [(root, outer)]
        while stack:
            node, scope = stack.pop()
            kind = node.type

            if kind == "package_declaration":
                continue
            if kind == "import_declaration":
                self._visit_import(node)
                continue

            if kind in _TYPE_DECL_TYPES:
                scope = self._enter_type(node, scope)
            elif kind == "method_declaration":
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    scope = self._enter_member(node_text(name_node), scope)
            elif kind in _CONSTRUCTOR_DECL_TYPES:
                # Constructor throws clauses count against the enclosing type.
                inner = self._enter_member(CONSTRUCTOR_NAME, scope)
                for child in reversed(node.children):
                    stack.append((child, scope if child.type == "throws" else inner))
                continue
            elif kind in _TYPE_NODE_TYPES:
                self._reference(scope, dotted_name(node))
                stack.extend((child, scope) for child in reversed(_type_parts(node)))
                continue
            elif kind in _ANNOTATION_TYPES:
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    self._reference(scope, dotted_name(name_node))
                stack.extend(
                    (child, scope)
                    for child in reversed(node.children)
                    if child != name_node
                )
                continue
            elif kind in _RECEIVER_TYPES:
                receiver = node.child_by_field_name("object")
                if receiver is not None:
                    self._reference(scope, dotted_name(receiver))
            elif kind == "method_reference":
                receiver = node.named_children[0] if node.named_children else None
                if receiver is not None and receiver.type not in _TYPE_NODE_TYPES:
                    self._reference(scope, dotted_name(receiver))

            stack.extend((child, scope) for child in reversed(node.children))

    def _enter_type(self, node: Node, scope: Scope | None) -> Scope | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return scope
        simple = node_text(name_node)
        type_name = scope.qualify(simple) if scope is not None else simple
        self._tables.declare_class(type_name, self._unit)
        return self._enter(type_name, scope)

    def _enter_member(self, name: str, scope: Scope | None) -> Scope:
        member_name = scope.qualify(name, "#") if scope is not None else f"#{name}"
        return self._enter(member_name, scope)

    def _enter(self, name: str, scope: Scope | None) -> Scope:
        self._tables.enter_scope(name, self._package)
        return Scope(name, scope)

    def _reference(self, scope: Scope | None, name: str | None) -> None:
        # References outside any type (e.g. package annotations) have no element.
        if name is None or scope is None or scope.name == self._package:
            return
        self._tables.add_reference(scope.name, name)

    def _visit_import(self, node: Node) -> None:
        is_static = any(child.type == "static" for child in node.children)
        is_wildcard = any(child.type == "asterisk" for child in node.children)
        name = None
        for child in node.named_children:
            if child.type in ("identifier", "scoped_identifier"):
                name = dotted_name(child)
                break
        if name is None:
            return
        if is_static or not is_wildcard:
            if is_static and not is_wildcard and "." in name:
                # the last component is the imported member
                name = name.rsplit(".", 1)[0]
            self._tables.add_import(self._unit, name)
        else:
            self._tables.add_wildcard_import(self._unit, name)


def dotted_name(node: Node) -> str | None:
    """Return the dotted name spelled by *node*, without type arguments.

    Returns None when the node is not a plain name, e.g. a receiver that
    is a method call or ``this``.
    """
    kind = node.type
    if kind in ("identifier", "type_identifier"):
        return node_text(node)
    if kind in ("scoped_identifier", "scoped_type_identifier", "field_access"):
        parts: list[str] = []
        for child in node.named_children:
            if child.type in _ANNOTATION_TYPES or child.type in _COMMENT_TYPES:
                continue
            part = dotted_name(child)
            if part is None:
                return None
            parts.append(part)
        return ".".join(parts) or None
    if kind == "generic_type":
        for child in node.named_children:
            if child.type in ("type_identifier", "scoped_type_identifier"):
                return dotted_name(child)
    return None


def _package_name(root: Node) -> str:
    for child in root.children:
        if child.type == "package_declaration":
            for part in child.named_children:
                if part.type in ("identifier", "scoped_identifier"):
                    return dotted_name(part) or ""
    return ""


def _type_parts(node: Node) -> list[Node]:
    """Return the type arguments and annotations nested in a type name."""
    found: list[Node] = []
    stack = [node]
    while stack:
        current = stack.pop()
        for child in current.children:
            if child.type in ("scoped_type_identifier", "generic_type"):
                stack.append(child)
            elif child.type == "type_arguments" or child.type in _ANNOTATION_TYPES:
                found.append(child)
    return found
