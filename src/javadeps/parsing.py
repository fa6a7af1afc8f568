"""Tree-sitter plumbing: load the Java grammar and parse source files."""

from __future__ import annotations

import logging
from pathlib import Path

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser, Tree

from javadeps.errors import SourceParseError

logger = logging.getLogger(__name__)

JAVA_LANGUAGE = Language(tsjava.language())


def new_parser() -> Parser:
    """Return a parser for the Java grammar (parsers are not thread-safe)."""
    return Parser(JAVA_LANGUAGE)


def parse_source(
    source: bytes,
    path: Path,
    *,
    parser: Parser | None = None,
    strict: bool = True,
) -> Tree:
    """Parse *source* (the contents of *path*) into a syntax tree.

    Tree-sitter always produces a tree, marking unparseable regions with
    ``ERROR``/missing nodes. In strict mode such a tree raises
    :class:`SourceParseError`; otherwise it is logged and kept.
    """
    tree = (parser or new_parser()).parse(source)
    if tree.root_node.has_error:
        bad = first_error(tree.root_node)
        where = "unknown location"
        if bad is not None:
            line, col = node_point(bad)
            where = f"line {line}, column {col}"
        if strict:
            raise SourceParseError(path, f"syntax error at {where}")
        logger.warning("Syntax error in %s at %s; continuing with partial tree", path, where)
    return tree


def parse_file(path: Path, *, parser: Parser | None = None, strict: bool = True) -> Tree:
    try:
        source = path.read_bytes()
    except OSError as e:
        raise SourceParseError(path, str(e)) from e
    return parse_source(source, path, parser=parser, strict=strict)


def node_text(node: Node) -> str:
    """Return the source text covered by *node*."""
    return node.text.decode("utf-8", errors="replace")


def node_point(node: Node) -> tuple[int, int]:
    """Return the 1-based (line, column) where *node* starts."""
    return node.start_point[0] + 1, node.start_point[1] + 1


def first_error(root: Node) -> Node | None:
    """Return the first ``ERROR`` or missing node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None
