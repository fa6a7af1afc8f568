"""Prefix trie over dot-separated names, used to recognize package prefixes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

V = TypeVar("V")

WILDCARD = "*"


@dataclass
class _Node(Generic[V]):
    value: V | None = None
    has_value: bool = False
    children: dict[str, _Node[V]] = field(default_factory=dict)


class NameTrie(Generic[V]):
    """Maps dotted names (``com.example.foo``) to values.

    A ``*`` component matches any single component at its level, so
    ``com.*.internal`` covers ``com.acme.internal``. Lookups fall back to
    the nearest ancestor that holds a value, which lets a partially
    qualified or nested-type name resolve to its best enclosing entry.
    """

    def __init__(self) -> None:
        self._root: _Node[V] = _Node()

    def put(self, pattern: str, value: V) -> None:
        node = self._root
        for component in _components(pattern):
            node = node.children.setdefault(component, _Node())
        node.value = value
        node.has_value = True

    def get(self, name: str) -> V | None:
        """Return the value of the deepest entry matching a prefix of *name*."""
        best = self._root.value if self._root.has_value else None
        for node, _ in self._descend(name):
            if node.has_value:
                best = node.value
        return best

    def find_package(self, name: str) -> str:
        """Return the longest recorded prefix of *name*, or ``""``."""
        best = ""
        matched: list[str] = []
        for node, component in self._descend(name):
            matched.append(component)
            if node.has_value:
                best = ".".join(matched)
        return best

    def _descend(self, name: str):
        node = self._root
        for component in _components(name):
            child = node.children.get(component)
            if child is None:
                child = node.children.get(WILDCARD)
            if child is None:
                return
            node = child
            yield node, component


class PackageTrieSet:
    """Set of package names backed by a :class:`NameTrie`."""

    def __init__(self, packages=()) -> None:
        self._trie: NameTrie[bool] = NameTrie()
        self._names: set[str] = set()
        for package in packages:
            self.add(package)

    def add(self, package: str) -> None:
        if package and package not in self._names:
            self._names.add(package)
            self._trie.put(package, True)

    def __contains__(self, package: object) -> bool:
        return package in self._names

    def __len__(self) -> int:
        return len(self._names)

    def find_package(self, name: str) -> str:
        """Return how much of *name* is a known package (``""`` if none)."""
        return self._trie.find_package(name)


def _components(name: str) -> list[str]:
    return name.split(".") if name else []
