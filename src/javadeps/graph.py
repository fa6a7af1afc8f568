"""Queryable dependency graph over compilation units and package directories."""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Union

from javadeps.analysis import enumerate_paths, shorten_cycles
from javadeps.errors import AnalysisError, EmptyCompilationUnitError
from javadeps.model import (
    CompilationUnit,
    JavaClass,
    JavaPackage,
    PackageDirectory,
    normalize_path,
)

logger = logging.getLogger(__name__)

# A compilation unit, a package directory, or a path naming either one.
Node = Union[CompilationUnit, PackageDirectory, str, "os.PathLike[str]"]

_EMPTY: frozenset = frozenset()
_NO_DETAILS: Mapping = MappingProxyType({})


def _multimap() -> defaultdict:
    # dict-of-dicts keeps insertion order, which fixes the walk order of
    # the cycle search.
    return defaultdict(dict)


def _freeze(multimap: Mapping) -> Mapping:
    return MappingProxyType({key: frozenset(values) for key, values in multimap.items()})


def _check_internal(cls: JavaClass) -> None:
    if cls.source_root is None:
        raise AnalysisError(f"Class {cls.name} from {cls.source_file} has no source root")
    if cls.package.is_external:
        raise AnalysisError(f"Class {cls.name} from {cls.source_file} has no package directory")


class Results:
    """Analysis over a corpus of Java source code.

    Built from the classes each compilation unit depends on. Exposes the
    file-level and package-level dependency graphs (plus their reverse
    and external-class variants), the shortest path between any two
    connected packages, and the minimal package cycles. Everything is
    read-only once constructed.
    """

    def __init__(self, class_dependencies: Mapping[CompilationUnit, Iterable[JavaClass]]):
        class_dependencies = {unit: list(deps) for unit, deps in class_dependencies.items()}

        directories: dict[Path, PackageDirectory] = {}
        for deps in class_dependencies.values():
            for cls in deps:
                if not cls.is_external:
                    _check_internal(cls)
                    for directory in cls.package.directories:
                        directories.setdefault(directory.path, directory)

        files: dict[CompilationUnit, None] = {}
        packages: dict[PackageDirectory, None] = {}
        external_classes: dict[JavaClass, None] = {}
        external_packages: dict[JavaPackage, None] = {}

        file_dependencies = _multimap()
        file_dependents = _multimap()
        package_dependencies = _multimap()
        package_dependents = _multimap()
        files_by_package = _multimap()
        package_dependencies_by_file = _multimap()
        package_dependents_by_file = _multimap()
        file_dependencies_by_package = _multimap()
        file_dependents_by_package = _multimap()
        external_class_dependencies = _multimap()
        external_package_dependencies = _multimap()
        external_classes_by_package = _multimap()
        external_package_dependencies_by_file = _multimap()
        external_dependencies_by_package = _multimap()
        details: dict[tuple[PackageDirectory, PackageDirectory], defaultdict] = defaultdict(
            _multimap
        )

        for source, deps in class_dependencies.items():
            if not source.class_names:
                raise EmptyCompilationUnitError(source.path)
            source_dir = directories.get(source.directory)
            if source_dir is None:
                raise AnalysisError(f"No package directory is known for {source.path}")
            source.seal()
            files[source] = None
            packages[source_dir] = None
            files_by_package[source_dir][source] = None

            for dep in deps:
                target = dep.source_file
                if target is not None:
                    target_dir = directories[target.directory]
                    files[target] = None
                    packages[target_dir] = None
                    files_by_package[target_dir][target] = None
                    file_dependencies[source][target] = None
                    file_dependents[target][source] = None
                    file_dependencies_by_package[source_dir][target] = None
                    file_dependents_by_package[target_dir][source] = None
                    if source_dir != target_dir:
                        package_dependencies[source_dir][target_dir] = None
                        package_dependents[target_dir][source_dir] = None
                        package_dependencies_by_file[source][target_dir] = None
                        package_dependents_by_file[target][source_dir] = None
                        details[(source_dir, target_dir)][source][target] = None
                else:
                    external_classes[dep] = None
                    external_packages[dep.package] = None
                    external_class_dependencies[source][dep] = None
                    external_package_dependencies[source_dir][dep.package] = None
                    external_classes_by_package[dep.package][dep] = None
                    external_package_dependencies_by_file[source][dep.package] = None
                    external_dependencies_by_package[source_dir][dep] = None

        self._directories = directories
        self._units = {unit.path: unit for unit in files}
        self._files = tuple(sorted(files, key=lambda u: u.path))
        self._packages = tuple(sorted(packages, key=lambda d: d.path))
        self._external_classes = tuple(sorted(external_classes, key=lambda c: c.name))
        self._external_packages = tuple(sorted(external_packages, key=lambda p: p.name))

        self._file_dependencies = _freeze(file_dependencies)
        self._file_dependents = _freeze(file_dependents)
        self._package_dependencies = _freeze(package_dependencies)
        self._package_dependents = _freeze(package_dependents)
        self._files_by_package = _freeze(files_by_package)
        self._package_dependencies_by_file = _freeze(package_dependencies_by_file)
        self._package_dependents_by_file = _freeze(package_dependents_by_file)
        self._file_dependencies_by_package = _freeze(file_dependencies_by_package)
        self._file_dependents_by_package = _freeze(file_dependents_by_package)
        self._external_class_dependencies = _freeze(external_class_dependencies)
        self._external_package_dependencies = _freeze(external_package_dependencies)
        self._external_classes_by_package = _freeze(external_classes_by_package)
        self._external_package_dependencies_by_file = _freeze(external_package_dependencies_by_file)
        self._external_dependencies_by_package = _freeze(external_dependencies_by_package)
        self._details = MappingProxyType(
            {pair: _freeze(edges) for pair, edges in details.items()}
        )

        self._package_graph = MappingProxyType(
            {pkg: tuple(deps) for pkg, deps in package_dependencies.items()}
        )
        shortest, cycles = enumerate_paths(self._package_graph)
        self._shortest_paths = MappingProxyType(shortest)
        self._package_cycles = shorten_cycles(cycles, shortest)

        logger.debug(
            "Graph: %d files, %d packages, %d external classes, %d package cycles",
            len(self._files),
            len(self._packages),
            len(self._external_classes),
            len(self._package_cycles),
        )

    # -- node sets -----------------------------------------------------------

    @property
    def compilation_units(self) -> tuple[CompilationUnit, ...]:
        """All compilation units analyzed, ordered by path."""
        return self._files

    @property
    def packages(self) -> tuple[PackageDirectory, ...]:
        """All package directories analyzed, ordered by path."""
        return self._packages

    @property
    def external_classes(self) -> tuple[JavaClass, ...]:
        return self._external_classes

    @property
    def external_packages(self) -> tuple[JavaPackage, ...]:
        return self._external_packages

    @property
    def package_graph(self) -> Mapping[PackageDirectory, tuple[PackageDirectory, ...]]:
        """Package dependencies in discovery order (same-package edges excluded)."""
        return self._package_graph

    @property
    def package_cycles(self) -> tuple[tuple[PackageDirectory, ...], ...]:
        """The minimal package cycles; each starts and ends with the same package."""
        return self._package_cycles

    # -- queries ---------------------------------------------------------------

    def files_in_package(self, package: Node) -> frozenset[CompilationUnit]:
        node = self._node(package)
        if not isinstance(node, PackageDirectory):
            return _EMPTY
        return self._files_by_package.get(node, _EMPTY)

    def external_package_contents(self, package: JavaPackage | str) -> frozenset[JavaClass]:
        if isinstance(package, str):
            package = JavaPackage(package)
        return self._external_classes_by_package.get(package, _EMPTY)

    def dependencies(self, node: Node) -> frozenset[CompilationUnit]:
        """Compilation units the given file (or the files of a package) depend on."""
        node = self._node(node)
        if isinstance(node, PackageDirectory):
            return self._file_dependencies_by_package.get(node, _EMPTY)
        return self._file_dependencies.get(node, _EMPTY)

    def dependents(self, node: Node) -> frozenset[CompilationUnit]:
        """Compilation units that depend on the given file or package."""
        node = self._node(node)
        if isinstance(node, PackageDirectory):
            return self._file_dependents_by_package.get(node, _EMPTY)
        return self._file_dependents.get(node, _EMPTY)

    def package_dependencies(self, node: Node) -> frozenset[PackageDirectory]:
        node = self._node(node)
        if isinstance(node, PackageDirectory):
            return self._package_dependencies.get(node, _EMPTY)
        return self._package_dependencies_by_file.get(node, _EMPTY)

    def package_dependents(self, node: Node) -> frozenset[PackageDirectory]:
        node = self._node(node)
        if isinstance(node, PackageDirectory):
            return self._package_dependents.get(node, _EMPTY)
        return self._package_dependents_by_file.get(node, _EMPTY)

    def external_dependencies(self, node: Node) -> frozenset[JavaClass]:
        node = self._node(node)
        if isinstance(node, PackageDirectory):
            return self._external_dependencies_by_package.get(node, _EMPTY)
        return self._external_class_dependencies.get(node, _EMPTY)

    def external_package_dependencies(self, node: Node) -> frozenset[JavaPackage]:
        node = self._node(node)
        if isinstance(node, PackageDirectory):
            return self._external_package_dependencies.get(node, _EMPTY)
        return self._external_package_dependencies_by_file.get(node, _EMPTY)

    def file_dependency_details(
        self, dependent: Node, dependency: Node
    ) -> Mapping[CompilationUnit, frozenset[CompilationUnit]]:
        """Explain a package edge by its file-level edges.

        Maps each file of *dependent* that depends on *dependency* to the
        files of *dependency* it uses. Empty unless both are packages.
        """
        first = self._node(dependent)
        second = self._node(dependency)
        if not isinstance(first, PackageDirectory) or not isinstance(second, PackageDirectory):
            return _NO_DETAILS
        return self._details.get((first, second), _NO_DETAILS)

    def dependency_path(self, source: Node, target: Node) -> tuple[PackageDirectory, ...]:
        """Return the shortest package path from *source* to *target*.

        Files stand for their package. The path starts with the source
        package and ends with the target package; it is empty when the
        target is not a (transitive) dependency of the source.
        """
        return self._shortest_paths.get((self._package_of(source), self._package_of(target)), ())

    # -- helpers ---------------------------------------------------------------

    def _node(self, node: Node) -> CompilationUnit | PackageDirectory:
        if isinstance(node, (CompilationUnit, PackageDirectory)):
            return node
        path = normalize_path(node)
        directory = self._directories.get(path)
        if directory is not None:
            return directory
        unit = self._units.get(path)
        if unit is not None:
            return unit
        return PackageDirectory(path) if path.is_dir() else CompilationUnit(path)

    def _package_of(self, node: Node) -> PackageDirectory:
        node = self._node(node)
        if isinstance(node, PackageDirectory):
            return node
        return self._directories.get(node.directory) or PackageDirectory(node.directory)
