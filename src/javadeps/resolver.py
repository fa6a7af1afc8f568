"""Resolve textual type references to classes.

The lookup approximates Java's scoping rules closely enough to recover
every real dependency between compilation units, without type checking.
Some identifiers stay unresolved and are silently dropped:

* method references whose receiver is a variable (``task::run``),
* nested types inherited from a supertype but never imported (``Entry``
  inside a class implementing ``Map``),
* type variables.

None of these hide a dependency between compilation units, since the
types they depend on are imported or referenced elsewhere in the file.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterator, Mapping
from pathlib import Path

from javadeps.classpath import ClassIndex
from javadeps.errors import ClassLookupError
from javadeps.model import CompilationUnit, JavaClass, JavaPackage, PackageDirectory
from javadeps.scopes import SymbolTables

logger = logging.getLogger(__name__)

IMPLICIT_PACKAGE = "java.lang"


def index_packages(tables: SymbolTables) -> dict[str, JavaPackage]:
    """Group the directories of all units by declared package.

    Each :class:`PackageDirectory` is bound to the first package found in
    it. The returned mapping is keyed by package name.
    """
    directories: dict[Path, PackageDirectory] = {}
    by_package: dict[str, dict[PackageDirectory, None]] = defaultdict(dict)
    for unit, package in tables.package_by_unit.items():
        directory = directories.get(unit.directory)
        if directory is None:
            directory = directories[unit.directory] = PackageDirectory(unit.directory)
        by_package[package][directory] = None

    packages: dict[str, JavaPackage] = {}
    for name, dirs in by_package.items():
        package = JavaPackage(name, frozenset(dirs))
        for directory in dirs:
            directory.bind(package)
        packages[name] = package
    return packages


class SymbolResolver:
    """Turns the raw :class:`SymbolTables` into resolved classes."""

    def __init__(
        self,
        tables: SymbolTables,
        packages: Mapping[str, JavaPackage],
        class_index: ClassIndex | None = None,
    ):
        self._tables = tables
        self._packages = packages
        self._class_index = class_index
        self._internal: dict[str, JavaClass] = {}
        self._external: dict[tuple[str, str], JavaClass | None] = {}
        self._external_packages: dict[str, JavaPackage] = {}

    def resolve_all(self) -> dict[CompilationUnit, dict[JavaClass, None]]:
        """Map every unit to the (ordered) set of classes it depends on.

        Each unit also maps to its own classes so that units without any
        resolvable reference still show up in the dependency graph.
        """
        resolved: dict[CompilationUnit, dict[JavaClass, None]] = {
            unit: {} for unit in self._tables.units.values()
        }
        unresolved = 0
        for unit, imports in self._tables.imports_by_unit.items():
            for imported in imports:
                cls = self.resolve_class(imported)
                if cls is None:
                    unresolved += 1
                else:
                    resolved.setdefault(unit, {})[cls] = None
        for scope, names in self._tables.deps_by_scope.items():
            unit = self.unit_for_scope(scope)
            if unit is None:
                continue
            for name in names:
                cls = self.resolve_reference(name, scope)
                if cls is None:
                    unresolved += 1
                else:
                    resolved.setdefault(unit, {})[cls] = None
        for class_name, unit in self._tables.unit_by_class.items():
            cls = self.resolve_class(class_name)
            if cls is not None:
                resolved.setdefault(unit, {})[cls] = None

        logger.debug(
            "Resolved dependencies of %d units (%d references unresolved)",
            len(resolved),
            unresolved,
        )
        return resolved

    def resolve_class(self, name: str, known_prefix: str | None = None) -> JavaClass | None:
        """Resolve a candidate fully qualified *name*.

        *known_prefix* is the part of the name known to be a package; it
        bounds the search for binary names of nested external classes.
        """
        unit = self._tables.unit_by_class.get(name)
        if unit is not None:
            return self._internal_class(name, unit)
        if known_prefix is None:
            known_prefix = self._tables.package_index.find_package(name)
        return self._find_external(name, known_prefix)

    def resolve_reference(self, name: str, scope: str) -> JavaClass | None:
        """Resolve *name* as written inside the element *scope*."""
        package = self._tables.package_by_scope[scope]
        unit = self.unit_for_scope(scope)

        # Enclosing types, innermost first. Siblings in the same package are
        # only consulted after imports.
        for context in self._contexts(scope):
            if name == _simple_name(context):
                return self.resolve_class(context)
            enclosed = self.resolve_class(f"{context}.{name}", package)
            if enclosed is not None:
                return enclosed

        # Top-level types of the same file shadow imports.
        own = f"{package}.{name}" if package else name
        if unit is not None and self._tables.unit_by_class.get(own) == unit:
            return self.resolve_class(own)

        prefix, dot, suffix = name.partition(".")
        for imported in self._tables.imports_by_unit.get(unit, ()):
            if not dot:
                if name == _simple_name(imported):
                    return self.resolve_class(imported)
            elif prefix == _simple_name(imported):
                return self.resolve_class(f"{imported}.{suffix}")

        for imported_scope in self._tables.wildcards_by_unit.get(unit, ()):
            cls = self.resolve_class(f"{imported_scope}.{name}")
            if cls is not None:
                return cls

        if package:
            cls = self.resolve_class(f"{package}.{name}", package)
            if cls is not None:
                return cls

        cls = self.resolve_class(f"{IMPLICIT_PACKAGE}.{name}", IMPLICIT_PACKAGE)
        if cls is not None:
            return cls

        # Already qualified, or in the unnamed package.
        return self.resolve_class(name)

    def unit_for_scope(self, scope: str) -> CompilationUnit | None:
        """Return the unit declaring the innermost type around *scope*."""
        for context in self._contexts(scope):
            unit = self._tables.unit_by_class.get(context)
            if unit is not None:
                return unit
        return None

    def _contexts(self, scope: str) -> Iterator[str]:
        """Yield *scope* and its enclosing elements, stopping at the package."""
        package = self._tables.package_by_scope[scope]
        current: str | None = scope
        while current is not None:
            yield current
            pos = max(current.rfind("."), current.rfind("#"))
            if pos == -1:
                current = None
            else:
                current = current[:pos]
                if current == package:
                    current = None

    def _internal_class(self, name: str, unit: CompilationUnit) -> JavaClass:
        cls = self._internal.get(name)
        if cls is None:
            package = self._packages[self._tables.package_by_unit[unit]]
            cls = self._internal[name] = JavaClass(name, package, unit, unit.root)
        return cls

    def _find_external(self, name: str, known_prefix: str) -> JavaClass | None:
        # A canonical name is only the binary name for top-level classes, so
        # keep turning the rightmost dot into '$' until the class is found or
        # the known package prefix is reached.
        key = (name, known_prefix)
        if key in self._external:
            return self._external[key]

        result = None
        if self._class_index is not None:
            binary = name
            pos = len(name)
            while pos > len(known_prefix):
                package = self._lookup(binary)
                if package is not None:
                    result = JavaClass(name, self._external_package(package))
                    break
                pos = binary.rfind(".", 0, pos)
                if pos != -1:
                    binary = f"{binary[:pos]}${binary[pos + 1:]}"

        self._external[key] = result
        return result

    def _lookup(self, binary_name: str) -> str | None:
        try:
            return self._class_index.find_class(binary_name)
        except ClassLookupError as e:
            logger.debug("Treating %s as not found: %s", binary_name, e)
            return None

    def _external_package(self, name: str) -> JavaPackage:
        package = self._external_packages.get(name)
        if package is None:
            package = self._external_packages[name] = JavaPackage(name)
        return package


def _simple_name(element: str) -> str:
    return element.rsplit(".", 1)[-1]
