"""Data model for source dependency graphs: files, package directories, classes."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from javadeps.errors import AnalysisError


def normalize_path(path: str | os.PathLike[str]) -> Path:
    """Return an absolute, lexically normalized path (symlinks are kept)."""
    return Path(os.path.normpath(os.path.abspath(path)))


class CompilationUnit:
    """A Java source file and the classes it declares.

    Identity is the normalized file path. Classes are declared during the
    scope pass; once the unit is sealed it no longer changes.
    """

    def __init__(self, path: str | os.PathLike[str], root: str | os.PathLike[str] | None = None):
        self.path = normalize_path(path)
        self.root = normalize_path(root) if root is not None else None
        self._class_names: dict[str, None] = {}
        self._package_name: str | None = None
        self._sealed = False

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def class_names(self) -> tuple[str, ...]:
        return tuple(self._class_names)

    @property
    def package_name(self) -> str:
        """Package of the first declared class, else a guess from the path."""
        if self._package_name is not None:
            return self._package_name
        return self._guess_package()

    def declare(self, class_name: str, package_name: str) -> None:
        if self._sealed:
            raise AnalysisError(f"Cannot declare {class_name} in sealed unit {self.path}")
        if self._package_name is None:
            self._package_name = package_name
        self._class_names[class_name] = None

    def seal(self) -> None:
        self._sealed = True

    def _guess_package(self) -> str:
        if self.root is None or self.root == self.path:
            return ""
        try:
            relative = self.directory.relative_to(self.root)
        except ValueError:
            return self.directory.name
        return ".".join(relative.parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompilationUnit):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(("unit", self.path))

    def __repr__(self) -> str:
        return f"CompilationUnit({str(self.path)!r})"

    def __str__(self) -> str:
        return str(self.path)


class PackageDirectory:
    """A directory holding the source files of one package.

    Identity is the directory path. The directory is bound to its
    :class:`JavaPackage` once all packages of the batch are known.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = normalize_path(path)
        self._package: JavaPackage | None = None

    @property
    def java_package(self) -> JavaPackage | None:
        return self._package

    @property
    def package_name(self) -> str | None:
        return self._package.name if self._package is not None else None

    def bind(self, package: JavaPackage) -> None:
        # A directory mixing package declarations keeps its first package.
        if self._package is None:
            self._package = package

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageDirectory):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(("package-dir", self.path))

    def __repr__(self) -> str:
        return f"PackageDirectory({str(self.path)!r})"

    def __str__(self) -> str:
        name = self.package_name
        if name is None:
            return str(self.path)
        return name or "(default)"


@dataclass(frozen=True)
class JavaPackage:
    """A Java package; internal packages list the directories that form it."""

    name: str
    directories: frozenset[PackageDirectory] = field(
        default=frozenset(), compare=False, repr=False
    )

    @property
    def is_external(self) -> bool:
        return not self.directories

    def __str__(self) -> str:
        return self.name or "(default)"


@dataclass(frozen=True)
class JavaClass:
    """A resolved class.

    A class without a source file is external: it was found only by name,
    through a class index, and never belongs to the analyzed corpus.
    """

    name: str
    package: JavaPackage
    source_file: CompilationUnit | None = None
    source_root: Path | None = None

    @property
    def is_external(self) -> bool:
        return self.source_file is None

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.name
