"""Exception hierarchy for javadeps."""

from __future__ import annotations

from pathlib import Path


class JavadepsError(Exception):
    """Base class for all javadeps errors."""


class ConfigError(JavadepsError):
    """Raised when settings cannot be read or hold invalid values."""


class AnalysisError(JavadepsError):
    """Raised when a batch of sources cannot be analyzed.

    Analysis is all-or-nothing, so any of these aborts the whole batch.
    """


class DuplicateClassError(AnalysisError):
    """Raised when two compilation units declare the same class."""

    def __init__(self, class_name: str, path: Path, previous: Path):
        super().__init__(
            f"Type {class_name} is declared in more than one compilation unit: "
            f"{path} and {previous}"
        )
        self.class_name = class_name
        self.path = path
        self.previous = previous


class EmptyCompilationUnitError(AnalysisError):
    """Raised when a compilation unit declares no classes."""

    def __init__(self, path: Path):
        super().__init__(f"Compilation unit {path} does not declare any types")
        self.path = path


class SourceParseError(AnalysisError):
    """Raised when a source file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason


class ClassLookupError(JavadepsError):
    """Raised by a class index when a lookup must be treated as "not found".

    The resolver always swallows this. Indexes use it for conditions such
    as a case-insensitive file system matching a class file whose name
    differs in case from the requested one.
    """
