"""Dependency analysis for Java source trees: file and package graphs, paths and cycles."""

from javadeps.analyzer import InlineExecutor, SourceDependencyAnalyzer
from javadeps.classpath import ClassIndex, StaticClassIndex
from javadeps.config import Settings, load_settings
from javadeps.errors import (
    AnalysisError,
    ClassLookupError,
    ConfigError,
    DuplicateClassError,
    EmptyCompilationUnitError,
    JavadepsError,
    SourceParseError,
)
from javadeps.graph import Results
from javadeps.model import CompilationUnit, JavaClass, JavaPackage, PackageDirectory

__all__ = [
    "AnalysisError",
    "ClassIndex",
    "ClassLookupError",
    "CompilationUnit",
    "ConfigError",
    "DuplicateClassError",
    "EmptyCompilationUnitError",
    "InlineExecutor",
    "JavaClass",
    "JavaPackage",
    "JavadepsError",
    "PackageDirectory",
    "Results",
    "Settings",
    "SourceDependencyAnalyzer",
    "SourceParseError",
    "StaticClassIndex",
    "load_settings",
]
