"""Orchestrator: discover → parse → scan → resolve → graph."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future
from pathlib import Path

from javadeps.classpath import BUILTIN_CLASSES, ClassIndex, StaticClassIndex, build_class_index
from javadeps.config import Settings
from javadeps.discover import discover_sources
from javadeps.graph import Results
from javadeps.model import CompilationUnit
from javadeps.parsing import new_parser, parse_file
from javadeps.resolver import SymbolResolver, index_packages
from javadeps.scopes import SymbolTables

logger = logging.getLogger(__name__)

# Called after each file is scanned with (files done, files total, path).
ProgressCallback = Callable[[int, int, Path], None]


class InlineExecutor(Executor):
    """Runs every submitted call right away, on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


class SourceDependencyAnalyzer:
    """Analyzes the Java sources under a set of root paths.

    The whole batch is one task: either every file is reflected in the
    :class:`Results`, or the future fails with the first error. An
    analyzer runs at most once; later calls to :meth:`analyze` return the
    same future.
    """

    def __init__(
        self,
        paths: Iterable[str | os.PathLike[str]],
        *,
        class_index: ClassIndex | None = None,
        exclude: Iterable[str] = (),
        strict: bool = True,
        progress: ProgressCallback | None = None,
    ):
        self.paths = tuple(paths)
        self.class_index = (
            class_index if class_index is not None else StaticClassIndex(BUILTIN_CLASSES)
        )
        self.exclude = tuple(exclude)
        self.strict = strict
        self._progress = progress
        self._future: Future[Results] | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        paths: Iterable[str | os.PathLike[str]],
        settings: Settings,
        *,
        progress: ProgressCallback | None = None,
    ) -> SourceDependencyAnalyzer:
        return cls(
            paths,
            class_index=build_class_index(settings),
            exclude=settings.exclude,
            strict=settings.strict,
            progress=progress,
        )

    def analyze(self, executor: Executor | None = None) -> Future[Results]:
        """Submit the analysis to *executor* (default: run inline)."""
        with self._lock:
            if self._future is None:
                self._future = (executor or InlineExecutor()).submit(self._analyze)
            return self._future

    def run(self) -> Results:
        """Analyze synchronously, raising whatever the analysis raised."""
        return self.analyze().result()

    def _analyze(self) -> Results:
        sources = discover_sources(self.paths, self.exclude)
        tables = SymbolTables()
        parser = new_parser()
        for done, (root, path) in enumerate(sources, start=1):
            logger.debug("Scanning %s", path)
            tree = parse_file(path, parser=parser, strict=self.strict)
            tables.scan(CompilationUnit(path, root), tree)
            if self._progress is not None:
                self._progress(done, len(sources), path)

        logger.debug(
            "Scanned %d files: %d classes in %d packages",
            len(tables.units),
            len(tables.unit_by_class),
            len(tables.package_index),
        )

        packages = index_packages(tables)
        resolved = SymbolResolver(tables, packages, self.class_index).resolve_all()
        return Results(resolved)
