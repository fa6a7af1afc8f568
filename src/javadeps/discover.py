"""Find the Java source files under a set of root paths."""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from javadeps.model import normalize_path

logger = logging.getLogger(__name__)

# Declare no types; the analysis has nothing to record for them.
_SKIP_FILES = {"package-info.java", "module-info.java"}


def is_java_source(path: Path) -> bool:
    return path.suffix.lower() == ".java" and path.name not in _SKIP_FILES


def discover_sources(
    paths: Iterable[str | os.PathLike[str]],
    exclude: Iterable[str] = (),
) -> list[tuple[Path, Path]]:
    """Return ``(root, file)`` pairs for every Java source under *paths*.

    A path may be a directory (searched recursively) or a single source
    file, whose root is its parent directory. Files matching an *exclude*
    glob (relative to their root, ``/``-separated) are skipped, as are files
    already found under an earlier root.
    """
    patterns = list(exclude)
    seen: set[Path] = set()
    found: list[tuple[Path, Path]] = []

    for raw in paths:
        root = normalize_path(raw)
        if root.is_file():
            candidates = [root] if is_java_source(root) else []
            root = root.parent
        elif root.is_dir():
            candidates = _walk(root)
        else:
            logger.warning("Source path %s does not exist — skipping", root)
            continue

        for source in candidates:
            if source in seen:
                logger.debug("%s already found under an earlier root", source)
                continue
            relative = source.relative_to(root).as_posix()
            if any(fnmatch.fnmatch(relative, pattern) for pattern in patterns):
                logger.debug("Excluding %s", source)
                continue
            seen.add(source)
            found.append((root, source))

    logger.debug("Discovered %d source files", len(found))
    return found


def _walk(root: Path) -> list[Path]:
    sources: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if is_java_source(path):
                sources.append(path)
    return sources
