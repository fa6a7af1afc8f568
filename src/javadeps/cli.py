"""Command-line interface for javadeps."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from javadeps.analyzer import SourceDependencyAnalyzer
from javadeps.config import load_settings
from javadeps.discover import is_java_source
from javadeps.errors import JavadepsError
from javadeps.report import format_text, to_json

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="javadeps",
        description="Java source dependency analyzer — package graph, paths and cycles.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        default=[Path(".")],
        help="Directories or Java source files to analyze (default: .)",
    )
    parser.add_argument(
        "--classpath",
        action="append",
        type=Path,
        default=[],
        metavar="PATH",
        help="Jar file or class directory for resolving external classes (repeatable)",
    )
    parser.add_argument(
        "--no-jdk",
        action="store_true",
        help="Do not index the classes of the installed JDK",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Warn about syntax errors instead of failing",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--fail-on-cycles",
        action="store_true",
        help="Exit with status 1 if package cycles are found",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("javadeps").setLevel(logging.DEBUG)

    for path in args.paths:
        if not path.exists():
            parser.error(f"{path} does not exist")
        if not path.is_dir() and not is_java_source(path):
            parser.error(f"{path} is neither a directory nor a Java source file")

    try:
        settings = load_settings(Path.cwd())
        settings = settings.replace(classpath=settings.classpath + tuple(args.classpath))
        if args.no_jdk:
            settings = settings.replace(use_jdk=False)
        if args.lenient:
            settings = settings.replace(strict=False)

        analyzer = SourceDependencyAnalyzer.from_settings(
            args.paths,
            settings,
            progress=lambda done, total, path: logger.info("Analyzed %s (%d/%d)", path, done, total),
        )
        results = analyzer.run()
    except JavadepsError as e:
        print(f"javadeps: {e}", file=sys.stderr)
        return 1

    report = to_json(results) if args.as_json else format_text(results)
    if report:
        print(report)

    if args.fail_on_cycles and results.package_cycles:
        return 1
    return 0
