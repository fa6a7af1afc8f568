"""Shared fixtures: small Java source trees written under tmp_path."""

import textwrap
from pathlib import Path

import pytest

from javadeps import SourceDependencyAnalyzer


@pytest.fixture
def java_tree(tmp_path):
    """Return a writer that lays out ``{relative path: source}`` under a source root."""
    root = tmp_path / "src"

    def write(files: dict[str, str]) -> Path:
        for relative, text in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)
        return root

    return write


@pytest.fixture
def analyze():
    """Run the analyzer synchronously over the given paths."""

    def run(*paths, **kwargs):
        return SourceDependencyAnalyzer(paths, **kwargs).run()

    return run


@pytest.fixture
def cycle_tree(java_tree):
    """Three packages depending on each other in a ring: a -> b -> c -> a."""
    return java_tree(
        {
            "a/A.java": """
                package a;

                import b.B;

                public class A {
                    private B b;
                }
            """,
            "b/B.java": """
                package b;

                import c.C;

                public class B {
                    private C c;
                }
            """,
            "c/C.java": """
                package c;

                import a.A;

                public class C {
                    private A a;
                }
            """,
        }
    )
