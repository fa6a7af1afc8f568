"""Tests for name resolution against the symbol tables."""

import textwrap
from pathlib import Path

import pytest

from javadeps.classpath import BUILTIN_CLASSES, StaticClassIndex
from javadeps.errors import ClassLookupError
from javadeps.model import CompilationUnit
from javadeps.parsing import parse_source
from javadeps.resolver import SymbolResolver, index_packages
from javadeps.scopes import SymbolTables

ROOT = Path("/project/src")


def build(files, class_index=None):
    tables = SymbolTables()
    units = {}
    for relative, source in files.items():
        path = ROOT / relative
        unit = CompilationUnit(path, ROOT)
        tables.scan(unit, parse_source(textwrap.dedent(source).encode("utf-8"), path))
        units[relative] = unit
    if class_index is None:
        class_index = StaticClassIndex(BUILTIN_CLASSES)
    resolver = SymbolResolver(tables, index_packages(tables), class_index)
    return resolver, units


class RaisingIndex:
    def find_class(self, binary_name):
        raise ClassLookupError(f"{binary_name} differs in case")


class TestResolveReference:
    def test_same_file_type_wins_over_import(self):
        resolver, _ = build(
            {
                "p/A.java": """
                    package p;

                    import q.B;

                    class A { B b; }
                    class B {}
                """,
                "q/B.java": "package q; public class B {}",
            }
        )
        assert resolver.resolve_reference("B", "p.A").name == "p.B"

    def test_nested_type_of_enclosing_class(self):
        resolver, units = build(
            {
                "p/Outer.java": """
                    package p;

                    class Outer {
                        static class Inner {}
                        class User { Inner inner; }
                    }
                """,
            }
        )
        cls = resolver.resolve_reference("Inner", "p.Outer.User")
        assert cls.name == "p.Outer.Inner"
        assert cls.source_file == units["p/Outer.java"]

    def test_explicit_import(self):
        resolver, units = build(
            {
                "p/A.java": "package p; import q.B; class A { B b; }",
                "q/B.java": "package q; public class B {}",
            }
        )
        cls = resolver.resolve_reference("B", "p.A")
        assert cls.name == "q.B"
        assert cls.source_file == units["q/B.java"]
        assert not cls.is_external

    def test_wildcard_import(self):
        resolver, _ = build(
            {
                "p/A.java": "package p; import q.*; class A { B b; }",
                "q/B.java": "package q; public class B {}",
            }
        )
        assert resolver.resolve_reference("B", "p.A").name == "q.B"

    def test_same_package(self):
        resolver, _ = build(
            {
                "p/A.java": "package p; class A { B b; }",
                "p/B.java": "package p; class B {}",
            }
        )
        assert resolver.resolve_reference("B", "p.A").name == "p.B"

    def test_java_lang_is_implicit(self):
        resolver, _ = build({"p/A.java": "package p; class A { String s; }"})
        cls = resolver.resolve_reference("String", "p.A")
        assert cls.name == "java.lang.String"
        assert cls.package.name == "java.lang"
        assert cls.is_external

    def test_fully_qualified_name(self):
        resolver, _ = build(
            {
                "p/A.java": "package p; class A { q.B b; }",
                "q/B.java": "package q; public class B {}",
            }
        )
        assert resolver.resolve_reference("q.B", "p.A").name == "q.B"

    def test_nested_external_class_through_import(self):
        resolver, _ = build(
            {
                "p/A.java": """
                    package p;

                    import java.util.Map;

                    class A { Map.Entry<String, String> entry; }
                """,
            }
        )
        cls = resolver.resolve_reference("Map.Entry", "p.A")
        assert cls.name == "java.util.Map.Entry"
        assert cls.package.name == "java.util"

    def test_unknown_name_is_unresolved(self):
        resolver, _ = build({"p/A.java": "package p; class A { Missing m; }"})
        assert resolver.resolve_reference("Missing", "p.A") is None

    def test_lookup_errors_count_as_not_found(self):
        resolver, _ = build(
            {"p/A.java": "package p; class A { String s; }"},
            class_index=RaisingIndex(),
        )
        assert resolver.resolve_reference("String", "p.A") is None


class TestResolveAll:
    def test_every_unit_maps_to_its_own_classes(self):
        resolver, units = build(
            {
                "p/A.java": "package p; class A {}",
                "p/B.java": "package p; class B { A a; }",
            }
        )
        resolved = resolver.resolve_all()
        assert [cls.name for cls in resolved[units["p/A.java"]]] == ["p.A"]
        assert [cls.name for cls in resolved[units["p/B.java"]]] == ["p.A", "p.B"]

    def test_imports_count_as_dependencies(self):
        resolver, units = build(
            {
                "p/A.java": "package p; import java.util.List; import q.B; class A {}",
                "q/B.java": "package q; public class B {}",
            }
        )
        names = [cls.name for cls in resolver.resolve_all()[units["p/A.java"]]]
        assert names == ["java.util.List", "q.B", "p.A"]

    def test_packages_are_bound_to_directories(self):
        resolver, units = build({"com/acme/A.java": "package com.acme; class A {}"})
        (cls,) = resolver.resolve_all()[units["com/acme/A.java"]]
        (directory,) = cls.package.directories
        assert directory.path == ROOT / "com" / "acme"
        assert directory.package_name == "com.acme"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("java.util.List", "java.util"),
        ("java.util.Map.Entry", "java.util"),
        ("java.lang.Thread.State", "java.lang"),
    ],
)
def test_resolve_class_finds_binary_names(name, expected):
    resolver, _ = build({"p/A.java": "package p; class A {}"})
    assert resolver.resolve_class(name).package.name == expected
