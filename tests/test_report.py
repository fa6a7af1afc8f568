"""Tests for report rendering."""

import json

from javadeps.report import cycle_edges, format_text, to_json


def test_text_report_for_cycles(cycle_tree, analyze):
    results = analyze(cycle_tree)
    a, b, c = (cycle_tree / name / f"{name.upper()}.java" for name in "abc")
    assert format_text(results).splitlines() == [
        "Found cycle: a -> b -> c -> a",
        "From a to b:",
        f"   {a} -> {b}",
        "From b to c:",
        f"   {b} -> {c}",
        "From c to a:",
        f"   {c} -> {a}",
    ]


def test_text_report_lists_external_packages(java_tree, analyze):
    root = java_tree(
        {
            "p/A.java": """
                package p;

                import java.util.List;

                class A { String name; }
            """,
        }
    )
    assert format_text(analyze(root)).splitlines() == [
        "External package: java.lang",
        "External package: java.util",
    ]


def test_cycle_edges_are_distinct(cycle_tree, analyze):
    edges = cycle_edges(analyze(cycle_tree))
    assert [(str(x), str(y)) for x, y in edges] == [("a", "b"), ("b", "c"), ("c", "a")]


def test_json_report(cycle_tree, analyze):
    data = json.loads(to_json(analyze(cycle_tree)))
    assert [p["name"] for p in data["packages"]] == ["a", "b", "c"]
    assert data["packages"][0]["dependencies"] == ["b"]
    assert data["packages"][0]["files"] == [str(cycle_tree / "a" / "A.java")]
    (cycle,) = data["cycles"]
    assert cycle["packages"] == ["a", "b", "c", "a"]
    assert cycle["edges"][0]["files"] == [
        {"from": str(cycle_tree / "a" / "A.java"), "to": str(cycle_tree / "b" / "B.java")}
    ]
    assert data["externalPackages"] == []


def test_json_report_describes_external_classes(java_tree, analyze):
    root = java_tree(
        {
            "p/A.java": """
                package p;

                import java.util.List;

                class A { List<String> names; q.B b; }
            """,
            "q/B.java": "package q; public class B {}",
        }
    )
    data = json.loads(to_json(analyze(root)))
    assert data["packages"][0]["dependencies"] == ["q"]
    assert data["packages"][1]["dependencies"] == []
    assert data["externalClasses"] == [
        {"name": "java.lang.String", "simpleName": "String", "package": "java.lang"},
        {"name": "java.util.List", "simpleName": "List", "package": "java.util"},
    ]
