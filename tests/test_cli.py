"""Tests for the javadeps command line."""

import json

import pytest

from javadeps.cli import main


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    # Settings are read from the working directory.
    monkeypatch.chdir(tmp_path)


def test_prints_cycles(cycle_tree, capsys):
    assert main([str(cycle_tree), "--no-jdk"]) == 0
    out = capsys.readouterr().out
    assert "Found cycle: a -> b -> c -> a" in out
    assert "From a to b:" in out


def test_fail_on_cycles(cycle_tree):
    assert main([str(cycle_tree), "--no-jdk", "--fail-on-cycles"]) == 1


def test_acyclic_tree_passes(java_tree, capsys):
    root = java_tree({"p/A.java": "package p; class A {}"})
    assert main([str(root), "--no-jdk", "--fail-on-cycles"]) == 0
    assert capsys.readouterr().out == ""


def test_json_output(cycle_tree, capsys):
    assert main([str(cycle_tree), "--no-jdk", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["cycles"][0]["packages"] == ["a", "b", "c", "a"]


def test_analysis_errors_go_to_stderr(java_tree, capsys):
    root = java_tree(
        {
            "one/A.java": "package p; class A {}",
            "two/A.java": "package p; class A {}",
        }
    )
    assert main([str(root), "--no-jdk"]) == 1
    err = capsys.readouterr().err
    assert "more than one compilation unit" in err


def test_lenient_parsing(java_tree):
    root = java_tree({"p/A.java": "package p; class A { int x = ; }"})
    assert main([str(root), "--no-jdk"]) == 1
    assert main([str(root), "--no-jdk", "--lenient"]) == 0


def test_missing_path(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing")])
    assert excinfo.value.code == 2


def test_rejects_non_java_file(tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("hello")
    with pytest.raises(SystemExit):
        main([str(notes)])


def test_settings_file_is_used(java_tree, tmp_path, capsys):
    root = java_tree(
        {
            "p/A.java": "package p; class A {}",
            "gen/B.java": "package gen; class B {}",
        }
    )
    (tmp_path / ".javadeps.toml").write_text('[javadeps]\nexclude = ["gen/*"]\nuse-jdk = false\n')
    assert main([str(root), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [p["name"] for p in data["packages"]] == ["p"]
