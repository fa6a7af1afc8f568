"""Tests for settings loading."""

from pathlib import Path

import pytest

from javadeps.config import Settings, load_settings
from javadeps.errors import ConfigError


def test_defaults_without_config(tmp_path):
    assert load_settings(tmp_path) == Settings()


def test_javadeps_toml(tmp_path):
    (tmp_path / ".javadeps.toml").write_text(
        """
[javadeps]
exclude = ["*/generated/*"]
classpath = ["libs/guava.jar"]
use-jdk = false
strict = false
"""
    )
    settings = load_settings(tmp_path)
    assert settings.exclude == ("*/generated/*",)
    assert settings.classpath == (tmp_path / "libs" / "guava.jar",)
    assert settings.use_jdk is False
    assert settings.strict is False


def test_pyproject_table(tmp_path):
    (tmp_path / "pyproject.toml").write_text(
        """
[project]
name = "demo"

[tool.javadeps]
exclude = ["test/*"]
"""
    )
    settings = load_settings(tmp_path)
    assert settings.exclude == ("test/*",)
    assert settings.use_jdk is True


def test_javadeps_toml_wins_over_pyproject(tmp_path):
    (tmp_path / ".javadeps.toml").write_text('[javadeps]\nexclude = ["a/*"]\n')
    (tmp_path / "pyproject.toml").write_text('[tool.javadeps]\nexclude = ["b/*"]\n')
    assert load_settings(tmp_path).exclude == ("a/*",)


def test_pyproject_without_table(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')
    assert load_settings(tmp_path) == Settings()


def test_invalid_toml(tmp_path):
    (tmp_path / ".javadeps.toml").write_text("[javadeps\n")
    with pytest.raises(ConfigError):
        load_settings(tmp_path)


@pytest.mark.parametrize(
    "body",
    [
        'exclude = "*.java"',
        "exclude = [1, 2]",
        'use-jdk = "no"',
    ],
)
def test_wrongly_typed_values(tmp_path, body):
    (tmp_path / ".javadeps.toml").write_text(f"[javadeps]\n{body}\n")
    with pytest.raises(ConfigError):
        load_settings(tmp_path)


def test_replace_returns_new_settings():
    settings = Settings()
    changed = settings.replace(strict=False, classpath=(Path("x.jar"),))
    assert settings.strict is True
    assert changed.strict is False
    assert changed.classpath == (Path("x.jar"),)
