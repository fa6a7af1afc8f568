"""Project settings read from ``.javadeps.toml`` or ``pyproject.toml``."""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from javadeps.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Options that shape one analysis run."""

    # glob patterns, matched against source paths relative to their root
    exclude: tuple[str, ...] = ()
    # jars and class directories consulted for external classes
    classpath: tuple[Path, ...] = ()
    use_jdk: bool = True
    strict: bool = True

    def replace(self, **changes: Any) -> Settings:
        return dataclasses.replace(self, **changes)


def load_settings(project_dir: Path) -> Settings:
    """Read settings for *project_dir*.

    ``.javadeps.toml`` (a ``[javadeps]`` table) wins over the
    ``[tool.javadeps]`` table of ``pyproject.toml``. Relative classpath
    entries are taken relative to *project_dir*.
    """
    javadeps_toml = project_dir / ".javadeps.toml"
    if javadeps_toml.exists():
        table = _read_toml(javadeps_toml).get("javadeps", {})
        return _settings_from_table(table, javadeps_toml, project_dir)

    pyproject = project_dir / "pyproject.toml"
    if pyproject.exists():
        table = _read_toml(pyproject).get("tool", {}).get("javadeps")
        if table is not None:
            return _settings_from_table(table, pyproject, project_dir)

    return Settings()


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def _settings_from_table(table: Any, source: Path, project_dir: Path) -> Settings:
    if not isinstance(table, dict):
        raise ConfigError(f"{source}: javadeps settings must be a table")

    unknown = sorted(set(table) - {"exclude", "classpath", "use-jdk", "strict"})
    if unknown:
        logger.warning("%s: ignoring unknown javadeps settings %s", source, ", ".join(unknown))

    exclude = _string_list(table, "exclude", source)
    classpath = tuple(project_dir / entry for entry in _string_list(table, "classpath", source))
    logger.debug("Loaded settings from %s", source)
    return Settings(
        exclude=exclude,
        classpath=classpath,
        use_jdk=_flag(table, "use-jdk", True, source),
        strict=_flag(table, "strict", True, source),
    )


def _string_list(table: dict[str, Any], key: str, source: Path) -> tuple[str, ...]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{source}: '{key}' must be a list of strings")
    return tuple(value)


def _flag(table: dict[str, Any], key: str, default: bool, source: Path) -> bool:
    value = table.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{source}: '{key}' must be true or false")
    return value
