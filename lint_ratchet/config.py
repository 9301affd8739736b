"""Configuration loading for lint-ratchet."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lint_ratchet.baseline import DEFAULT_BASELINE_PATH

CONFIG_FILENAMES = (".lint-ratchet.toml", "lint-ratchet.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("lint_ratchet", "lint-ratchet")

UPDATE_ENV = "LINT_RATCHET_UPDATE_BASELINE"
TIGHTEN_ENV = "LINT_RATCHET_TIGHTEN_BASELINE"

OUTPUT_FORMATS = {"human", "json"}


@dataclass(slots=True)
class LinterConfig:
    """How the linter is invoked."""

    command: list[str] | None = None
    args: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": list(self.command) if self.command is not None else None,
            "args": list(self.args),
        }


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    baseline: str = DEFAULT_BASELINE_PATH
    fail_on_excess: bool = True
    show_code: int = 3
    format: str = "human"
    linter: LinterConfig = field(default_factory=LinterConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseline": self.baseline,
            "fail_on_excess": self.fail_on_excess,
            "show_code": self.show_code,
            "format": self.format,
            "linter": self.linter.to_dict(),
            "source": self.source,
        }


@dataclass(frozen=True, slots=True)
class EnvToggles:
    """Mode switches read from the environment."""

    update: bool = False
    tighten: bool = False


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Resolve settings from ``config_path`` or the first config file found in ``repo``.

    Dedicated config files hold the settings at top level; ``pyproject.toml``
    holds them under ``[tool.lint_ratchet]`` (or ``[tool."lint-ratchet"]``).
    """
    repo = repo.resolve()
    if config_path is not None:
        path = config_path if config_path.is_absolute() else repo / config_path
        if not path.is_file():
            raise ValueError(f"Config file does not exist: {path}")
        return _build_config(_read_settings(path), source=path)

    for path in (*(repo / name for name in CONFIG_FILENAMES), repo / PYPROJECT_FILENAME):
        if not path.is_file():
            continue
        settings = _read_settings(path)
        # A pyproject.toml without our tool table does not count as config.
        if settings or path.name != PYPROJECT_FILENAME:
            return _build_config(settings, source=path)
    return AppConfig()


def read_env_toggles(environ: Mapping[str, str] | None = None) -> EnvToggles:
    """Read the update/tighten switches; only the string ``true`` enables one."""
    env = os.environ if environ is None else environ
    return EnvToggles(
        update=_env_flag(env, UPDATE_ENV),
        tighten=_env_flag(env, TIGHTEN_ENV),
    )


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            f'baseline = "{DEFAULT_BASELINE_PATH}"',
            "fail_on_excess = true",
            "show_code = 3",
            'format = "human"',
            "",
            "[linter]",
            '# command = ["pnpm", "exec", "oxlint"]',
            'args = ["--type-aware"]',
            "",
        ]
    )


def _env_flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() == "true"


def _read_settings(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            document = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

    if path.name != PYPROJECT_FILENAME:
        return document
    tool = document.get("tool")
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key) if isinstance(tool, dict) else None
        if isinstance(section, dict):
            return section
    return {}


def _build_config(settings: dict[str, Any], *, source: Path) -> AppConfig:
    linter = settings.get("linter", {})
    if not isinstance(linter, dict):
        raise ValueError("linter must be a table/object")

    show_code = _setting(settings, "show_code", 3, int, "an integer")
    if show_code < 0:
        raise ValueError("show_code must be >= 0")

    output_format = _setting(settings, "format", "human", str, "a string").lower()
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"format must be one of: {', '.join(sorted(OUTPUT_FORMATS))}")

    command = linter.get("command")
    if command is not None:
        command = _string_list(command, "linter.command")
        if not command:
            raise ValueError("linter.command must not be empty")

    return AppConfig(
        baseline=_setting(settings, "baseline", DEFAULT_BASELINE_PATH, str, "a string"),
        fail_on_excess=_setting(settings, "fail_on_excess", True, bool, "a boolean"),
        show_code=show_code,
        format=output_format,
        linter=LinterConfig(
            command=command,
            args=_string_list(linter.get("args", []), "linter.args"),
        ),
        source=str(source),
    )


def _setting(settings: dict[str, Any], key: str, default: Any, kind: type, noun: str) -> Any:
    value = settings.get(key, default)
    # bool is an int subclass; only accept it where a bool is wanted.
    if isinstance(value, bool) != (kind is bool) or not isinstance(value, kind):
        raise ValueError(f"{key} must be {noun}")
    return value


def _string_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be a list of strings")
    return list(value)
