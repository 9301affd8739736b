"""Tests for config loading and environment toggles."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from lint_ratchet.config import (
    AppConfig,
    default_config_template,
    load_app_config,
    read_env_toggles,
)


def test_load_app_config_defaults_without_files(tmp_path: Path) -> None:
    config = load_app_config(tmp_path)
    assert config == AppConfig()
    assert config.baseline == ".oxlint-suppressions.json"
    assert config.fail_on_excess is True
    assert config.show_code == 3
    assert config.linter.command is None
    assert config.source is None


def test_load_app_config_prefers_dot_file_over_pyproject(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "pyproject.toml").write_text(
        "\n".join(
            [
                "[tool.lint_ratchet]",
                'baseline = "from-pyproject.json"',
                "show_code = 9",
            ]
        ),
        encoding="utf-8",
    )
    (repo / ".lint-ratchet.toml").write_text(
        "\n".join(
            [
                'baseline = "lint/baseline.json"',
                "fail_on_excess = false",
                "show_code = 0",
                'format = "JSON"',
                "",
                "[linter]",
                'command = ["pnpm", "exec", "oxlint"]',
                'args = ["--type-aware"]',
            ]
        ),
        encoding="utf-8",
    )

    config = load_app_config(repo)
    assert config.baseline == "lint/baseline.json"
    assert config.fail_on_excess is False
    assert config.show_code == 0
    assert config.format == "json"
    assert config.linter.command == ["pnpm", "exec", "oxlint"]
    assert config.linter.args == ["--type-aware"]
    assert config.source == str(repo.resolve() / ".lint-ratchet.toml")


def test_load_app_config_reads_pyproject_hyphenated_key(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "pyproject.toml").write_text(
        "\n".join(
            [
                '[tool."lint-ratchet"]',
                'format = "json"',
                "",
                '[tool."lint-ratchet".linter]',
                'args = ["src/"]',
            ]
        ),
        encoding="utf-8",
    )

    config = load_app_config(repo)
    assert config.format == "json"
    assert config.linter.args == ["src/"]
    assert config.source == str(repo.resolve() / "pyproject.toml")


def test_pyproject_without_tool_section_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "web"\n', encoding="utf-8")
    assert load_app_config(tmp_path).source is None


def test_load_app_config_from_explicit_config_path(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / ".lint-ratchet.toml").write_text("show_code = 1\n", encoding="utf-8")
    config_path = repo / "custom.toml"
    config_path.write_text("show_code = 7\n", encoding="utf-8")

    config = load_app_config(repo, config_path=Path("custom.toml"))
    assert config.show_code == 7
    assert config.source == str(repo.resolve() / "custom.toml")


def test_explicit_pyproject_path_reads_tool_table(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "[tool.lint_ratchet]\nshow_code = 5\n", encoding="utf-8"
    )

    config = load_app_config(tmp_path, config_path=Path("pyproject.toml"))
    assert config.show_code == 5


def test_load_app_config_missing_explicit_path(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Config file does not exist"):
        load_app_config(tmp_path, config_path=tmp_path / "nope.toml")


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("show_code = -1", "show_code must be >= 0"),
        ('show_code = "3"', "show_code must be an integer"),
        ('fail_on_excess = "yes"', "fail_on_excess must be a boolean"),
        ('format = "sarif"', "format must be one of: human, json"),
        ("baseline = 3", "baseline must be a string"),
        ('linter = "oxlint"', "linter must be a table/object"),
        ("[linter]\ncommand = []", "linter.command must not be empty"),
        ("[linter]\nargs = [1]", "linter.args must be a list of strings"),
        ("baseline = ", "Invalid TOML"),
    ],
)
def test_load_app_config_rejects_invalid_values(
    tmp_path: Path, content: str, message: str
) -> None:
    (tmp_path / ".lint-ratchet.toml").write_text(content + "\n", encoding="utf-8")
    with pytest.raises(ValueError, match=message):
        load_app_config(tmp_path)


@pytest.mark.parametrize(
    ("environ", "update", "tighten"),
    [
        ({}, False, False),
        ({"LINT_RATCHET_UPDATE_BASELINE": "true"}, True, False),
        ({"LINT_RATCHET_UPDATE_BASELINE": "TRUE"}, True, False),
        ({"LINT_RATCHET_UPDATE_BASELINE": "1"}, False, False),
        ({"LINT_RATCHET_UPDATE_BASELINE": "yes"}, False, False),
        ({"LINT_RATCHET_TIGHTEN_BASELINE": "True"}, False, True),
    ],
)
def test_read_env_toggles(environ: dict[str, str], update: bool, tighten: bool) -> None:
    toggles = read_env_toggles(environ)
    assert toggles.update is update
    assert toggles.tighten is tighten


def test_default_config_template_is_loadable(tmp_path: Path) -> None:
    template = default_config_template()
    assert tomllib.loads(template)["show_code"] == 3

    (tmp_path / "lint-ratchet.toml").write_text(template, encoding="utf-8")
    config = load_app_config(tmp_path)
    assert config.linter.args == ["--type-aware"]
    assert config.to_dict()["linter"] == {"command": None, "args": ["--type-aware"]}
