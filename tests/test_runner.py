"""Tests for linter command detection and invocation."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from lint_ratchet import runner as runner_module
from lint_ratchet.errors import AdapterParseError, SubprocessLaunchError
from lint_ratchet.runner import detect_linter_command, find_lockfile, run_linter
from tests.helpers_diagnostics import modern_output, modern_record


@pytest.mark.parametrize(
    ("lockfile", "expected"),
    [
        ("pnpm-lock.yaml", ["pnpm", "exec", "oxlint"]),
        ("yarn.lock", ["yarn", "exec", "oxlint"]),
        ("package-lock.json", ["npx", "oxlint"]),
    ],
)
def test_detect_linter_command_from_lockfile(
    tmp_path: Path, lockfile: str, expected: list[str]
) -> None:
    (tmp_path / lockfile).write_text("", encoding="utf-8")
    assert detect_linter_command(tmp_path) == expected


def test_find_lockfile_walks_up_to_parent(tmp_path: Path) -> None:
    (tmp_path / "yarn.lock").write_text("", encoding="utf-8")
    nested = tmp_path / "packages" / "web"
    nested.mkdir(parents=True)

    assert find_lockfile(nested) == (tmp_path / "yarn.lock").resolve()
    assert detect_linter_command(nested) == ["yarn", "exec", "oxlint"]


def test_nearest_lockfile_wins(tmp_path: Path) -> None:
    (tmp_path / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    nested = tmp_path / "app"
    nested.mkdir()
    (nested / "package-lock.json").write_text("{}", encoding="utf-8")

    assert detect_linter_command(nested) == ["npx", "oxlint"]


def test_pnpm_preferred_when_several_lockfiles_share_a_directory(tmp_path: Path) -> None:
    for name in ("package-lock.json", "yarn.lock", "pnpm-lock.yaml"):
        (tmp_path / name).write_text("", encoding="utf-8")
    assert detect_linter_command(tmp_path) == ["pnpm", "exec", "oxlint"]


def test_run_linter_builds_json_command_and_parses_stdout(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[dict[str, object]] = []
    stdout = modern_output(modern_record("src/a.ts", "eslint(no-var)"))

    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        calls.append({"command": command, **kwargs})
        return subprocess.CompletedProcess(command, 1, stdout=stdout, stderr="")

    monkeypatch.setattr(runner_module, "run", fake_run)

    linter_run = run_linter(["--type-aware", "src/"], cwd=tmp_path, command=["oxlint"])
    assert linter_run.command == ["oxlint", "-f", "json", "--type-aware", "src/"]
    assert linter_run.returncode == 1
    assert calls[0]["cwd"] == tmp_path
    assert calls[0]["check"] is False

    diagnostics = linter_run.diagnostics()
    assert [(item.filename, item.rule) for item in diagnostics] == [
        ("src/a.ts", "eslint(no-var)")
    ]


def test_run_linter_uses_detected_command(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    seen: list[list[str]] = []

    def fake_run(command: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        seen.append(command)
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr(runner_module, "run", fake_run)

    linter_run = run_linter([], cwd=tmp_path)
    assert seen == [["pnpm", "exec", "oxlint", "-f", "json"]]
    assert linter_run.diagnostics() == []


def test_run_linter_unparseable_output_keeps_streams(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_run(command: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(
            command, 2, stdout="Unknown option --bogus", stderr="usage: oxlint"
        )

    monkeypatch.setattr(runner_module, "run", fake_run)

    linter_run = run_linter(["--bogus"], cwd=tmp_path, command=["oxlint"])
    with pytest.raises(AdapterParseError) as exc_info:
        linter_run.diagnostics()
    assert exc_info.value.stdout == "Unknown option --bogus"
    assert exc_info.value.stderr == "usage: oxlint"


def test_run_linter_launch_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(2, "No such file or directory", command[0])

    monkeypatch.setattr(runner_module, "run", fake_run)

    with pytest.raises(SubprocessLaunchError, match="Failed to run oxlint"):
        run_linter([], cwd=tmp_path, command=["oxlint"])
