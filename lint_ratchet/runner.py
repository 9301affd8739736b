"""Linter subprocess helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from subprocess import run

from lint_ratchet.adapter import parse_linter_output
from lint_ratchet.diagnostics import Diagnostic
from lint_ratchet.errors import SubprocessLaunchError

logger = logging.getLogger(__name__)

# Checked in order within each directory while walking up from the start path.
LOCKFILE_COMMANDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("pnpm-lock.yaml", ("pnpm", "exec", "oxlint")),
    ("yarn.lock", ("yarn", "exec", "oxlint")),
    ("package-lock.json", ("npx", "oxlint")),
)
FALLBACK_COMMAND = ("oxlint",)
JSON_FORMAT_ARGS = ("-f", "json")


@dataclass(slots=True)
class LinterRun:
    """Captured output of one linter invocation."""

    command: list[str]
    stdout: str
    stderr: str
    returncode: int

    def diagnostics(self) -> list[Diagnostic]:
        """Parse stdout; the exit status is ignored since oxlint exits 1 on findings."""
        return parse_linter_output(self.stdout, self.stderr)


def find_lockfile(start: Path) -> Path | None:
    """Return the nearest package-manager lockfile at or above ``start``."""
    current = start.resolve()
    for directory in (current, *current.parents):
        for lockfile, _ in LOCKFILE_COMMANDS:
            candidate = directory / lockfile
            if candidate.exists():
                return candidate
    return None


def detect_linter_command(start: Path) -> list[str]:
    """Return the command prefix used to invoke oxlint from ``start``."""
    lockfile = find_lockfile(start)
    if lockfile is not None:
        for name, command in LOCKFILE_COMMANDS:
            if lockfile.name == name:
                logger.debug("using %s from %s", " ".join(command), lockfile)
                return list(command)
    return list(FALLBACK_COMMAND)


def run_linter(
    args: list[str],
    *,
    cwd: Path,
    command: list[str] | None = None,
) -> LinterRun:
    """Run the linter in JSON mode and capture its output."""
    prefix = list(command) if command else detect_linter_command(cwd)
    full_command = [*prefix, *JSON_FORMAT_ARGS, *args]
    logger.debug("running %s in %s", " ".join(full_command), cwd)

    try:
        completed = run(
            full_command,
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise SubprocessLaunchError(f"Failed to run {prefix[0]}: {exc}") from exc

    logger.debug("linter exited with %d", completed.returncode)
    return LinterRun(
        command=full_command,
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )
