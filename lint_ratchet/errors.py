"""Exception hierarchy shared by lint-ratchet modules."""

from __future__ import annotations


class LintRatchetError(RuntimeError):
    """Base class for errors surfaced to the command line."""


class AdapterParseError(LintRatchetError):
    """Raised when linter output is not valid diagnostic JSON."""

    def __init__(self, message: str, *, stdout: str = "", stderr: str = "") -> None:
        self.reason = message
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Failed to parse linter output: {message}\nStdout: {stdout}\nStderr: {stderr}"
        )


class StorageCorruptError(LintRatchetError):
    """Raised when an existing baseline file cannot be loaded."""


class StorageWriteError(LintRatchetError):
    """Raised when a baseline file cannot be written."""


class SubprocessLaunchError(LintRatchetError):
    """Raised when the linter executable could not be started."""
