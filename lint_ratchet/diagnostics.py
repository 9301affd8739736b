"""Canonical diagnostic model, independent of the linter's wire format."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

Severity = Literal["error", "warning"]

UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single violation reported by the linter."""

    filename: str
    rule: str
    severity: Severity
    message: str
    line: int | None = None
    column: int | None = None
    help: str | None = None
    url: str | None = None

    @property
    def location(self) -> str:
        """Return ``filename[:line:column]`` for one-line reporting."""
        if self.line is None:
            return self.filename
        return f"{self.filename}:{self.line}:{self.column or 0}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "rule": self.rule,
            "severity": self.severity,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "help": self.help,
            "url": self.url,
        }


def normalize_severity(raw: Any) -> Severity:
    """Map the linter's severity value onto ``error``/``warning``."""
    if isinstance(raw, str) and raw.strip().lower() == "warning":
        return "warning"
    return "error"
