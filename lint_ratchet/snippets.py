"""Source snippets shown next to excess diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import click

from lint_ratchet.diagnostics import Diagnostic

CONTEXT_LINES = 2
MAX_POINTER_WIDTH = 20


@dataclass(slots=True)
class CodeSnippet:
    """A target line plus surrounding context."""

    line_number: int
    column: int
    target: str
    before: list[str] = field(default_factory=list)
    after: list[str] = field(default_factory=list)

    @property
    def first_line_number(self) -> int:
        return self.line_number - len(self.before)


class SnippetReader:
    """Read source files at most once per run and cut snippets out of them."""

    def __init__(self, root: Path | None = None, *, context_lines: int = CONTEXT_LINES) -> None:
        self.root = root or Path(".")
        self.context_lines = context_lines
        self._cache: dict[str, list[str] | None] = {}

    def read_lines(self, filename: str) -> list[str] | None:
        if filename not in self._cache:
            path = Path(filename)
            if not path.is_absolute():
                path = self.root / path
            try:
                self._cache[filename] = path.read_text(encoding="utf-8").split("\n")
            except (OSError, UnicodeDecodeError):
                self._cache[filename] = None
        return self._cache[filename]

    def snippet_for(self, diagnostic: Diagnostic) -> CodeSnippet | None:
        """Return the snippet around ``diagnostic``, or None if it has no readable source."""
        if diagnostic.line is None or diagnostic.line < 1:
            return None
        lines = self.read_lines(diagnostic.filename)
        if lines is None:
            return None

        index = diagnostic.line - 1
        if index >= len(lines):
            return None
        return CodeSnippet(
            line_number=diagnostic.line,
            column=diagnostic.column or 0,
            target=lines[index],
            before=lines[max(0, index - self.context_lines) : index],
            after=lines[index + 1 : index + 1 + self.context_lines],
        )


def format_snippet(snippet: CodeSnippet, diagnostic: Diagnostic) -> str:
    """Render a snippet with line numbers and a pointer under the reported column."""
    border = click.style(" | ", fg="bright_black")
    lines = [
        f"  {click.style('x', fg='red', bold=True)} "
        f"{click.style(diagnostic.rule, fg='red')}: {diagnostic.message}",
        "     "
        + click.style(",-", fg="bright_black")
        + click.style(f"[{diagnostic.location}]", fg="blue"),
    ]

    for offset, text in enumerate(snippet.before):
        lines.append(_numbered(snippet.first_line_number + offset, border, text))
    lines.append(_numbered(snippet.line_number, border, snippet.target))

    width = max(1, min(len(diagnostic.message) or 10, MAX_POINTER_WIDTH))
    # 4-wide line number plus the 3-char border, then the 1-based column.
    indent = 7 + max(0, snippet.column - 1)
    lines.append(" " * indent + click.style("-" * width, fg="magenta"))

    for offset, text in enumerate(snippet.after, start=1):
        lines.append(_numbered(snippet.line_number + offset, border, text))
    lines.append("     " + click.style("`----", fg="bright_black"))

    if diagnostic.help:
        lines.append(f"  {click.style('help:', fg='cyan')} {diagnostic.help}")
    return "\n".join(lines)


def _numbered(number: int, border: str, text: str) -> str:
    return f"{click.style(str(number).rjust(4), fg='bright_black')}{border}{text}"
