"""Output rendering."""

from __future__ import annotations

import json
from typing import Any

import click

from lint_ratchet import __version__
from lint_ratchet.diagnostics import Diagnostic
from lint_ratchet.reconcile import BaselineChange, ExcessResult
from lint_ratchet.snippets import SnippetReader, format_snippet

UPDATE_HINT = "lint-ratchet --update [your-args]"
UPDATE_ENV_HINT = "LINT_RATCHET_UPDATE_BASELINE=true lint-ratchet [your-args]"
# Remaining diagnostics listed without snippets once a group is over the threshold.
MAX_LISTED_DIAGNOSTICS = 2


def render_human(
    results: list[ExcessResult],
    *,
    show_code: int = 3,
    snippet_reader: SnippetReader | None = None,
) -> str:
    """Render excess results grouped by file, with snippets and a summary."""
    reader = snippet_reader or SnippetReader()
    lines: list[str] = [click.style("Found unsuppressed errors:", fg="red", bold=True), ""]

    by_file: dict[str, list[ExcessResult]] = {}
    for result in results:
        by_file.setdefault(result.filename, []).append(result)

    for filename, file_results in by_file.items():
        lines.append(f"{click.style(filename, fg='blue', bold=True)}:")
        for result in file_results:
            lines.extend(_render_result(result, show_code=show_code, reader=reader))

    total_excess = sum(result.excess for result in results)
    lines.extend(
        [
            "",
            click.style("Summary:", bold=True),
            f"  - Files with issues: {len(by_file)}",
            f"  - Rules with excess errors: {len(results)}",
            f"  - Total excess errors: {total_excess}",
            "",
            click.style("To suppress all current errors, run:", fg="cyan"),
            f"  {click.style(UPDATE_HINT, bold=True)}",
        ]
    )
    return "\n".join(lines)


def render_success() -> str:
    return click.style("All errors are suppressed", fg="green", bold=True)


def render_changes(changes: list[BaselineChange]) -> str:
    """Render one line per changed baseline entry."""
    if not changes:
        return "No baseline changes."
    lines = ["Baseline changes:"]
    for change in changes:
        before = "-" if change.before is None else str(change.before)
        after = "-" if change.after is None else str(change.after)
        lines.append(f"- {change.filename} [{change.rule}] {change.kind}: {before} -> {after}")
    return "\n".join(lines)


def render_json(
    results: list[ExcessResult],
    *,
    baseline_path: str,
    input_source: str,
) -> str:
    """Render stable JSON output for CI and automation."""
    payload = build_json_payload(results, baseline_path=baseline_path, input_source=input_source)
    return json.dumps(payload, sort_keys=True)


def build_json_payload(
    results: list[ExcessResult],
    *,
    baseline_path: str,
    input_source: str,
) -> dict[str, Any]:
    """Build stable JSON payload for CI and automation."""
    return {
        "excess": [_serialize_result(result) for result in results],
        "summary": {
            "files": len({result.filename for result in results}),
            "rules": len(results),
            "total_excess": sum(result.excess for result in results),
        },
        "meta": {
            "baseline": baseline_path,
            "input_source": input_source,
            "version": __version__,
        },
    }


def _render_result(result: ExcessResult, *, show_code: int, reader: SnippetReader) -> list[str]:
    noun = "error" if result.excess == 1 else "errors"
    lines = [
        f"  {click.style('!', fg='yellow', bold=True)} "
        f"{click.style(result.rule, fg='red')}: "
        f"{click.style(str(result.excess), bold=True)} excess {noun} "
        f"(expected: {click.style(str(result.expected), dim=True)}, "
        f"actual: {click.style(str(result.actual), bold=True)})"
    ]

    diagnostics = result.diagnostics
    if show_code > 0 and diagnostics:
        lines.append("")
        lines.append(_render_diagnostic(diagnostics[0], reader=reader, with_snippet=True))
        rest = diagnostics[1:]
        if len(diagnostics) <= show_code:
            for item in rest:
                lines.append(_render_diagnostic(item, reader=reader, with_snippet=True))
        else:
            listed = rest[:MAX_LISTED_DIAGNOSTICS]
            for item in listed:
                lines.append(_render_diagnostic(item, reader=reader, with_snippet=False))
            hidden = len(rest) - len(listed)
            if hidden > 0:
                lines.append(f"    {click.style(f'... and {hidden} more', dim=True)}")

    lines.append(f"    {click.style('To suppress, re-run with:', fg='cyan')}")
    lines.append(f"    {click.style(UPDATE_ENV_HINT, bold=True)}")
    lines.append("")
    return lines


def _render_diagnostic(
    diagnostic: Diagnostic, *, reader: SnippetReader, with_snippet: bool
) -> str:
    if with_snippet:
        snippet = reader.snippet_for(diagnostic)
        if snippet is not None:
            return format_snippet(snippet, diagnostic)

    lines = [f"    - {click.style(diagnostic.location, fg='blue')}: {diagnostic.message}"]
    if diagnostic.help:
        lines.append(f"      {click.style(diagnostic.help, fg='cyan')}")
    return "\n".join(lines)


def _serialize_result(result: ExcessResult) -> dict[str, Any]:
    return {
        "filename": result.filename,
        "rule": result.rule,
        "expected": result.expected,
        "actual": result.actual,
        "excess": result.excess,
        "diagnostics": [item.to_dict() for item in result.diagnostics],
    }
