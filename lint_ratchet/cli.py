"""CLI entrypoint for lint-ratchet."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from lint_ratchet import __version__, reconcile
from lint_ratchet.adapter import parse_linter_output
from lint_ratchet.baseline import BaselineStore
from lint_ratchet.config import (
    OUTPUT_FORMATS,
    AppConfig,
    default_config_template,
    load_app_config,
    read_env_toggles,
)
from lint_ratchet.diagnostics import Diagnostic
from lint_ratchet.errors import LintRatchetError
from lint_ratchet.log import setup_logging
from lint_ratchet.report import render_changes, render_human, render_json, render_success
from lint_ratchet.runner import run_linter
from lint_ratchet.snippets import SnippetReader

EXIT_OK = 0
EXIT_EXCESS = 1
EXIT_ERROR = 2

logger = logging.getLogger(__name__)

app = typer.Typer(name="lint-ratchet", add_completion=False)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def config_template_callback(value: bool) -> None:
    """Print a starter config file and exit."""
    if value:
        typer.echo(default_config_template(), nl=False)
        raise typer.Exit()


@app.command(
    name="lint-ratchet",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_command(
    linter_args: Annotated[
        list[str] | None,
        typer.Argument(help="Paths and extra flags passed through to oxlint."),
    ] = None,
    baseline: Annotated[
        Path | None,
        typer.Option(
            "--baseline",
            "--suppressions",
            "-s",
            help="Path to the baseline file.",
            show_default=".oxlint-suppressions.json",
        ),
    ] = None,
    update: Annotated[
        bool,
        typer.Option("--update", "-u", help="Write current violation counts to the baseline."),
    ] = False,
    tighten: Annotated[
        bool,
        typer.Option("--tighten", help="Lower or drop baseline entries that were fixed."),
    ] = False,
    fail_on_excess: Annotated[
        bool | None,
        typer.Option(
            "--fail-on-excess/--no-fail-on-excess",
            help="Exit 1 when violations exceed the baseline.",
            show_default="fail-on-excess",
        ),
    ] = None,
    show_code: Annotated[
        int | None,
        typer.Option(
            "--show-code",
            min=0,
            help="Show code snippets for rules with N or fewer errors (0 disables).",
            show_default="3",
        ),
    ] = None,
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    input_file: Annotated[
        Path | None,
        typer.Option("--input-file", help="Read oxlint JSON output from a file."),
    ] = None,
    stdin: Annotated[bool, typer.Option(help="Read oxlint JSON output from stdin.")] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version", help="Show version and exit.", callback=version_callback, is_eager=True
        ),
    ] = False,
    config_template: Annotated[
        bool,
        typer.Option(
            "--config-template",
            help="Print a starter config file and exit.",
            callback=config_template_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Run oxlint and fail only on violations beyond the recorded baseline.

    Per-file, per-rule violation counts are compared against the baseline file.
    """
    _ = (version, config_template)
    setup_logging(logging.DEBUG if verbose else None)

    app_config = _load_config_or_raise(Path("."), config_file)
    output_format = (format or app_config.format).lower()
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    if input_file is not None and stdin:
        raise typer.BadParameter("Use either --input-file or --stdin, not both.")

    toggles = read_env_toggles()
    store = BaselineStore(baseline if baseline is not None else Path(app_config.baseline))
    resolved_fail = fail_on_excess if fail_on_excess is not None else app_config.fail_on_excess
    resolved_show_code = show_code if show_code is not None else app_config.show_code
    machine_output = output_format == "json"

    try:
        diagnostics, input_source = _collect_diagnostics(
            input_file=input_file,
            stdin=stdin,
            linter_args=[*app_config.linter.args, *(linter_args or [])],
            app_config=app_config,
        )

        if update or toggles.update:
            _update_baseline(store, diagnostics, machine_output=machine_output)
            return

        current = store.load()
        results = reconcile.find_excess(diagnostics, current)

        if tighten or toggles.tighten:
            tightened = reconcile.tighten(current, diagnostics)
            store.save(tightened)
            typer.echo(f"Tightened baseline file: {store.path}", err=machine_output)
            typer.echo(render_changes(reconcile.diff_baselines(current, tightened)), err=True)
    except LintRatchetError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=EXIT_ERROR) from exc

    if machine_output:
        typer.echo(render_json(results, baseline_path=str(store.path), input_source=input_source))
    elif not results:
        typer.echo(render_success())
    else:
        typer.echo(
            render_human(
                results,
                show_code=resolved_show_code,
                snippet_reader=SnippetReader(Path(".")),
            ),
            err=True,
        )

    if results and resolved_fail:
        raise typer.Exit(code=EXIT_EXCESS)


def main() -> None:
    """Console script entrypoint."""
    app()


def _collect_diagnostics(
    *,
    input_file: Path | None,
    stdin: bool,
    linter_args: list[str],
    app_config: AppConfig,
) -> tuple[list[Diagnostic], str]:
    if input_file is not None:
        try:
            text = input_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(str(exc), param_hint="--input-file") from exc
        return (parse_linter_output(text), f"input_file:{input_file}")

    if stdin:
        return (parse_linter_output(sys.stdin.read()), "stdin")

    linter_run = run_linter(linter_args, cwd=Path("."), command=app_config.linter.command)
    return (linter_run.diagnostics(), "linter")


def _update_baseline(
    store: BaselineStore, diagnostics: list[Diagnostic], *, machine_output: bool
) -> None:
    current = store.load()
    updated = reconcile.update(current, diagnostics)
    store.save(updated)
    changes = reconcile.diff_baselines(current, updated)
    logger.debug("baseline update changed %d entries", len(changes))

    if machine_output:
        payload = {
            "baseline": str(store.path),
            "total_diagnostics": len(diagnostics),
            "changes": [
                {
                    "filename": change.filename,
                    "rule": change.rule,
                    "before": change.before,
                    "after": change.after,
                }
                for change in changes
            ],
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    typer.echo(f"Updated baseline file: {store.path}")
    typer.echo(f"Total diagnostics: {len(diagnostics)}")
    typer.echo(render_changes(changes))


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc
