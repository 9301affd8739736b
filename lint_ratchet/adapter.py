"""Translate raw oxlint JSON output into ``Diagnostic`` models."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal

from lint_ratchet.diagnostics import UNKNOWN, Diagnostic, normalize_severity
from lint_ratchet.errors import AdapterParseError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RawOutput:
    """Decoded linter output tagged with the shape it was recognized as.

    ``modern`` payloads carry a top-level ``diagnostics`` array. ``legacy``
    payloads are keyed by filename with an array of records per file.
    """

    kind: Literal["modern", "legacy"]
    payload: dict[str, Any]


def parse_linter_output(stdout: str, stderr: str = "") -> list[Diagnostic]:
    """Parse linter stdout into diagnostics.

    Blank output means the linter reported nothing. ``stderr`` is only kept
    for the error message when parsing fails.
    """
    if not stdout.strip():
        return []

    raw = _decode(stdout, stderr)
    if raw.kind == "modern":
        diagnostics = _parse_modern(raw.payload, stdout=stdout, stderr=stderr)
    else:
        diagnostics = _parse_legacy(raw.payload, stdout=stdout, stderr=stderr)
    logger.debug("parsed %d diagnostics from %s output", len(diagnostics), raw.kind)
    return diagnostics


def _decode(stdout: str, stderr: str) -> RawOutput:
    try:
        loaded = json.loads(stdout)
    except json.JSONDecodeError as exc:
        raise AdapterParseError(
            f"Invalid JSON output: {exc}", stdout=stdout, stderr=stderr
        ) from exc

    if not isinstance(loaded, dict):
        raise AdapterParseError(
            f"Expected a JSON object, got {type(loaded).__name__}",
            stdout=stdout,
            stderr=stderr,
        )
    if "diagnostics" in loaded:
        if not isinstance(loaded["diagnostics"], list):
            raise AdapterParseError(
                f"Expected diagnostics array, got {type(loaded['diagnostics']).__name__}",
                stdout=stdout,
                stderr=stderr,
            )
        return RawOutput(kind="modern", payload=loaded)
    return RawOutput(kind="legacy", payload=loaded)


def _parse_modern(payload: dict[str, Any], *, stdout: str, stderr: str) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for record in payload["diagnostics"]:
        record = _as_record(record, stdout=stdout, stderr=stderr)
        line, column = _first_span_position(record)
        diagnostics.append(
            Diagnostic(
                filename=_as_text(record.get("filename")) or UNKNOWN,
                rule=_as_text(record.get("code")) or UNKNOWN,
                severity=normalize_severity(record.get("severity")),
                message=_as_text(record.get("message")) or "",
                line=line,
                column=column,
                help=_as_text(record.get("help")),
                url=_as_text(record.get("url")),
            )
        )
    return diagnostics


def _parse_legacy(payload: dict[str, Any], *, stdout: str, stderr: str) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for filename, records in payload.items():
        if not isinstance(records, list):
            raise AdapterParseError(
                f"Expected diagnostics array for {filename!r}, got {type(records).__name__}",
                stdout=stdout,
                stderr=stderr,
            )
        for record in records:
            record = _as_record(record, stdout=stdout, stderr=stderr)
            line, column = _first_span_position(record, legacy=True)
            diagnostics.append(
                Diagnostic(
                    filename=filename,
                    rule=(
                        _as_text(record.get("rule_id"))
                        or _as_text(record.get("code"))
                        or UNKNOWN
                    ),
                    severity=normalize_severity(record.get("severity")),
                    message=_as_text(record.get("message")) or "",
                    line=line,
                    column=column,
                    help=_as_text(record.get("help")),
                    url=_as_text(record.get("url")),
                )
            )
    return diagnostics


def _first_span_position(
    record: dict[str, Any], *, legacy: bool = False
) -> tuple[int | None, int | None]:
    labels = record.get("labels")
    if not isinstance(labels, list) or not labels:
        return (None, None)
    first = labels[0]
    span = first.get("span") if isinstance(first, dict) else None
    if not isinstance(span, dict):
        return (None, None)

    line = _as_int(span.get("line"))
    column = _as_int(span.get("column"))
    if not legacy:
        return (line, column)

    # Older output only carries byte offsets.
    start = _as_int(span.get("start"))
    end = _as_int(span.get("end"))
    if line is None:
        line = start
    if column is None and start is not None and end is not None:
        column = end - start
    return (line, column)


def _as_record(value: Any, *, stdout: str, stderr: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise AdapterParseError(
            f"Expected diagnostic object, got {type(value).__name__}",
            stdout=stdout,
            stderr=stderr,
        )
    return value


def _as_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
