"""Reconcile observed diagnostics against a baseline.

Every function here is pure: arguments are never mutated and a fresh value is
returned. Matching is exact on ``(filename, rule)``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from lint_ratchet.baseline import Baseline, BaselineEntry, FileRuleMap, canonicalize
from lint_ratchet.diagnostics import Diagnostic

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExcessResult:
    """Observed violations of one rule in one file that exceed the baseline."""

    rule: str
    filename: str
    expected: int
    actual: int
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def excess(self) -> int:
        return self.actual - self.expected


@dataclass(frozen=True, slots=True)
class BaselineChange:
    """One entry that differs between two baselines.

    ``before`` is ``None`` for an added entry and ``after`` is ``None`` for a
    removed one.
    """

    filename: str
    rule: str
    before: int | None
    after: int | None

    @property
    def kind(self) -> str:
        if self.before is None:
            return "added"
        if self.after is None:
            return "removed"
        return "lowered" if self.after < self.before else "raised"


def group_diagnostics(diagnostics: Iterable[Diagnostic]) -> FileRuleMap[list[Diagnostic]]:
    """Group diagnostics by file then rule, in order of first encounter."""
    groups: FileRuleMap[list[Diagnostic]] = FileRuleMap()
    for diagnostic in diagnostics:
        groups.setdefault(diagnostic.filename, diagnostic.rule, []).append(diagnostic)
    return groups


def generate(diagnostics: Iterable[Diagnostic]) -> Baseline:
    """Return the baseline that tolerates exactly the given diagnostics."""
    baseline = Baseline()
    for filename, rule, group in group_diagnostics(diagnostics).items():
        baseline.set(filename, rule, BaselineEntry(count=len(group)))
    return canonicalize(baseline)


def find_excess(diagnostics: Iterable[Diagnostic], baseline: Baseline) -> list[ExcessResult]:
    """Return every (file, rule) group whose observed count exceeds its baseline.

    Pairs missing from the baseline are compared against an implicit count of
    zero. Results follow the order groups were first seen in ``diagnostics``.
    """
    results: list[ExcessResult] = []
    for filename, rule, group in group_diagnostics(diagnostics).items():
        expected = baseline.count(filename, rule)
        actual = len(group)
        if actual > expected:
            results.append(
                ExcessResult(
                    rule=rule,
                    filename=filename,
                    expected=expected,
                    actual=actual,
                    diagnostics=list(group),
                )
            )
    logger.debug("found %d excess groups", len(results))
    return results


def update(current: Baseline, diagnostics: Iterable[Diagnostic]) -> Baseline:
    """Absorb the observed counts into the baseline.

    Each file seen in ``diagnostics`` has its whole rule map replaced, so a
    rule that no longer fires in that file is dropped. Files that were not
    observed keep their current entries.
    """
    observed = generate(diagnostics)
    updated = current.copy()
    for filename in observed:
        updated.replace_file(filename, observed.rules(filename))
    updated.prune_empty()
    return canonicalize(updated)


def tighten(current: Baseline, diagnostics: Iterable[Diagnostic]) -> Baseline:
    """Shrink the baseline to the observed counts without ever growing it.

    Fully fixed rules are removed, partially fixed ones are lowered, and
    anything at or above its baseline is left for ``find_excess`` to report.
    """
    groups = group_diagnostics(diagnostics)
    tightened = Baseline()
    for filename in current:
        kept: dict[str, BaselineEntry] = {}
        for rule, entry in current.rules(filename).items():
            actual = len(groups.get(filename, rule) or [])
            if actual == 0:
                continue
            kept[rule] = BaselineEntry(count=actual) if actual < entry.count else entry
        if kept:
            tightened.replace_file(filename, kept)
    return canonicalize(tightened)


def diff_baselines(before: Baseline, after: Baseline) -> list[BaselineChange]:
    """List entries that were added, removed, or changed, sorted by file and rule."""
    keys = {(filename, rule) for filename, rule, _ in before.items()}
    keys.update((filename, rule) for filename, rule, _ in after.items())

    changes: list[BaselineChange] = []
    for filename, rule in sorted(keys):
        old = before.get(filename, rule)
        new = after.get(filename, rule)
        old_count = old.count if old is not None else None
        new_count = new.count if new is not None else None
        if old_count != new_count:
            changes.append(
                BaselineChange(filename=filename, rule=rule, before=old_count, after=new_count)
            )
    return changes
