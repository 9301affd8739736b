"""Baseline model and JSON persistence.

A baseline records how many violations of each rule are tolerated in each
file. On disk it is a JSON object keyed by filename, then by rule name, with
``{"count": n}`` leaves. Both levels are always written in ascending order so
that the file diffs cleanly regardless of the order diagnostics arrived in.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Self, TypeVar

from lint_ratchet.errors import StorageCorruptError, StorageWriteError

logger = logging.getLogger(__name__)

DEFAULT_BASELINE_PATH = ".oxlint-suppressions.json"

V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class BaselineEntry:
    """Tolerated violation count for one (filename, rule) pair."""

    count: int

    def to_dict(self) -> dict[str, int]:
        return {"count": self.count}


class FileRuleMap(Generic[V]):
    """Two-level mapping of filename -> rule -> value.

    Insertion order is kept at both levels. Use ``sorted_copy`` to get the
    canonical ordering used for persistence.
    """

    __slots__ = ("_files",)

    def __init__(self, files: Mapping[str, Mapping[str, V]] | None = None) -> None:
        self._files: dict[str, dict[str, V]] = {}
        for filename, rules in (files or {}).items():
            self._files[filename] = dict(rules)

    def __contains__(self, filename: object) -> bool:
        return filename in self._files

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __bool__(self) -> bool:
        return bool(self._files)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileRuleMap):
            return NotImplemented
        return self._files == other._files

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._files!r})"

    def filenames(self) -> list[str]:
        return list(self._files)

    def rules(self, filename: str) -> dict[str, V]:
        """Return a copy of the rule map for ``filename`` (empty if absent)."""
        return dict(self._files.get(filename, {}))

    def get(self, filename: str, rule: str) -> V | None:
        return self._files.get(filename, {}).get(rule)

    def set(self, filename: str, rule: str, value: V) -> None:
        self._files.setdefault(filename, {})[rule] = value

    def setdefault(self, filename: str, rule: str, default: V) -> V:
        return self._files.setdefault(filename, {}).setdefault(rule, default)

    def replace_file(self, filename: str, rules: Mapping[str, V]) -> None:
        self._files[filename] = dict(rules)

    def remove(self, filename: str, rule: str) -> None:
        rules = self._files.get(filename)
        if rules is not None:
            rules.pop(rule, None)

    def remove_file(self, filename: str) -> None:
        self._files.pop(filename, None)

    def prune_empty(self) -> None:
        """Drop files whose rule map is empty."""
        for filename in [name for name, rules in self._files.items() if not rules]:
            del self._files[filename]

    def items(self) -> Iterator[tuple[str, str, V]]:
        """Yield ``(filename, rule, value)`` triples in insertion order."""
        for filename, rules in self._files.items():
            for rule, value in rules.items():
                yield (filename, rule, value)

    def copy(self) -> Self:
        return type(self)(self._files)

    def sorted_copy(self) -> Self:
        ordered: dict[str, dict[str, V]] = {}
        for filename in sorted(self._files):
            rules = self._files[filename]
            ordered[filename] = {rule: rules[rule] for rule in sorted(rules)}
        return type(self)(ordered)


class Baseline(FileRuleMap[BaselineEntry]):
    """Tolerated violation counts per file and rule."""

    __slots__ = ()

    def count(self, filename: str, rule: str) -> int:
        """Return the tolerated count, 0 when the file or rule is absent."""
        entry = self.get(filename, rule)
        return entry.count if entry is not None else 0

    def total(self) -> int:
        return sum(entry.count for _, _, entry in self.items())

    def to_dict(self) -> dict[str, dict[str, dict[str, int]]]:
        """Return the persisted shape, sorted by filename then rule."""
        payload: dict[str, dict[str, dict[str, int]]] = {}
        for filename, rule, entry in self.sorted_copy().items():
            payload.setdefault(filename, {})[rule] = entry.to_dict()
        return payload

    @classmethod
    def from_dict(cls, raw: Any) -> Baseline:
        """Build a baseline from the persisted shape, raising ``ValueError`` if malformed."""
        if not isinstance(raw, dict):
            raise ValueError("baseline must be a JSON object keyed by filename")

        baseline = cls()
        for filename, rules in raw.items():
            if not isinstance(rules, dict):
                raise ValueError(f"{filename}: expected an object keyed by rule name")
            # Keep files with no rules; update/tighten prune them.
            baseline.replace_file(filename, {})
            for rule, entry in rules.items():
                baseline.set(filename, rule, _parse_entry(entry, f"{filename}.{rule}"))
        return baseline


def canonicalize(baseline: Baseline) -> Baseline:
    """Return a copy of ``baseline`` with filenames and rules sorted ascending."""
    return baseline.sorted_copy()


class BaselineStore:
    """Load and save a baseline JSON file."""

    def __init__(self, path: Path | str = DEFAULT_BASELINE_PATH) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Baseline:
        """Load the baseline; a missing file is an empty baseline."""
        if not self.path.exists():
            logger.debug("baseline %s does not exist, starting empty", self.path)
            return Baseline()

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageCorruptError(f"Failed to read baseline file {self.path}: {exc}") from exc

        try:
            baseline = Baseline.from_dict(json.loads(content))
        except (json.JSONDecodeError, ValueError) as exc:
            raise StorageCorruptError(
                f"Failed to parse baseline file {self.path}: {exc}"
            ) from exc

        logger.debug(
            "loaded baseline %s: %d files, %d tolerated violations",
            self.path,
            len(baseline),
            baseline.total(),
        )
        return baseline

    def save(self, baseline: Baseline) -> None:
        """Overwrite the baseline file with the canonical form of ``baseline``."""
        content = json.dumps(canonicalize(baseline).to_dict(), indent=2) + "\n"
        temp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp_file:
                temp_path = Path(temp_file.name)
                temp_file.write(content)
            # Temp files are created 0600; keep the mode a plain write would give.
            os.chmod(temp_path, self._file_mode())
            os.replace(temp_path, self.path)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise StorageWriteError(f"Failed to write baseline file {self.path}: {exc}") from exc

        logger.debug("wrote baseline %s: %d files", self.path, len(baseline))

    def _file_mode(self) -> int:
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask


def _parse_entry(value: Any, field_name: str) -> BaselineEntry:
    if not isinstance(value, dict) or "count" not in value:
        raise ValueError(f"{field_name}: expected an object with a 'count' field")
    count = value["count"]
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"{field_name}.count must be an integer")
    if count < 0:
        raise ValueError(f"{field_name}.count must be non-negative, got {count}")
    return BaselineEntry(count=count)
