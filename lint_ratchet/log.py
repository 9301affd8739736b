"""Logging setup for the command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the CLI.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

import click

LOG_LEVEL_ENV = "LINT_RATCHET_LOG_LEVEL"
LOG_FORMAT = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT = "[%(levelname)s] [%(name)s:%(lineno)d] %(message)s"

_LEVEL_COLORS = (
    (logging.ERROR, "red"),
    (logging.WARNING, "yellow"),
    (logging.INFO, "green"),
    (logging.DEBUG, "bright_black"),
)


class ClickFormatter(logging.Formatter):
    """Color each record by severity using ``click.style``."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for level, color in _LEVEL_COLORS:
            if record.levelno >= level:
                return click.style(message, fg=color)
        return message


def resolve_env_log_level(environ: Mapping[str, str] | None = None) -> int | None:
    """Return the level named by ``LINT_RATCHET_LOG_LEVEL``, or None if unset/unknown."""
    env = os.environ if environ is None else environ
    raw = env.get(LOG_LEVEL_ENV, "").strip().upper()
    if not raw:
        return None
    if raw.isdigit():
        return int(raw)
    return logging.getLevelNamesMapping().get(raw)


def setup_logging(level: int | None = None) -> None:
    """Route ``lint_ratchet`` log records to stderr at ``level``.

    Without an explicit level the environment is consulted, then WARNING.
    """
    if level is None:
        level = resolve_env_log_level() or logging.WARNING

    package_logger = logging.getLogger("lint_ratchet")
    package_logger.setLevel(level)
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    log_format = DEBUG_LOG_FORMAT if level <= logging.DEBUG else LOG_FORMAT
    handler.setFormatter(ClickFormatter(log_format))
    package_logger.addHandler(handler)
    package_logger.propagate = False
