"""
Logging configuration — central setup for the ``fxd`` entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

This is diagnostic logging.  The user-facing installation history
(``~/installation_log.txt``) is written by ``InstallLog``, which also
mirrors each entry under the ``fxdev.core.persistence.install_log``
logger.  Those mirrored lines already reach the user through the menu
and the history file, so the console only shows them at DEBUG; a
diagnostic log file always receives them.

Levels are resolved in precedence order:
    CLI flag  >  FXDEV_LOG_LEVEL env var  >  WARNING (default)

Optional file output via FXDEV_LOG_FILE / FXDEV_LOG_FILE_LEVEL env vars.
"""

from __future__ import annotations

import logging
import sys

HISTORY_LOGGER = "fxdev.core.persistence.install_log"

# console level -> (format, datefmt); the menu owns stdout, we write to stderr
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    logging.WARNING: ("fxd: %(message)s", None),
}

_FILE_FORMAT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s", "%Y-%m-%d %H:%M:%S")


class _HistoryEchoFilter(logging.Filter):
    """Drop routine installation-history mirrors; keep their warnings and errors."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name != HISTORY_LOGGER or record.levelno >= logging.WARNING


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def console_format(level: int) -> tuple[str, str | None]:
    """The console (format, datefmt) pair for a numeric level."""
    for threshold in (logging.DEBUG, logging.INFO):
        if level <= threshold:
            return _CONSOLE_FORMATS[threshold]
    return _CONSOLE_FORMATS[logging.WARNING]


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a diagnostic log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    numeric_level = _parse_level(level)
    fmt, datefmt = console_format(numeric_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    if numeric_level > logging.DEBUG:
        console.addFilter(_HistoryEchoFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(*_FILE_FORMAT))
        root.addHandler(fh)

    root.setLevel(effective_level)


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
