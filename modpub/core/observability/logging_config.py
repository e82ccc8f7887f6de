"""
Logging configuration — one call at CLI startup.

``setup_logging`` resolves the console level itself:

    explicit level  >  --debug / --verbose / --quiet  >  MODPUB_LOG_LEVEL  >  WARNING

A second, usually more detailed, sink can be added with MODPUB_LOG_FILE
(and MODPUB_LOG_FILE_LEVEL). Modules only ever do
``logger = logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LOG_LEVEL = "MODPUB_LOG_LEVEL"
ENV_LOG_FILE = "MODPUB_LOG_FILE"
ENV_LOG_FILE_LEVEL = "MODPUB_LOG_FILE_LEVEL"

# Console format per level threshold, most detailed first; bare messages above INFO
_CONSOLE_FORMATS: tuple[tuple[int, str, str], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_MINIMAL = ("%(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# yaml and pydantic stay at WARNING unless debugging
_NOISY_LOGGERS = ("yaml", "pydantic")


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Console level name from the CLI flags, else the environment."""
    for flag, name in ((debug, "DEBUG"), (verbose, "INFO"), (quiet, "ERROR")):
        if flag:
            return name
    env = os.environ if environ is None else environ
    return env.get(ENV_LOG_LEVEL) or "WARNING"


def setup_logging(
    level: str | None = None,
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    log_file: str | None = None,
    log_file_level: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name. When None it is resolved from the
            flags and MODPUB_LOG_LEVEL.
        debug, verbose, quiet: The CLI verbosity flags.
        log_file: Log file path. Defaults to MODPUB_LOG_FILE.
        log_file_level: Level for the log file. Defaults to
            MODPUB_LOG_FILE_LEVEL, then to the console level.
        environ: Environment to read (defaults to ``os.environ``).

    Returns:
        The numeric console level.
    """
    env = os.environ if environ is None else environ
    if level is None:
        level = resolve_level(debug=debug, verbose=verbose, quiet=quiet, environ=env)
    console_level = _parse_level(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_console_handler(console_level))
    root_level = console_level

    log_file = log_file or env.get(ENV_LOG_FILE)
    if log_file:
        file_level_name = log_file_level or env.get(ENV_LOG_FILE_LEVEL)
        file_level = _parse_level(file_level_name) if file_level_name else console_level
        root.addHandler(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root.setLevel(root_level)

    if console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False
    return console_level


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next(
        ((f, d) for threshold, f, d in _CONSOLE_FORMATS if level <= threshold),
        _CONSOLE_MINIMAL,
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
