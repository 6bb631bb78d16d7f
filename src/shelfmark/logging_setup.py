"""Logging configuration for shelfmark.

Everything logs under the ``shelfmark`` logger. The console gets a RichHandler
on stderr so it never mixes with command output on stdout; an optional
rotating file captures DEBUG regardless of the console level.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "shelfmark"
LOG_FILE_NAME = "shelfmark.log"
LOG_FILE_MAX_BYTES = 1_000_000
LOG_FILE_BACKUPS = 3

# HTTP client libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def default_log_file() -> Path:
    """``shelfmark.log`` in the platform log directory."""
    from shelfmark.paths import log_dir

    return log_dir() / LOG_FILE_NAME


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | str | None = None,
    rich_console: bool = True,
    quiet_console: bool = False,
) -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once: existing handlers are replaced.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR (unknown names fall back to INFO)
        log_file: Rotating log file; always receives DEBUG
        rich_console: RichHandler instead of a plain StreamHandler
        quiet_console: Show only WARNING+ on the console

    Returns:
        The ``shelfmark`` logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler: logging.Handler
    if rich_console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console_handler.setLevel(logging.WARNING if quiet_console else level)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-7s | [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return logger
