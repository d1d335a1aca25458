"""Logging setup for Claude Context Bar.

Console output goes through rich; an optional rotating file keeps a
longer record for the ``watch`` loop.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "claude_context_bar"
LOG_LEVEL_ENV = "CLAUDE_CONTEXT_BAR_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING


def get_log_level(level: Optional[Union[str, int]] = None) -> int:
    """Resolve a level name, falling back to the environment, then WARNING."""
    if isinstance(level, int):
        return level
    name = (level or os.getenv(LOG_LEVEL_ENV, "")).upper()
    resolved = logging.getLevelName(name) if name else DEFAULT_LEVEL
    return resolved if isinstance(resolved, int) else DEFAULT_LEVEL


def setup_logging(
    level: Optional[Union[str, int]] = None,
    log_file: Optional[Path] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Configure the package logger. Safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(get_log_level(level))
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True), show_path=False, rich_tracebacks=True
    )
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        except OSError as e:
            logger.warning("Cannot open log file %s: %s", log_file, e)
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
                )
            )
            logger.addHandler(file_handler)

    return logger
