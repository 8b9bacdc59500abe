from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


PACKAGE = "stylepipe"
LEVEL_ENV = "STYLEPIPE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_console_ready = False


def _level_number(value: str | int | None) -> int:
    if isinstance(value, int):
        return value
    name = str(value or os.getenv(LEVEL_ENV) or "INFO").upper()
    number = logging.getLevelName(name)
    return number if isinstance(number, int) else logging.INFO


def _qualify(name: str) -> str:
    if name == PACKAGE or name.startswith(PACKAGE + "."):
        return name
    return f"{PACKAGE}.{name}"


def _swap_file_handler(logger: logging.Logger, log_file: Path) -> None:
    target = str(log_file.resolve())
    for h in list(logger.handlers):
        if not isinstance(h, RotatingFileHandler):
            continue
        if h.baseFilename == target:
            return
        logger.removeHandler(h)
        h.close()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(target, maxBytes=1_000_000, backupCount=3)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def get_logger(
    name: str,
    log_file: Path | None = None,
    level: str | int | None = None,
) -> logging.Logger:
    """Return a logger under the `stylepipe` hierarchy.

    The first call sets up console output at `STYLEPIPE_LOG_LEVEL` (INFO by
    default). `level` and `log_file` apply to the returned logger only, so
    passing them for `stylepipe` itself covers every task logger. A second
    `log_file` replaces the earlier one instead of adding another handler.
    """
    global _console_ready
    if not _console_ready:
        logging.basicConfig(level=_level_number(None), format=LOG_FORMAT)
        _console_ready = True
    logger = logging.getLogger(_qualify(name))
    if level is not None:
        logger.setLevel(_level_number(level))
    if log_file is not None:
        _swap_file_handler(logger, Path(log_file))
    return logger
