"""Logging for barrage: namespace, levels and formatters."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

# Per-thread lifecycle messages (captains and soldiers) are logged here.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Above CRITICAL, so nothing is emitted.
QUIET = logging.CRITICAL + 10

ROOT_LOGGER = "barrage"

_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG)

_TEXT_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-5s %(threadName)s %(name)s: %(message)s"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: timestamp, level, logger, thread, message, plus exception when
    the record carries one.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def verbosity_to_level(verbose: int, *, quiet: bool = False) -> int:
    """Map the CLI ``-v`` count and ``--quiet`` flag to a logging level.

    Args:
        verbose: Number of times ``-v`` was passed.
        quiet: If True, logging is silenced regardless of ``verbose``.

    Returns:
        ``QUIET`` when quiet, otherwise ERROR, WARNING, INFO, DEBUG for
        0 to 3 and ``TRACE`` for anything above.
    """
    if quiet:
        return QUIET
    if verbose < len(_VERBOSITY_LEVELS):
        return _VERBOSITY_LEVELS[max(verbose, 0)]
    return TRACE


def setup_logging(level: int = logging.INFO, *, json_format: bool = False) -> logging.Logger:
    """Configure the ``barrage`` logger and return it.

    The logger owns exactly one handler, writing to the ``sys.stderr`` of
    the latest call, and does not propagate to the root logger. Calling
    again replaces that handler instead of adding another.

    Args:
        level: Logging level, e.g. ``verbosity_to_level(2)``.
        json_format: Emit one JSON object per line instead of text.

    Returns:
        The ``barrage`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``barrage.<name>``, e.g. ``get_logger("engine.soldier")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
