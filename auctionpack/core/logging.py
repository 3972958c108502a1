"""
Logging setup shared by the CLI and the test suite.

Log records are written as::

    2023-01-09 14:48:20,594 [INFO] [AuctionBidder] submitting BID request: 01GPA...

Loggers are named after the class that owns them. See `get_logger`.
"""

import logging
import time
from typing import Any, Final

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"


def level_from_name(name: str) -> int:
    """
    Maps a case-insensitive level name, e.g. 'debug', to its logging level.

    :raises ValueError: if the name is not a registered logging level
    """
    level = logging.getLevelNamesMapping().get(name.strip().upper())
    if level is None:
        raise ValueError(f"unknown log level: {name!r}")
    return level


def configure_logging(
    level: int | str = logging.WARNING,
    handlers: list[logging.Handler] | None = None,
):
    """
    Replaces the root logger configuration.

    Timestamps are rendered in UTC, and warnings issued via the `warnings` module are routed to the `py.warnings`
    logger.

    :param level: logging level or level name
    :param handlers: if not specified, then records are written to stderr
    """
    if isinstance(level, str):
        level = level_from_name(level)

    logging.Formatter.converter = time.gmtime
    logging.basicConfig(
        format=LOG_FORMAT,
        level=level,
        handlers=handlers,
        force=True,
    )
    logging.captureWarnings(True)


def get_logger(obj: Any, name: str | None = None) -> logging.Logger:
    """
    :param obj: the logger is named after the object's class
    :param name: optional child logger name, i.e., the logger is named `{class name}.{name}`
    """
    logger = logging.getLogger(type(obj).__name__)
    return logger if name is None else logger.getChild(name)
