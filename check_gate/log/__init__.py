# AGPL-3.0 License

"""
Logging setup for the check gate, built on loguru.
"""

import logging
import sys
from enum import Enum

from loguru import logger


class LoggingFormat(str, Enum):
    CONSOLE = "CONSOLE"
    JSON = "JSON"


def setup_logger(level: str = "INFO", fmt: LoggingFormat = LoggingFormat.CONSOLE):
    """
    Replace the default loguru sink with a stdout sink.

    Args:
        level: Standard logging level name; unknown names fall back to INFO
        fmt: CONSOLE for colorized text, JSON for one serialized record per line
    """
    level: int = logging.getLevelName(str(level).upper())
    if type(level) is not int:
        level = logging.INFO

    logger.remove(None)
    if LoggingFormat(fmt) == LoggingFormat.JSON:
        logger.add(
            sys.stdout,
            level=level,
            format="{message}",
            colorize=False,
            serialize=True,
        )
    else:
        logger.add(sys.stdout, level=level, colorize=True)

    return logger


def get_logger(*args, **kwargs):
    return logger
