"""
Logger setup using loguru.

Diagnostics go to stderr; route tables own stdout.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from apimap.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(level: Optional[str] = None, log_file: Optional[Path] = None) -> None:
    """
    Replace all loguru sinks with apimap's.

    Args:
        level: Log level; defaults to ``settings.log_level``
        log_file: Also append to this file; defaults to ``settings.log_file``
    """
    logger.remove()

    level = level or settings.log_level
    log_file = log_file or settings.log_file

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(log_file), format=FILE_FORMAT, level=level, encoding="utf-8")

    logger.debug(f"Logging at {level}" + (f" to {log_file}" if log_file else ""))


setup_logger()
