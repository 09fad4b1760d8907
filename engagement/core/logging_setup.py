"""Loguru sink setup"""

import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at the given level"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function} - {message}",
    )
