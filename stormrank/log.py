"""Logging setup (loguru)."""

import sys
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

def setup_logging(level: str = "INFO"):
    """Replace loguru's default sink with one formatted stderr sink.

    stdout stays free for the CLI's own output.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        colorize=True,
        format=LOG_FORMAT,
        level=level.upper(),
        backtrace=False,
        diagnose=False,
    )
    logger.debug("Logging initialized (level={})", level.upper())
    return logger
