"""Logging utilities for service-scan."""

import sys
from typing import Optional

from loguru import logger

DEFAULT_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(
    level: str = "INFO",
    format: Optional[str] = None,
    sink=sys.stderr,
) -> int:
    """
    Configure loguru logging with standardized settings.

    Replaces loguru's default handler and enables the package's log records,
    which are disabled on import.

    Args:
        level: Logging level (TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL)
        format: Custom log format string (uses default if None)
        sink: Where log records are written

    Returns:
        The id of the added handler
    """
    logger.remove()
    logger.enable("service_scan")
    return logger.add(sink, format=format or DEFAULT_FORMAT, level=level)
