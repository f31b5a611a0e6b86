"""
Logging configuration for the listing ranker.

Sets up loguru with appropriate levels and formatting.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger


def setup_logging(
    level: str = "INFO", debug: bool = False, log_file: str | Path | None = None
) -> None:
    """
    Configure loguru logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, enable debug logging and more verbose output
        log_file: Optional path of a rotating file sink for INFO and above
    """
    # Remove default handler
    logger.remove()
    _ = logger.configure(extra={"name": "listing_ranker"})

    log_level = "DEBUG" if debug else level

    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}:{function}:{line}</cyan> - <level>{message}</level>",
    )

    if log_file is not None:
        logger.add(
            str(log_file),
            level="DEBUG" if debug else "INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger instance.

    Args:
        name: Optional component name bound to every record

    Returns:
        Logger instance
    """
    return logger.bind(name=name or "listing_ranker")
