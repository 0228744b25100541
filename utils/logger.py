"""
Logging configuration using loguru.
Provides structured logging with console and optional file output.
"""

import sys
from loguru import logger as _logger

from config.settings import settings

# Remove default handler
_logger.remove()

# Add console handler with custom format
_logger.add(
    sys.stderr,
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    ),
    level=settings.log_level,
    colorize=True
)

if settings.log_to_file:
    log_dir = settings.log_dir
    log_dir.mkdir(exist_ok=True, parents=True)

    # Add file handler for debug logs
    _logger.add(
        log_dir / "debug.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | {name}:{function}:{line} | {message}",
        level="DEBUG",
        rotation="10 MB",
        retention="7 days",
        compression="zip"
    )

    # Add file handler for error logs
    _logger.add(
        log_dir / "error.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | {name}:{function}:{line} | {message}",
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="zip"
    )

# Records logged without a bound component still format cleanly
_logger.configure(extra={"component": "engine"})

# Export logger
logger = _logger


def get_logger(component: str):
    """
    Get a logger bound to a component name.

    Components receive this sink by injection so tests can pass their own.

    Args:
        component: Component name shown in log records

    Returns:
        Bound loguru logger
    """
    return logger.bind(component=component)
