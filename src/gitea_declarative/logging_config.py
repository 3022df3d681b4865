"""Loguru configuration for gitea-declarative.

The package never installs handlers on import; the CLI calls `configure_logger` once at
startup, and library users are free to configure loguru however they like.
"""

from __future__ import annotations

import sys
from typing import Literal, TextIO

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

OPERATOR_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
"""Console format for interactive runs. Passwords for new users are printed through it."""

DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logger(
    level: LogLevel = "INFO",
    *,
    format_string: str | None = None,
    colorize: bool | None = None,
    sink: TextIO = sys.stderr,
) -> int:
    """Replace all loguru handlers with a single console handler.

    Args:
        level: The minimum level to display.
        format_string: A loguru format string. Defaults to `DEBUG_FORMAT` at DEBUG or
            TRACE, and `OPERATOR_FORMAT` otherwise.
        colorize: Force colour on or off. None lets loguru decide based on the sink.
        sink: Where to write log lines.

    Returns:
        The id of the new handler.

    Example:
        ```python
        from gitea_declarative.logging_config import configure_logger

        configure_logger("DEBUG")
        ```
    """
    logger.remove()

    if format_string is None:
        format_string = DEBUG_FORMAT if level in ("TRACE", "DEBUG") else OPERATOR_FORMAT

    return logger.add(sink, level=level, format=format_string, colorize=colorize)


def disable_logging() -> None:
    """Remove every loguru handler."""
    logger.remove()


__all__ = [
    "DEBUG_FORMAT",
    "OPERATOR_FORMAT",
    "LogLevel",
    "configure_logger",
    "disable_logging",
]
