"""Logging configuration for the todo list.

This module provides a pre-configured logger for the package.
Modules log through children of the 'todo_list' logger.

Example:
    >>> import logging
    >>> logging.getLogger("todo_list").setLevel(logging.DEBUG)

"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

logger = logging.getLogger("todo_list")

# Quiet unless the CLI asks for more
logger.setLevel(logging.WARNING)

logger.addHandler(logging.NullHandler())

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: int = logging.WARNING,
    format_string: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure logging for the todo list.

    Replaces any stream handler added by an earlier call, so calling this
    twice does not duplicate log lines.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
        format_string: Custom format string for log messages.
        stream: Output stream (defaults to sys.stderr).

    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    if stream is None:
        stream = sys.stderr

    for existing in list(logger.handlers):
        if isinstance(existing, logging.StreamHandler):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(format_string))

    logger.addHandler(handler)
    logger.setLevel(level)
