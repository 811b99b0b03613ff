"""Logging for the codesentinel logger hierarchy.

Every module logs under ``codesentinel.<part>`` (agents, validator, folder,
metrics, ...). Output goes to stderr so the CLI can print the JSON report
on stdout.
"""

import logging
import sys
from typing import Optional, TextIO


ROOT_LOGGER = "codesentinel"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach one stream handler to the codesentinel logger.

    Calling it again replaces the handler instead of stacking a second one,
    and the root logger is left alone so SDK logging keeps its own level.

    Args:
        level: Logging level (default: INFO)
        format_str: Custom format string
        stream: Destination (default: stderr)

    Returns:
        The codesentinel logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_codesentinel", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(format_str or DEFAULT_FORMAT))
    handler._codesentinel = True
    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger; short names are placed under the codesentinel hierarchy."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
