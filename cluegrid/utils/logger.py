"""Logging setup shared by the engine, the stores and the CLI."""

from __future__ import annotations

import logging
from typing import IO, Optional, Union

ROOT_LOGGER = "cluegrid"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"

_HANDLER_NAME = "cluegrid-console"


def parse_level(level: Union[int, str], default: int = logging.WARNING) -> int:
    """Accept ``"info"``/``"DEBUG"``/``20`` style levels; unknown names give ``default``."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else default


def configure_logging(level: Union[int, str] = logging.INFO, stream: Optional[IO[str]] = None) -> logging.Handler:
    """Install the console handler on the ``cluegrid`` logger.

    Calling again replaces the previous console handler instead of stacking a
    second one. Handlers owned by other code are left alone.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(parse_level(level))
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``cluegrid`` namespace."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
