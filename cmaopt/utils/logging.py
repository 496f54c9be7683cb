"""Console logging for the CLI and console diagnostics.

Library modules log through ``logging.getLogger(__name__)`` and never touch
handlers. The console handler is attached once, to the ``cmaopt`` package
logger, the first time :func:`get_logger` or :func:`configure_logging` runs.
"""

from __future__ import annotations

import logging
from typing import Final

_PACKAGE_LOGGER: Final = "cmaopt"
_FORMAT: Final = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
_DATE_FORMAT: Final = "%Y-%m-%d %H:%M:%S"


class _ConsoleHandler(logging.StreamHandler):
    """Marker type so the handler is attached only once."""


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Attach the console handler to the package logger and optionally set its level.

    The level defaults to INFO the first time; later calls only change it
    when ``level`` is given.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    if not any(isinstance(h, _ConsoleHandler) for h in logger.handlers):
        handler = _ConsoleHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)
        if level is None:
            logger.setLevel(logging.INFO)
    if level is not None:
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``cmaopt.<component>`` with console output enabled."""
    logger = configure_logging()
    return logger.getChild(component) if component else logger
