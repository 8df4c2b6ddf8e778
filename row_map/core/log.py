"""Logging helpers.

RowMap logs through standard library loggers named after its modules
(``row_map.core.connection``, ``row_map.repository.store``, ...). Statements
and cache hits/misses are logged at DEBUG, connection lifecycle at INFO.
Libraries should not configure logging; applications may call
``configure_logging`` for a quick console setup.
"""

from __future__ import annotations

import logging
import logging.config

PACKAGE_LOGGER = "row_map"


def configure_logging(level: str | int = "INFO", force: bool = False) -> None:
    """Send RowMap log records to stderr at *level*.

    Parameters
    ----------
    level : str | int
        Logging level name (e.g., "DEBUG", "INFO") or number.
    force : bool
        Replace handlers already attached to the ``row_map`` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if force:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "console",
                },
            },
            "loggers": {
                PACKAGE_LOGGER: {
                    "handlers": ["console"],
                    "level": level if isinstance(level, int) else level.upper(),
                    "propagate": False,
                },
            },
        }
    )


__all__ = ["configure_logging", "PACKAGE_LOGGER"]
