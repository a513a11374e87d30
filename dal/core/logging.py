"""Logging setup for applications embedding the data-access layer."""


import logging
import sys

from dal.core.config import settings


def configure_logging(level: int | str | None = None) -> None:
    """Set up structured logging on the root logger."""
    if level is None:
        if settings.log_level:
            level = settings.log_level.upper()
        else:
            level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Statement echo is controlled by SQL_ECHO, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
