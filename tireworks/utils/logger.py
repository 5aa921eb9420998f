"""Logger setup for TireWorks.

Modules ask for a named logger:

    from tireworks.utils.logger import get_logger
    logger = get_logger(__name__)

Entry points call setup_logging() once with the configured level. SQLAlchemy's
engine chatter stays at WARNING unless TW_SQL_ECHO is set.
"""
import logging
import os

DEFAULT_LEVEL = os.getenv("TW_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def _resolve(level) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logging(level=DEFAULT_LEVEL) -> None:
    logging.basicConfig(level=_resolve(level), format=LOG_FORMAT)
    if not os.getenv("TW_SQL_ECHO"):
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
