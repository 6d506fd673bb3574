"""Logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this sets up the
handlers once at startup so application, uvicorn and SQLAlchemy output share
one format.
"""

import logging.config

from crudkit.infrastructure.config.settings import Settings


def build_logging_config(settings: Settings) -> dict:
    """Return the dictConfig for ``settings``."""
    log_level = "DEBUG" if settings.debug else settings.log_level

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "crudkit": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
            "uvicorn": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "INFO" if settings.db_echo else "WARNING",
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }


def setup_logging(settings: Settings) -> None:
    """Configure global log format and levels."""
    logging.config.dictConfig(build_logging_config(settings))
