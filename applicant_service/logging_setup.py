"""Central logging configuration for the Applicant Service.

Installs a single stdout handler on the root logger so module loggers emit
INFO-level records without per-module setup. Uvicorn loggers share the same
handler and duplicate handlers are avoided under reloaders.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"

_DICT_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": LOG_FORMAT},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        # SQL echo stays off unless explicitly raised
        "sqlalchemy.engine": {"level": "WARNING"},
    },
}


def configure_logging() -> None:
    """Configure application-wide logging once.

    Returns early when the root logger already has handlers (pytest's
    capture, uvicorn --reload) so records are not printed twice.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    dictConfig(_DICT_CONFIG)


__all__ = ["configure_logging", "LOG_FORMAT"]
