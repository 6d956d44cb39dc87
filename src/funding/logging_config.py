import logging
import logging.config
import os
import sys
from typing import Any, Mapping

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "/tmp/funding.log"


def logging_config(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Build the dictConfig for the current environment.

    FUNDING_LOG_LEVEL and FUNDING_LOG_FILE are read on every call.
    """
    env = os.environ if environ is None else environ
    level = env.get("FUNDING_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    log_file = env.get("FUNDING_LOG_FILE", DEFAULT_LOG_FILE)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-6s %(name)8s:%(lineno)d %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": sys.stdout,
            },
            "file": {
                "class": "logging.FileHandler",
                "formatter": "default",
                "filename": log_file,
                "mode": "a",
            },
        },
        "loggers": {
            "funding": {
                "level": level,
                "handlers": ["console", "file"],
                "propagate": False,
            },
            # httpx logs every request at INFO
            "httpx": {
                "level": "WARNING",
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "httpcore": {
                "level": "WARNING",
                "handlers": ["console", "file"],
                "propagate": False,
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console", "file"],
        },
    }


def setup_logging():
    """ Apply the logging configuration. """
    logging.config.dictConfig(logging_config())
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
