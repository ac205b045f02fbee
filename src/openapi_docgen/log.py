"""Logging configuration for the command line tool."""

import logging
from logging.config import dictConfig

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        }
    },
    "loggers": {
        "openapi_docgen": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        }
    },
}


def configure_logging(verbose: bool = False) -> None:
    """Send openapi_docgen logs to stderr; DEBUG when verbose."""
    config = {**LOGGING_CONFIG, "loggers": {"openapi_docgen": dict(LOGGING_CONFIG["loggers"]["openapi_docgen"])}}
    config["loggers"]["openapi_docgen"]["level"] = "DEBUG" if verbose else "WARNING"
    dictConfig(config)
    logging.getLogger(__name__).debug("Verbose logging enabled")
