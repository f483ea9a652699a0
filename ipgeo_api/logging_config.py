"""Process-wide logging setup."""

import logging.config

from ipgeo_api.config import Settings

LOG_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"


def configure_logging(settings: Settings) -> None:
    """Send application logs to the console and, if configured, a rotating file."""
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "structured",
            "stream": "ext://sys.stdout",
        },
    }
    if settings.log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "structured",
            "filename": settings.log_file,
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%dT%H:%M:%S%z"},
            },
            "handlers": handlers,
            "loggers": {
                "ipgeo_api": {
                    "handlers": list(handlers),
                    "level": settings.log_level.upper(),
                    "propagate": True,
                },
            },
        }
    )
