"""Django ``LOGGING`` configuration for the procurement service.

Records go to the console and to a rotating log file. ``LOG_LEVEL`` sets the
level of the application loggers and ``LOG_FILE`` the file location.
"""

import logging
import os
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Application packages whose module loggers follow LOG_LEVEL.
APP_LOGGERS = ("materials", "core", "procurement_app")


def build_logging_config() -> Dict[str, Any]:
    """Return the ``dictConfig`` mapping used as ``settings.LOGGING``.

    The file handler rotates at roughly 1MB with three backups and only
    opens the file on the first record.
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = level_name if isinstance(logging.getLevelName(level_name), int) else "INFO"

    app_logger = {"handlers": ["console", "file"], "level": level, "propagate": True}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": os.getenv("LOG_FILE", "procurement.log"),
                "maxBytes": 1_000_000,
                "backupCount": 3,
                "delay": True,
            },
        },
        "loggers": {
            **{name: dict(app_logger) for name in APP_LOGGERS},
            "django.request": {
                "handlers": ["console", "file"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }
