"""Logging configuration.

Configures the root logger once for the whole process.
"""

import logging.config
from typing import Optional

from config import get_settings

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure console logging.

    Args:
        level: Log level name. Defaults to the LOG_LEVEL setting.
    """
    global _configured
    if _configured:
        return

    level = (level or get_settings().log_level).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                # SQL echo is too noisy below WARNING
                "sqlalchemy.engine": {"level": "WARNING"},
                "botocore": {"level": "WARNING"},
                "urllib3": {"level": "WARNING"},
            },
        }
    )
    _configured = True
