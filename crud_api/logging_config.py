import logging
import logging.config
from typing import Optional

from crud_api.config import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None):
    """
    Configure global log format
    Standardize log output format for all loggers including uvicorn and SQLAlchemy.
    """
    settings = settings or get_settings()
    log_level = "DEBUG" if settings.is_development else "INFO"
    # SQL statements are only echoed in development
    sql_level = "INFO" if settings.is_development else "WARNING"

    logging_config = {
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
            "root": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": True,
            },
            "uvicorn": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.error": {
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
                "level": sql_level,
                "propagate": False,
            },
            # Driver and event loop chatter stays out of DEBUG output
            "aiosqlite": {
                "level": "WARNING",
            },
            "asyncio": {
                "level": "WARNING",
            },
            "crud_api": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)
