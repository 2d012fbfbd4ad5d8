from __future__ import annotations

import logging
from logging.config import dictConfig

from asgi_correlation_id.context import correlation_id
from pythonjsonlogger import jsonlogger

# Libraries that log every statement or connection at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "botocore", "urllib3")


class CorrelationIdFilter(logging.Filter):
    """Attach the current request correlation ID to each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or "-"
        return True


def configure_logging(level: str = "INFO", *, json_logs: bool = True) -> None:
    """Route application and uvicorn logs through one handler.

    ``json_logs=False`` swaps the JSON formatter for a single-line text one,
    which reads better in a local terminal.
    """
    formatter = "json" if json_logs else "text"
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"with_correlation": {"()": CorrelationIdFilter}},
            "formatters": {
                "json": {
                    "()": jsonlogger.JsonFormatter,
                    "fmt": (
                        "%(asctime)s %(levelname)s %(name)s "
                        "%(message)s %(correlation_id)s"
                    ),
                    "rename_fields": {"levelname": "level", "asctime": "time"},
                },
                "text": {
                    "format": (
                        "%(asctime)s %(levelname)-8s [%(correlation_id)s] "
                        "%(name)s: %(message)s"
                    ),
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter,
                    "filters": ["with_correlation"],
                }
            },
            "root": {"handlers": ["default"], "level": level},
            "loggers": {
                "uvicorn.error": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                },
                "uvicorn.access": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                },
                **{name: {"level": "WARNING"} for name in NOISY_LOGGERS},
            },
        }
    )
