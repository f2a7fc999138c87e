import json
import logging
from logging.config import dictConfig
from typing import Any


# Per-request output of the storage client libraries.
QUIET_LIBRARY_LOGGERS: tuple[str, ...] = ("swiftclient", "botocore", "boto3", "urllib3")


def setup_logging(level: str = "INFO") -> None:
    """Log JSON to stderr at level; the wipe script logs plain text."""
    loggers: dict[str, Any] = {
        name: {"level": "WARNING"} for name in QUIET_LIBRARY_LOGGERS
    }
    loggers["swiftstore.startup"] = {
        "handlers": ["startup_console"],
        "level": "INFO",
        "propagate": False,
    }
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": JsonFormatter,
                },
                "plain": {
                    "format": "%(levelname)s %(name)s: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
                "startup_console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                },
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
            "loggers": loggers,
        }
    )


# Record attributes set through ``extra=`` by the backend and the lister.
CONTEXT_FIELDS: tuple[str, ...] = ("operation", "container", "key")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the backend operation context.

    ``operation``, ``container`` and ``key`` come from the record when the
    call site passed them in ``extra``, otherwise from a logged exception
    that carries them (backend errors do).
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        error = record.exc_info[1] if record.exc_info else None
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None) or getattr(error, field, None)
            if value:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)
