"""Centralized logging configuration shared by the API and the scheduler worker."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

from app.core.context import get_request_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"

# Third-party loggers that log every HTTP call or job execution at INFO.
# uvicorn.access is replaced by RequestIDMiddleware's "app.access" line.
NOISY_LOGGERS = ("httpx", "openai", "apscheduler.executors.default", "uvicorn.access")


class RequestIdFilter(logging.Filter):
    """Stamp records with the current request or batch-run id."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - minimal logic
        record.request_id = get_request_id() or "-"
        return True


def build_logging_config(log_level: str) -> Dict[str, Any]:
    loggers: Dict[str, Any] = {name: {"level": "WARNING"} for name in NOISY_LOGGERS}
    loggers["app.access"] = {"level": "INFO"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {"request_id": {"()": "app.core.logging.RequestIdFilter"}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": log_level,
                "filters": ["request_id"],
            }
        },
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": log_level},
    }


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure logging once per process."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(build_logging_config(log_level.upper()))
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
