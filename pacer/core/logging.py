"""PACER — Structured JSON Logging."""

import logging
import json
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from pacer.config import settings

# Context attached through `extra=` and copied into every JSON line.
EXTRA_FIELDS = ("client_id", "platform", "goal_id", "endpoint", "duration_ms")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value
        return json.dumps(log_entry, default=str)


def get_logger(name: str) -> logging.Logger:
    """Return `pacer.<name>` with a JSON stdout handler attached once."""
    logger = logging.getLogger(f"pacer.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    return logger


@contextmanager
def log_timing(
    logger: logging.Logger, endpoint: str, client_id: str | None = None
) -> Iterator[None]:
    """Log how long the wrapped block took, tagged with the endpoint."""
    started = time.monotonic()
    try:
        yield
    finally:
        logger.info(
            f"{endpoint} served",
            extra={
                "endpoint": endpoint,
                "client_id": client_id,
                "duration_ms": round((time.monotonic() - started) * 1000, 1),
            },
        )
