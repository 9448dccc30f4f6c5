"""Logging configuration for the TTL URL shortener.

One set of handlers serves the service logger (``ttl_shortener`` and its
children) and the uvicorn server loggers, so access lines and upsert lines
land in the same stream and format. Client libraries that log every HTTP
call or pool event are held at WARNING unless running at DEBUG.
"""

import json
import logging
import sys
from typing import List, Optional

LOGGER_NAME = "ttl_shortener"

# Server loggers sharing the service handlers (uvicorn.error propagates to uvicorn)
SERVER_LOGGERS = ("uvicorn", "uvicorn.access")

# PocketBase client and Postgres driver
CHATTY_LOGGERS = ("httpx", "httpcore", "asyncpg")

# LogRecord attributes passed through ``extra=`` that end up in JSON output
EXTRA_FIELDS = ("client", "upsert", "duration_ms", "status_code")


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_handlers(
    level: int,
    log_file: Optional[str],
    json_format: bool,
) -> List[logging.Handler]:
    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Setup logging for the service and the server running it.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        json_format: Whether to emit one JSON object per line

    Returns:
        The ``ttl_shortener`` logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    handlers = _build_handlers(numeric_level, log_file, json_format)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.handlers.clear()
    for handler in handlers:
        logger.addHandler(handler)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.setLevel(numeric_level)
        server_logger.handlers.clear()
        for handler in handlers:
            server_logger.addHandler(handler)
        server_logger.propagate = False

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Logger for a component, under the service logger.

    Args:
        name: Dotted suffix (``"web"``) or full logger name

    Returns:
        Logger instance
    """
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
