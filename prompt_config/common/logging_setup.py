"""
Structured Logging Setup

Consistent logging configuration for the fetcher, store and CLI.
Uses JSON format for structured logs by default.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs.setdefault("extra", {})
        kwargs["extra"]["service"] = self.extra.get("service", "unknown")
        return msg, kwargs


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    Set up structured logging for a component.

    Args:
        service_name: Name of the component (e.g., "fetcher", "sync")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"prompt_config.{service_name}")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    # stderr keeps stdout clean for CLI JSON output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Args:
        service_name: Name of the component

    Returns:
        Logger adapter with service name in all logs
    """
    log_level = os.environ.get("PROMPT_CONFIG_LOG_LEVEL", "INFO")
    json_format = os.environ.get("PROMPT_CONFIG_LOG_FORMAT", "json").lower() == "json"

    logger = setup_logging(service_name, log_level, json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


def log_fetch_failure(
    logger: logging.LoggerAdapter,
    url: str,
    reason: str,
    error: str | None = None,
    status_code: int | None = None,
) -> None:
    """Log a failed remote config fetch"""
    logger.error(
        f"Failed to fetch config from {url}: {error or reason}",
        extra={"url": url, "reason": reason, "status_code": status_code},
    )


def log_cache_event(
    logger: logging.LoggerAdapter,
    event: str,
    age_ms: int | None = None,
    **context: Any,
) -> None:
    """Log a cache hit, store or stale-serve event"""
    log_method = logger.warning if event == "stale" else logger.debug
    age_text = f" (age {age_ms} ms)" if age_ms is not None else ""
    log_method(
        f"Config cache {event}{age_text}",
        extra={"cache_event": event, "age_ms": age_ms, **context},
    )
