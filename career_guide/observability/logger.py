"""
observability/logger.py — Structured JSON logging.

Every log line is a valid JSON object with consistent fields, so request
failures seen by users can be traced with grep / jq.

Example output:
{"ts": "2026-10-18T10:00:00.000+00:00", "level": "WARNING", "logger": "career_guide.client.controller",
 "message": "request_failed", "flow": "career_guidance", "error_kind": "server", "status_code": 503}
"""
import json
import logging
import time
from datetime import datetime, timezone

from career_guide.config import get_settings

# Attributes every LogRecord carries; anything else came in via extra={...}
_RESERVED_ATTRS = frozenset((
    "args", "asctime", "created", "exc_info", "exc_text",
    "filename", "funcName", "id", "levelname", "levelno",
    "lineno", "module", "msecs", "message", "msg", "name",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "thread", "threadName", "taskName",
))


class JSONFormatter(logging.Formatter):
    """Formats every log record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Request context; unset fields (e.g. status_code before any response) are omitted
        log_obj.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and value is not None
        )

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a structured logger.
    Usage:
        logger = get_logger(__name__)
        logger.info("request_succeeded", extra={"flow": "career_guidance", "latency_ms": 812})
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(get_settings().log_level.upper())
        logger.propagate = False
    return logger


class Timer:
    """Context manager measuring wall-clock latency of one request, in milliseconds."""

    def __init__(self) -> None:
        self._start: float = 0.0
        self.elapsed_ms: float = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_) -> None:
        self.elapsed_ms = round((time.perf_counter() - self._start) * 1000, 1)
