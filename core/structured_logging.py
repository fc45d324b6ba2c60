"""
Structured Logging with Correlation IDs
=======================================

JSON-structured logging for the scoring API and the grading jobs.

Every log line carries the correlation fields bound for the current context:
    request_id  - HTTP requests (X-Request-ID, generated when absent)
    run_id, job - one grading / final-promotion batch

Fields live in a single ContextVar, so concurrent requests and runs never mix.

Usage:
    from core.structured_logging import configure_structured_logging, grading_run, log_info

    configure_structured_logging()
    with grading_run(job="grading"):
        log_info(logger, "Pick graded", pick_id="abc123", tier="A", edge_score=21)
    # {"ts": "...", "level": "INFO", "msg": "Pick graded", "run_id": "run-xxx",
    #  "job": "grading", "pick_id": "abc123", "tier": "A", "edge_score": 21}
"""

import json
import logging
import os
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

REDACTED = "[REDACTED]"
_SENSITIVE_KEY_PARTS = ("api_key", "apikey", "admin_key", "authorization", "password", "secret", "token")

_correlation: ContextVar[Dict[str, str]] = ContextVar("log_correlation", default={})

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

# Libraries that are chatty at INFO
QUIET_LOGGERS = ("asyncio", "httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")


# =============================================================================
# CORRELATION CONTEXT
# =============================================================================

@contextmanager
def bind_context(**fields: Optional[str]) -> Iterator[Dict[str, str]]:
    """Add correlation fields for the duration of the block."""
    merged = {**_correlation.get(), **{k: v for k, v in fields.items() if v}}
    token = _correlation.set(merged)
    try:
        yield merged
    finally:
        _correlation.reset(token)


def current_context() -> Dict[str, str]:
    return dict(_correlation.get())


def get_request_id() -> Optional[str]:
    return _correlation.get().get("request_id")


def get_run_id() -> Optional[str]:
    return _correlation.get().get("run_id")


def new_correlation_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@contextmanager
def grading_run(run_id: Optional[str] = None, job: Optional[str] = None) -> Iterator[str]:
    """Tag every log line inside the block with a grading run id (and job name)."""
    run_id = run_id or new_correlation_id("run")
    with bind_context(run_id=run_id, job=job):
        yield run_id


# =============================================================================
# FORMATTERS
# =============================================================================

def is_sensitive_key(key: str) -> bool:
    lowered = key.lower().replace("-", "_")
    return any(part in lowered for part in _SENSITIVE_KEY_PARTS)


def redact(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Mask secrets one level deep (headers dicts, config dumps)."""
    clean: Dict[str, Any] = {}
    for key, value in fields.items():
        if is_sensitive_key(str(key)):
            clean[key] = REDACTED
        elif isinstance(value, Mapping):
            clean[key] = {k: REDACTED if is_sensitive_key(str(k)) else v for k, v in value.items()}
        else:
            clean[key] = value
    return clean


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and not k.startswith("_")}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line:

    {"ts": "2026-02-13T10:30:45.123456+00:00", "level": "INFO",
     "logger": "grading_orchestrator", "msg": "Graded pick p-1 - Tier: A, Edge: 21",
     "run_id": "run-0a1b2c3d4e5f", "job": "grading", "at": "process_record:239",
     "pick_id": "p-1", "tier": "A", "edge_score": 21}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(current_context())
        entry["at"] = f"{record.funcName}:{record.lineno}"
        entry.update(redact(record_extras(record)))
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """
    2026-02-13 10:30:45.123 [INFO] [run-abc123] grading_orchestrator - Batch complete
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        correlation = get_request_id() or get_run_id() or "-"
        line = f"{stamp} [{record.levelname}] [{correlation}] {record.name} - {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


# =============================================================================
# HTTP MIDDLEWARE
# =============================================================================

class RequestCorrelationMiddleware(BaseHTTPMiddleware):
    """Bind X-Request-ID (incoming or generated) for the request and echo it back."""

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or new_correlation_id("req")
        with bind_context(request_id=request_id):
            response = await call_next(request)
        response.headers[self.HEADER_NAME] = request_id
        return response


# =============================================================================
# SETUP + HELPERS
# =============================================================================

def configure_structured_logging(level: Optional[str] = None, format_type: Optional[str] = None) -> None:
    """
    Replace root handlers with a single stdout handler.

    Args:
        level: DEBUG / INFO / WARNING / ERROR (default LOG_LEVEL env var)
        format_type: "json" or "text" (default LOG_FORMAT env var)
    """
    level = (level or DEFAULT_LOG_LEVEL).upper()
    formatter = JSONFormatter() if (format_type or DEFAULT_LOG_FORMAT).lower() == "json" else TextFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_with_context(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """logger.log() with structured fields, e.g. pick_id="abc123", tier="S"."""
    logger.log(level, message, extra=extra)


def log_info(logger: logging.Logger, message: str, **extra: Any) -> None:
    log_with_context(logger, logging.INFO, message, **extra)


def log_warning(logger: logging.Logger, message: str, **extra: Any) -> None:
    log_with_context(logger, logging.WARNING, message, **extra)


def log_error(logger: logging.Logger, message: str, **extra: Any) -> None:
    log_with_context(logger, logging.ERROR, message, **extra)


def log_debug(logger: logging.Logger, message: str, **extra: Any) -> None:
    log_with_context(logger, logging.DEBUG, message, **extra)
