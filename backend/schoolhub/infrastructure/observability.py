"""Structured Logging: JSON formatter, setup and a tenant-aware access log.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (school_id, user_id, error_code, path, resource) surfaced when present
    - Every request produces one access line with method, path, status and
      latency; school_id and user_id are attached once a session was resolved
    - JSON format in production, human-readable in development

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
    - The session guard records the caller on request.state; the access log
      reads it back after the response, so unauthenticated requests log no tenant
    - Health checks log at DEBUG so orchestrator polling does not drown the log
"""

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import Request

_EXTRA_FIELDS = (
    "school_id", "user_id", "error_code", "path", "method", "status_code",
    "resource", "resource_id", "latency_ms",
)

access_logger = logging.getLogger("schoolhub.access")

_QUIET_PREFIX = "/api/v1/health"


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


def _access_level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if path.startswith(_QUIET_PREFIX):
        return logging.DEBUG
    return logging.INFO


async def access_log_middleware(request: Request, call_next):
    """HTTP middleware: one structured line per request."""
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        path = request.url.path
        access_logger.log(
            _access_level(path, status_code),
            f"{request.method} {path} {status_code}",
            extra={
                "method": request.method,
                "path": path,
                "status_code": status_code,
                "latency_ms": int((time.perf_counter() - start) * 1000),
                "school_id": getattr(request.state, "school_id", None),
                "user_id": getattr(request.state, "user_id", None),
            },
        )
