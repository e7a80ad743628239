"""Logging setup and request logging middleware."""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_LOGGER = "app.requests"
REDACTED_HEADERS = frozenset({"authorization", "cookie", "apikey", "x-api-key"})


def configure_logging(level: str = "INFO") -> None:
    """Configure one console format for the app and the server/client libraries."""
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx", "fastapi"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(log_level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.propagate = False
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    return {
        k: "<redacted>" if k.lower() in REDACTED_HEADERS else v for k, v in headers.items()
    }


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log one JSON line per request and echo the request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get("x-request-id", str(uuid.uuid4()))
        start = time.perf_counter()

        response = await call_next(request)

        duration_ms = int((time.perf_counter() - start) * 1000)
        entry = {
            "event": "http_request",
            "request_id": rid,
            "method": request.method,
            "path": request.url.path,
            "query": {k: v for k, v in request.query_params.items() if k != "token"},
            "headers": _redact_headers(dict(request.headers)),
            "status": response.status_code,
            "duration_ms": duration_ms,
        }
        logger = logging.getLogger(REQUEST_LOGGER)
        if response.status_code >= 500:
            logger.error(json.dumps(entry, default=str))
        else:
            logger.info(json.dumps(entry, default=str))
        response.headers["x-request-id"] = rid
        return response
