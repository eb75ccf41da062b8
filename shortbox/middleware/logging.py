"""
Logging setup and the access-log middleware.

Every request gets one access line:
    METHOD PATH STATUS DURATIONms IP:<client>

Headers, query strings and bodies are never logged: the Authorization
header carries the admin secret, and lookups can carry slugs a caller did
not mean to publish.
"""

import logging
import sys
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("shortbox")


def setup_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """
    Configure the "shortbox" logger. Module loggers (shortbox.api.endpoints,
    shortbox.core.body, ...) propagate to it.

    Args:
        level: Logging level name; unknown names fall back to INFO
        json_format: Emit one JSON object per line instead of plain text

    Returns:
        The configured logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    if json_format:
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def get_client_ip(request: Request) -> str:
    """
    Best-effort client address.

    Prefers the CDN's CF-Connecting-IP, then the first X-Forwarded-For hop,
    then the socket peer.
    """
    connecting_ip = request.headers.get("CF-Connecting-IP")
    if connecting_ip:
        return connecting_ip.strip()

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first: Optional[str] = forwarded_for.split(",")[0].strip()
        if first:
            return first

    return request.client.host if request.client else "unknown"


def access_log_level(status_code: int) -> int:
    """Server errors log as ERROR, everything else as INFO."""
    return logging.ERROR if status_code >= 500 else logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """Writes one access-log line per request."""

    def __init__(self, app, access_logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.access_logger = access_logger or logging.getLogger("shortbox.access")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        self.access_logger.log(
            access_log_level(response.status_code),
            f"{request.method} {request.url.path} {response.status_code} "
            f"{elapsed_ms:.2f}ms IP:{get_client_ip(request)}",
        )
        return response


def add_logging_middleware(app: FastAPI) -> None:
    app.add_middleware(LoggingMiddleware)
