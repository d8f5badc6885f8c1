"""Access log middleware.

One line per request on the ``wphub.request`` logger. Server errors log at
ERROR and client errors at WARNING. Polling endpoints log at DEBUG so they
do not drown out real traffic.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from wphub.core.logging import env_bool

# Polled by browsers and load balancers.
QUIET_PATH_SUFFIXES = ("/unread-count", "/health")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI) -> None:
        super().__init__(app)
        self.logger = logging.getLogger("wphub.request")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code: int | None = response.status_code if response else None

            extra: dict[str, Any] = {
                "method": request.method,
                "path": request.url.path,
                "query": request.url.query,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent"),
            }

            if status_code is None or status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            elif request.url.path.endswith(QUIET_PATH_SUFFIXES):
                log = self.logger.debug
            else:
                log = self.logger.info

            log(
                "%s %s%s -> %s (%.2fms)",
                request.method,
                request.url.path,
                f"?{request.url.query}" if request.url.query else "",
                status_code,
                duration_ms,
                extra=extra,
            )


def add_request_logging_middleware(app: FastAPI) -> None:
    """Attach request logging middleware (enabled by default)."""

    if not env_bool("LOG_REQUESTS", default=True):
        return
    app.add_middleware(RequestLoggingMiddleware)
