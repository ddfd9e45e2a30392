"""
Access Logging Middleware

Logs every API request (method, path, status, duration, client) through the
CustomLogger and tags the response with a request id for correlation.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.api.responses import unhandled_exception_handler
from app.logging import get_logger

logger = get_logger("access")

SKIPPED_PATHS = ["/", "/health", "/docs", "/openapi.json"]


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API access.

    Captures:
    - Request details (path, method, IP, user agent)
    - Performance metrics (duration)
    - Request tracking (request_id, echoed as ``X-Request-ID``)
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_threshold: float = 1.0):
        """
        Args:
            app: FastAPI application
            enabled: Whether logging is enabled (can be disabled in tests)
            slow_threshold: Requests slower than this (seconds) are also logged as slow
        """
        super().__init__(app)
        self.enabled = enabled
        self.slow_threshold = slow_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Reaproveita o id enviado pelo proxy, se houver
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            # a resposta 500 também leva o request id e entra no log de acesso
            response = await unhandled_exception_handler(request, exc)
        duration = round(time.perf_counter() - start_time, 4)

        response.headers["X-Request-ID"] = request_id

        if not self.enabled or request.url.path in SKIPPED_PATHS:
            return response

        logger.request(
            "API request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
            request_id=request_id,
            ip_address=self._get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )
        if duration > self.slow_threshold:
            logger.slow("Slow request", duration=duration, threshold=self.slow_threshold, path=request.url.path)

        return response

    def _get_client_ip(self, request: Request) -> str:
        """
        Checks X-Forwarded-For first (proxied requests), then the direct client.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
