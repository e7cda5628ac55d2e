"""
PI Analytics — HTTP Middleware
================================
Request access log with timing, and the CORS preflight responder.
"""
from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from lib.logger import setup_logger

logger = setup_logger("api_middleware")

CORS_ALLOW_METHODS = ["GET", "POST", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with request timing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d in %.1fms",
            request.method, request.url.path, response.status_code, duration_ms,
        )
        return response


class PreflightMiddleware(BaseHTTPMiddleware):
    """Answer every OPTIONS request with an empty 200 and the CORS headers."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            logger.debug("Preflight %s", request.url.path)
            return Response(status_code=200, headers=CORS_HEADERS)
        return await call_next(request)
