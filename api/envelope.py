"""
PI Analytics — Response Envelope
==================================
Every response carries a leading ``timestamp``; every error is rendered as
``{error, timestamp}`` with no stack trace.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lib.logger import setup_logger

logger = setup_logger("api_envelope")

ROUTING_MISSES = {404: "Not Found", 405: "Method Not Allowed"}


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def envelope(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Prefix a report with the response timestamp."""
    return {"timestamp": timestamp(), **payload}


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "timestamp": timestamp()},
    )


def _describe_validation(exc: RequestValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return "Invalid request: " + "; ".join(problems)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if ROUTING_MISSES.get(exc.status_code) == exc.detail:
        return error_response(f"Not found: {request.url.path}", 404)
    return error_response(str(exc.detail), exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(_describe_validation(exc), 400)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return error_response(f"Server error: {exc}", 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
