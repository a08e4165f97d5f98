"""
Exception handlers: every error leaves the API as {"error": ..., "details"?: ...}
"""

import traceback

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from Livestock_RAG_Backend.core.config import settings
from Livestock_RAG_Backend.core.errors import RagError

logger = structlog.get_logger(__name__)

INVALID_FORMAT = "Invalid request format. Expected { prompt: string, context?: string }"


def _error_body(message: str, details: str | None = None) -> dict:
    body = {"error": message}
    if details:
        body["details"] = details
    return body


def _validation_message(errors: list[dict]) -> str:
    for err in errors:
        if err.get("type") == "json_invalid":
            return "Invalid JSON in request body"
        if err.get("type") == "missing" and tuple(err.get("loc", ())) == ("body",):
            return "Request body is required"
    return INVALID_FORMAT


async def rag_error_handler(request: Request, exc: RagError):
    logger.warning(
        "rag_request_failed",
        error=exc.message,
        error_type=type(exc).__name__,
        status=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.public_message()))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=_error_body(_validation_message(exc.errors())))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
    if exc.status_code == 405:
        message = "Method not allowed. Use POST."
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    details = None
    if settings.is_development:
        details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=_error_body("Internal server error", details))


async def catch_unhandled_errors(request: Request, call_next):
    # runs inside CORSMiddleware so the 500 body still carries CORS headers
    try:
        return await call_next(request)
    except Exception as exc:
        return await general_exception_handler(request, exc)


def register_exception_handlers(app) -> None:
    app.add_exception_handler(RagError, rag_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
