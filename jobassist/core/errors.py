# jobassist/core/errors.py
"""
Error taxonomy and the handlers that render every failure as the API envelope:

    {"success": false, "message": "...", "error": "CODE"}

Client errors (400/401/403/404) carry a specific message; dependency failures
(database, generation service) are logged with context and collapsed to a
generic message.
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    def __init__(self, status_code: int, message: str, error: str):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.error = error


class BadRequest(ApiError):
    def __init__(self, message: str, error: str = "INVALID_INPUT"):
        super().__init__(400, message, error)


class Unauthorized(ApiError):
    def __init__(self, message: str = "Authentication required", error: str = "UNAUTHORIZED"):
        super().__init__(401, message, error)


class Forbidden(ApiError):
    def __init__(self, message: str = "Unauthorized", error: str = "FORBIDDEN"):
        super().__init__(403, message, error)


class NotFound(ApiError):
    def __init__(self, message: str, error: str = "NOT_FOUND"):
        super().__init__(404, message, error)


class UpstreamFailure(ApiError):
    def __init__(self, message: str, error: str = "INTERNAL_ERROR"):
        super().__init__(500, message, error)


def envelope(message: str, data=None, success: bool = True, error: Optional[str] = None) -> dict:
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    return body


def _error_response(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(message, success=False, error=error))


async def api_error_handler(request: Request, exc: ApiError):
    return _error_response(exc.status_code, exc.message, exc.error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error_response(exc.status_code, message, f"HTTP_{exc.status_code}")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        fields.append(".".join(loc) or "body")
    message = "Invalid or missing fields: " + ", ".join(dict.fromkeys(fields))
    return _error_response(400, message, "INVALID_INPUT")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "Internal server error", "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
