"""
HTTP error rendering for mounted module routes and the kernel API.

Every error leaves the application in one envelope:

{
    "error": {
        "status_code": 404,
        "error_code": "NOT_FOUND",
        "message": "Extension point not found: cartFields",
        "details": {...},
        "path": "/api/v1/kernel/extension-points/cartFields"
    }
}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.exceptions import ErrorCode, StorefrontError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    503: "SERVICE_UNAVAILABLE",
}


def create_error_response(
    status_code: int,
    message: str,
    error_code: str | ErrorCode | None = None,
    details: dict[str, Any] | None = None,
    path: str | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"status_code": status_code, "message": message}
    if error_code:
        body["error_code"] = error_code.value if isinstance(error_code, ErrorCode) else error_code
    if details:
        body["details"] = details
    if path:
        body["path"] = path
    return JSONResponse(status_code=status_code, content={"error": body})


def _route_of(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def storefront_exception_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """A kernel error escaping a handler chain is a server fault, not a client one."""
    logger.error(
        "Kernel error while serving %s: %s",
        _route_of(request),
        exc.message,
        extra={"error_code": exc.error_code.value, "route": _route_of(request)},
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        exc.message,
        error_code=exc.error_code,
        details=exc.details,
        path=request.url.path,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    details = exc.detail if isinstance(exc.detail, dict) else None
    message = details.get("message", str(exc.detail)) if details else str(exc.detail)
    return create_error_response(
        exc.status_code,
        message,
        error_code=HTTP_ERROR_CODES.get(exc.status_code, f"HTTP_{exc.status_code}"),
        details=details,
        path=request.url.path,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Handler code is module-authored; its internals stay in the log.
    logger.error(
        "Unhandled exception in %s: %s",
        _route_of(request),
        exc,
        exc_info=True,
        extra={"route": _route_of(request)},
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        error_code=ErrorCode.UNKNOWN_ERROR,
        path=request.url.path,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
