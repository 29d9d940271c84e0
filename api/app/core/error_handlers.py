"""
Exception handlers for the Immigration AMA Assistant API.

Every error leaves the API as ``{"error": {"code", "message", "status_code"}}``
so the chat UI only has one shape to render.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from app.core.exceptions import BaseAppException
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _error_response(
    code: str,
    message: Any,
    status_code: int,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "error": {"code": code, "message": message, "status_code": status_code}
    }
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def base_exception_handler(
    request: Request, exc: BaseAppException
) -> JSONResponse:
    """Render an application exception.

    Client errors are logged as warnings, upstream and server failures as errors.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{request.method} {request.url.path} -> {exc.status_code} "
        f"{exc.error_code}: {exc.detail}",
        extra={"error_code": exc.error_code, "status_code": exc.status_code},
    )
    return _error_response(exc.error_code, exc.detail, exc.status_code, exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    logger.warning(
        f"{request.method} {request.url.path} rejected: {len(errors)} invalid field(s)"
    )
    fields = [".".join(str(part) for part in error["loc"]) for error in errors]
    return _error_response(
        "INVALID_REQUEST",
        f"Invalid request body: {', '.join(fields)}",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler. The response never carries exception details."""
    logger.exception(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}"
    )
    return _error_response(
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the handlers, most specific first."""
    app.add_exception_handler(BaseAppException, base_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
