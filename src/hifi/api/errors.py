"""Error responses for the HTTP API.

All errors are answered as ``{"error": "<message>"}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hifi.deposits.errors import DepositError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build an error response."""
    return JSONResponse(status_code=status_code, content={"error": message})


def internal_error() -> JSONResponse:
    """Generic 500 response; details stay in the server log."""
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def deposit_error_handler(request: Request, exc: DepositError) -> JSONResponse:
    """Translate deposit errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return internal_error()
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed path or query parameters as 400."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return error_response(400, message)


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers on an app."""
    app.add_exception_handler(DepositError, deposit_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
