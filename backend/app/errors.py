# exception handlers: render every failure as {success: false, message, field?}
# routers keep raising HTTPException, validation errors become 400s

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded

from app.models.common import ErrorResponse
from app.limiter import GENERAL_MESSAGE

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again."
_REQUEST_PARTS = {"body", "query", "path", "header", "cookie"}


def _error_json(status_code: int, message: str, field: str | None = None, headers=None) -> JSONResponse:
    body = ErrorResponse(message=message, field=field).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def describe_validation_error(exc: RequestValidationError) -> tuple[str, str | None]:
    """first error only, as a readable message plus the offending field name"""
    errors = exc.errors()
    if not errors:
        return "Invalid request", None
    first = errors[0]

    field = None
    for part in first.get("loc", ()):
        if isinstance(part, str) and part not in _REQUEST_PARTS:
            field = part
            break

    if first.get("type") == "missing" and field:
        return f"{field} is required", field

    message = first.get("msg", "Invalid request")
    # pydantic prefixes messages raised from our own validators
    message = message.removeprefix("Value error, ")
    if field and first.get("type") != "value_error":
        message = f"{field}: {message}"
    return message, field


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_json(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    # sync: the limiter middleware calls this directly without awaiting
    message = exc.limit.error_message or GENERAL_MESSAGE
    if callable(message):
        message = message()
    logger.warning(f"Rate limit hit on {request.method} {request.url.path}: {exc.detail}")
    return _error_json(status.HTTP_429_TOO_MANY_REQUESTS, message)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message, field = describe_validation_error(exc)
    logger.info(f"Validation failed on {request.method} {request.url.path}: {message}")
    return _error_json(status.HTTP_400_BAD_REQUEST, message, field)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR)


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
