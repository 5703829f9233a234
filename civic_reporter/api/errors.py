"""Conversion of exceptions into the JSON error envelope."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from civic_reporter.config import settings
from civic_reporter.core.exceptions import APIException, InfrastructureError, ValidationError

logger = structlog.get_logger()


def _render(request: Request, exc: APIException) -> JSONResponse:
    error = dict(exc.detail["error"])
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        error["request_id"] = request_id
    return JSONResponse(status_code=exc.status_code, content={"error": error}, headers=exc.headers)


def _field_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in errors
    ]


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """Render application errors as raised."""
    return _render(request, exc)


async def handle_validation_error(
    request: Request, exc: RequestValidationError | PydanticValidationError
) -> JSONResponse:
    """Form, path and schema validation failures are all 400s."""
    error = ValidationError(message="Request validation failed", details=_field_errors(exc.errors()))
    return _render(request, error)


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures are logged and answered without internals."""
    logger.error(
        "database_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return _render(request, InfrastructureError(message="A storage error occurred"))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything not raised on purpose."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    details = [{"type": type(exc).__name__, "message": str(exc)}] if settings.debug else None
    error = APIException(details=details)
    return _render(request, error)


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler on the application."""
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(PydanticValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
