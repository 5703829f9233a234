"""Shared schema base, error envelope and small response bodies."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ErrorInfo(BaseModel):
    """Body of the ``error`` key in every error response."""

    code: str
    message: str
    details: Optional[list[dict[str, Any]]] = None
    request_id: Optional[str] = None


class ErrorEnvelope(BaseModel):
    """Error response as produced by the exception handlers."""

    error: ErrorInfo


# OpenAPI documentation for the errors any route may answer with
ERROR_RESPONSES: dict[int, dict[str, Any]] = {
    400: {"model": ErrorEnvelope, "description": "Missing or invalid input"},
    401: {"model": ErrorEnvelope, "description": "Bad credentials or shared secret"},
    403: {"model": ErrorEnvelope, "description": "Role or ownership mismatch"},
    404: {"model": ErrorEnvelope, "description": "Issue or account not found"},
    429: {"model": ErrorEnvelope, "description": "Too many login attempts"},
}


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class HealthResponse(BaseModel):
    """Liveness or readiness report."""

    status: str
    version: str
    database: Optional[str] = None
    redis: Optional[str] = None
