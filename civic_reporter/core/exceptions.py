"""Application errors and the JSON body they are rendered as.

Every error is an ``HTTPException`` whose ``detail`` is already the
response body::

    {"error": {"code": ..., "message": ..., "details": [...]}}

Subclasses only pick the status, the machine readable code and a
default message.
"""

from typing import Any, ClassVar, Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception with standardized error format."""

    http_status: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: ClassVar[str] = "INTERNAL_ERROR"
    default_message: ClassVar[str] = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
        code: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.code = code or self.default_code
        self.error_message = message or self.default_message
        self.details = details

        body: dict[str, Any] = {"code": self.code, "message": self.error_message}
        if details:
            body["details"] = details

        super().__init__(
            status_code=self.http_status,
            detail={"error": body},
            headers=headers,
        )


class ValidationError(APIException):
    """Missing, malformed or mismatched input."""

    http_status = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class AuthenticationError(APIException):
    """Bad credentials or shared secret."""

    http_status = status.HTTP_401_UNAUTHORIZED
    default_code = "AUTHENTICATION_ERROR"
    default_message = "Authentication failed"


class LoginRequiredError(APIException):
    """Anonymous caller on a route that needs a session; redirects to login."""

    http_status = status.HTTP_303_SEE_OTHER
    default_code = "LOGIN_REQUIRED"
    default_message = "Please log in to continue"

    def __init__(self, login_url: str = "/login"):
        super().__init__(headers={"Location": login_url})


class AuthorizationError(APIException):
    """Session lacks the role, or the caller does not own the issue."""

    http_status = status.HTTP_403_FORBIDDEN
    default_code = "AUTHORIZATION_ERROR"
    default_message = "You don't have permission to perform this action"


class NotFoundError(APIException):
    """Issue or account does not exist."""

    http_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", message: Optional[str] = None):
        super().__init__(message=message or f"{resource} not found")


class RateLimitError(APIException):
    """Too many login attempts from one client."""

    http_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = "RATE_LIMIT_EXCEEDED"
    default_message = "Too many requests"

    def __init__(self, message: Optional[str] = None, retry_after: int = 60):
        super().__init__(message=message, headers={"Retry-After": str(retry_after)})


class InvalidStatusTransitionError(APIException):
    """Status change refused while strict transitions are enabled."""

    http_status = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_STATUS_TRANSITION"

    def __init__(
        self,
        current_status: str,
        target_status: str,
        valid_transitions: list[str],
    ):
        super().__init__(
            message=f"Cannot transition from '{current_status}' to '{target_status}'",
            details=[
                {
                    "current_status": current_status,
                    "target_status": target_status,
                    "valid_transitions": valid_transitions,
                }
            ],
        )


class InfrastructureError(APIException):
    """Backing store failure."""

    default_code = "INFRASTRUCTURE_ERROR"
    default_message = "A backing service failed"
