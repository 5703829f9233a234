"""Core security, rules and exception modules."""

from civic_reporter.core.exceptions import (
    APIException,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from civic_reporter.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)

__all__ = [
    # Security
    "hash_password",
    "verify_password",
    "create_session_token",
    "decode_session_token",
    # Exceptions
    "APIException",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ValidationError",
]
