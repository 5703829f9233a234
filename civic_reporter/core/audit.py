"""structlog setup and the audit events written by routes."""

import logging
from typing import Any, Mapping, Optional

import structlog

from civic_reporter.config import Settings

logger = structlog.get_logger()

MASK = "***MASKED***"

# Keys whose values never reach the logs, compared case-insensitively
SENSITIVE_FIELDS = frozenset({
    "password",
    "password_hash",
    "confirmpassword",
    "confirm_password",
    "token",
    "secret",
    "session",
    "cookie",
    "authorization",
})


def configure_logging(config: Settings) -> None:
    """Route structlog output through JSON or console rendering at LOG_LEVEL."""
    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def mask_sensitive(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy ``data`` with sensitive values replaced, recursing into dicts."""
    masked: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_FIELDS:
            masked[key] = MASK
        elif isinstance(value, Mapping):
            masked[key] = mask_sensitive(value)
        else:
            masked[key] = value
    return masked


def log_auth_event(
    event: str,
    account_id: Optional[str] = None,
    email: Optional[str] = None,
    success: bool = True,
    reason: Optional[str] = None,
    ip_address: Optional[str] = None,
    request_id: Optional[str] = None,
) -> None:
    """
    Record signup, login, elevation and logout outcomes.

    Failed attempts keep only the first two characters of the email so
    the log cannot be used to enumerate accounts.
    """
    context: dict[str, Any] = {
        "event_type": "auth",
        "auth_action": event,
        "success": success,
        "ip_address": ip_address,
        "request_id": request_id,
    }

    if not success:
        if email:
            context["email_prefix"] = f"{email[:2]}***"
        logger.warning("auth_event", reason=reason, **context)
        return

    logger.info("auth_event", account_id=account_id, email=email, **context)


def log_data_modification(
    action: str,
    resource: str,
    resource_id: str,
    user_id: str,
    changes: Optional[dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> None:
    """Record a create, update, delete or endorse on an issue."""
    logger.info(
        "data_modified",
        event_type="data_modification",
        action=action,
        resource=resource,
        resource_id=resource_id,
        user_id=user_id,
        changes=mask_sensitive(changes) if changes else None,
        request_id=request_id,
    )
