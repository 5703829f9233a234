"""API dependencies for the session gate."""

from typing import Annotated, Optional

import redis.asyncio as redis
import structlog
from fastapi import Depends, Request
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.config import settings
from civic_reporter.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    LoginRequiredError,
    RateLimitError,
)
from civic_reporter.core.security import decode_session_token
from civic_reporter.database import get_db
from civic_reporter.middleware.audit_logger import client_ip
from civic_reporter.models.account import Account
from civic_reporter.redis import RateLimiter, SessionStore, get_redis
from civic_reporter.schemas.auth import SessionContext
from civic_reporter.services.account import AccountService
from civic_reporter.services.notifier import Notifier, get_notifier

logger = structlog.get_logger()


async def get_optional_session(
    request: Request,
    redis_client: Annotated[redis.Redis, Depends(get_redis)],
) -> Optional[SessionContext]:
    """
    Resolve the session cookie to a session context.

    Returns None for anonymous callers: no cookie, a token that fails
    verification, or a session record that has expired.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    try:
        session_id = decode_session_token(token)
    except JWTError:
        return None

    record = await SessionStore(redis_client).get(session_id)
    if not record or "account_id" not in record:
        return None

    try:
        session = SessionContext.from_record(session_id, record)
    except ValueError:
        logger.warning("session_record_invalid", session_id=session_id)
        return None

    # Store account ID in request state for logging
    request.state.user_id = str(session.account_id)
    return session


async def require_authenticated(
    session: Annotated[Optional[SessionContext], Depends(get_optional_session)],
) -> SessionContext:
    """Require a logged-in caller; anonymous callers go to the login page."""
    if session is None:
        raise LoginRequiredError()
    return session


async def require_solver(
    session: Annotated[Optional[SessionContext], Depends(get_optional_session)],
) -> SessionContext:
    """Require a session elevated with the solver token."""
    if session is None or not session.is_solver:
        raise AuthorizationError(message="Access denied. Solver role required.")
    return session


async def require_admin(
    session: Annotated[Optional[SessionContext], Depends(get_optional_session)],
) -> SessionContext:
    """Require a session elevated with the admin secret."""
    if session is None or not session.is_admin:
        raise AuthorizationError(message="Access denied. Admin role required.")
    return session


async def get_session_account(
    session: Annotated[SessionContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Account:
    """
    Load the account behind the session.

    Raises:
        AuthenticationError: If the account no longer exists
    """
    account = await AccountService(db).get_by_id(session.account_id)
    if account is None:
        raise AuthenticationError(message="Account no longer exists")
    return account


async def check_login_rate_limit(
    request: Request,
    redis_client: Annotated[redis.Redis, Depends(get_redis)],
) -> None:
    """Throttle login attempts per client IP."""
    rate_limiter = RateLimiter(redis_client)

    is_allowed, _, retry_after = await rate_limiter.is_allowed(
        key=f"login:{client_ip(request)}",
        max_requests=settings.login_rate_limit_per_minute,
        window_seconds=60,
    )

    if not is_allowed:
        raise RateLimitError(
            message="Too many login attempts. Please try again later.",
            retry_after=retry_after,
        )


# Type aliases for common dependencies
OptionalSession = Annotated[Optional[SessionContext], Depends(get_optional_session)]
CurrentSession = Annotated[SessionContext, Depends(require_authenticated)]
SolverSession = Annotated[SessionContext, Depends(require_solver)]
AdminSession = Annotated[SessionContext, Depends(require_admin)]
CurrentAccount = Annotated[Account, Depends(get_session_account)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[redis.Redis, Depends(get_redis)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]
