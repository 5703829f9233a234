"""Signup, login, role elevation and logout endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from civic_reporter.api.deps import (
    CurrentSession,
    DbSession,
    OptionalSession,
    RedisClient,
    check_login_rate_limit,
)
from civic_reporter.config import settings
from civic_reporter.core.audit import log_auth_event
from civic_reporter.core.exceptions import AuthenticationError
from civic_reporter.middleware.audit_logger import client_ip
from civic_reporter.schemas.common import MessageResponse
from civic_reporter.services.auth import AuthService
from civic_reporter.utils.text_sanitizer import clean_text

router = APIRouter()

FormField = Annotated[Optional[str], Form()]


def _redirect_with_session(url: str, token: str) -> RedirectResponse:
    """Redirect and hand the browser its session cookie."""
    response = RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


def _log_failure(request: Request, event: str, email: Optional[str], exc: AuthenticationError) -> None:
    log_auth_event(
        event,
        email=email,
        success=False,
        reason=exc.code,
        ip_address=client_ip(request),
        request_id=getattr(request.state, "request_id", None),
    )


@router.post(
    "/signup",
    status_code=303,
    summary="Create an account",
    description="Register a citizen account, start a session and redirect to the profile.",
)
async def signup(
    request: Request,
    db: DbSession,
    redis_client: RedisClient,
    session: OptionalSession,
    email: FormField = None,
    password: FormField = None,
    confirm_password: Annotated[Optional[str], Form(alias="confirmPassword")] = None,
) -> RedirectResponse:
    """Register a new account."""
    auth_service = AuthService(db, redis_client)
    account = await auth_service.signup(email, password, confirm_password)
    await db.commit()

    token = await auth_service.start_session(
        account,
        previous_session_id=session.session_id if session else None,
    )
    log_auth_event(
        "signup",
        account_id=str(account.id),
        email=account.email,
        ip_address=client_ip(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return _redirect_with_session("/profile", token)


@router.post(
    "/login",
    status_code=303,
    summary="Log in",
    dependencies=[Depends(check_login_rate_limit)],
)
async def login(
    request: Request,
    db: DbSession,
    redis_client: RedisClient,
    session: OptionalSession,
    email: FormField = None,
    password: FormField = None,
) -> RedirectResponse:
    """Verify credentials and start a citizen session."""
    auth_service = AuthService(db, redis_client)
    try:
        account = await auth_service.authenticate(email, password)
    except AuthenticationError as exc:
        _log_failure(request, "login", email, exc)
        raise

    await db.commit()

    token = await auth_service.start_session(
        account,
        previous_session_id=session.session_id if session else None,
    )
    log_auth_event(
        "login",
        account_id=str(account.id),
        email=account.email,
        ip_address=client_ip(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return _redirect_with_session("/profile", token)


@router.post(
    "/login/solver",
    status_code=303,
    summary="Log in as a solver",
    description="Requires the shared solver token. The department is bound to the new session.",
    dependencies=[Depends(check_login_rate_limit)],
)
async def login_solver(
    request: Request,
    db: DbSession,
    redis_client: RedisClient,
    session: OptionalSession,
    email: FormField = None,
    password: FormField = None,
    token: FormField = None,
    department: FormField = None,
) -> RedirectResponse:
    """Verify the solver token and credentials, then start a solver session."""
    auth_service = AuthService(db, redis_client)
    try:
        account = await auth_service.authenticate_solver(email, password, token)
    except AuthenticationError as exc:
        _log_failure(request, "solver_login", email, exc)
        raise

    await db.commit()

    session_token = await auth_service.start_session(
        account,
        previous_session_id=session.session_id if session else None,
        is_solver=True,
        department=clean_text(department),
    )
    log_auth_event(
        "solver_login",
        account_id=str(account.id),
        email=account.email,
        ip_address=client_ip(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return _redirect_with_session("/solver/dashboard", session_token)


@router.post(
    "/admin/login",
    status_code=303,
    summary="Log in as an admin",
    description="Requires the shared admin secret.",
    dependencies=[Depends(check_login_rate_limit)],
)
async def login_admin(
    request: Request,
    db: DbSession,
    redis_client: RedisClient,
    session: OptionalSession,
    email: FormField = None,
    password: FormField = None,
    secret: FormField = None,
) -> RedirectResponse:
    """Verify the admin secret and credentials, then start an admin session."""
    auth_service = AuthService(db, redis_client)
    try:
        account = await auth_service.authenticate_admin(email, password, secret)
    except AuthenticationError as exc:
        _log_failure(request, "admin_login", email, exc)
        raise

    await db.commit()

    session_token = await auth_service.start_session(
        account,
        previous_session_id=session.session_id if session else None,
        is_admin=True,
    )
    log_auth_event(
        "admin_login",
        account_id=str(account.id),
        email=account.email,
        ip_address=client_ip(request),
        request_id=getattr(request.state, "request_id", None),
    )
    return _redirect_with_session("/admin/dashboard", session_token)


@router.get("/logout", status_code=303, summary="Log out")
async def logout(
    request: Request,
    db: DbSession,
    redis_client: RedisClient,
    session: OptionalSession,
) -> RedirectResponse:
    """Destroy the current session."""
    if session is not None:
        await AuthService(db, redis_client).end_session(session.session_id)
        log_auth_event(
            "logout",
            account_id=str(session.account_id),
            ip_address=client_ip(request),
            request_id=getattr(request.state, "request_id", None),
        )

    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.post(
    "/logout/all",
    response_model=MessageResponse,
    summary="Log out everywhere",
    description="Destroy every session of the current account, including this one.",
)
async def logout_all(
    request: Request,
    db: DbSession,
    redis_client: RedisClient,
    session: CurrentSession,
) -> JSONResponse:
    """Destroy all sessions of the caller's account."""
    count = await AuthService(db, redis_client).end_all_sessions(str(session.account_id))
    log_auth_event(
        "logout_all",
        account_id=str(session.account_id),
        ip_address=client_ip(request),
        request_id=getattr(request.state, "request_id", None),
    )

    response = JSONResponse(
        MessageResponse(message=f"Successfully logged out from {count} device(s)").model_dump()
    )
    response.delete_cookie(settings.session_cookie_name)
    return response
