"""Per-request audit logging."""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from civic_reporter.config import settings
from civic_reporter.core.audit import mask_sensitive

logger = structlog.get_logger()

AUTH_PATHS = frozenset({"/signup", "/login", "/login/solver", "/admin/login", "/logout", "/logout/all"})


def client_ip(request: Request) -> str:
    """
    Address of the caller, used for throttling and audit entries.

    Proxy headers only count when the direct peer is listed in
    TRUSTED_PROXIES. The right-most X-Forwarded-For hop that is not
    itself a trusted proxy is taken.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = settings.trusted_proxies_set
    if peer not in trusted:
        return peer

    hops = [hop.strip() for hop in request.headers.get("X-Forwarded-For", "").split(",") if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return request.headers.get("X-Real-IP") or peer


class AuditLogMiddleware(BaseHTTPMiddleware):
    """
    Log ``request_started`` and ``request_completed`` for every request.

    The completion entry carries the status, the duration and the
    account resolved by the session gate, and is logged at warning
    level for 4xx and error level for 5xx answers. Health probes are
    not logged.
    """

    EXCLUDED_PATHS = frozenset({"/health", "/health/ready", "/health/live"})

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return await call_next(request)

        request_id = getattr(request.state, "request_id", None)
        logger.info(
            "request_started",
            request_id=request_id,
            method=request.method,
            path=path,
            query_params=mask_sensitive(request.query_params),
            client_ip=client_ip(request),
            user_agent=request.headers.get("User-Agent", "unknown"),
            auth_request=path in AUTH_PATHS,
        )

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400:
            log = logger.warning
        else:
            log = logger.info

        log(
            "request_completed",
            request_id=request_id,
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            user_id=getattr(request.state, "user_id", None),
        )
        return response
