"""Response hardening headers."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from civic_reporter.config import settings


def build_csp(directives: dict[str, str]) -> str:
    """Join CSP directives into a header value."""
    return "; ".join(f"{name} {sources}" for name, sources in directives.items())


APP_CSP = {
    "default-src": "'self'",
    "script-src": "'self'",
    "style-src": "'self' 'unsafe-inline'",
    "img-src": "'self' data: https:",
    "connect-src": "'self'",
    "frame-ancestors": "'none'",
    "form-action": "'self'",
    "base-uri": "'self'",
}

# Swagger UI and ReDoc pull their bundles from jsDelivr
DOCS_CSP = {
    **APP_CSP,
    "script-src": "'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "style-src": "'self' 'unsafe-inline' https://cdn.jsdelivr.net",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add the fixed hardening headers, a CSP and cache rules to every response."""

    STATIC_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "camera=(), microphone=(), geolocation=(self)",
    }
    APP_POLICY = build_csp(APP_CSP)
    DOCS_POLICY = build_csp(DOCS_CSP)
    DOCS_PATHS = frozenset({"/docs", "/redoc", "/openapi.json"})
    HSTS = "max-age=31536000; includeSubDomains"

    def _policy_for(self, path: str) -> str:
        if settings.debug and path in self.DOCS_PATHS:
            return self.DOCS_POLICY
        return self.APP_POLICY

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        path = request.url.path

        response.headers.update(self.STATIC_HEADERS)
        response.headers["Content-Security-Policy"] = self._policy_for(path)

        # Uploaded photos are public and immutable
        if not path.startswith(settings.upload_url_prefix):
            response.headers["Cache-Control"] = "no-store, private"

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = self.HSTS

        return response
