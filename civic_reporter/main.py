"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from civic_reporter import __version__
from civic_reporter.api.errors import register_exception_handlers
from civic_reporter.api.router import router as api_router
from civic_reporter.api.routes import health
from civic_reporter.config import settings
from civic_reporter.core.audit import configure_logging
from civic_reporter.database import close_db, init_db
from civic_reporter.middleware import (
    AuditLogMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from civic_reporter.redis import close_redis, init_redis

configure_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database and Redis pools for the lifetime of the app."""
    await init_db()
    await init_redis()
    yield
    await close_db()
    await close_redis()


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies larger than one photo plus the other form fields."""

    FORM_OVERHEAD = 64 * 1024

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        limit = settings.max_upload_bytes + self.FORM_OVERHEAD
        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > limit:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={
                    "error": {
                        "code": "REQUEST_TOO_LARGE",
                        "message": f"Request body too large. Maximum size is {limit // 1024}KB.",
                    }
                },
            )
        return await call_next(request)


app = FastAPI(
    title=settings.app_name,
    description="Citizens report and endorse local problems; solvers and admins triage them.",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

# Last added runs first: CORS, then request ID, audit log, headers, size limit
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditLogMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID", "Retry-After"],
)

register_exception_handlers(app)

app.include_router(api_router)
app.include_router(health.router, prefix="/health", tags=["Health"])
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)
