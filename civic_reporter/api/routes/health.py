"""Liveness and readiness probes."""

from fastapi import APIRouter, Response, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from civic_reporter import __version__
from civic_reporter.api.deps import DbSession, RedisClient
from civic_reporter.schemas.common import HealthResponse

router = APIRouter()

HEALTHY = "healthy"


@router.get("", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """Report that the process is serving."""
    return HealthResponse(status=HEALTHY, version=__version__)


@router.get("/live", response_model=HealthResponse, summary="Liveness probe")
async def liveness_check() -> HealthResponse:
    """Answer as long as the event loop runs."""
    return HealthResponse(status="alive", version=__version__)


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness probe",
    responses={503: {"model": HealthResponse, "description": "A dependency is unreachable"}},
)
async def readiness_check(
    response: Response, db: DbSession, redis_client: RedisClient
) -> HealthResponse:
    """Check the database and Redis can both be reached; 503 when either cannot."""
    try:
        await db.execute(text("SELECT 1"))
        database = HEALTHY
    except SQLAlchemyError as exc:
        database = f"unhealthy: {type(exc).__name__}"

    try:
        await redis_client.ping()
        redis_status = HEALTHY
    except (RedisError, OSError) as exc:
        redis_status = f"unhealthy: {type(exc).__name__}"

    overall = HEALTHY if database == HEALTHY and redis_status == HEALTHY else "unhealthy"
    if overall != HEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status=overall, version=__version__, database=database, redis=redis_status)
