"""Router combining all endpoint routers."""

from fastapi import APIRouter

from civic_reporter.api.routes import admin, auth, issues, preferences, reports, solver
from civic_reporter.schemas.common import ERROR_RESPONSES

router = APIRouter(responses=ERROR_RESPONSES)

# Include all routers
router.include_router(auth.router, tags=["Authentication"])
router.include_router(issues.router, tags=["Issues"])
router.include_router(solver.router, prefix="/solver", tags=["Solver"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])
router.include_router(reports.router, prefix="/api", tags=["Map"])
router.include_router(preferences.router, tags=["Preferences"])
