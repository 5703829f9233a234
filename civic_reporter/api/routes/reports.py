"""Map data endpoint."""

from fastapi import APIRouter

from civic_reporter.api.deps import DbSession
from civic_reporter.schemas.issue import ReportPoint
from civic_reporter.services.issue import IssueService
from civic_reporter.utils.geo import parse_location

router = APIRouter()


@router.get(
    "/reports",
    response_model=list[ReportPoint],
    summary="Issues for the map",
    description="Every issue with coordinates parsed from its location; unparseable locations yield nulls.",
)
async def list_reports(db: DbSession) -> list[ReportPoint]:
    """List issues as map points."""
    issues = await IssueService(db).list_all()

    points = []
    for issue in issues:
        coordinates = parse_location(issue.location)
        points.append(
            ReportPoint(
                id=issue.id,
                title=issue.title,
                status=issue.status,
                reporter_id=issue.reporter_id,
                latitude=coordinates.latitude,
                longitude=coordinates.longitude,
                image=issue.image,
                date_reported=issue.created_at,
            )
        )
    return points
