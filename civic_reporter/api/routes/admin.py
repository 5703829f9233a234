"""Admin moderation endpoints."""

import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import RedirectResponse

from civic_reporter.api.deps import AdminSession, DbSession, NotifierDep
from civic_reporter.api.routes.issues import issue_to_response, see_other
from civic_reporter.core.audit import log_data_modification
from civic_reporter.schemas.issue import IssueResponse, IssueUpdate
from civic_reporter.services.issue import IssueService

router = APIRouter()


@router.get(
    "/dashboard",
    response_model=list[IssueResponse],
    summary="Admin dashboard",
    description="All issues with reporter emails.",
)
async def admin_dashboard(session: AdminSession, db: DbSession) -> list[IssueResponse]:
    """List every issue for moderation."""
    issues = await IssueService(db).list_all()
    return [issue_to_response(i) for i in issues]


@router.post(
    "/update/{issue_id}",
    status_code=303,
    summary="Edit any issue",
    description="Update title, location or status and warn the reporter that the post was flagged.",
)
async def admin_update(
    request: Request,
    issue_id: uuid.UUID,
    session: AdminSession,
    db: DbSession,
    notifier: NotifierDep,
    title: Annotated[Optional[str], Form()] = None,
    location: Annotated[Optional[str], Form()] = None,
    status_value: Annotated[Optional[str], Form(alias="status")] = None,
) -> RedirectResponse:
    """Edit an issue as admin."""
    issue_service = IssueService(db)
    issue = await issue_service.get_or_404(issue_id)

    data = IssueUpdate(title=title, location=location, status=status_value)
    await issue_service.update(issue, data)
    await db.commit()

    log_data_modification(
        action="admin_update",
        resource="issue",
        resource_id=str(issue.id),
        user_id=str(session.account_id),
        changes=data.changes(),
        request_id=getattr(request.state, "request_id", None),
    )

    await notifier.notify_flagged(
        issue.reporter.email if issue.reporter else None,
        issue.title,
    )
    return see_other("/admin/dashboard")


@router.post(
    "/delete/{issue_id}",
    status_code=303,
    summary="Delete any issue",
    description="Remove an issue and tell the reporter it was marked as spam.",
)
async def admin_delete(
    request: Request,
    issue_id: uuid.UUID,
    session: AdminSession,
    db: DbSession,
    notifier: NotifierDep,
) -> RedirectResponse:
    """Delete an issue as admin."""
    issue_service = IssueService(db)
    issue = await issue_service.get_or_404(issue_id)

    reporter_email = issue.reporter.email if issue.reporter else None
    title = issue.title

    await issue_service.delete(issue)
    await db.commit()

    log_data_modification(
        action="admin_delete",
        resource="issue",
        resource_id=str(issue_id),
        user_id=str(session.account_id),
        request_id=getattr(request.state, "request_id", None),
    )

    await notifier.notify_removed(reporter_email, title)
    return see_other("/admin/dashboard")
