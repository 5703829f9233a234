"""Solver endpoints for triaging issues."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Form, Request
from fastapi.responses import RedirectResponse

from civic_reporter.api.deps import DbSession, NotifierDep, SolverSession
from civic_reporter.api.routes.issues import issue_to_response, see_other
from civic_reporter.core.audit import log_data_modification
from civic_reporter.core.exceptions import ValidationError
from civic_reporter.schemas.account import AccountResponse
from civic_reporter.schemas.issue import IssueUpdate, SolverDashboardResponse
from civic_reporter.services.account import AccountService
from civic_reporter.services.issue import IssueService

router = APIRouter()


@router.get(
    "/dashboard",
    response_model=SolverDashboardResponse,
    summary="Solver dashboard",
    description="All issues, with the department bound to the solver session.",
)
async def solver_dashboard(session: SolverSession, db: DbSession) -> SolverDashboardResponse:
    """List issues for a solver."""
    solver = await AccountService(db).get_or_404(session.account_id)
    issues = await IssueService(db).list_all()
    return SolverDashboardResponse(
        solver=AccountResponse.model_validate(solver),
        department=session.department,
        issues=[issue_to_response(i) for i in issues],
    )


@router.post(
    "/update/{issue_id}",
    status_code=303,
    summary="Update issue status",
    description="Set the status of any issue and notify its reporter by email.",
)
async def update_status(
    request: Request,
    issue_id: uuid.UUID,
    session: SolverSession,
    db: DbSession,
    notifier: NotifierDep,
    status: Annotated[str, Form(max_length=50)],
) -> RedirectResponse:
    """Change an issue's status."""
    data = IssueUpdate(status=status)
    if not data.status:
        raise ValidationError(message="Status is required")

    issue_service = IssueService(db)
    issue = await issue_service.get_or_404(issue_id)
    await issue_service.update(issue, data)
    await db.commit()

    log_data_modification(
        action="update_status",
        resource="issue",
        resource_id=str(issue.id),
        user_id=str(session.account_id),
        changes={"status": issue.status, "department": session.department},
        request_id=getattr(request.state, "request_id", None),
    )

    await notifier.notify_status_change(
        issue.reporter.email if issue.reporter else None,
        issue.title,
        issue.status,
    )
    return see_other("/solver/dashboard")
