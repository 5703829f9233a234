"""Issue endpoints for citizens."""

import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile, status
from fastapi.responses import RedirectResponse

from civic_reporter.api.deps import CurrentAccount, CurrentSession, DbSession
from civic_reporter.core.audit import log_data_modification
from civic_reporter.core.exceptions import AuthorizationError
from civic_reporter.models.issue import Issue
from civic_reporter.schemas.account import AccountResponse, AccountSummary
from civic_reporter.schemas.issue import (
    EndorsementResponse,
    IssueCreate,
    IssueResponse,
    IssueUpdate,
    ProfileResponse,
)
from civic_reporter.services.account import AccountService
from civic_reporter.services.issue import IssueService
from civic_reporter.services.uploads import discard_image, save_image

router = APIRouter()


def issue_to_response(issue: Issue) -> IssueResponse:
    """Convert issue model to response schema."""
    return IssueResponse(
        id=issue.id,
        title=issue.title,
        location=issue.location,
        image=issue.image,
        status=issue.status,
        department=issue.department,
        reporter=AccountSummary(
            id=issue.reporter.id,
            email=issue.reporter.email,
        ) if issue.reporter else None,
        created_at=issue.created_at,
        endorsement_count=issue.endorsement_count,
    )


def see_other(url: str) -> RedirectResponse:
    """Redirect after a successful form post."""
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get(
    "/",
    response_model=list[IssueResponse],
    summary="List all issues",
    description="Public feed of every reported issue, newest first.",
)
async def list_issues(db: DbSession) -> list[IssueResponse]:
    """List all issues."""
    issues = await IssueService(db).list_all()
    return [issue_to_response(i) for i in issues]


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Current account profile",
    description="Points, level, badges and the issues reported by the caller.",
)
async def get_profile(account: CurrentAccount, db: DbSession) -> ProfileResponse:
    """Get the caller's profile."""
    issues = await IssueService(db).list_by_reporter(account.id)
    return ProfileResponse(
        account=AccountResponse.model_validate(account),
        issues=[issue_to_response(i) for i in issues],
    )


@router.post(
    "/issues",
    status_code=303,
    summary="Report an issue",
    description="Create an issue with an optional photo and award submission points.",
)
async def create_issue(
    request: Request,
    account: CurrentAccount,
    db: DbSession,
    title: Annotated[str, Form()],
    location: Annotated[str, Form()] = "",
    status_value: Annotated[Optional[str], Form(alias="status")] = None,
    department: Annotated[Optional[str], Form()] = None,
    image: Annotated[Optional[UploadFile], File()] = None,
) -> RedirectResponse:
    """Report a new issue."""
    data = IssueCreate(
        title=title,
        location=location,
        status=status_value,
        department=department,
    )
    image_path = await save_image(image)

    try:
        issue = await IssueService(db).create(data, account, image_path=image_path)
        await AccountService(db).record_submission(account)
        await db.commit()
    except Exception:
        await discard_image(image_path)
        raise

    log_data_modification(
        action="create",
        resource="issue",
        resource_id=str(issue.id),
        user_id=str(account.id),
        changes={"title": issue.title, "points": account.points, "level": account.level},
        request_id=getattr(request.state, "request_id", None),
    )
    return see_other("/profile")


@router.post(
    "/posts/{issue_id}/edit",
    status_code=303,
    summary="Edit own issue",
    description="Only the reporter may edit. Empty fields are left unchanged.",
)
async def edit_issue(
    request: Request,
    issue_id: uuid.UUID,
    session: CurrentSession,
    db: DbSession,
    title: Annotated[Optional[str], Form()] = None,
    location: Annotated[Optional[str], Form()] = None,
    status_value: Annotated[Optional[str], Form(alias="status")] = None,
) -> RedirectResponse:
    """Update the caller's own issue."""
    issue_service = IssueService(db)
    issue = await issue_service.get_or_404(issue_id)

    if not issue_service.is_owner(issue, session.account_id):
        raise AuthorizationError(message="Not authorized")

    data = IssueUpdate(title=title, location=location, status=status_value)
    await issue_service.update(issue, data)
    await db.commit()

    log_data_modification(
        action="update",
        resource="issue",
        resource_id=str(issue.id),
        user_id=str(session.account_id),
        changes=data.changes(),
        request_id=getattr(request.state, "request_id", None),
    )
    return see_other("/profile")


@router.post(
    "/posts/{issue_id}/delete",
    status_code=303,
    summary="Delete own issue",
)
async def delete_issue(
    request: Request,
    issue_id: uuid.UUID,
    session: CurrentSession,
    db: DbSession,
) -> RedirectResponse:
    """Delete the caller's own issue."""
    issue_service = IssueService(db)
    issue = await issue_service.get_or_404(issue_id)

    if not issue_service.is_owner(issue, session.account_id):
        raise AuthorizationError(message="Not authorized")

    await issue_service.delete(issue)
    await db.commit()

    log_data_modification(
        action="delete",
        resource="issue",
        resource_id=str(issue_id),
        user_id=str(session.account_id),
        request_id=getattr(request.state, "request_id", None),
    )
    return see_other("/profile")


@router.post(
    "/posts/{issue_id}/endorse",
    response_model=EndorsementResponse,
    summary="Toggle endorsement",
    description="Endorse the issue, or withdraw an existing endorsement.",
)
async def endorse_issue(
    request: Request,
    issue_id: uuid.UUID,
    account: CurrentAccount,
    db: DbSession,
) -> EndorsementResponse:
    """Toggle the caller's endorsement."""
    issue_service = IssueService(db)
    issue = await issue_service.get_or_404(issue_id)

    count = await issue_service.toggle_endorsement(issue, account)
    await db.commit()

    log_data_modification(
        action="endorse",
        resource="issue",
        resource_id=str(issue.id),
        user_id=str(account.id),
        changes={"endorsed": issue.is_endorsed_by(account.id), "count": count},
        request_id=getattr(request.state, "request_id", None),
    )
    return EndorsementResponse(count=count)
