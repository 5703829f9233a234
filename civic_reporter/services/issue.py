"""Issue service for issue management operations."""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.config import settings
from civic_reporter.core.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
)
from civic_reporter.models.account import Account
from civic_reporter.models.issue import Issue, IssueStatus
from civic_reporter.schemas.issue import IssueCreate, IssueUpdate


class IssueService:
    """Service for issue operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, issue_id: uuid.UUID) -> Optional[Issue]:
        """Get issue by ID with reporter and endorsers."""
        result = await self.db.execute(
            select(Issue)
            .where(Issue.id == issue_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, issue_id: uuid.UUID) -> Issue:
        """Get issue by ID or raise NotFoundError."""
        issue = await self.get_by_id(issue_id)
        if not issue:
            raise NotFoundError(resource="Issue", message="Post not found")
        return issue

    async def list_all(self) -> list[Issue]:
        """All issues, newest first."""
        result = await self.db.execute(
            select(Issue)
            .order_by(Issue.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_by_reporter(self, reporter_id: uuid.UUID) -> list[Issue]:
        """Issues reported by one account, newest first."""
        result = await self.db.execute(
            select(Issue)
            .where(Issue.reporter_id == reporter_id)
            .order_by(Issue.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create(
        self,
        data: IssueCreate,
        reporter: Account,
        image_path: Optional[str] = None,
    ) -> Issue:
        """
        Create a new issue.

        Args:
            data: Issue creation data
            reporter: Account reporting the issue
            image_path: Public path of the uploaded photo, if any

        Returns:
            Created issue
        """
        issue = Issue(
            title=data.title,
            location=data.location,
            image=image_path,
            status=data.status or IssueStatus.PENDING.value,
            reporter_id=reporter.id,
            department=data.department or None,
        )

        self.db.add(issue)
        await self.db.flush()

        # Reload to pick up server defaults and relationships
        return await self.get_or_404(issue.id)

    async def update(self, issue: Issue, data: IssueUpdate) -> Issue:
        """
        Apply the non-empty fields of an update.

        Raises:
            InvalidStatusTransitionError: If strict transitions are enabled
                and the status change is not allowed
        """
        changes = data.changes()

        if "status" in changes:
            self._validate_status_transition(issue, changes["status"])

        for field, value in changes.items():
            setattr(issue, field, value)

        await self.db.flush()
        return issue

    async def set_status(self, issue: Issue, status: str) -> Issue:
        """Set the status of an issue."""
        return await self.update(issue, IssueUpdate(status=status))

    async def delete(self, issue: Issue) -> None:
        """Delete an issue together with its endorsements."""
        await self.db.delete(issue)
        await self.db.flush()

    async def toggle_endorsement(self, issue: Issue, account: Account) -> int:
        """
        Endorse the issue, or withdraw the endorsement if already given.

        Returns:
            Number of endorsements after the toggle
        """
        endorsers = issue.endorsers
        existing = next((a for a in endorsers if a.id == account.id), None)
        if existing is not None:
            endorsers.remove(existing)
        else:
            endorsers.append(account)

        await self.db.flush()
        return len(endorsers)

    def _validate_status_transition(self, issue: Issue, new_status: str) -> None:
        """
        Check a status change against the lifecycle table.

        Only enforced when ENFORCE_STATUS_TRANSITIONS is set; otherwise
        any free-text status is accepted from any state.
        """
        if not settings.enforce_status_transitions:
            return

        if not issue.can_transition_to(new_status):
            raise InvalidStatusTransitionError(
                current_status=issue.status,
                target_status=new_status,
                valid_transitions=[s.value for s in issue.get_valid_transitions()],
            )

    def is_owner(self, issue: Issue, account_id: uuid.UUID) -> bool:
        """Check if the account reported the issue."""
        return issue.reporter_id == account_id
