"""Account service for lookups and gamification updates."""

import uuid
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from civic_reporter.core.exceptions import NotFoundError
from civic_reporter.core.gamification import POINTS_PER_ISSUE, evaluate
from civic_reporter.models.account import Account


class AccountService:
    """Service for account operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, account_id: uuid.UUID) -> Optional[Account]:
        """Get account by ID."""
        result = await self.db.execute(
            select(Account).where(Account.id == account_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by email."""
        result = await self.db.execute(
            select(Account).where(Account.email == email)
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, account_id: uuid.UUID) -> Account:
        """Get account by ID or raise NotFoundError."""
        account = await self.get_by_id(account_id)
        if not account:
            raise NotFoundError(resource="Account")
        return account

    async def record_submission(self, account: Account) -> Account:
        """
        Award the points for one submitted issue.

        The increment is a single UPDATE so concurrent submissions by the
        same account cannot overwrite each other; level and badges are
        then derived from the value the database returned.

        Args:
            account: Reporting account

        Returns:
            The account with updated points, level and badges
        """
        result = await self.db.execute(
            update(Account)
            .where(Account.id == account.id)
            .values(points=Account.points + POINTS_PER_ISSUE)
            .returning(Account.points)
            .execution_options(synchronize_session=False)
        )
        points = result.scalar_one()

        state = evaluate(points, account.badges or [])
        # Reflect the stored total without scheduling another write of it
        set_committed_value(account, "points", state.points)
        account.level = state.level
        if state.badges != list(account.badges or []):
            account.badges = state.badges

        await self.db.flush()
        return account
