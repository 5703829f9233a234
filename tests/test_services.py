"""Tests for account and issue services."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.models.account import Account
from civic_reporter.models.issue import Issue
from civic_reporter.schemas.issue import IssueCreate, IssueUpdate
from civic_reporter.services.account import AccountService
from civic_reporter.services.issue import IssueService


class TestAccountService:
    """Tests for AccountService."""

    @pytest.mark.asyncio
    async def test_record_submission(self, db_session: AsyncSession, test_citizen: Account):
        """Test one submission adds ten points and the first badge."""
        account = await AccountService(db_session).record_submission(test_citizen)

        assert account.points == 10
        assert account.badges == ["Active Citizen"]

        await db_session.commit()
        await db_session.refresh(test_citizen)
        assert test_citizen.points == 10

    @pytest.mark.asyncio
    async def test_repeated_submissions_accumulate(
        self, db_session: AsyncSession, test_citizen: Account
    ):
        """Test each increment builds on the stored total."""
        service = AccountService(db_session)

        await service.record_submission(test_citizen)
        await service.record_submission(test_citizen)

        await db_session.commit()
        await db_session.refresh(test_citizen)
        assert test_citizen.points == 20

    @pytest.mark.asyncio
    async def test_get_by_email(self, db_session: AsyncSession, test_citizen: Account):
        service = AccountService(db_session)
        assert (await service.get_by_email("citizen@example.com")).id == test_citizen.id
        assert await service.get_by_email("missing@example.com") is None


class TestIssueService:
    """Tests for IssueService."""

    @pytest.mark.asyncio
    async def test_create_defaults(self, db_session: AsyncSession, test_citizen: Account):
        """Test status defaults to Pending and a blank department is dropped."""
        issue = await IssueService(db_session).create(
            IssueCreate(title="Leaking pipe", department=""),
            test_citizen,
        )

        assert issue.status == "Pending"
        assert issue.department is None
        assert issue.location == ""
        assert issue.reporter.email == "citizen@example.com"
        assert issue.created_at is not None

    @pytest.mark.asyncio
    async def test_create_keeps_given_status(self, db_session: AsyncSession, test_citizen: Account):
        issue = await IssueService(db_session).create(
            IssueCreate(title="Leaking pipe", status="Resolved", department="Water"),
            test_citizen,
        )

        assert issue.status == "Resolved"
        assert issue.department == "Water"

    @pytest.mark.asyncio
    async def test_update_ignores_blank_fields(self, db_session: AsyncSession, test_issue: Issue):
        """Test only non-empty fields are applied."""
        await IssueService(db_session).update(test_issue, IssueUpdate(title="", location="  ", status="Resolved"))

        assert test_issue.title == "Broken streetlight"
        assert test_issue.location == "12.9716,77.5946"
        assert test_issue.status == "Resolved"

    @pytest.mark.asyncio
    async def test_toggle_endorsement(
        self, db_session: AsyncSession, test_issue: Issue, other_citizen: Account
    ):
        """Test toggling twice restores the original state."""
        service = IssueService(db_session)
        issue = await service.get_or_404(test_issue.id)

        assert await service.toggle_endorsement(issue, other_citizen) == 1
        assert issue.is_endorsed_by(other_citizen.id) is True
        assert await service.toggle_endorsement(issue, other_citizen) == 0
        assert issue.is_endorsed_by(other_citizen.id) is False

    @pytest.mark.asyncio
    async def test_is_owner(
        self, db_session: AsyncSession, test_issue: Issue, test_citizen: Account, other_citizen: Account
    ):
        service = IssueService(db_session)
        assert service.is_owner(test_issue, test_citizen.id) is True
        assert service.is_owner(test_issue, other_citizen.id) is False
