"""SQLAlchemy models for the Civic Issue Reporter."""

from civic_reporter.models.account import Account, AccountLevel, AccountRole
from civic_reporter.models.issue import (
    VALID_STATUS_TRANSITIONS,
    Issue,
    IssueStatus,
    issue_endorsements,
)

__all__ = [
    "Account",
    "AccountLevel",
    "AccountRole",
    "Issue",
    "IssueStatus",
    "VALID_STATUS_TRANSITIONS",
    "issue_endorsements",
]
