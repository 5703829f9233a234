"""Service layer for business logic."""

from civic_reporter.services.account import AccountService
from civic_reporter.services.auth import AuthService
from civic_reporter.services.issue import IssueService
from civic_reporter.services.notifier import Notifier, get_notifier

__all__ = [
    "AccountService",
    "AuthService",
    "IssueService",
    "Notifier",
    "get_notifier",
]
