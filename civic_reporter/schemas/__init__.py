"""Pydantic schemas for request/response validation."""

from civic_reporter.schemas.account import AccountResponse, AccountSummary
from civic_reporter.schemas.auth import SessionContext
from civic_reporter.schemas.common import (
    ErrorEnvelope,
    HealthResponse,
    MessageResponse,
)
from civic_reporter.schemas.issue import (
    EndorsementResponse,
    IssueCreate,
    IssueResponse,
    IssueUpdate,
    ProfileResponse,
    ReportPoint,
    SolverDashboardResponse,
)

__all__ = [
    # Session
    "SessionContext",
    # Account
    "AccountResponse",
    "AccountSummary",
    # Issue
    "IssueCreate",
    "IssueUpdate",
    "IssueResponse",
    "ReportPoint",
    "EndorsementResponse",
    "ProfileResponse",
    "SolverDashboardResponse",
    # Common
    "ErrorEnvelope",
    "HealthResponse",
    "MessageResponse",
]
