"""Issue schemas for request/response validation."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from civic_reporter.schemas.account import AccountResponse, AccountSummary
from civic_reporter.schemas.common import BaseSchema
from civic_reporter.utils.text_sanitizer import clean_text


class IssueCreate(BaseSchema):
    """Schema for creating a new issue."""

    title: str = Field(..., min_length=1, max_length=200)
    location: str = Field(default="", max_length=255)
    status: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=100)

    @field_validator("title", "location", "status", "department", mode="before")
    @classmethod
    def strip_markup(cls, v: Any) -> Any:
        """Remove HTML from plain text fields before length checks."""
        if not isinstance(v, str):
            return v
        return clean_text(v) or ""


class IssueUpdate(BaseSchema):
    """Schema for updating an issue. Empty fields are left unchanged."""

    title: Optional[str] = Field(default=None, max_length=200)
    location: Optional[str] = Field(default=None, max_length=255)
    status: Optional[str] = Field(default=None, max_length=50)

    @field_validator("title", "location", "status", mode="before")
    @classmethod
    def strip_markup(cls, v: Any) -> Any:
        """Remove HTML; blank values count as not provided."""
        if not isinstance(v, str):
            return v
        return clean_text(v)

    def changes(self) -> dict[str, str]:
        """Fields that carry a new value."""
        return {k: v for k, v in self.model_dump().items() if v}


class IssueResponse(BaseSchema):
    """Schema for issue response."""

    id: uuid.UUID
    title: str
    location: str
    image: Optional[str]
    status: str
    department: Optional[str]
    reporter: Optional[AccountSummary]
    created_at: datetime
    endorsement_count: int = Field(default=0, description="Number of endorsements")


class ReportPoint(BaseSchema):
    """Issue as plotted on the map."""

    id: uuid.UUID
    title: str
    status: str
    reporter_id: uuid.UUID
    latitude: Optional[float]
    longitude: Optional[float]
    image: Optional[str]
    date_reported: datetime


class EndorsementResponse(BaseSchema):
    """Endorsement count after a toggle."""

    count: int


class ProfileResponse(BaseSchema):
    """Account profile with its own issues."""

    account: AccountResponse
    issues: list[IssueResponse]


class SolverDashboardResponse(BaseSchema):
    """Issues visible to a solver together with the session department."""

    solver: AccountResponse
    department: Optional[str]
    issues: list[IssueResponse]
