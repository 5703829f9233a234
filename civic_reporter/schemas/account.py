"""Account schemas for responses."""

import uuid
from datetime import datetime
from typing import Optional

from civic_reporter.models.account import AccountRole
from civic_reporter.schemas.common import BaseSchema


class AccountSummary(BaseSchema):
    """Minimal account summary for embedding in other responses."""

    id: uuid.UUID
    email: str


class AccountResponse(BaseSchema):
    """Schema for account profile response."""

    id: uuid.UUID
    email: str
    role: AccountRole
    department: Optional[str] = None
    points: int
    level: str
    badges: list[str]
    created_at: datetime
