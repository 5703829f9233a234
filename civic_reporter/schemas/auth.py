"""Session schemas."""

import uuid
from typing import Optional

from pydantic import BaseModel


class SessionContext(BaseModel):
    """Identity and role flags resolved from the session cookie."""

    session_id: str
    account_id: uuid.UUID
    is_solver: bool = False
    is_admin: bool = False
    department: Optional[str] = None

    @classmethod
    def from_record(cls, session_id: str, record: dict[str, str]) -> "SessionContext":
        """Build a context from a Redis session hash."""
        return cls(
            session_id=session_id,
            account_id=uuid.UUID(record["account_id"]),
            is_solver=record.get("is_solver") == "1",
            is_admin=record.get("is_admin") == "1",
            department=record.get("department") or None,
        )
