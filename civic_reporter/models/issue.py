"""Issue model definition."""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from civic_reporter.database import Base
from civic_reporter.models.types import GUID

if TYPE_CHECKING:
    from civic_reporter.models.account import Account


class IssueStatus(str, enum.Enum):
    """Conventional issue status values.

    The status column is free text; these are the values the
    application itself writes and the only ones accepted when strict
    transitions are enabled.
    """

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"


# Allowed transitions when ENFORCE_STATUS_TRANSITIONS is on
VALID_STATUS_TRANSITIONS: dict[IssueStatus, list[IssueStatus]] = {
    IssueStatus.PENDING: [IssueStatus.IN_PROGRESS, IssueStatus.RESOLVED],
    IssueStatus.IN_PROGRESS: [IssueStatus.RESOLVED, IssueStatus.PENDING],
    IssueStatus.RESOLVED: [IssueStatus.IN_PROGRESS],
}


issue_endorsements = Table(
    "issue_endorsements",
    Base.metadata,
    Column(
        "issue_id",
        GUID(),
        ForeignKey("issues.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "account_id",
        GUID(),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Issue(Base):
    """Issue model for citizen reports."""

    __tablename__ = "issues"

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
    )

    # Basic fields
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        index=True,
    )
    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )
    image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=IssueStatus.PENDING.value,
        index=True,
    )
    department: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )

    # Reporter reference (restrict on delete - accounts with reports stay)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    reporter: Mapped["Account"] = relationship(
        "Account",
        lazy="selectin",
        foreign_keys=[reporter_id],
    )
    endorsers: Mapped[list["Account"]] = relationship(
        "Account",
        secondary=issue_endorsements,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Issue(id={self.id}, title={self.title}, status={self.status})>"

    @validates("reporter_id")
    def _validate_reporter(self, key: str, value: uuid.UUID) -> uuid.UUID:
        current = self.__dict__.get("reporter_id")
        if current is not None and current != value:
            raise ValueError("reporter_id cannot be changed once set")
        return value

    @property
    def endorsement_count(self) -> int:
        """Get the number of accounts endorsing the issue."""
        return len(self.endorsers) if self.endorsers else 0

    def is_endorsed_by(self, account_id: uuid.UUID) -> bool:
        """Check whether the account currently endorses the issue."""
        return any(a.id == account_id for a in self.endorsers or [])

    def can_transition_to(self, new_status: str) -> bool:
        """Check if transition to new status is valid under strict rules."""
        if new_status == self.status:
            return True
        try:
            current = IssueStatus(self.status)
            target = IssueStatus(new_status)
        except ValueError:
            return False
        return target in VALID_STATUS_TRANSITIONS.get(current, [])

    def get_valid_transitions(self) -> list[IssueStatus]:
        """Get list of valid status transitions from current status."""
        try:
            return VALID_STATUS_TRANSITIONS.get(IssueStatus(self.status), [])
        except ValueError:
            return []
