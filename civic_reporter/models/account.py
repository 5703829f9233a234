"""Account model definition."""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from civic_reporter.database import Base
from civic_reporter.models.types import GUID


class AccountRole(str, enum.Enum):
    """Account roles enumeration.

    Stored for display only. Solver and admin rights come from the
    session record written at elevation time.
    """

    CITIZEN = "citizen"
    SOLVER = "solver"
    ADMIN = "admin"


class AccountLevel(str, enum.Enum):
    """Gamification level tiers."""

    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"


class Account(Base):
    """Account model holding credentials and gamification state."""

    __tablename__ = "accounts"

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        primary_key=True,
        default=uuid.uuid4,
        index=True,
    )

    # Credentials
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Role and department
    role: Mapped[AccountRole] = mapped_column(
        Enum(AccountRole, name="account_role", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=AccountRole.CITIZEN,
    )
    department: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    # Gamification
    points: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    level: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountLevel.BRONZE.value,
    )
    badges: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email}, level={self.level})>"
