"""Initial migration - create accounts, issues and endorsements.

Revision ID: 001
Revises: None
Create Date: 2024-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all database tables."""
    # Create account_role enum
    account_role_enum = postgresql.ENUM(
        "citizen", "solver", "admin",
        name="account_role",
        create_type=True,
    )
    account_role_enum.create(op.get_bind(), checkfirst=True)

    # Create accounts table
    op.create_table(
        "accounts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "role",
            postgresql.ENUM("citizen", "solver", "admin", name="account_role", create_type=False),
            nullable=False,
            server_default="citizen",
        ),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("level", sa.String(20), nullable=False, server_default="Bronze"),
        sa.Column("badges", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_accounts_id", "accounts", ["id"])
    op.create_index("ix_accounts_email", "accounts", ["email"])

    # Create issues table
    op.create_table(
        "issues",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("location", sa.String(255), nullable=False, server_default=""),
        sa.Column("image", sa.String(255), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="Pending"),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("reporter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["reporter_id"], ["accounts.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_issues_id", "issues", ["id"])
    op.create_index("ix_issues_title", "issues", ["title"])
    op.create_index("ix_issues_status", "issues", ["status"])
    op.create_index("ix_issues_department", "issues", ["department"])
    op.create_index("ix_issues_reporter_id", "issues", ["reporter_id"])

    # Create issue_endorsements table (one row per account and issue)
    op.create_table(
        "issue_endorsements",
        sa.Column("issue_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint("issue_id", "account_id"),
        sa.ForeignKeyConstraint(["issue_id"], ["issues.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
    )


def downgrade() -> None:
    """Drop all database tables."""
    # Drop tables in reverse order (respect foreign keys)
    op.drop_table("issue_endorsements")

    op.drop_index("ix_issues_reporter_id", "issues")
    op.drop_index("ix_issues_department", "issues")
    op.drop_index("ix_issues_status", "issues")
    op.drop_index("ix_issues_title", "issues")
    op.drop_index("ix_issues_id", "issues")
    op.drop_table("issues")

    op.drop_index("ix_accounts_email", "accounts")
    op.drop_index("ix_accounts_id", "accounts")
    op.drop_table("accounts")

    # Drop enums
    postgresql.ENUM(name="account_role").drop(op.get_bind(), checkfirst=True)
