"""Login and user profile tables.

Creates `login` (credentials, provider, status) and `user_profile`
(personal details, one row per login).

Revision ID: 001_identity_tables
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_identity_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create login and user_profile."""
    op.create_table(
        "login",
        sa.Column("user_id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=True),
        sa.Column("user_type", sa.String(16), nullable=False, server_default="tenant"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("auth_provider", sa.String(16), nullable=False, server_default="local"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint("username", name="uq_login_username"),
        sa.CheckConstraint(
            "auth_provider IN ('local', 'external', 'both')",
            name="ck_login_auth_provider",
        ),
        sa.CheckConstraint(
            "auth_provider = 'external' OR password_hash IS NOT NULL",
            name="ck_login_password_required",
        ),
    )

    op.create_table(
        "user_profile",
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("login.user_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("full_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("gender", sa.String(1), nullable=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
    )
    op.create_index("ix_user_profile_email", "user_profile", ["email"])


def downgrade() -> None:
    """Drop user_profile and login."""
    op.drop_index("ix_user_profile_email", table_name="user_profile")
    op.drop_table("user_profile")
    op.drop_table("login")
