"""ORM models for the login (credential) and user_profile tables."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authsvc.db.base import Base

# BIGINT only autoincrements on SQLite when declared as INTEGER PRIMARY KEY.
_ID_TYPE = BigInteger().with_variant(Integer(), "sqlite")


class UserType(str, enum.Enum):
    ADMIN = "admin"
    OWNER = "owner"
    TENANT = "tenant"
    AGENT = "agent"


class AuthProvider(str, enum.Enum):
    """Which credential paths can authenticate an account."""

    LOCAL = "local"
    EXTERNAL = "external"
    BOTH = "both"


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class Account(Base):
    """Maps to the 'login' table."""

    __tablename__ = "login"
    __table_args__ = (
        CheckConstraint(
            "auth_provider IN ('local', 'external', 'both')",
            name="ck_login_auth_provider",
        ),
        CheckConstraint(
            "auth_provider = 'external' OR password_hash IS NOT NULL",
            name="ck_login_password_required",
        ),
    )

    user_id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)
    user_type: Mapped[str] = mapped_column(String(16), nullable=False, default=UserType.TENANT.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    auth_provider: Mapped[str] = mapped_column(
        String(16), nullable=False, default=AuthProvider.LOCAL.value
    )
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )

    profile: Mapped[Profile | None] = relationship("Profile", back_populates="account", uselist=False)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class Profile(Base):
    """Maps to the 'user_profile' table, one row per account."""

    __tablename__ = "user_profile"

    user_id: Mapped[int] = mapped_column(
        _ID_TYPE, ForeignKey("login.user_id", ondelete="CASCADE"), primary_key=True
    )
    full_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(1), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    account: Mapped[Account] = relationship("Account", back_populates="profile")
