"""Parameterized queries against the login and user_profile tables.

All functions take the caller's session and never commit; transaction scope is
owned by the caller (see `Database.transaction`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from authsvc.db.models import Account, Profile

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def find_account_by_profile_email(db: AsyncSession, email: str) -> tuple[Account, Profile] | None:
    """Account and profile for a profile email (used for existence and merge checks)."""
    result = await db.execute(
        select(Account, Profile)
        .join(Profile, Profile.user_id == Account.user_id)
        .where(Profile.email == email)
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1]


async def find_active_login(db: AsyncSession, username: str) -> tuple[Account, Profile | None] | None:
    """Active account with this username, left-joined with its profile."""
    result = await db.execute(
        select(Account, Profile)
        .outerjoin(Profile, Profile.user_id == Account.user_id)
        .where(Account.username == username)
        .where(Account.is_active.is_(True))
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1]


async def get_profile_with_account(db: AsyncSession, user_id: int) -> tuple[Profile, Account] | None:
    """Profile joined to its account, or None."""
    result = await db.execute(
        select(Profile, Account)
        .join(Account, Account.user_id == Profile.user_id)
        .where(Profile.user_id == user_id)
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def insert_account(
    db: AsyncSession,
    *,
    username: str,
    password_hash: str | None,
    user_type: str,
    auth_provider: str,
    is_active: bool = True,
) -> Account:
    """Insert a login row and flush so the generated user_id is populated."""
    account = Account(
        username=username,
        password_hash=password_hash,
        user_type=user_type,
        auth_provider=auth_provider,
        is_active=is_active,
    )
    db.add(account)
    await db.flush()
    return account


async def insert_profile(
    db: AsyncSession,
    *,
    user_id: int,
    full_name: str,
    email: str,
    gender: str | None,
    profile_image_url: str | None = None,
    phone_number: str | None = None,
    address: str | None = None,
) -> Profile:
    """Insert the profile row paired with an account."""
    profile = Profile(
        user_id=user_id,
        full_name=full_name,
        email=email,
        gender=gender,
        profile_image_url=profile_image_url,
        phone_number=phone_number,
        address=address,
    )
    db.add(profile)
    await db.flush()
    return profile


async def set_auth_provider(db: AsyncSession, account: Account, auth_provider: str) -> None:
    """Change which credential paths can authenticate an account."""
    account.auth_provider = auth_provider
    await db.flush()
