"""
Identity reconciliation: registration, password login, Google login, profiles.

One logical user is one `login` row plus one `user_profile` row, keyed by email.
Local registration and Google Sign-In both resolve to that same row: a Google
login for an email that registered with a password upgrades the account's
`auth_provider` to `both` instead of creating a second account.

Each operation returns an explicit result (`authsvc.auth.results`). Store,
token and verifier exceptions are mapped to failure kinds here and never
reach the caller.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any

import jwt
import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authsvc.auth import store
from authsvc.auth.errors import ExternalIdentityError, IdentityError, TokenError
from authsvc.auth.password import hash_password, verify_password
from authsvc.auth.results import (
    AuthFailure,
    Created,
    FailureKind,
    LoginOk,
    ProfileFound,
)
from authsvc.db.models import Account, AuthProvider, Profile, UserType
from authsvc.presence.mirror import PresenceRecord
from authsvc.users.gender import normalize_gender

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from authsvc.auth.google import IdentityVerifier, VerifiedClaims
    from authsvc.auth.jwt import TokenIssuer
    from authsvc.database import Database
    from authsvc.presence.mirror import PresenceMirror

logger = structlog.get_logger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _presence_record(account: Account, profile: Profile | None) -> PresenceRecord:
    return PresenceRecord(
        user_id=account.user_id,
        display_name=profile.full_name if profile else "",
        photo_url=profile.profile_image_url if profile else None,
        phone=profile.phone_number if profile else None,
        user_type=account.user_type,
        auth_provider=account.auth_provider,
    )


class IdentityService:
    """Creates, matches and merges accounts across password and Google logins."""

    def __init__(
        self,
        db: Database,
        tokens: TokenIssuer,
        verifier: IdentityVerifier,
        presence: PresenceMirror,
    ) -> None:
        self._db = db
        self._tokens = tokens
        self._verifier = verifier
        self._presence = presence

    # -----------------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------------

    async def register(
        self,
        full_name: str | None,
        gender: str | None,
        email: str | None,
        password: str | None,
    ) -> Created | AuthFailure:
        """Register a local (password) account and its profile atomically."""
        if not full_name or not gender or not email or not password:
            logger.warning("register_missing_fields")
            return AuthFailure.of(FailureKind.MISSING_FIELDS)

        email = normalize_email(email)
        try:
            async with self._db.transaction() as db:
                account, profile = await self._create_local_account(db, full_name, gender, email, password)
        except IdentityError as e:
            logger.info("register_rejected", email=email, reason=e.kind.name)
            return AuthFailure.of(e.kind, str(e))
        except SQLAlchemyError:
            logger.error("register_db_error", email=email, exc_info=True)
            return AuthFailure.of(FailureKind.PERSISTENCE_ERROR)

        await self._presence.record_registration(_presence_record(account, profile))
        logger.info("user_created", user_id=account.user_id, email=email, method="local")
        return Created(user_id=account.user_id)

    async def _create_local_account(
        self,
        db: AsyncSession,
        full_name: str,
        gender: str,
        email: str,
        password: str,
    ) -> tuple[Account, Profile]:
        existing = await store.find_account_by_profile_email(db, email)
        if existing is not None:
            account, _ = existing
            if account.auth_provider == AuthProvider.EXTERNAL.value:
                raise IdentityError(FailureKind.EXTERNAL_ACCOUNT_EXISTS)
            raise IdentityError(FailureKind.ACCOUNT_EXISTS)

        password_hash = hash_password(password)
        try:
            account = await store.insert_account(
                db,
                username=email,
                password_hash=password_hash,
                user_type=UserType.TENANT.value,
                auth_provider=AuthProvider.LOCAL.value,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email.
            raise IdentityError(FailureKind.ACCOUNT_EXISTS) from e

        if account.user_id is None:
            logger.error("register_missing_user_id", email=email)
            raise IdentityError(FailureKind.PERSISTENCE_ERROR, "Failed to register user")

        normalized_gender = normalize_gender(gender)
        logger.debug("gender_normalized", raw=gender, normalized=normalized_gender)
        profile = await store.insert_profile(
            db,
            user_id=account.user_id,
            full_name=full_name,
            email=email,
            gender=normalized_gender,
        )
        return account, profile

    # -----------------------------------------------------------------------
    # Password login
    # -----------------------------------------------------------------------

    async def login(self, email: str | None, password: str | None) -> LoginOk | AuthFailure:
        """Authenticate an active account by email and password."""
        if not email or not password:
            logger.warning("login_missing_fields")
            return AuthFailure.of(FailureKind.MISSING_FIELDS, "Email and password are required")

        email = normalize_email(email)
        try:
            async with self._db.session() as db:
                found = await store.find_active_login(db, email)
        except SQLAlchemyError:
            logger.error("login_db_error", email=email, exc_info=True)
            return AuthFailure.of(FailureKind.PERSISTENCE_ERROR)

        if found is None:
            logger.warning("login_failed", email=email, reason="user_not_found")
            return AuthFailure.of(FailureKind.INVALID_CREDENTIALS, code="USER_NOT_FOUND")

        account, profile = found
        if account.password_hash is None:
            logger.warning("login_failed", user_id=account.user_id, reason="no_password", provider=account.auth_provider)
            if account.auth_provider == AuthProvider.EXTERNAL.value:
                return AuthFailure.of(FailureKind.EXTERNAL_ONLY_ACCOUNT)
            return AuthFailure.of(FailureKind.NO_PASSWORD_SET)

        if not verify_password(password, account.password_hash):
            logger.warning("login_failed", user_id=account.user_id, reason="wrong_password")
            return AuthFailure.of(FailureKind.INVALID_CREDENTIALS, code="WRONG_PASSWORD")

        await self._presence.mark_online(_presence_record(account, profile))

        token = self._issue_token(account)
        if token is None:
            return AuthFailure.of(FailureKind.TOKEN_ERROR)
        logger.info("user_logged_in", user_id=account.user_id, method="local")
        return LoginOk(user_id=account.user_id, token=token)

    # -----------------------------------------------------------------------
    # Google login
    # -----------------------------------------------------------------------

    async def login_with_external_identity(self, assertion: str | None) -> LoginOk | AuthFailure:
        """
        Log in with a Google ID token, creating or merging the account as needed.

        - unknown email: new `external` account and profile from the claims
        - `local` account: upgraded to `both`, password login keeps working
        - `external` or `both`: matched without mutation
        - deactivated account: rejected, nothing is changed
        """
        if not assertion:
            logger.warning("external_login_missing_token")
            return AuthFailure.of(FailureKind.MISSING_FIELDS, "Missing Google id_token")

        try:
            claims = await self._verifier.verify(assertion)
        except ExternalIdentityError as e:
            logger.warning("external_auth_failed", error=str(e))
            return AuthFailure.of(FailureKind.EXTERNAL_AUTH_FAILED)

        claims = replace(claims, email=normalize_email(claims.email))
        if not claims.email_verified:
            logger.warning("external_email_not_verified", email=claims.email)
            return AuthFailure.of(FailureKind.EMAIL_NOT_VERIFIED)

        try:
            account, profile = await self._reconcile_external(claims)
        except IdentityError as e:
            logger.warning("external_login_rejected", email=claims.email, reason=e.kind.name)
            return AuthFailure.of(e.kind, str(e))
        except Exception:
            logger.error("external_login_error", email=claims.email, exc_info=True)
            return AuthFailure.of(FailureKind.EXTERNAL_AUTH_FAILED)

        await self._presence.mark_online(_presence_record(account, profile))

        token = self._issue_token(account)
        if token is None:
            return AuthFailure.of(FailureKind.TOKEN_ERROR)
        logger.info("user_logged_in", user_id=account.user_id, method="external", provider=account.auth_provider)
        return LoginOk(user_id=account.user_id, token=token, message="Google login successful")

    async def _reconcile_external(self, claims: VerifiedClaims) -> tuple[Account, Profile]:
        try:
            async with self._db.transaction() as db:
                return await self._match_or_create_external(db, claims)
        except IntegrityError:
            # A concurrent first login created the account; the retry matches it.
            logger.info("external_login_retry", email=claims.email)
        async with self._db.transaction() as db:
            return await self._match_or_create_external(db, claims)

    async def _match_or_create_external(
        self,
        db: AsyncSession,
        claims: VerifiedClaims,
    ) -> tuple[Account, Profile]:
        existing = await store.find_account_by_profile_email(db, claims.email)
        if existing is not None:
            account, profile = existing
            if not account.is_active:
                raise IdentityError(FailureKind.ACCOUNT_DISABLED)
            if account.auth_provider == AuthProvider.LOCAL.value:
                await store.set_auth_provider(db, account, AuthProvider.BOTH.value)
                logger.info("account_linked", user_id=account.user_id, provider=AuthProvider.BOTH.value)
            return account, profile

        account = await store.insert_account(
            db,
            username=claims.email,
            password_hash=None,
            user_type=UserType.TENANT.value,
            auth_provider=AuthProvider.EXTERNAL.value,
        )
        if account.user_id is None:
            raise IdentityError(FailureKind.PERSISTENCE_ERROR, "Failed to register user")
        profile = await store.insert_profile(
            db,
            user_id=account.user_id,
            full_name=claims.name or "",
            email=claims.email,
            gender=normalize_gender(claims.gender),
            profile_image_url=claims.picture,
        )
        logger.info("user_created", user_id=account.user_id, email=claims.email, method="external")
        return account, profile

    # -----------------------------------------------------------------------
    # Profiles
    # -----------------------------------------------------------------------

    async def get_profile(self, user_id: int) -> ProfileFound | AuthFailure:
        """Profile fields plus the account's user_type and auth_provider."""
        try:
            async with self._db.session() as db:
                found = await store.get_profile_with_account(db, user_id)
        except SQLAlchemyError:
            logger.error("profile_db_error", user_id=user_id, exc_info=True)
            return AuthFailure.of(FailureKind.PERSISTENCE_ERROR)

        if found is None:
            return AuthFailure.of(FailureKind.PROFILE_NOT_FOUND)

        profile, account = found
        return ProfileFound(
            profile={
                "full_name": profile.full_name,
                "phone_number": profile.phone_number,
                "email": profile.email,
                "address": profile.address,
                "gender": profile.gender,
                "profile_image_url": profile.profile_image_url,
                "user_type": account.user_type,
                "auth_provider": account.auth_provider,
            }
        )

    # -----------------------------------------------------------------------
    # Tokens
    # -----------------------------------------------------------------------

    def _issue_token(self, account: Account) -> str | None:
        claims: dict[str, Any] = {
            "user_id": account.user_id,
            "user_type": account.user_type,
            "email": account.username,
        }
        try:
            return self._tokens.issue(claims)
        except (TokenError, jwt.PyJWTError):
            logger.error("token_issue_failed", user_id=account.user_id, exc_info=True)
            return None
