"""
Google Sign-In ID token verification.

The assertion's RS256 signature is checked against Google's published JWKS,
which `PyJWKClient` fetches and caches.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

import jwt

from authsvc.auth.errors import ExternalIdentityError
from authsvc.config import Settings

GOOGLE_ISSUERS = frozenset({"accounts.google.com", "https://accounts.google.com"})


@dataclass(frozen=True)
class VerifiedClaims:
    """Normalized claim set extracted from a verified assertion."""

    email: str
    email_verified: bool
    name: str | None = None
    picture: str | None = None
    gender: str | None = None


class IdentityVerifier(Protocol):
    async def verify(self, assertion: str) -> VerifiedClaims: ...


class SigningKeySource(Protocol):
    def get_signing_key_from_jwt(self, token: str) -> Any: ...  # noqa: ANN401


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class GoogleIdentityVerifier:
    """Verifies Google ID tokens for one OAuth client ID."""

    def __init__(
        self,
        client_id: str,
        *,
        jwks_url: str = "https://www.googleapis.com/oauth2/v3/certs",
        issuers: frozenset[str] = GOOGLE_ISSUERS,
        key_source: SigningKeySource | None = None,
    ) -> None:
        self.client_id = client_id
        self.issuers = issuers
        self._keys = key_source or jwt.PyJWKClient(jwks_url, cache_keys=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> GoogleIdentityVerifier:
        return cls(settings.google_client_id, jwks_url=settings.google_jwks_url)

    async def verify(self, assertion: str) -> VerifiedClaims:
        """
        Verify signature, audience, expiry and issuer of an ID token.

        Raises:
            ExternalIdentityError: If any check fails or the email claim is absent.
        """
        if not self.client_id:
            msg = "Google client ID is not configured"
            raise ExternalIdentityError(msg)

        try:
            # JWKS lookups may hit the network; keep them off the event loop.
            signing_key = await asyncio.to_thread(self._keys.get_signing_key_from_jwt, assertion)
            payload: dict[str, Any] = jwt.decode(
                assertion,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_id,
                options={"require": ["exp", "iat", "iss", "aud", "sub"]},
            )
        except jwt.PyJWTError as e:
            raise ExternalIdentityError(str(e)) from e

        if payload.get("iss") not in self.issuers:
            msg = f"Unexpected issuer '{payload.get('iss')}'"
            raise ExternalIdentityError(msg)

        email = payload.get("email")
        if not email:
            msg = "Assertion has no email claim"
            raise ExternalIdentityError(msg)

        return VerifiedClaims(
            email=str(email).strip().lower(),
            email_verified=_as_bool(payload.get("email_verified", False)),
            name=payload.get("name"),
            picture=payload.get("picture"),
            gender=payload.get("gender"),
        )
