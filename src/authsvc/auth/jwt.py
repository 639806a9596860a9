"""
HS256 session token management.

Tokens carry `user_id` plus optional `user_type` and `email` claims. Everything
beyond `user_id` is opaque to the issuer.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from authsvc.auth.errors import TokenExpiredError, TokenInvalidError
from authsvc.config import Settings

DEFAULT_TTL = timedelta(hours=12)


class TokenIssuer:
    """Signs and validates bearer tokens with a server-held secret."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        issuer: str = "authsvc",
        default_ttl: timedelta = DEFAULT_TTL,
    ) -> None:
        if not secret:
            msg = "Token signing secret must not be empty"
            raise ValueError(msg)
        self._secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.default_ttl = default_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            default_ttl=timedelta(minutes=settings.jwt_expire_minutes),
        )

    def issue(self, claims: dict[str, Any], ttl: timedelta | None = None) -> str:
        """
        Create a signed token for the given claims.

        Args:
            claims: Must contain `user_id`; other keys are copied as-is.
            ttl: Lifetime of the token, defaults to the configured expiry.

        Returns:
            Encoded JWT string.
        """
        if claims.get("user_id") is None:
            msg = "Token claims must include user_id"
            raise TokenInvalidError(msg)
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            **claims,
            "sub": str(claims["user_id"]),
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.default_ttl),
            "iss": self.issuer,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def validate(self, token: str) -> dict[str, Any]:
        """
        Verify and decode a token.

        Raises:
            TokenExpiredError: If the token has expired.
            TokenInvalidError: If the signature, issuer or claims are invalid.
        """
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            msg = "Token has expired"
            raise TokenExpiredError(msg) from None
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(str(e)) from e

        if payload.get("user_id") is None:
            msg = "Token is missing the user_id claim"
            raise TokenInvalidError(msg)
        return payload
