"""FastAPI authentication dependencies."""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from authsvc.auth.errors import TokenError
from authsvc.auth.jwt import TokenIssuer
from authsvc.dependencies import get_token_issuer

logger = structlog.get_logger()

_bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> int:
    """
    Verify the bearer token and return the user_id it was issued for.

    Raises 403 when the header is missing or malformed, or the token is
    invalid or expired.
    """
    if credentials is None:
        logger.warning("authorization_missing")
        raise HTTPException(status_code=403, detail="Access denied, no token provided")

    try:
        claims = tokens.validate(credentials.credentials)
    except TokenError as e:
        logger.warning("token_rejected", error=str(e))
        raise HTTPException(status_code=403, detail="Invalid or expired token") from e

    try:
        return int(claims["user_id"])
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=403, detail="Invalid or expired token") from e
