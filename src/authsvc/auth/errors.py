"""Exceptions raised inside the authentication package.

None of these cross the `IdentityService` boundary: the service converts them
to `AuthFailure` results.
"""

from __future__ import annotations

from authsvc.auth.results import FailureKind


class IdentityError(Exception):
    """A reconciliation rule rejected the request; carries the failure kind."""

    def __init__(self, kind: FailureKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or kind.default_message)


class TokenError(Exception):
    """Base class for session token failures."""


class TokenExpiredError(TokenError):
    """The token signature is valid but its expiry has passed."""


class TokenInvalidError(TokenError):
    """The token is malformed, forged, or missing required claims."""


class ExternalIdentityError(Exception):
    """The third-party identity assertion could not be verified."""
