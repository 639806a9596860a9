"""
Explicit outcomes returned by the identity service.

Every operation returns one of `Created`, `LoginOk`, `ProfileFound` or
`AuthFailure`; callers never see store, token or verifier exceptions.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class FailureKind(enum.Enum):
    """Failure kinds with their HTTP status, default error code and message."""

    MISSING_FIELDS = (400, "MISSING_FIELDS", "Missing required fields")
    ACCOUNT_EXISTS = (400, "USER_EXISTS", "Email already exists")
    EXTERNAL_ACCOUNT_EXISTS = (
        400,
        "EXTERNAL_ACCOUNT_EXISTS",
        "Email is registered through Google Sign-In. Log in with Google instead.",
    )
    INVALID_CREDENTIALS = (401, "WRONG_PASSWORD", "Invalid email or password")
    EXTERNAL_ONLY_ACCOUNT = (
        401,
        "EXTERNAL_ONLY_ACCOUNT",
        "This account uses Google Sign-In. Log in with Google instead.",
    )
    NO_PASSWORD_SET = (401, "NO_PASSWORD_SET", "No password is set for this account")
    PROFILE_NOT_FOUND = (404, "USER_NOT_FOUND", "User profile not found")
    PERSISTENCE_ERROR = (500, "DATABASE_ERROR", "Database error")
    TOKEN_ERROR = (500, "JWT_ERROR", "Failed to issue session token")
    EXTERNAL_AUTH_FAILED = (400, "EXTERNAL_AUTH_FAILED", "Google authentication failed.")
    EMAIL_NOT_VERIFIED = (403, "EMAIL_NOT_VERIFIED", "Email not verified by Google.")
    ACCOUNT_DISABLED = (403, "ACCOUNT_DISABLED", "This account has been deactivated.")

    def __init__(self, status: int, code: str, default_message: str) -> None:
        self.status = status
        self.default_code = code
        self.default_message = default_message


@dataclass(frozen=True)
class Created:
    user_id: int
    message: str = "User registered successfully"
    status: int = 201


@dataclass(frozen=True)
class LoginOk:
    user_id: int
    token: str
    message: str = "Login successful"
    status: int = 200


@dataclass(frozen=True)
class ProfileFound:
    profile: dict[str, Any] = field(default_factory=dict)
    message: str = "success"
    status: int = 200


@dataclass(frozen=True)
class AuthFailure:
    kind: FailureKind
    message: str
    code: str

    @classmethod
    def of(cls, kind: FailureKind, message: str | None = None, code: str | None = None) -> AuthFailure:
        return cls(kind=kind, message=message or kind.default_message, code=code or kind.default_code)

    @property
    def status(self) -> int:
        return self.kind.status
