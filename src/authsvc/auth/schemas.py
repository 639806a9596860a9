"""Request/response schemas for authentication endpoints.

Request fields are optional at the schema level: missing or empty values are
reported by the identity service as MISSING_FIELDS (400), not as 422.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class RegisterRequest(BaseModel):
    """Email + password registration."""

    full_name: str | None = None
    gender: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ExternalLoginRequest(BaseModel):
    """Google Sign-In; accepts `assertion_token` or the legacy `id_token` key."""

    assertion_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("assertion_token", "id_token"),
    )


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    message: str
    token: str


class ErrorResponse(BaseModel):
    error: str
    code: str | None = None


class ProfileResponse(BaseModel):
    message: str
    profile: dict[str, Any]
