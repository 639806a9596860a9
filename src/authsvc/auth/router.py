"""Authentication router: register, password login and Google login."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from authsvc.auth.results import AuthFailure
from authsvc.auth.schemas import (
    ErrorResponse,
    ExternalLoginRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
)
from authsvc.auth.service import IdentityService
from authsvc.dependencies import get_identity_service

router = APIRouter(tags=["Authentication"])

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def failure_response(failure: AuthFailure) -> JSONResponse:
    """Render a failure result as `{error, code}` with its HTTP status."""
    return JSONResponse(
        status_code=failure.status,
        content={"error": failure.message, "code": failure.code},
    )


@router.post("/register", status_code=201, response_model=MessageResponse, responses=_ERRORS)
async def register(
    body: RegisterRequest,
    service: IdentityService = Depends(get_identity_service),
) -> MessageResponse | JSONResponse:
    """Register with full name, gender, email and password."""
    result = await service.register(
        full_name=body.full_name,
        gender=body.gender,
        email=body.email,
        password=body.password,
    )
    if isinstance(result, AuthFailure):
        return failure_response(result)
    return MessageResponse(message=result.message)


@router.post("/login", response_model=TokenResponse, responses=_ERRORS)
async def login(
    body: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> TokenResponse | JSONResponse:
    """Log in with email + password."""
    result = await service.login(email=body.email, password=body.password)
    if isinstance(result, AuthFailure):
        return failure_response(result)
    return TokenResponse(message=result.message, token=result.token)


@router.post("/login/external", response_model=TokenResponse, responses=_ERRORS)
@router.post("/login/google", response_model=TokenResponse, responses=_ERRORS, include_in_schema=False)
async def login_external(
    body: ExternalLoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> TokenResponse | JSONResponse:
    """Log in with a Google Sign-In ID token."""
    result = await service.login_with_external_identity(body.assertion_token)
    if isinstance(result, AuthFailure):
        return failure_response(result)
    return TokenResponse(message=result.message, token=result.token)
