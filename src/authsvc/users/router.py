"""Profile router: the authenticated user's own profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from authsvc.auth.dependencies import get_current_user_id
from authsvc.auth.results import AuthFailure
from authsvc.auth.router import failure_response
from authsvc.auth.schemas import ErrorResponse, ProfileResponse
from authsvc.auth.service import IdentityService
from authsvc.dependencies import get_identity_service

router = APIRouter(tags=["Users"])


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
@router.get("/dashboard", response_model=ProfileResponse, include_in_schema=False)
async def get_profile(
    user_id: int = Depends(get_current_user_id),
    service: IdentityService = Depends(get_identity_service),
) -> ProfileResponse | JSONResponse:
    """Return the profile of the user the bearer token was issued for."""
    result = await service.get_profile(user_id)
    if isinstance(result, AuthFailure):
        return failure_response(result)
    return ProfileResponse(message=result.message, profile=result.profile)
