"""
User Profile API

Endpoints:
- GET    /api/users/me - Current user's profile row
- PATCH  /api/users/me - Update name / email
- DELETE /api/users/me - Delete the profile and everything it owns
- PUT    /api/users/me/plan - Change plan (free, pro, enterprise)
- GET    /api/users/me/stats - Niche, site and content counts
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from nichelab.auth.dependencies import get_current_user
from nichelab.services import UserService
from .common import envelope_response, get_user_service

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)],  # All endpoints require authentication
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class UpdateProfileRequest(BaseModel):
    """Request to update the user profile."""
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)


class UpdatePlanRequest(BaseModel):
    plan_type: Literal["free", "pro", "enterprise"]


# =============================================================================
# USER PROFILE ENDPOINTS
# =============================================================================

@router.get("/me")
def get_current_user_profile(service: UserService = Depends(get_user_service)):
    """Get the current user's profile (created on first authenticated request)."""
    return envelope_response(service.get_current_profile())


@router.patch("/me")
def update_current_user_profile(
    request: UpdateProfileRequest,
    service: UserService = Depends(get_user_service),
):
    return envelope_response(service.update_profile(request.model_dump(exclude_unset=True)))


@router.delete("/me")
def delete_current_user(service: UserService = Depends(get_user_service)):
    """Delete the profile row; niches, sites, keywords and content go with it."""
    return envelope_response(service.delete_account())


@router.put("/me/plan")
def update_plan(request: UpdatePlanRequest, service: UserService = Depends(get_user_service)):
    return envelope_response(service.update_plan(request.plan_type))


@router.get("/me/stats")
async def user_stats(service: UserService = Depends(get_user_service)):
    return envelope_response(await service.get_user_stats())
