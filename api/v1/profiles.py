"""
Profiles API endpoints.

Handles profile management for the signed-in member.
"""

from fastapi import APIRouter, Depends

from api.deps import get_profile_service, require_member
from models.account import Account
from schemas.account import AccountRead, ProfileUpdate
from schemas.responses import StandardSuccessResponse
from services.profile_service import ProfileService

router = APIRouter()


@router.get("", response_model=StandardSuccessResponse)
async def get_profile(account: Account = Depends(require_member)):
    """Get the current member's profile."""
    return {"success": True, "message": "Profil", "data": AccountRead.model_validate(account)}


@router.patch("", response_model=StandardSuccessResponse)
async def update_profile(
    body: ProfileUpdate,
    account: Account = Depends(require_member),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Update the current member's profile.

    - **full_name**: new display name (optional)
    - **avatar_url**: empty string clears the avatar (optional)
    - **profile_attributes**: merged into the stored attributes; null values remove keys
    """
    updated = await profiles.update(
        account,
        full_name=body.full_name,
        avatar_url=body.avatar_url,
        attributes=body.profile_attributes,
    )
    return {"success": True, "message": "Profil diperbarui", "data": AccountRead.model_validate(updated)}
