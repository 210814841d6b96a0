"""User Routes

- GET /api/user/me: Current user profile
"""

from fastapi import APIRouter, Depends

from signin_service.api.dependencies import require_authentication
from signin_service.domain.models import UserProfile, UserRecord

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/me", response_model=UserProfile)
async def get_current_user_profile(
    current_user: UserRecord = Depends(require_authentication),
) -> UserProfile:
    """Return the profile of the signed-in user"""
    return UserProfile.from_record(current_user)
