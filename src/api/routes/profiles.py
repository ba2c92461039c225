"""Profile API routes."""

from fastapi import APIRouter

from src.api.deps import CurrentUser
from src.api.middleware.error_handler import NotFoundError
from src.domain.order_state import Role
from src.schemas.profile import ProfileResponse
from src.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get current user's profile",
    description="Returns the authenticated user's profile with the resolved marketplace role.",
)
async def get_my_profile(user: CurrentUser) -> ProfileResponse:
    """Get the authenticated user's profile.

    Raises:
        NotFoundError: 404 if the user has not registered a profile yet.
    """
    profile = await ProfileService().get_profile(user.user_id)
    if not profile:
        raise NotFoundError("Profile not found")

    return ProfileResponse(**{**profile, "role": Role.parse(profile.get("role")).value})
