"""User profile routes."""

from fastapi import APIRouter, Depends

from ...auth import Identity
from ...db.repositories import UserProfileRepository
from ..dependencies import get_current_identity, get_profile_repo
from ..schemas import AIProfileBody, FastingGoalBody, MealPreferencesBody

router = APIRouter(prefix="/profile", tags=["profile"])


async def _current_profile(identity: Identity, profiles: UserProfileRepository) -> dict:
    profile = await profiles.ensure_profile(identity.id, identity.email, identity.display_name)
    return profile.to_dict()


@router.get("")
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Get the signed-in user's profile."""
    return await _current_profile(identity, profiles)


@router.put("/fasting-goal")
async def update_fasting_goal(
    body: FastingGoalBody,
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Set the default fasting goal in hours."""
    await profiles.update_fasting_goal(identity.id, body.fasting_goal_hours)
    return await _current_profile(identity, profiles)


@router.put("/ai-profile")
async def update_ai_profile(
    body: AIProfileBody,
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Save the details used for fasting-time suggestions."""
    await profiles.update_ai_profile(identity.id, body.to_model())
    return await _current_profile(identity, profiles)


@router.put("/meal-preferences")
async def update_meal_preferences(
    body: MealPreferencesBody,
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    await profiles.update_meal_preferences(identity.id, body.to_model())
    return await _current_profile(identity, profiles)
