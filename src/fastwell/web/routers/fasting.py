"""Fasting session routes."""

from fastapi import APIRouter, Depends, Query

from ...auth import Identity
from ...db.repositories import FASTING_SESSIONS, FastingSessionRepository, UserProfileRepository
from ...exceptions import DocumentNotFoundError
from ...models.fasting import FastingSession, resolve_goal_hours
from ...models.timestamps import utc_now
from ..dependencies import get_current_identity, get_fasting_repo, get_profile_repo
from ..schemas import EndFastBody, StartFastBody

router = APIRouter(prefix="/fasts", tags=["fasting"])


async def _profile_goal(identity: Identity, profiles: UserProfileRepository) -> float | None:
    profile = await profiles.get_user_profile(identity.id)
    return profile.fasting_goal_hours if profile else None


def _timer_view(session: FastingSession, profile_goal: float | None) -> dict:
    """Session plus the live timer values shown while fasting."""
    now = utc_now()
    return {
        **session.to_client_dict(),
        "effectiveGoalHours": resolve_goal_hours(session.goal_duration_hours, profile_goal),
        "elapsedSeconds": int(session.elapsed(now).total_seconds()),
        "remainingSeconds": int(session.remaining(now, profile_goal).total_seconds()),
        "progressPercentage": round(session.progress_percentage(now, profile_goal), 1),
    }


@router.post("", status_code=201)
async def start_fast(
    body: StartFastBody | None = None,
    identity: Identity = Depends(get_current_identity),
    fasts: FastingSessionRepository = Depends(get_fasting_repo),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Start a fast. Without an explicit goal the profile goal is used."""
    goal = body.goal_duration_hours if body else None
    if goal is None:
        goal = resolve_goal_hours(None, await _profile_goal(identity, profiles))

    session_id = await fasts.start_new_fast(identity.id, goal)
    session = await fasts.get(session_id)
    return _timer_view(session, goal)


@router.get("/active")
async def active_fast(
    identity: Identity = Depends(get_current_identity),
    fasts: FastingSessionRepository = Depends(get_fasting_repo),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Get the running fast, or null when not fasting."""
    session = await fasts.get_active_fast(identity.id)
    if session is None:
        return {"active": None}
    return {"active": _timer_view(session, await _profile_goal(identity, profiles))}


@router.get("/history")
async def fasting_history(
    count: int = Query(7, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    fasts: FastingSessionRepository = Depends(get_fasting_repo),
):
    """Latest completed fasts, newest first."""
    history = await fasts.get_fasting_history(identity.id, count)
    return {"fasts": [session.to_client_dict() for session in history]}


@router.post("/{session_id}/end")
async def end_fast(
    session_id: str,
    body: EndFastBody | None = None,
    identity: Identity = Depends(get_current_identity),
    fasts: FastingSessionRepository = Depends(get_fasting_repo),
):
    """Complete a fast, recording its duration."""
    session = await fasts.get(session_id)
    if session is None or session.user_id != identity.id:
        raise DocumentNotFoundError(FASTING_SESSIONS, session_id)

    ended = await fasts.end_current_fast(session_id, body.notes if body else None)
    return {
        **ended.to_client_dict(),
        "metGoal": ended.met_goal(),
    }
