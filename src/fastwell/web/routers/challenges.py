"""Weekly challenges and fasting score routes."""

from fastapi import APIRouter, Depends

from ...auth import Identity
from ...db.repositories import FastingSessionRepository
from ...services.dashboard import load_score, load_weekly_challenges
from ..dependencies import get_current_identity, get_fasting_repo

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.get("/weekly")
async def weekly_challenges(
    identity: Identity = Depends(get_current_identity),
    fasts: FastingSessionRepository = Depends(get_fasting_repo),
):
    """The seven challenge slots for the week ending today."""
    challenges = await load_weekly_challenges(fasts, identity.id)
    return challenges.to_dict()


@router.get("/score")
async def fasting_score(
    identity: Identity = Depends(get_current_identity),
    fasts: FastingSessionRepository = Depends(get_fasting_repo),
):
    """The 1-10 fasting score over the last 30 days."""
    score = await load_score(fasts, identity.id)
    return score.to_dict()
