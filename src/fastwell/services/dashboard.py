"""Load fasting history and run the scoring engine for one user."""

from datetime import datetime, timedelta

from ..db.repositories import FastingSessionRepository
from ..models.challenges import ScoreSummary, WeeklyChallenges
from ..models.timestamps import as_aware, utc_now
from .scoring import LONG_WINDOW_DAYS, compute_score, compute_weekly_challenges

# Extra days so fasts that started before the window but ended inside it count
CHALLENGE_HISTORY_DAYS = 10


async def load_weekly_challenges(
    fasts: FastingSessionRepository, user_id: str, now: datetime | None = None
) -> WeeklyChallenges:
    now = as_aware(now) if now else utc_now()
    history = await fasts.get_completed_since(user_id, now - timedelta(days=CHALLENGE_HISTORY_DAYS))
    return compute_weekly_challenges(history, now)


async def load_score(
    fasts: FastingSessionRepository, user_id: str, now: datetime | None = None
) -> ScoreSummary:
    now = as_aware(now) if now else utc_now()
    history = await fasts.get_completed_since(user_id, now - timedelta(days=LONG_WINDOW_DAYS))
    return compute_score(history, now)
