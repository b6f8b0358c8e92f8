"""Weekly challenge and fasting score computation.

Pure functions over a list of completed fasting sessions for one user.
Nothing here touches the store; callers fetch the history first
(at least the last 10 days for challenges, 30 days for the score).
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from ..models.challenges import ChallengeDay, ChallengeDayResult, ScoreSummary, WeeklyChallenges
from ..models.fasting import FastingSession
from ..models.timestamps import as_aware, local_day, utc_now

CHALLENGE_DEFINITION: tuple[ChallengeDay, ...] = (
    ChallengeDay("Day 1", 6, 12, 10),
    ChallengeDay("Day 2", 5, 12, 10),
    ChallengeDay("Day 3", 4, 14, 10),
    ChallengeDay("Day 4", 3, 14, 10),
    ChallengeDay("Day 5", 2, 16, 10),
    ChallengeDay("Day 6", 1, 16, 10),
    ChallengeDay("Day 7", 0, 16, 10),
)

SEVEN_DAY_BONUS_POINTS = 50

SHORT_WINDOW_DAYS = 7
LONG_WINDOW_DAYS = 30

MIN_SCORE = 1
MAX_SCORE = 10

# (minimum fasts in the 30-day window, sub-score), highest first
FREQUENCY_THRESHOLDS = ((20, 5), (15, 4), (10, 3), (5, 2))

# (minimum goal-met ratio, sub-score), highest first
CONSISTENCY_THRESHOLDS = ((0.95, 5), (0.8, 4), (0.6, 3), (0.4, 2))

# Fasts exist in the window but none had a goal
NO_GOAL_CONSISTENCY_SCORE = 2

# (minimum fasts in the 7-day window, label), highest first
FREQUENCY_LABELS = ((6, "Excellent"), (4, "High"), (2, "Medium"))
LOWEST_FREQUENCY_LABEL = "Low"


def _reference_day(reference_date: date | datetime | None) -> date:
    if reference_date is None:
        return local_day(utc_now())
    if isinstance(reference_date, datetime):
        return local_day(reference_date)
    return reference_date


def _qualifies(session: FastingSession, target: date, goal_hours: float) -> bool:
    if not session.is_completed or session.end_time is None:
        return False
    if session.actual_duration_minutes is None:
        return False
    return local_day(session.end_time) == target and session.met_goal(goal_hours)


def compute_weekly_challenges(
    history: Iterable[FastingSession],
    reference_date: date | datetime | None = None,
    definition: tuple[ChallengeDay, ...] = CHALLENGE_DEFINITION,
    bonus_points: int = SEVEN_DAY_BONUS_POINTS,
) -> WeeklyChallenges:
    """Evaluate the seven challenge slots against a fasting history.

    Args:
        history: Completed fasting sessions for one user
        reference_date: Day considered "today" (defaults to the current day)
        definition: Challenge slots to evaluate
        bonus_points: Awarded once when every slot is completed

    Returns:
        WeeklyChallenges with slots ordered oldest first
    """
    sessions = list(history)
    today = _reference_day(reference_date)

    days = []
    for slot in definition:
        target = today - timedelta(days=slot.relative_day_index)
        match = next((s for s in sessions if _qualifies(s, target, slot.goal_hours)), None)
        days.append(
            ChallengeDayResult(
                day_label=slot.day_label,
                relative_day_index=slot.relative_day_index,
                target_date=target,
                goal_hours=slot.goal_hours,
                points_possible=slot.points,
                is_completed=match is not None,
                points_earned=slot.points if match else 0,
                fast_duration_met=match.actual_duration_minutes if match else None,
            )
        )

    days.sort(key=lambda d: d.relative_day_index, reverse=True)
    all_done = bool(days) and all(d.is_completed for d in days)

    return WeeklyChallenges(
        days=days,
        bonus_awarded=all_done,
        bonus_points=bonus_points if all_done else 0,
    )


def _within(session: FastingSession, reference: datetime, window_days: int) -> bool:
    # Half-open: a fast that ended exactly window_days ago is out
    if session.end_time is None:
        return False
    return reference - as_aware(session.end_time) < timedelta(days=window_days)


def frequency_sub_score(fasts_in_window: int) -> int:
    for minimum, score in FREQUENCY_THRESHOLDS:
        if fasts_in_window >= minimum:
            return score
    return MIN_SCORE


def consistency_sub_score(ratio: float) -> int:
    for minimum, score in CONSISTENCY_THRESHOLDS:
        if ratio >= minimum:
            return score
    return MIN_SCORE


def frequency_label(fasts_last_7_days: int) -> str:
    for minimum, label in FREQUENCY_LABELS:
        if fasts_last_7_days >= minimum:
            return label
    return LOWEST_FREQUENCY_LABEL


def _reference_instant(reference: date | datetime | None) -> datetime:
    if reference is None:
        return utc_now()
    if isinstance(reference, datetime):
        return as_aware(reference)
    # A calendar day covers everything up to its local midnight
    return as_aware(datetime.combine(reference + timedelta(days=1), time.min))


def compute_score(
    history: Iterable[FastingSession],
    reference: date | datetime | None = None,
) -> ScoreSummary:
    """Compute the 1-10 fasting score.

    Frequency (1-5) comes from the number of fasts that ended in the last
    30 days; consistency (1-5) from the share of goal-bearing fasts that
    met their goal. Sessions without an end time are ignored. A `date`
    reference is measured from the end of that local day.
    """
    sessions = list(history)
    now = _reference_instant(reference)

    last_7 = [s for s in sessions if _within(s, now, SHORT_WINDOW_DAYS)]
    last_30 = [s for s in sessions if _within(s, now, LONG_WINDOW_DAYS)]

    frequency = frequency_sub_score(len(last_30))

    with_goals = [s for s in last_30 if s.has_goal and s.actual_duration_minutes is not None]
    consistency_percentage = None
    if with_goals:
        ratio = sum(1 for s in with_goals if s.met_goal()) / len(with_goals)
        consistency = consistency_sub_score(ratio)
        consistency_percentage = ratio * 100
    elif last_30:
        consistency = NO_GOAL_CONSISTENCY_SCORE
    else:
        consistency = MIN_SCORE

    total = max(MIN_SCORE, min(MAX_SCORE, frequency + consistency))

    return ScoreSummary(
        total_score=total,
        frequency_sub_score=frequency,
        consistency_sub_score=consistency,
        fasts_last_7_days=len(last_7),
        fasts_last_30_days=len(last_30),
        consistency_percentage=consistency_percentage,
        frequency_label=frequency_label(len(last_7)),
    )
