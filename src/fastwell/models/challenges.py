"""Weekly challenge and fasting score result models."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class ChallengeDay:
    """One fixed slot of the weekly challenge."""

    day_label: str
    relative_day_index: int  # 0 = reference day, 6 = six days before
    goal_hours: float
    points: int


@dataclass
class ChallengeDayResult:
    """A challenge slot evaluated against the fasting history."""

    day_label: str
    relative_day_index: int
    target_date: date
    goal_hours: float
    points_possible: int
    is_completed: bool
    points_earned: int
    fast_duration_met: int | None = None  # minutes of the matching fast

    def to_dict(self) -> dict:
        return {
            "dayLabel": self.day_label,
            "relativeDayIndex": self.relative_day_index,
            "targetDate": self.target_date.isoformat(),
            "goalHours": self.goal_hours,
            "pointsPossible": self.points_possible,
            "isCompleted": self.is_completed,
            "pointsEarned": self.points_earned,
            "fastDurationMet": self.fast_duration_met,
        }


@dataclass
class WeeklyChallenges:
    """Seven evaluated slots plus the all-week bonus."""

    days: list[ChallengeDayResult]
    bonus_awarded: bool
    bonus_points: int

    @property
    def completed_count(self) -> int:
        return sum(1 for day in self.days if day.is_completed)

    @property
    def points_from_days(self) -> int:
        return sum(day.points_earned for day in self.days)

    @property
    def total_points(self) -> int:
        return self.points_from_days + self.bonus_points

    def to_dict(self) -> dict:
        return {
            "days": [day.to_dict() for day in self.days],
            "completedCount": self.completed_count,
            "pointsFromDays": self.points_from_days,
            "bonusAwarded": self.bonus_awarded,
            "bonusPoints": self.bonus_points,
            "totalPoints": self.total_points,
        }


@dataclass
class ScoreSummary:
    """Overall 1-10 fasting score with the counts behind it."""

    total_score: int
    frequency_sub_score: int
    consistency_sub_score: int
    fasts_last_7_days: int
    fasts_last_30_days: int
    consistency_percentage: float | None
    frequency_label: str

    @property
    def has_data(self) -> bool:
        """False when no fast ended in the 30-day window.

        Callers should show "not yet available" instead of the floor score.
        """
        return self.fasts_last_30_days > 0

    def to_dict(self) -> dict:
        return {
            "totalScore": self.total_score,
            "frequencySubScore": self.frequency_sub_score,
            "consistencySubScore": self.consistency_sub_score,
            "fastsLast7Days": self.fasts_last_7_days,
            "fastsLast30Days": self.fasts_last_30_days,
            "consistencyPercentage": self.consistency_percentage,
            "frequencyLabel": self.frequency_label,
            "hasData": self.has_data,
        }
