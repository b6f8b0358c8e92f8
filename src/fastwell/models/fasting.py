"""Fasting session data model."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .timestamps import as_aware, optional_datetime, optional_iso, parse_iso, to_iso

SCHEMA_VERSION = 1

# Goal used when neither the session nor the profile sets one
DEFAULT_FASTING_GOAL_HOURS = 16


class FastingStatus(str, Enum):
    """Fasting session lifecycle state."""

    ACTIVE = "active"
    COMPLETED = "completed"


def duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between two instants, rounded to nearest."""
    seconds = (as_aware(end_time) - as_aware(start_time)).total_seconds()
    return round(seconds / 60)


def resolve_goal_hours(
    session_goal: float | None = None,
    profile_goal: float | None = None,
) -> float:
    """Pick the effective goal: session, then profile, then the default."""
    return session_goal or profile_goal or DEFAULT_FASTING_GOAL_HOURS


@dataclass
class FastingSession:
    """A user-initiated fasting interval.

    Created active with a start time; completed exactly once, which sets
    the end time and the measured duration.
    """

    user_id: str
    start_time: datetime
    status: FastingStatus = FastingStatus.ACTIVE
    end_time: datetime | None = None
    goal_duration_hours: float | None = None
    actual_duration_minutes: int | None = None
    notes: str = ""
    id: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == FastingStatus.COMPLETED

    @property
    def has_goal(self) -> bool:
        return bool(self.goal_duration_hours and self.goal_duration_hours > 0)

    def met_goal(self, goal_hours: float | None = None) -> bool:
        """Whether the recorded duration reaches the goal (inclusive)."""
        goal = goal_hours if goal_hours is not None else self.goal_duration_hours
        if not goal or self.actual_duration_minutes is None:
            return False
        return self.actual_duration_minutes >= goal * 60

    def complete(self, end_time: datetime, notes: str | None = None) -> None:
        """Close the session at end_time."""
        if self.is_completed:
            raise ValueError("Fasting session is already completed")
        self.end_time = end_time
        self.actual_duration_minutes = duration_minutes(self.start_time, end_time)
        self.status = FastingStatus.COMPLETED
        self.notes = notes or ""

    def elapsed(self, now: datetime) -> timedelta:
        """Time fasted so far (or in total, once completed)."""
        end = self.end_time if self.end_time else now
        return max(as_aware(end) - as_aware(self.start_time), timedelta(0))

    def remaining(self, now: datetime, fallback_goal_hours: float | None = None) -> timedelta:
        goal = timedelta(hours=resolve_goal_hours(self.goal_duration_hours, fallback_goal_hours))
        return max(goal - self.elapsed(now), timedelta(0))

    def progress_percentage(self, now: datetime, fallback_goal_hours: float | None = None) -> float:
        """Progress toward the goal, capped at 100."""
        goal_seconds = resolve_goal_hours(self.goal_duration_hours, fallback_goal_hours) * 3600
        if goal_seconds <= 0:
            return 0.0
        return min(self.elapsed(now).total_seconds() / goal_seconds * 100, 100.0)

    def to_dict(self) -> dict:
        """Convert to a document for storage."""
        return {
            "schemaVersion": SCHEMA_VERSION,
            "userId": self.user_id,
            "startTime": to_iso(self.start_time),
            "endTime": optional_iso(self.end_time),
            "goalDurationHours": self.goal_duration_hours,
            "actualDurationMinutes": self.actual_duration_minutes,
            "notes": self.notes,
            "status": self.status.value,
        }

    def to_client_dict(self) -> dict:
        """Serializable view with ISO-string timestamps and the id."""
        data = self.to_dict()
        del data["schemaVersion"]
        data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict, id: str | None = None) -> "FastingSession":
        """Create from a stored document, default-filling optional fields."""
        return cls(
            id=id or data.get("id"),
            user_id=data["userId"],
            start_time=parse_iso(data["startTime"]),
            end_time=optional_datetime(data.get("endTime")),
            goal_duration_hours=data.get("goalDurationHours"),
            actual_duration_minutes=data.get("actualDurationMinutes"),
            notes=data.get("notes") or "",
            status=FastingStatus(data.get("status", "active")),
        )
