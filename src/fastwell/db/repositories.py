"""Data access layer for fastwell."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, TypeVar

from ..exceptions import ActiveFastExistsError, DocumentNotFoundError, InvalidInputError
from ..models.ai_requests import AIRequest, RequestKind, RequestStatus
from ..models.fasting import FastingSession, FastingStatus
from ..models.timestamps import as_aware, utc_now
from ..models.user_profile import (
    MAX_AGE,
    MAX_FASTING_GOAL_HOURS,
    MIN_AGE,
    MIN_FASTING_GOAL_HOURS,
    AIProfile,
    MealPreferences,
    UserProfile,
)
from ..models.weight import WeightEntry, WeightUnit
from .store import DocumentStore

logger = logging.getLogger(__name__)

FASTING_SESSIONS = "fasting_sessions"
WEIGHT_ENTRIES = "weight_entries"
USER_PROFILES = "user_profiles"

T = TypeVar("T")


def _load_all(collection: str, docs: list[dict], loader: Callable[[dict], T]) -> list[T]:
    """Convert documents, skipping (and logging) malformed ones."""
    items = []
    for doc in docs:
        try:
            items.append(loader(doc))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed document %s/%s: %s", collection, doc.get("id"), e)
    return items


class FastingSessionRepository:
    """Repository for fasting sessions."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def start_new_fast(
        self,
        user_id: str,
        goal_duration_hours: float | None = None,
        started_at: datetime | None = None,
    ) -> str:
        """Start an active fast for the user and return its id.

        A user may only have one active fast; starting a second one is
        rejected.
        """
        if not user_id:
            raise InvalidInputError("User ID is required.")
        if goal_duration_hours is not None and goal_duration_hours <= 0:
            raise InvalidInputError("Fasting goal must be a positive number of hours.")

        active = await self.get_active_fast(user_id)
        if active is not None:
            raise ActiveFastExistsError(f"Fasting session {active.id} is still active.")

        session = FastingSession(
            user_id=user_id,
            start_time=started_at or utc_now(),
            goal_duration_hours=goal_duration_hours,
        )
        return await self.store.create(FASTING_SESSIONS, session.to_dict())

    async def end_current_fast(
        self,
        session_id: str,
        notes: str | None = None,
        ended_at: datetime | None = None,
    ) -> FastingSession:
        """Complete a fasting session, recording its duration."""
        if not session_id:
            raise InvalidInputError("Session ID is required.")

        session = await self.get(session_id)
        if session is None:
            raise DocumentNotFoundError(FASTING_SESSIONS, session_id)
        if session.is_completed:
            raise InvalidInputError("Fasting session is already completed.")

        session.complete(ended_at or utc_now(), notes)
        await self.store.update(
            FASTING_SESSIONS,
            session_id,
            {
                "endTime": session.end_time,
                "status": session.status.value,
                "actualDurationMinutes": session.actual_duration_minutes,
                "notes": session.notes,
            },
        )
        return session

    async def get(self, session_id: str) -> FastingSession | None:
        """Get a fasting session by ID."""
        doc = await self.store.get(FASTING_SESSIONS, session_id)
        if doc is None:
            return None
        return FastingSession.from_dict(doc)

    async def get_active_fast(self, user_id: str) -> FastingSession | None:
        """Get the user's most recently started active fast."""
        if not user_id:
            return None
        docs = await self.store.query(
            FASTING_SESSIONS,
            [("userId", "==", user_id), ("status", "==", FastingStatus.ACTIVE.value)],
            order_by="startTime",
            descending=True,
            limit=1,
        )
        sessions = _load_all(FASTING_SESSIONS, docs, FastingSession.from_dict)
        return sessions[0] if sessions else None

    async def get_fasting_history(self, user_id: str, count: int = 7) -> list[FastingSession]:
        """Get the user's latest completed fasts, newest start first."""
        if not user_id:
            return []
        docs = await self.store.query(
            FASTING_SESSIONS,
            [("userId", "==", user_id), ("status", "==", FastingStatus.COMPLETED.value)],
            order_by="startTime",
            descending=True,
            limit=count,
        )
        return _load_all(FASTING_SESSIONS, docs, FastingSession.from_dict)

    async def get_completed_since(self, user_id: str, since: datetime) -> list[FastingSession]:
        """Get completed fasts that ended at or after `since`, newest first."""
        if not user_id:
            return []
        docs = await self.store.query(
            FASTING_SESSIONS,
            [
                ("userId", "==", user_id),
                ("status", "==", FastingStatus.COMPLETED.value),
                ("endTime", ">=", since),
            ],
            order_by="endTime",
            descending=True,
        )
        return _load_all(FASTING_SESSIONS, docs, FastingSession.from_dict)


class WeightEntryRepository:
    """Repository for weight entries."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def add_weight_entry(
        self,
        user_id: str,
        weight: float,
        entry_date: datetime | None = None,
        unit: WeightUnit | str | None = None,
    ) -> str:
        """Record a weight measurement."""
        if not user_id:
            raise InvalidInputError("User ID is required.")
        if weight is None or weight <= 0:
            raise InvalidInputError("Weight must be a positive number.")

        try:
            weight_unit = WeightUnit(unit) if unit else WeightUnit.KG
        except ValueError:
            raise InvalidInputError(f"Unknown weight unit: {unit!r}")

        entry = WeightEntry(
            user_id=user_id,
            weight=weight,
            date=entry_date or utc_now(),
            unit=weight_unit,
        )
        return await self.store.create(WEIGHT_ENTRIES, entry.to_dict())

    async def get_weight_history(self, user_id: str, limit: int = 90) -> list[WeightEntry]:
        """Get the latest `limit` entries, returned oldest first."""
        if not user_id:
            return []
        docs = await self.store.query(
            WEIGHT_ENTRIES,
            [("userId", "==", user_id)],
            order_by="date",
            descending=True,
            limit=limit,
        )
        entries = _load_all(WEIGHT_ENTRIES, docs, WeightEntry.from_dict)
        return sorted(entries, key=lambda e: e.date)


class UserProfileRepository:
    """Repository for user profiles (one document per user id)."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_user_profile(
        self,
        uid: str,
        email: str | None = None,
        display_name: str | None = None,
        **additional,
    ) -> UserProfile:
        """Create (or merge into) the profile document for a user."""
        data = {"uid": uid, "email": email, "displayName": display_name, **additional}
        await self.store.set(USER_PROFILES, uid, data, merge=True)
        return await self.get_user_profile(uid)

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        """Get a user profile, or None when it does not exist."""
        if not user_id:
            return None
        doc = await self.store.get(USER_PROFILES, user_id)
        if doc is None:
            return None
        return UserProfile.from_dict(doc)

    async def update_user_profile(self, user_id: str, data: dict) -> None:
        """Merge partial data into the profile."""
        if not user_id:
            raise InvalidInputError("User ID is required to update profile.")
        await self.store.set(USER_PROFILES, user_id, {"uid": user_id, **data}, merge=True)

    async def update_fasting_goal(self, user_id: str, fasting_goal_hours: float) -> None:
        if not MIN_FASTING_GOAL_HOURS <= fasting_goal_hours <= MAX_FASTING_GOAL_HOURS:
            raise InvalidInputError(
                f"Fasting goal must be between {MIN_FASTING_GOAL_HOURS} "
                f"and {MAX_FASTING_GOAL_HOURS} hours."
            )
        await self.update_user_profile(user_id, {"fastingGoalHours": fasting_goal_hours})

    async def update_ai_profile(self, user_id: str, ai_profile: AIProfile) -> None:
        if ai_profile.age is not None and not MIN_AGE <= ai_profile.age <= MAX_AGE:
            raise InvalidInputError(f"Age must be between {MIN_AGE} and {MAX_AGE}.")
        await self.update_user_profile(user_id, {"aiProfile": ai_profile.to_dict()})

    async def update_meal_preferences(self, user_id: str, preferences: MealPreferences) -> None:
        if preferences.calorie_goal is not None and preferences.calorie_goal <= 0:
            raise InvalidInputError("Calorie goal must be a positive number.")
        await self.update_user_profile(user_id, {"mealPreferences": preferences.to_dict()})

    async def ensure_profile(self, uid: str, email: str | None, display_name: str | None = None) -> UserProfile:
        """Post-authentication hook: create the profile if it is missing."""
        profile = await self.get_user_profile(uid)
        if profile is None:
            logger.info("Creating profile for user %s", uid)
            profile = await self.create_user_profile(uid, email, display_name)
        return profile


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Local-time start of `day` and of the following day."""
    start = as_aware(datetime.combine(day, time.min))
    return start, as_aware(datetime.combine(day + timedelta(days=1), time.min))


class AIRequestRepository:
    """Repository for AI suggestion and meal-plan request documents."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create(self, kind: RequestKind, user_id: str, user_input: dict) -> str:
        """Store a new request in the pending state."""
        now = utc_now()
        request = AIRequest(
            kind=kind,
            user_id=user_id,
            user_input=user_input,
            status=RequestStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        return await self.store.create(kind.collection, request.to_dict())

    async def get(self, kind: RequestKind, request_id: str) -> AIRequest | None:
        doc = await self.store.get(kind.collection, request_id)
        if doc is None:
            return None
        return AIRequest.from_dict(kind, doc)

    async def set_status(
        self,
        kind: RequestKind,
        request_id: str,
        status: RequestStatus,
        output: dict | None = None,
        error: str | None = None,
    ) -> None:
        """Move a request to a new status, stamping updatedAt."""
        patch: dict = {"status": status.value, "updatedAt": utc_now()}
        if output is not None:
            patch["output"] = output
        if error is not None:
            patch["error"] = error
        await self.store.update(kind.collection, request_id, patch)

    async def list_for_user(self, kind: RequestKind, user_id: str) -> list[AIRequest]:
        """All requests of a kind for the user, newest first."""
        if not user_id:
            return []
        docs = await self.store.query(
            kind.collection,
            [("userId", "==", user_id)],
            order_by="createdAt",
            descending=True,
        )
        return _load_all(kind.collection, docs, lambda doc: AIRequest.from_dict(kind, doc))

    async def count_created_on(self, kind: RequestKind, user_id: str, day: date) -> int:
        """Number of requests the user created on a local calendar day."""
        if not user_id:
            return 0
        start, end = day_bounds(day)
        return await self.store.count(
            kind.collection,
            [("userId", "==", user_id), ("createdAt", ">=", start), ("createdAt", "<", end)],
        )
