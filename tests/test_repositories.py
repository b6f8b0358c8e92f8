"""Tests for the entity repositories."""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from fastwell.db.repositories import (
    FASTING_SESSIONS,
    AIRequestRepository,
    FastingSessionRepository,
    UserProfileRepository,
    WeightEntryRepository,
)
from fastwell.exceptions import ActiveFastExistsError, DocumentNotFoundError, InvalidInputError
from fastwell.models.ai_requests import RequestKind, RequestStatus
from fastwell.models.fasting import FastingStatus
from fastwell.models.user_profile import AIProfile, MealPreferences
from fastwell.models.weight import WeightUnit
from fastwell.services.dashboard import load_score, load_weekly_challenges


class TestFastingSessionRepository:
    """Tests for starting, ending and listing fasts."""

    def test_start_and_end_fast(self, store):
        """A fast moves from active to completed exactly once."""
        repo = FastingSessionRepository(store)
        start = datetime(2024, 6, 15, 8, 0, tzinfo=timezone.utc)

        async def run():
            session_id = await repo.start_new_fast("u1", 16, started_at=start)
            active = await repo.get_active_fast("u1")
            ended = await repo.end_current_fast(
                session_id, "done", ended_at=start + timedelta(hours=16)
            )
            return session_id, active, ended, await repo.get(session_id)

        session_id, active, ended, stored = asyncio.run(run())

        assert active.id == session_id
        assert ended.actual_duration_minutes == 960
        assert stored.status == FastingStatus.COMPLETED
        assert stored.end_time == start + timedelta(hours=16)
        assert stored.notes == "done"
        assert stored.met_goal() is True

    def test_second_active_fast_rejected(self, store):
        repo = FastingSessionRepository(store)

        async def run():
            await repo.start_new_fast("u1", 16)
            await repo.start_new_fast("u1", 18)

        with pytest.raises(ActiveFastExistsError):
            asyncio.run(run())

    def test_other_users_fast_does_not_block(self, store):
        repo = FastingSessionRepository(store)

        async def run():
            await repo.start_new_fast("u1", 16)
            await repo.start_new_fast("u2", 16)
            return await repo.get_active_fast("u2")

        assert asyncio.run(run()).user_id == "u2"

    def test_start_requires_user_id(self, store):
        with pytest.raises(InvalidInputError):
            asyncio.run(FastingSessionRepository(store).start_new_fast(""))

    def test_end_missing_session(self, store):
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(FastingSessionRepository(store).end_current_fast("missing"))

    def test_end_completed_session_rejected(self, store):
        repo = FastingSessionRepository(store)

        async def run():
            session_id = await repo.start_new_fast("u1", 16)
            await repo.end_current_fast(session_id)
            await repo.end_current_fast(session_id)

        with pytest.raises(InvalidInputError):
            asyncio.run(run())

    def test_get_active_fast_empty_user(self, store):
        assert asyncio.run(FastingSessionRepository(store).get_active_fast("")) is None

    def test_history_newest_first_with_count(self, store):
        repo = FastingSessionRepository(store)
        base = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)

        async def run():
            for day in range(10):
                start = base + timedelta(days=day)
                session_id = await repo.start_new_fast("u1", 16, started_at=start)
                await repo.end_current_fast(session_id, ended_at=start + timedelta(hours=16))
            await repo.start_new_fast("u1", 16)
            return await repo.get_fasting_history("u1")

        history = asyncio.run(run())

        assert len(history) == 7
        assert all(s.is_completed for s in history)
        assert history[0].start_time == base + timedelta(days=9)
        assert history[-1].start_time == base + timedelta(days=3)

    def test_completed_since(self, store):
        repo = FastingSessionRepository(store)
        base = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)

        async def run():
            for day in (0, 5, 9):
                start = base + timedelta(days=day)
                session_id = await repo.start_new_fast("u1", 16, started_at=start)
                await repo.end_current_fast(session_id, ended_at=start + timedelta(hours=16))
            return await repo.get_completed_since("u1", base + timedelta(days=5))

        sessions = asyncio.run(run())

        assert [s.start_time.day for s in sessions] == [10, 6]

    def test_malformed_documents_skipped(self, store):
        repo = FastingSessionRepository(store)

        async def run():
            await store.create(FASTING_SESSIONS, {"userId": "u1", "status": "completed"})
            session_id = await repo.start_new_fast("u1", 16)
            await repo.end_current_fast(session_id)
            return await repo.get_fasting_history("u1")

        assert len(asyncio.run(run())) == 1

    def test_null_start_time_skipped(self, store):
        """A stored null timestamp is skipped in history and in completed-since."""
        repo = FastingSessionRepository(store)
        start = datetime(2024, 6, 10, 8, 0, tzinfo=timezone.utc)

        async def run():
            await store.create(
                FASTING_SESSIONS,
                {
                    "userId": "u1",
                    "status": "completed",
                    "startTime": None,
                    "endTime": "2024-06-12T00:00:00.000+00:00",
                },
            )
            session_id = await repo.start_new_fast("u1", 16, started_at=start)
            await repo.end_current_fast(session_id, ended_at=start + timedelta(hours=16))
            return (
                await repo.get_fasting_history("u1"),
                await repo.get_completed_since("u1", start - timedelta(days=1)),
            )

        history, recent = asyncio.run(run())

        assert [s.start_time for s in history] == [start]
        assert [s.start_time for s in recent] == [start]


class TestWeightEntryRepository:
    """Tests for weight entries."""

    def test_add_and_history_oldest_first(self, store):
        repo = WeightEntryRepository(store)
        base = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)

        async def run():
            await repo.add_weight_entry("u1", 81.0, base + timedelta(days=2))
            await repo.add_weight_entry("u1", 82.0, base)
            await repo.add_weight_entry("u1", 180, base + timedelta(days=1), "lbs")
            return await repo.get_weight_history("u1")

        entries = asyncio.run(run())

        assert [e.weight for e in entries] == [82.0, 180.0, 81.0]
        assert entries[1].unit == WeightUnit.LBS
        assert entries[0].unit == WeightUnit.KG

    def test_history_limit_keeps_latest(self, store):
        repo = WeightEntryRepository(store)
        base = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)

        async def run():
            for day in range(5):
                await repo.add_weight_entry("u1", 80 + day, base + timedelta(days=day))
            return await repo.get_weight_history("u1", limit=2)

        assert [e.weight for e in asyncio.run(run())] == [83, 84]

    @pytest.mark.parametrize("weight", [0, -5])
    def test_non_positive_weight_rejected(self, store, weight):
        with pytest.raises(InvalidInputError):
            asyncio.run(WeightEntryRepository(store).add_weight_entry("u1", weight))

    def test_unknown_unit_rejected(self, store):
        with pytest.raises(InvalidInputError):
            asyncio.run(WeightEntryRepository(store).add_weight_entry("u1", 80, unit="stone"))


class TestUserProfileRepository:
    """Tests for user profiles."""

    def test_ensure_profile_creates_once(self, store):
        repo = UserProfileRepository(store)

        async def run():
            first = await repo.ensure_profile("u1", "a@b.com", "Ana")
            await repo.update_fasting_goal("u1", 18)
            second = await repo.ensure_profile("u1", "a@b.com", "Ana")
            return first, second

        first, second = asyncio.run(run())

        assert first.email == "a@b.com"
        assert first.display_name == "Ana"
        assert second.fasting_goal_hours == 18

    def test_update_sections_merge(self, store, sample_ai_profile, sample_meal_preferences):
        repo = UserProfileRepository(store)

        async def run():
            await repo.create_user_profile("u1", "a@b.com")
            await repo.update_ai_profile("u1", sample_ai_profile)
            await repo.update_meal_preferences("u1", sample_meal_preferences)
            await repo.update_fasting_goal("u1", 20)
            return await repo.get_user_profile("u1")

        profile = asyncio.run(run())

        assert profile.email == "a@b.com"
        assert profile.ai_profile == sample_ai_profile
        assert profile.meal_preferences == sample_meal_preferences
        assert profile.fasting_goal_hours == 20

    @pytest.mark.parametrize("hours", [11, 73])
    def test_fasting_goal_bounds(self, store, hours):
        with pytest.raises(InvalidInputError):
            asyncio.run(UserProfileRepository(store).update_fasting_goal("u1", hours))

    @pytest.mark.parametrize("age", [17, 101])
    def test_age_bounds(self, store, age):
        with pytest.raises(InvalidInputError):
            asyncio.run(UserProfileRepository(store).update_ai_profile("u1", AIProfile(age=age)))

    def test_calorie_goal_must_be_positive(self, store):
        with pytest.raises(InvalidInputError):
            asyncio.run(
                UserProfileRepository(store).update_meal_preferences(
                    "u1", MealPreferences(calorie_goal=0)
                )
            )

    def test_missing_profile(self, store):
        assert asyncio.run(UserProfileRepository(store).get_user_profile("nobody")) is None


class TestAIRequestRepository:
    """Tests for AI request documents."""

    def test_create_is_pending(self, store):
        repo = AIRequestRepository(store)

        async def run():
            request_id = await repo.create(RequestKind.MEAL_PLAN, "u1", {"dietType": "keto"})
            return await repo.get(RequestKind.MEAL_PLAN, request_id)

        request = asyncio.run(run())

        assert request.status == RequestStatus.PENDING
        assert request.user_input == {"dietType": "keto"}
        assert request.output is None

    def test_set_status_stamps_update(self, store):
        repo = AIRequestRepository(store)

        async def run():
            request_id = await repo.create(RequestKind.SUGGESTION, "u1", {})
            before = await repo.get(RequestKind.SUGGESTION, request_id)
            await asyncio.sleep(0.01)
            await repo.set_status(RequestKind.SUGGESTION, request_id, RequestStatus.ERROR, error="x")
            return before, await repo.get(RequestKind.SUGGESTION, request_id)

        before, after = asyncio.run(run())

        assert after.status == RequestStatus.ERROR
        assert after.error == "x"
        assert after.updated_at > before.updated_at
        assert after.created_at == before.created_at

    def test_count_created_on_today(self, store):
        repo = AIRequestRepository(store)

        async def run():
            await repo.create(RequestKind.MEAL_PLAN, "u1", {})
            await repo.create(RequestKind.MEAL_PLAN, "u1", {})
            await repo.create(RequestKind.MEAL_PLAN, "u2", {})
            today = datetime.now().date()
            return (
                await repo.count_created_on(RequestKind.MEAL_PLAN, "u1", today),
                await repo.count_created_on(RequestKind.MEAL_PLAN, "u1", date(2000, 1, 1)),
            )

        assert asyncio.run(run()) == (2, 0)

    def test_null_created_at_skipped(self, store):
        repo = AIRequestRepository(store)

        async def run():
            await store.create(
                RequestKind.SUGGESTION.collection,
                {
                    "userId": "u1",
                    "userInput": {},
                    "status": "pending",
                    "createdAt": None,
                    "updatedAt": None,
                },
            )
            request_id = await repo.create(RequestKind.SUGGESTION, "u1", {})
            return request_id, await repo.list_for_user(RequestKind.SUGGESTION, "u1")

        request_id, requests = asyncio.run(run())

        assert [r.id for r in requests] == [request_id]


class TestDashboard:
    """Tests for loading history into the scoring engine."""

    def _record(self, store, now):
        repo = FastingSessionRepository(store)

        async def run():
            for end, hours in ((now - timedelta(hours=1), 17), (now - timedelta(days=40), 20)):
                session_id = await repo.start_new_fast("u1", 16, started_at=end - timedelta(hours=hours))
                await repo.end_current_fast(session_id, ended_at=end)

        asyncio.run(run())
        return repo

    def test_weekly_challenges_from_store(self, store):
        now = datetime(2024, 6, 15, 20, 0)
        repo = self._record(store, now)

        weekly = asyncio.run(load_weekly_challenges(repo, "u1", now))

        assert weekly.completed_count == 1
        assert weekly.days[-1].is_completed
        assert weekly.days[-1].fast_duration_met == 17 * 60

    def test_score_ignores_old_fasts(self, store):
        now = datetime(2024, 6, 15, 20, 0)
        repo = self._record(store, now)

        summary = asyncio.run(load_score(repo, "u1", now))

        assert summary.fasts_last_30_days == 1
        assert summary.consistency_percentage == 100
        assert summary.has_data
