"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from fastwell.ai.prompts import PromptTemplate
from fastwell.config import Settings
from fastwell.db import DocumentStore, init_db
from fastwell.models.fasting import FastingSession, FastingStatus
from fastwell.models.user_profile import AIProfile, MealPreferences


class FakeCompleter:
    """Stands in for the Gemini client.

    `responses` maps a template name to the output model instance to
    return (or an exception to raise).
    """

    def __init__(self, responses: dict | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, object]] = []

    async def complete(self, template: PromptTemplate, structured_input):
        self.calls.append((template.name, structured_input))
        response = self.responses.get(template.name)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def store(temp_db_path):
    """An initialized document store in a temporary database."""
    asyncio.run(init_db(temp_db_path))
    return DocumentStore(temp_db_path)


@pytest.fixture
def settings():
    """Settings pointing at a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Settings(
            data_dir=Path(tmpdir),
            secret_key="test-secret",
            bcrypt_rounds=4,
            gemini_api_key=None,
        )


@pytest.fixture
def reference_noon():
    """A fixed local-time reference instant well away from midnight."""
    return datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def completed_fast():
    """Factory for completed fasting sessions ending at a given instant."""

    def make(end_time: datetime, minutes: int, goal_hours: float | None = None, user_id: str = "user-1"):
        return FastingSession(
            user_id=user_id,
            start_time=end_time - timedelta(minutes=minutes),
            end_time=end_time,
            status=FastingStatus.COMPLETED,
            goal_duration_hours=goal_hours,
            actual_duration_minutes=minutes,
        )

    return make


@pytest.fixture
def sample_ai_profile():
    return AIProfile(
        age=34,
        gender="female",
        activity_level="moderate",
        sleep_schedule="11 PM - 7 AM",
        daily_routine="Office job, lunch at 12:30, gym at 6 PM",
        fasting_experience="beginner",
    )


@pytest.fixture
def sample_meal_preferences():
    return MealPreferences(diet_type="low-carb", food_intolerances="lactose", calorie_goal=1800)


@pytest.fixture
def make_completer():
    """Factory for FakeCompleter instances."""
    return FakeCompleter
