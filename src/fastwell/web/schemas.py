"""Request bodies accepted by the HTTP API."""

from datetime import datetime

from pydantic import Field

from ..ai.schemas import DEFAULT_PLAN_DAYS, MAX_PLAN_DAYS, MIN_PLAN_DAYS, CamelModel
from ..models.user_profile import (
    MAX_AGE,
    MAX_FASTING_GOAL_HOURS,
    MIN_AGE,
    MIN_FASTING_GOAL_HOURS,
    AIProfile,
    MealPreferences,
)
from ..models.weight import WeightUnit


class SignUpBody(CamelModel):
    email: str
    password: str
    display_name: str | None = None


class SignInBody(CamelModel):
    email: str
    password: str


class FastingGoalBody(CamelModel):
    fasting_goal_hours: float = Field(ge=MIN_FASTING_GOAL_HOURS, le=MAX_FASTING_GOAL_HOURS)


class AIProfileBody(CamelModel):
    age: int | None = Field(default=None, ge=MIN_AGE, le=MAX_AGE)
    gender: str | None = None
    activity_level: str | None = None
    sleep_schedule: str | None = None
    daily_routine: str | None = None
    fasting_experience: str | None = None

    def to_model(self) -> AIProfile:
        return AIProfile(**self.model_dump())


PREFERENCE_FIELDS = {"diet_type", "food_intolerances", "calorie_goal"}


class MealPreferencesBody(CamelModel):
    diet_type: str | None = None
    food_intolerances: str | None = None
    calorie_goal: int | None = Field(default=None, gt=0)

    def to_model(self) -> MealPreferences:
        return MealPreferences(**self.model_dump(include=PREFERENCE_FIELDS))


class MealPlanRequestBody(MealPreferencesBody):
    number_of_days: int = Field(default=DEFAULT_PLAN_DAYS, ge=MIN_PLAN_DAYS, le=MAX_PLAN_DAYS)


class StartFastBody(CamelModel):
    goal_duration_hours: float | None = Field(default=None, gt=0)


class EndFastBody(CamelModel):
    notes: str | None = None


class WeightEntryBody(CamelModel):
    weight: float = Field(gt=0)
    date: datetime | None = None
    unit: WeightUnit | None = None
