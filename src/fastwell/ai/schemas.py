"""Structured input/output schemas for the AI features.

Field names are snake_case in Python and camelCase in stored documents
and model responses.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MIN_PLAN_DAYS = 1
MAX_PLAN_DAYS = 7
DEFAULT_PLAN_DAYS = 3


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class FastingProfileInput(CamelModel):
    """Profile details a fasting-time suggestion is based on."""

    age: int = Field(description="The age of the user.")
    gender: str = Field(min_length=1, description="The gender of the user.")
    activity_level: str = Field(
        min_length=1,
        description="The activity level of the user (e.g., sedentary, moderate, active).",
    )
    sleep_schedule: str = Field(
        min_length=1,
        description="The typical sleep schedule of the user (e.g., 10 PM - 6 AM).",
    )
    daily_routine: str = Field(
        min_length=1,
        description="The user's daily routine, including meal times and workout schedule.",
    )
    fasting_experience: str = Field(
        min_length=1,
        description="Fasting experience level (e.g., beginner, intermediate, advanced).",
    )


class SuggestFastingTimesInput(CamelModel):
    user_profile: FastingProfileInput


class SuggestFastingTimesOutput(CamelModel):
    suggested_start_time: str = Field(description="Suggested fasting start time (e.g., 8:00 PM).")
    suggested_end_time: str = Field(description="Suggested fasting end time (e.g., 12:00 PM).")
    reasoning: str = Field(description="Why these times suit the user's profile and habits.")


class GenerateMealPlanInput(CamelModel):
    diet_type: str | None = Field(
        default=None, description="Preferred diet (e.g., balanced, low-carb, vegan, keto)."
    )
    food_intolerances: str | None = Field(
        default=None, description="Comma-separated food intolerances (e.g., gluten, lactose)."
    )
    calorie_goal: int | None = Field(default=None, description="Approximate daily calorie goal in kcal.")
    number_of_days: int = Field(
        default=DEFAULT_PLAN_DAYS,
        ge=MIN_PLAN_DAYS,
        le=MAX_PLAN_DAYS,
        description="Number of days the plan should cover.",
    )


class Meal(CamelModel):
    name: str = Field(description="Meal name (e.g., Breakfast, Lunch, Dinner).")
    description: str = Field(description="Main ingredients and a short preparation idea.")


class DailyMealPlan(CamelModel):
    day: str = Field(description="Day of the plan (e.g., Day 1, Monday).")
    meals: list[Meal] = Field(default_factory=list)


class GenerateMealPlanOutput(CamelModel):
    meal_plan: list[DailyMealPlan] = Field(default_factory=list)
    disclaimer: str | None = Field(
        default=None,
        description="Reminder that suggestions are AI-generated and not professional advice.",
    )
