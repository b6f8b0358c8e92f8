"""User profile data models."""

from dataclasses import dataclass, field

SCHEMA_VERSION = 1

# Bounds enforced on profile updates
MIN_FASTING_GOAL_HOURS = 12
MAX_FASTING_GOAL_HOURS = 72
MIN_AGE = 18
MAX_AGE = 100

# (stored value, label) pairs offered by the profile forms
GENDER_OPTIONS = (
    ("male", "Male"),
    ("female", "Female"),
    ("other", "Other / prefer not to say"),
)
ACTIVITY_LEVEL_OPTIONS = (
    ("sedentary", "Sedentary (little or no exercise)"),
    ("light", "Light (exercise 1-3 days/week)"),
    ("moderate", "Moderate (exercise 3-5 days/week)"),
    ("active", "Active (hard exercise 6-7 days/week)"),
    ("very_active", "Very active (physical job or intense training)"),
)
FASTING_EXPERIENCE_OPTIONS = (
    ("beginner", "Beginner (never or rarely fasted)"),
    ("intermediate", "Intermediate (fast regularly)"),
    ("advanced", "Advanced (long fasts, lots of experience)"),
)
DIET_TYPE_OPTIONS = (
    ("balanced", "Balanced"),
    ("low-carb", "Low-carb"),
    ("keto", "Ketogenic"),
    ("vegan", "Vegan"),
    ("vegetarian", "Vegetarian"),
    ("paleo", "Paleo"),
)


@dataclass
class AIProfile:
    """Personal details used to tailor fasting-time suggestions."""

    age: int | None = None
    gender: str | None = None
    activity_level: str | None = None  # see ACTIVITY_LEVEL_OPTIONS
    sleep_schedule: str | None = None  # e.g. "10 PM - 6 AM"
    daily_routine: str | None = None
    fasting_experience: str | None = None  # beginner, intermediate, advanced

    def missing_fields(self) -> list[str]:
        """Names of fields a suggestion request still needs."""
        return [name for name, value in self.to_dict().items() if value in (None, "")]

    def to_dict(self) -> dict:
        return {
            "age": self.age,
            "gender": self.gender,
            "activityLevel": self.activity_level,
            "sleepSchedule": self.sleep_schedule,
            "dailyRoutine": self.daily_routine,
            "fastingExperience": self.fasting_experience,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AIProfile":
        return cls(
            age=data.get("age"),
            gender=data.get("gender"),
            activity_level=data.get("activityLevel"),
            sleep_schedule=data.get("sleepSchedule"),
            daily_routine=data.get("dailyRoutine"),
            fasting_experience=data.get("fastingExperience"),
        )


@dataclass
class MealPreferences:
    """Dietary preferences used for meal-plan generation."""

    diet_type: str | None = None  # see DIET_TYPE_OPTIONS
    food_intolerances: str | None = None  # comma-separated
    calorie_goal: int | None = None

    def is_empty(self) -> bool:
        return not (self.diet_type or self.food_intolerances or self.calorie_goal)

    def to_dict(self) -> dict:
        return {
            "dietType": self.diet_type,
            "foodIntolerances": self.food_intolerances,
            "calorieGoal": self.calorie_goal,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MealPreferences":
        return cls(
            diet_type=data.get("dietType"),
            food_intolerances=data.get("foodIntolerances"),
            calorie_goal=data.get("calorieGoal"),
        )


@dataclass
class UserProfile:
    """Per-user settings document, keyed by the identity's user id."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    fasting_goal_hours: float | None = None
    ai_profile: AIProfile = field(default_factory=AIProfile)
    meal_preferences: MealPreferences = field(default_factory=MealPreferences)

    def to_dict(self) -> dict:
        """Convert to a document for storage."""
        return {
            "schemaVersion": SCHEMA_VERSION,
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "fastingGoalHours": self.fasting_goal_hours,
            "aiProfile": self.ai_profile.to_dict(),
            "mealPreferences": self.meal_preferences.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        """Create from a stored document; absent sections become empty."""
        return cls(
            uid=data["uid"],
            email=data.get("email"),
            display_name=data.get("displayName"),
            fasting_goal_hours=data.get("fastingGoalHours"),
            ai_profile=AIProfile.from_dict(data.get("aiProfile") or {}),
            meal_preferences=MealPreferences.from_dict(data.get("mealPreferences") or {}),
        )
