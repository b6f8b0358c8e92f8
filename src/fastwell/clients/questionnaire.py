"""Interactive profile questionnaire for the CLI."""

import questionary
from questionary import Style

from ..models.user_profile import (
    ACTIVITY_LEVEL_OPTIONS,
    DIET_TYPE_OPTIONS,
    FASTING_EXPERIENCE_OPTIONS,
    GENDER_OPTIONS,
    MAX_AGE,
    MAX_FASTING_GOAL_HOURS,
    MIN_AGE,
    MIN_FASTING_GOAL_HOURS,
    AIProfile,
    MealPreferences,
)

custom_style = Style(
    [
        ("qmark", "fg:#00897b bold"),
        ("question", "bold"),
        ("answer", "fg:#ef6c00 bold"),
        ("pointer", "fg:#00897b bold"),
        ("highlighted", "fg:#00897b bold"),
        ("selected", "fg:#ef6c00"),
        ("instruction", ""),
        ("text", ""),
    ]
)


def parse_optional_int(value: str | None) -> int | None:
    """Integer from a free-text answer; blank or invalid input gives None."""
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def validate_range(minimum: float, maximum: float):
    """questionary validator accepting blank input or a number in range."""

    def validate(text: str) -> bool | str:
        if not text.strip():
            return True
        try:
            number = float(text)
        except ValueError:
            return "Enter a number"
        if not minimum <= number <= maximum:
            return f"Enter a value between {minimum:g} and {maximum:g}"
        return True

    return validate


def _choices(options: tuple[tuple[str, str], ...]) -> list[questionary.Choice]:
    return [questionary.Choice(label, value) for value, label in options]


def _default_choice(options: tuple[tuple[str, str], ...], current: str | None) -> str | None:
    values = [value for value, _ in options]
    return current if current in values else None


class ProfileQuestionnaire:
    """Collects fasting goal, AI profile and meal preferences interactively.

    Current values are offered as defaults, so pressing enter keeps them.
    A cancelled prompt (Ctrl-C) returns None from each collector.
    """

    async def collect_fasting_goal(self, current: float | None) -> float | None:
        answer = await questionary.text(
            f"Default fasting goal in hours ({MIN_FASTING_GOAL_HOURS}-{MAX_FASTING_GOAL_HOURS}):",
            default=f"{current:g}" if current else "",
            validate=validate_range(MIN_FASTING_GOAL_HOURS, MAX_FASTING_GOAL_HOURS),
            style=custom_style,
        ).ask_async()
        if answer is None or not answer.strip():
            return None
        return float(answer)

    async def collect_ai_profile(self, current: AIProfile) -> AIProfile | None:
        """Ask for the details fasting-time suggestions are based on."""
        print("\n=== Fasting Profile ===\n")

        age = await questionary.text(
            "Your age:",
            default=str(current.age) if current.age else "",
            validate=validate_range(MIN_AGE, MAX_AGE),
            style=custom_style,
        ).ask_async()
        if age is None:
            return None

        gender = await questionary.select(
            "Gender:",
            choices=_choices(GENDER_OPTIONS),
            default=_default_choice(GENDER_OPTIONS, current.gender),
            style=custom_style,
        ).ask_async()

        activity_level = await questionary.select(
            "How active are you?",
            choices=_choices(ACTIVITY_LEVEL_OPTIONS),
            default=_default_choice(ACTIVITY_LEVEL_OPTIONS, current.activity_level),
            style=custom_style,
        ).ask_async()

        sleep_schedule = await questionary.text(
            "Typical sleep schedule (e.g. 10:30 PM - 7 AM):",
            default=current.sleep_schedule or "",
            style=custom_style,
        ).ask_async()

        daily_routine = await questionary.text(
            "Describe your day (meal times, work, exercise):",
            default=current.daily_routine or "",
            style=custom_style,
        ).ask_async()

        fasting_experience = await questionary.select(
            "Fasting experience:",
            choices=_choices(FASTING_EXPERIENCE_OPTIONS),
            default=_default_choice(FASTING_EXPERIENCE_OPTIONS, current.fasting_experience),
            style=custom_style,
        ).ask_async()

        if None in (gender, activity_level, sleep_schedule, daily_routine, fasting_experience):
            return None

        return AIProfile(
            age=parse_optional_int(age),
            gender=gender,
            activity_level=activity_level,
            sleep_schedule=sleep_schedule.strip() or None,
            daily_routine=daily_routine.strip() or None,
            fasting_experience=fasting_experience,
        )

    async def collect_meal_preferences(self, current: MealPreferences) -> MealPreferences | None:
        """Ask for the preferences meal plans are generated from."""
        print("\n=== Meal Preferences ===\n")

        diet_type = await questionary.select(
            "Diet type:",
            choices=_choices(DIET_TYPE_OPTIONS),
            default=_default_choice(DIET_TYPE_OPTIONS, current.diet_type),
            style=custom_style,
        ).ask_async()
        if diet_type is None:
            return None

        intolerances = await questionary.text(
            "Food intolerances or allergies (e.g. gluten, lactose):",
            default=current.food_intolerances or "",
            style=custom_style,
        ).ask_async()

        calories = await questionary.text(
            "Daily calorie goal (optional):",
            default=str(current.calorie_goal) if current.calorie_goal else "",
            validate=validate_range(1, 10000),
            style=custom_style,
        ).ask_async()

        if intolerances is None or calories is None:
            return None

        return MealPreferences(
            diet_type=diet_type,
            food_intolerances=intolerances.strip() or None,
            calorie_goal=parse_optional_int(calories),
        )
